"""JSON config loading helpers.

Stores viewer defaults: font, font size, colors, encoding, display modes and
window size. All access is defensive: malformed or missing config falls back
safely and individual invalid values are ignored.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass, replace
from pathlib import Path

from platformdirs import user_config_dir

logger = logging.getLogger(__name__)

APP_NAME = "txtview"
CONFIG_FILENAME = "config.json"
DEFAULT_CONFIG_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / CONFIG_FILENAME
LEGACY_CONFIG_PATH = Path.home() / ".txtview" / CONFIG_FILENAME
CONFIG_PATH = DEFAULT_CONFIG_PATH

DEFAULT_FONT_SIZE = 12
DEFAULT_WIDTH = 240
DEFAULT_HEIGHT = 240

Color = tuple[int, int, int]


@dataclass(frozen=True)
class ViewerConfig:
    """Startup options for one viewer session."""

    font_path: Path | None = None
    font_size: int = DEFAULT_FONT_SIZE
    bg_color: Color = (255, 255, 255)
    text_color: Color = (0, 0, 0)
    encoding: str | None = None
    ignore_linebreaks: bool = False
    inverted_colors: bool = False
    width: int = DEFAULT_WIDTH
    height: int = DEFAULT_HEIGHT
    fullscreen: bool = False


def _load_config_path() -> Path:
    """Return preferred config path, falling back to legacy location when needed."""
    if CONFIG_PATH.exists():
        return CONFIG_PATH
    if CONFIG_PATH == DEFAULT_CONFIG_PATH and LEGACY_CONFIG_PATH.exists():
        return LEGACY_CONFIG_PATH
    return CONFIG_PATH


def load_config(path: Path | None = None) -> dict[str, object]:
    """Load the persisted JSON config object.

    Returns an empty dict when the file is missing, unreadable, malformed, or
    does not decode to a top-level JSON object.
    """
    config_path = path if path is not None else _load_config_path()
    try:
        data = json.loads(config_path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return {}
    except (OSError, ValueError) as exc:
        logger.warning("Ignoring unreadable config %s: %s", config_path, exc)
        return {}
    return data if isinstance(data, dict) else {}


def is_ttf_file(path: str | Path) -> bool:
    """Return whether ``path`` has a ``.ttf`` extension (case-insensitive)."""
    name = Path(path).name
    dot = name.rfind(".")
    if dot <= 0:
        return False
    return name[dot:].lower() == ".ttf"


def parse_color(value: object) -> Color | None:
    """Parse ``"r,g,b"`` text or a 3-item int list into an RGB tuple.

    Components are clamped to ``0..255``; anything else yields ``None``.
    """
    if isinstance(value, str):
        parts = [part.strip() for part in value.strip().split(",")]
        if len(parts) != 3:
            return None
        try:
            components = [int(part) for part in parts]
        except ValueError:
            return None
    elif isinstance(value, (list, tuple)):
        if len(value) != 3 or not all(isinstance(c, int) and not isinstance(c, bool) for c in value):
            return None
        components = list(value)
    else:
        return None
    r, g, b = (max(0, min(255, c)) for c in components)
    return r, g, b


def _coerce_positive_int(value: object) -> int | None:
    """Accept ints (not bools) and numeric strings greater than zero."""
    if isinstance(value, bool):
        return None
    if isinstance(value, str):
        try:
            value = int(value.strip())
        except ValueError:
            return None
    if not isinstance(value, int) or value <= 0:
        return None
    return value


def _coerce_flag(value: object) -> bool | None:
    """Accept JSON booleans and the ``0``/``1`` ints older config files used."""
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return value != 0
    return None


def viewer_config_from_mapping(data: Mapping[str, object], base: ViewerConfig | None = None) -> ViewerConfig:
    """Overlay validated values from a config mapping onto ``base``."""
    config = base if base is not None else ViewerConfig()
    updates: dict[str, object] = {}

    font = data.get("font")
    if isinstance(font, str) and font.strip():
        if is_ttf_file(font.strip()):
            updates["font_path"] = Path(font.strip()).expanduser()
        else:
            logger.debug("Ignoring non-TTF font in config: %r", font)

    for key in ("font_size", "width", "height"):
        if key in data:
            parsed = _coerce_positive_int(data[key])
            if parsed is None:
                logger.debug("Ignoring invalid %s in config: %r", key, data[key])
            else:
                updates[key] = parsed

    for key in ("bg_color", "text_color"):
        if key in data:
            color = parse_color(data[key])
            if color is None:
                logger.debug("Ignoring invalid %s in config: %r", key, data[key])
            else:
                updates[key] = color

    encoding = data.get("encoding")
    if isinstance(encoding, str) and encoding.strip():
        updates["encoding"] = encoding.strip()

    for key in ("ignore_linebreaks", "inverted_colors", "fullscreen"):
        if key in data:
            flag = _coerce_flag(data[key])
            if flag is not None:
                updates[key] = flag

    return replace(config, **updates)


def load_viewer_config(path: Path | None = None) -> ViewerConfig:
    """Build a ``ViewerConfig`` from defaults plus the config file."""
    return viewer_config_from_mapping(load_config(path))

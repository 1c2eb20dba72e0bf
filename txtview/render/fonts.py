"""Font resolution and pygame-backed text measurement.

The layout engine only sees ``FontWidthOracle``; the font object itself is an
opaque handle owned by the runtime.
"""

from __future__ import annotations

import logging
from pathlib import Path

import pygame

from ..errors import MeasurementError, MissingFontError
from ..layout.measure import decode_for_measure

logger = logging.getLogger(__name__)

MONOSPACE_FAMILIES = "dejavusansmono,liberationmono,couriernew,courier,monospace"
STATUS_FONT_SIZE = 14


def bundled_font_path() -> Path:
    """Path of the default font shipped inside the pygame package."""
    return Path(pygame.__file__).resolve().parent / pygame.font.get_default_font()


def resolve_font_path(path: Path | None) -> Path:
    """Return an absolute font path, picking a system monospace font for ``None``.

    An explicit path that does not exist raises ``MissingFontError``.
    """
    if path is not None:
        resolved = path.expanduser().resolve()
        if not resolved.is_file():
            raise MissingFontError(f'Failed to load font "{resolved}": file not found', path=resolved)
        return resolved

    matched = pygame.font.match_font(MONOSPACE_FAMILIES)
    if matched:
        return Path(matched).resolve()
    logger.info("No system monospace font found; falling back to pygame's default font")
    return bundled_font_path()


def open_font(path: Path, size: int) -> pygame.font.Font:
    """Open ``path`` at ``size`` points or raise ``MissingFontError``."""
    try:
        return pygame.font.Font(str(path), size)
    except (OSError, pygame.error) as exc:
        raise MissingFontError(f'Failed to load font "{path}": {exc}', path=path) from exc


def open_status_font(size: int = STATUS_FONT_SIZE) -> pygame.font.Font:
    """Open the bundled font used for status messages."""
    return pygame.font.Font(None, size)


class FontWidthOracle:
    """Measure UTF-8 slices in pixels with one pygame font."""

    def __init__(self, font: pygame.font.Font) -> None:
        self.font = font

    def __call__(self, text: bytes) -> int:
        decoded = decode_for_measure(text)
        if not decoded:
            return 0
        try:
            width, _height = self.font.size(decoded)
        except (pygame.error, ValueError) as exc:
            raise MeasurementError(f"cannot measure text: {exc}") from exc
        return width

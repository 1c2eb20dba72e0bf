"""Command-line front door for txtview.

Parses CLI options, layers them over the config file and either prints the
wrapped layout (``--render``) or opens the interactive viewer window.
"""

from __future__ import annotations

import argparse
import logging
import shutil
import sys
from dataclasses import replace
from pathlib import Path

from .errors import MissingDocumentError, MissingFontError
from .render.plain import render_plain_text
from .runtime import run_viewer
from .runtime.config import Color, ViewerConfig, is_ttf_file, load_viewer_config, parse_color
from .runtime.document import read_document

LOG_LEVELS = ("debug", "info", "warning", "error")
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def _positive_int(value: str) -> int:
    """argparse type for positive integer values."""
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid integer value: {value!r}") from exc
    if parsed <= 0:
        raise argparse.ArgumentTypeError("value must be >= 1")
    return parsed


def _color(value: str) -> Color:
    """argparse type for ``r,g,b`` colors."""
    parsed = parse_color(value)
    if parsed is None:
        raise argparse.ArgumentTypeError(f"invalid color {value!r}; expected r,g,b")
    return parsed


def _ttf_path(value: str) -> Path:
    if not is_ttf_file(value):
        raise argparse.ArgumentTypeError(f"font must be a .ttf file: {value!r}")
    return Path(value).expanduser()


def _default_render_width() -> int:
    """Resolve default render width from current terminal size."""
    term = shutil.get_terminal_size((80, 24))
    return max(1, term.columns)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="View a plain-text file in a scrollable window.")
    parser.add_argument("path", help="Text file to open.")
    parser.add_argument("--font", type=_ttf_path, default=None, help="TrueType font file (.ttf).")
    parser.add_argument("--font-size", type=_positive_int, default=None, help="Font size in points.")
    parser.add_argument("--bg-color", type=_color, default=None, help="Background color as r,g,b.")
    parser.add_argument("--text-color", type=_color, default=None, help="Text color as r,g,b.")
    parser.add_argument("--encoding", default=None, help="Source encoding (default: detect).")
    parser.add_argument(
        "--ignore-linebreaks",
        action="store_true",
        default=None,
        help="Start in the mode that joins single line breaks into spaces.",
    )
    parser.add_argument("--inverted-colors", action="store_true", default=None, help="Swap text and background.")
    parser.add_argument("--width", type=_positive_int, default=None, help="Window width in pixels.")
    parser.add_argument("--height", type=_positive_int, default=None, help="Window height in pixels.")
    parser.add_argument("--fullscreen", action="store_true", default=None, help="Open a fullscreen window.")
    parser.add_argument("--config", type=Path, default=None, help="Config file to read instead of the default.")
    parser.add_argument("--render", action="store_true", help="Print the wrapped text to stdout and exit.")
    parser.add_argument(
        "--max-cols",
        type=_positive_int,
        default=None,
        help="Column width for --render output (default: terminal width).",
    )
    parser.add_argument("--log-level", choices=LOG_LEVELS, default="warning", help="Logging verbosity.")
    return parser


def apply_cli_overrides(config: ViewerConfig, args: argparse.Namespace) -> ViewerConfig:
    """Return ``config`` with every option given on the command line applied."""
    updates = {}
    for field_name, arg_name in (
        ("font_path", "font"),
        ("font_size", "font_size"),
        ("bg_color", "bg_color"),
        ("text_color", "text_color"),
        ("encoding", "encoding"),
        ("ignore_linebreaks", "ignore_linebreaks"),
        ("inverted_colors", "inverted_colors"),
        ("width", "width"),
        ("height", "height"),
        ("fullscreen", "fullscreen"),
    ):
        value = getattr(args, arg_name)
        if value is not None:
            updates[field_name] = value
    return replace(config, **updates)


def main() -> None:
    """Parse CLI arguments and open the viewer on the given file."""
    args = build_parser().parse_args()
    logging.basicConfig(level=getattr(logging, args.log_level.upper()), format=LOG_FORMAT)

    path = Path(args.path).expanduser()
    if not path.is_file():
        raise SystemExit(f"Path not found: {path}")

    config = apply_cli_overrides(load_viewer_config(args.config), args)

    try:
        if args.render:
            max_cols = args.max_cols if args.max_cols is not None else _default_render_width()
            text = read_document(path, config.encoding)
            sys.stdout.write(render_plain_text(text, max_cols, ignore_linebreaks=config.ignore_linebreaks))
            return
        run_viewer(config, path.resolve())
    except (MissingDocumentError, MissingFontError) as exc:
        raise SystemExit(str(exc)) from exc


if __name__ == "__main__":
    main()

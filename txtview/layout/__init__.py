"""Text layout and viewport engine.

Pure functions and containers with no UI concerns: line records and their
chunked store, width-constrained line breaking, the linebreak-collapsed text
transform, and viewport lookup.
"""

from __future__ import annotations

from .collapse import collapse
from .engine import build_layout, find_fitting_length, iter_logical_lines, utf8_char_length
from .line_store import DEFAULT_CHUNK_CAPACITY, LayoutStats, LineRecord, LineStore
from .measure import CellWidthOracle, WidthOracle
from .viewport import clamp_scroll, first_visible, max_scroll, scroll_percent, visible_lines

__all__ = [
    "CellWidthOracle",
    "DEFAULT_CHUNK_CAPACITY",
    "LayoutStats",
    "LineRecord",
    "LineStore",
    "WidthOracle",
    "build_layout",
    "clamp_scroll",
    "collapse",
    "find_fitting_length",
    "first_visible",
    "iter_logical_lines",
    "max_scroll",
    "scroll_percent",
    "utf8_char_length",
    "visible_lines",
]

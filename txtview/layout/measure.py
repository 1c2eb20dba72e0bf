"""Width oracles used by the layout engine.

An oracle maps a UTF-8 byte slice to a width in layout units (pixels for a
font, cells for a terminal). It must be monotonic in prefix length for a given
font and size, and raises ``MeasurementError`` for input it cannot measure.
"""

from __future__ import annotations

import unicodedata
from typing import Protocol

from ..errors import MeasurementError

TAB_STOP = 8


class WidthOracle(Protocol):
    def __call__(self, text: bytes) -> int: ...


def decode_for_measure(text: bytes) -> str:
    """Decode a candidate slice, refusing slices that split a code point."""
    try:
        return text.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise MeasurementError(f"cannot measure invalid UTF-8 slice: {exc.reason}") from exc


def char_display_width(ch: str, col: int) -> int:
    """Return terminal column width for one character at visual column ``col``.

    Tabs expand to the next 8-column stop, combining marks consume no columns,
    and East Asian wide/fullwidth characters consume two.
    """
    if ch == "\t":
        return TAB_STOP - (col % TAB_STOP)
    if unicodedata.combining(ch):
        return 0
    if unicodedata.east_asian_width(ch) in {"W", "F"}:
        return 2
    return 1


def plain_display_width(text: str) -> int:
    """Return the number of terminal cells ``text`` occupies from column 0."""
    col = 0
    for ch in text:
        col += char_display_width(ch, col)
    return col


class CellWidthOracle:
    """Measure text in terminal cells, for the non-interactive dump renderer."""

    def __call__(self, text: bytes) -> int:
        return plain_display_width(decode_for_measure(text))

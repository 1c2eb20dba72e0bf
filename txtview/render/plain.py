"""Non-interactive dump of a wrapped layout for terminals and pipes."""

from __future__ import annotations

from ..layout import CellWidthOracle, build_layout, collapse


def render_plain_text(text: bytes, max_cols: int, *, ignore_linebreaks: bool = False) -> str:
    """Wrap ``text`` to ``max_cols`` terminal cells and return one row per line.

    Uses the same layout engine as the window, with one cell per unit of width
    and one row per line.
    """
    source = collapse(text) if ignore_linebreaks else text
    store = build_layout(source, CellWidthOracle(), max(1, max_cols), 1)
    out: list[str] = []
    for record in store:
        out.append(source[record.start_offset : record.end_offset].decode("utf-8", errors="replace"))
        out.append("\n")
    return "".join(out)

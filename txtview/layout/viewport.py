"""Viewport lookup and scroll arithmetic over a built ``LineStore``.

Records are contiguous in y, so the first visible line for a scroll offset is
found by binary search and rendering only walks the lines that intersect the
viewport.
"""

from __future__ import annotations

from collections.abc import Iterator

from .line_store import LineRecord, LineStore


def first_visible(store: LineStore, scroll_pos: int) -> int:
    """Return the minimal index whose record extends below ``scroll_pos``.

    Returns ``0`` for an empty store or when no record qualifies.
    """
    left = 0
    right = len(store) - 1
    while left <= right:
        mid = left + (right - left) // 2
        line = store.get(mid)
        if line.bottom > scroll_pos:
            if mid == 0 or store.get(mid - 1).bottom <= scroll_pos:
                return mid
            right = mid - 1
        else:
            left = mid + 1
    return 0


def visible_lines(
    store: LineStore,
    scroll_pos: int,
    viewport_height: int,
) -> Iterator[tuple[int, LineRecord, int]]:
    """Yield ``(index, record, screen_y)`` for records intersecting the viewport."""
    for index in range(first_visible(store, scroll_pos), len(store)):
        record = store.get(index)
        screen_y = record.y_position - scroll_pos
        if screen_y >= viewport_height:
            return
        yield index, record, screen_y


def max_scroll(total_height: int, viewport_height: int) -> int:
    """Largest scroll offset that still fills the viewport."""
    return max(0, total_height - viewport_height)


def clamp_scroll(scroll_pos: int, total_height: int, viewport_height: int) -> int:
    """Clamp ``scroll_pos`` into ``[0, max_scroll(...)]``."""
    return max(0, min(scroll_pos, max_scroll(total_height, viewport_height)))


def scroll_percent(scroll_pos: int, total_height: int, viewport_height: int) -> float:
    """Compute vertical scroll position as percentage of scrollable range."""
    limit = max_scroll(total_height, viewport_height)
    if limit <= 0:
        return 0.0
    return (clamp_scroll(scroll_pos, total_height, viewport_height) / limit) * 100.0

"""Width-constrained line breaking over UTF-8 byte buffers.

The engine walks terminator-delimited logical lines and splits each one into
visual lines that fit ``max_width`` according to a width oracle. Fits are
found with a binary search over prefix lengths, preferring a break at the last
space that still fits. When not even one character fits, one code point is
emitted anyway so every build terminates.
"""

from __future__ import annotations

import logging
import re
import time
from collections.abc import Iterator

from ..errors import LayoutAllocationError, MeasurementError
from .line_store import DEFAULT_CHUNK_CAPACITY, LineRecord, LineStore
from .measure import WidthOracle

logger = logging.getLogger(__name__)

_TERMINATOR_RE = re.compile(rb"\r\n|\r|\n")
_SPACE = 0x20
_TAB = 0x09


def utf8_char_length(lead_byte: int) -> int:
    """Return the UTF-8 sequence length announced by ``lead_byte``.

    Continuation and invalid lead bytes count as one byte so callers always
    advance.
    """
    if lead_byte < 0x80:
        return 1
    if 0xC0 <= lead_byte <= 0xDF:
        return 2
    if 0xE0 <= lead_byte <= 0xEF:
        return 3
    if 0xF0 <= lead_byte <= 0xF7:
        return 4
    return 1


def _is_continuation(byte: int) -> bool:
    return (byte & 0xC0) == 0x80


def iter_logical_lines(text: bytes) -> Iterator[tuple[int, int]]:
    """Yield ``(start, length)`` for each terminator-delimited line of ``text``.

    ``\\r\\n`` is one terminator. A terminator at the very end of the buffer
    does not open an extra empty line.
    """
    pos = 0
    end = len(text)
    while pos < end:
        match = _TERMINATOR_RE.search(text, pos)
        if match is None:
            yield pos, end - pos
            return
        yield pos, match.start() - pos
        pos = match.end()


def _boundary_at_or_before(text: bytes, start: int, length: int) -> int:
    """Move ``length`` back so ``text[start:start + length]`` ends on a code point."""
    while length > 0 and start + length < len(text) and _is_continuation(text[start + length]):
        length -= 1
    return length


def _prefix_fits(
    text: bytes,
    start: int,
    length: int,
    measure: WidthOracle,
    max_width: int,
) -> bool:
    try:
        width = measure(text[start : start + length])
    except MeasurementError:
        return False
    return width <= max_width


def find_fitting_length(
    text: bytes,
    start: int,
    length: int,
    measure: WidthOracle,
    max_width: int,
) -> int:
    """Return the longest prefix of ``text[start:start + length]`` within ``max_width``.

    The oracle is assumed monotonic in prefix length. Candidates are snapped to
    code-point boundaries before measuring, and a measurement failure counts as
    "does not fit". When the best fit stops short of the segment end, the
    nearest preceding space is preferred as long as that shorter prefix still
    measures within ``max_width``.
    """
    if length <= 0:
        return 0

    left = 0
    right = length
    best_fit = 0
    while left <= right:
        mid = left + (right - left) // 2
        candidate = _boundary_at_or_before(text, start, mid)
        if _prefix_fits(text, start, candidate, measure, max_width):
            best_fit = max(best_fit, candidate)
            left = mid + 1
        else:
            if candidate == 0:
                break
            right = candidate - 1

    if 0 < best_fit < length:
        space_pos = best_fit
        while space_pos > 0:
            if text[start + space_pos] == _SPACE and _prefix_fits(
                text, start, space_pos, measure, max_width
            ):
                best_fit = space_pos
                break
            space_pos -= 1

    return best_fit


def _layout_lines(
    store: LineStore,
    text: bytes,
    measure: WidthOracle,
    max_width: int,
    line_height: int,
) -> int:
    """Append records for all of ``text`` and return the final vertical cursor."""
    current_y = 0
    for seg_start, seg_length in iter_logical_lines(text):
        if seg_length == 0:
            store.append(LineRecord(current_y, line_height, seg_start, 0, False))
            current_y += line_height
            continue

        offset = 0
        while offset < seg_length:
            line_start = seg_start + offset
            remaining = seg_length - offset
            fit = find_fitting_length(text, line_start, remaining, measure, max_width)
            if fit == 0:
                fit = min(utf8_char_length(text[line_start]), remaining)

            store.append(
                LineRecord(
                    y_position=current_y,
                    height=line_height,
                    start_offset=line_start,
                    length=fit,
                    is_wrapped=offset + fit < seg_length,
                )
            )
            current_y += line_height

            offset += fit
            while offset < seg_length and text[seg_start + offset] in (_SPACE, _TAB):
                offset += 1
    return current_y


def build_layout(
    text: bytes,
    measure: WidthOracle,
    max_width: int,
    line_height: int,
    store: LineStore | None = None,
    chunk_capacity: int = DEFAULT_CHUNK_CAPACITY,
) -> LineStore:
    """Lay out ``text`` into ``store`` (or a new store) and return it.

    An existing store is reset first and keeps its chunks. If the build fails
    the store is reset again before the error propagates, so a half-built
    layout is never observable.
    """
    if line_height <= 0:
        raise ValueError("line_height must be >= 1")
    if store is None:
        store = LineStore(chunk_capacity)
    store.reset()

    started = time.perf_counter()
    try:
        total_height = _layout_lines(store, text, measure, max_width, line_height)
    except LayoutAllocationError:
        logger.error("Layout build aborted after %d lines", len(store))
        store.reset()
        raise

    store.built_width = max_width
    store.line_height = line_height
    store.total_height = total_height
    store.stats.elapsed_ms = (time.perf_counter() - started) * 1000.0
    logger.debug(
        "Laid out %d bytes into %d lines (%d px) in %.1f ms using %d blocks of %d",
        len(text),
        len(store),
        total_height,
        store.stats.elapsed_ms,
        store.stats.total_blocks,
        store.stats.block_size,
    )
    return store

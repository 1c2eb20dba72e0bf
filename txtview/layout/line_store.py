"""Chunked, append-only storage for post-wrap line records.

Records are grouped into fixed-capacity chunks kept in an arena list, so an
index resolves to ``(chunk, offset)`` by arithmetic. A store is never patched:
it is reset and refilled by one layout build, optionally reusing the chunks
it already holds.
"""

from __future__ import annotations

import sys
from collections.abc import Iterator
from dataclasses import dataclass

from ..errors import LayoutAllocationError

DEFAULT_CHUNK_CAPACITY = 50


@dataclass(frozen=True)
class LineRecord:
    """One visual line: vertical placement plus the source byte range it shows."""

    y_position: int
    height: int
    start_offset: int
    length: int
    is_wrapped: bool = False

    @property
    def end_offset(self) -> int:
        return self.start_offset + self.length

    @property
    def bottom(self) -> int:
        return self.y_position + self.height


@dataclass
class LayoutStats:
    """Bookkeeping for the most recent build into a store."""

    block_size: int
    elapsed_ms: float = 0.0
    memory_used: int = 0
    total_blocks: int = 0


class LineStore:
    """Append-only sequence of ``LineRecord`` split into equal-sized chunks."""

    def __init__(self, chunk_capacity: int = DEFAULT_CHUNK_CAPACITY) -> None:
        """Create an empty store and eagerly allocate its first chunk."""
        if chunk_capacity < 1:
            raise ValueError("chunk_capacity must be >= 1")
        self.chunk_capacity = chunk_capacity
        self.stats = LayoutStats(block_size=chunk_capacity)
        self._chunks: list[list[LineRecord | None]] = []
        self._current_chunk = 0
        self._current_used = 0
        self._count = 0
        self.built_width = 0
        self.line_height = 0
        self.total_height = 0
        self._allocate_chunk()

    def __len__(self) -> int:
        return self._count

    def __iter__(self) -> Iterator[LineRecord]:
        remaining = self._count
        for chunk in self._chunks:
            if remaining <= 0:
                return
            take = min(remaining, self.chunk_capacity)
            yield from chunk[:take]
            remaining -= take

    def __getitem__(self, index: int) -> LineRecord:
        return self.get(index)

    @property
    def chunk_count(self) -> int:
        """Number of chunks currently held, including retained empty ones."""
        return len(self._chunks)

    def _allocate_chunk(self) -> None:
        try:
            chunk: list[LineRecord | None] = [None] * self.chunk_capacity
        except MemoryError as exc:
            raise LayoutAllocationError(
                "Failed to allocate line chunk",
                line_count=self._count,
            ) from exc
        self._chunks.append(chunk)
        self.stats.memory_used += sys.getsizeof(chunk)
        self.stats.total_blocks += 1

    def append(self, record: LineRecord) -> LineRecord:
        """Store ``record`` after the last one, opening a chunk when needed."""
        if not self._chunks:
            self._allocate_chunk()
            self._current_chunk = 0
            self._current_used = 0
        elif self._current_used >= self.chunk_capacity:
            next_chunk = self._current_chunk + 1
            if next_chunk >= len(self._chunks):
                self._allocate_chunk()
            self._current_chunk = next_chunk
            self._current_used = 0

        self._chunks[self._current_chunk][self._current_used] = record
        self._current_used += 1
        self._count += 1
        return record

    def get(self, index: int) -> LineRecord:
        """Return the record at ``index``; ``0 <= index < len(self)``."""
        if index < 0 or index >= self._count:
            raise IndexError(f"line {index} out of range (count={self._count})")
        chunk_index, offset = divmod(index, self.chunk_capacity)
        record = self._chunks[chunk_index][offset]
        assert record is not None
        return record

    def last(self) -> LineRecord | None:
        """Return the final record, or ``None`` for an empty store."""
        if self._count == 0:
            return None
        return self.get(self._count - 1)

    def reset(self) -> None:
        """Forget all records while keeping allocated chunks for the next build."""
        self._current_chunk = 0
        self._current_used = 0
        self._count = 0
        self.built_width = 0
        self.line_height = 0
        self.total_height = 0

    def release(self) -> None:
        """Drop every chunk; the store stays usable and reallocates on append."""
        self._chunks.clear()
        self.reset()
        self.stats = LayoutStats(block_size=self.chunk_capacity)

    def is_stale(self, max_width: int, line_height: int) -> bool:
        """Return whether this store was built for a different width or line height."""
        return self.built_width != max_width or self.line_height != line_height

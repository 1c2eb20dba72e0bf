"""Flat-file persistence of per-document scroll state.

The store is a plain sequence of fixed-size binary records with no header and
no index. Records are keyed by ``(document path, font path)`` and looked up
with a linear scan. The first record doubles as the file's format check: if
it is missing, short, or carries another version tag, the whole file is
deleted rather than repaired.

Persistence is best effort. I/O failures are logged and degrade to "no saved
state"; they never propagate into the viewer.
"""

from __future__ import annotations

import logging
import os
import struct
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO

from platformdirs import user_state_dir

from ..errors import CorruptScrollStateError

logger = logging.getLogger(__name__)

APP_NAME = "txtview"
SCROLL_STATE_VERSION = 4
PATH_CAPACITY = 1024
SCROLL_STATE_FILENAME = "positions_v2.bin"
DEFAULT_SCROLL_STATE_PATH = Path(user_state_dir(APP_NAME, appauthor=False)) / SCROLL_STATE_FILENAME
LEGACY_SCROLL_STATE_PATH = Path.home() / ".txtview" / SCROLL_STATE_FILENAME
SCROLL_STATE_PATH = DEFAULT_SCROLL_STATE_PATH

# version, document path, font path, font size, scroll, scroll (collapsed),
# ignore-linebreaks flag, inverted-colors flag
_RECORD = struct.Struct(f"<i{PATH_CAPACITY}s{PATH_CAPACITY}siiiii")
RECORD_SIZE = _RECORD.size


@dataclass(frozen=True)
class ScrollRecord:
    """Saved display state for one document rendered with one font."""

    document_path: str
    font_path: str
    font_size: int
    scroll_position: int = 0
    scroll_position_adjusted: int = 0
    ignore_linebreaks: bool = False
    inverted_colors: bool = False

    @property
    def key(self) -> tuple[bytes, bytes]:
        return record_key(self.document_path, self.font_path)


def _encode_path(path: str) -> bytes:
    """Encode a path for a fixed-capacity field, leaving room for the NUL."""
    return os.fsencode(path)[: PATH_CAPACITY - 1]


def _field_text(raw: bytes) -> bytes:
    terminator = raw.find(b"\0")
    if terminator < 0:
        raise CorruptScrollStateError("path field is not NUL-terminated")
    return raw[:terminator]


def record_key(document_path: str, font_path: str) -> tuple[bytes, bytes]:
    """Return the on-disk key bytes for a ``(document, font)`` pair."""
    return _encode_path(document_path), _encode_path(font_path)


def pack_record(record: ScrollRecord) -> bytes:
    """Serialize ``record`` into one fixed-size on-disk record."""
    document_field, font_field = record.key
    return _RECORD.pack(
        SCROLL_STATE_VERSION,
        document_field,
        font_field,
        record.font_size,
        record.scroll_position,
        record.scroll_position_adjusted,
        int(bool(record.ignore_linebreaks)),
        int(bool(record.inverted_colors)),
    )


def unpack_record(data: bytes) -> ScrollRecord:
    """Decode and validate one on-disk record.

    Raises ``CorruptScrollStateError`` for short data, a foreign version tag,
    or path fields without a terminating NUL.
    """
    if len(data) != RECORD_SIZE:
        raise CorruptScrollStateError(f"truncated record ({len(data)} of {RECORD_SIZE} bytes)")
    (
        version,
        document_field,
        font_field,
        font_size,
        scroll_position,
        scroll_position_adjusted,
        ignore_linebreaks,
        inverted_colors,
    ) = _RECORD.unpack(data)
    if version != SCROLL_STATE_VERSION:
        raise CorruptScrollStateError(f"unsupported version {version}")
    return ScrollRecord(
        document_path=os.fsdecode(_field_text(document_field)),
        font_path=os.fsdecode(_field_text(font_field)),
        font_size=font_size,
        scroll_position=scroll_position,
        scroll_position_adjusted=scroll_position_adjusted,
        ignore_linebreaks=bool(ignore_linebreaks),
        inverted_colors=bool(inverted_colors),
    )


def _raw_key(data: bytes) -> tuple[bytes, bytes]:
    """Return the NUL-trimmed path fields of a raw record without validation."""
    _version, document_field, font_field, *_rest = _RECORD.unpack(data)
    return document_field.split(b"\0", 1)[0], font_field.split(b"\0", 1)[0]


def _iter_records(handle: BinaryIO) -> Iterator[tuple[int, bytes]]:
    """Yield ``(offset, data)`` for each whole record; a short tail is ignored."""
    handle.seek(0)
    offset = 0
    while True:
        data = handle.read(RECORD_SIZE)
        if len(data) < RECORD_SIZE:
            return
        yield offset, data
        offset += RECORD_SIZE


def _validate_first_record(handle: BinaryIO) -> None:
    handle.seek(0)
    unpack_record(handle.read(RECORD_SIZE))


class ScrollStateStore:
    """Read and update scroll records in one store file."""

    def __init__(self, path: Path) -> None:
        self.path = path

    def _discard(self, reason: object) -> None:
        logger.warning("Discarding scroll state file %s: %s", self.path, reason)
        try:
            self.path.unlink()
        except FileNotFoundError:
            pass
        except OSError as exc:
            logger.warning("Could not delete scroll state file %s: %s", self.path, exc)

    def load(self, document_path: str, font_path: str) -> ScrollRecord | None:
        """Return the saved record for ``(document_path, font_path)``, if any.

        A corrupt file is deleted and reported as not found.
        """
        key = record_key(document_path, font_path)
        try:
            with self.path.open("rb") as handle:
                _validate_first_record(handle)
                for _offset, data in _iter_records(handle):
                    if _raw_key(data) == key:
                        return unpack_record(data)
        except FileNotFoundError:
            return None
        except CorruptScrollStateError as exc:
            self._discard(exc)
            return None
        except OSError as exc:
            logger.warning("Could not read scroll state file %s: %s", self.path, exc)
            return None
        return None

    def save(self, record: ScrollRecord) -> None:
        """Rewrite the matching record in place, or append a new one.

        Missing files (and files whose first record is invalid) are replaced by
        a fresh single-record file.
        """
        data = pack_record(record)
        key = record.key
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            try:
                handle = self.path.open("r+b")
            except FileNotFoundError:
                self._write_fresh(data)
                return

            with handle:
                try:
                    _validate_first_record(handle)
                except CorruptScrollStateError as exc:
                    logger.warning("Replacing invalid scroll state file %s: %s", self.path, exc)
                    handle.seek(0)
                    handle.truncate()
                    handle.write(data)
                    return

                append_at = 0
                for offset, existing in _iter_records(handle):
                    if _raw_key(existing) == key:
                        handle.seek(offset)
                        handle.write(data)
                        return
                    append_at = offset + RECORD_SIZE
                handle.seek(append_at)
                handle.write(data)
        except OSError as exc:
            logger.warning("Could not save scroll state to %s: %s", self.path, exc)

    def _write_fresh(self, data: bytes) -> None:
        with self.path.open("wb") as handle:
            handle.write(data)

    def records(self) -> list[ScrollRecord]:
        """Return every valid record in file order; corrupt files yield ``[]``."""
        out: list[ScrollRecord] = []
        try:
            with self.path.open("rb") as handle:
                _validate_first_record(handle)
                for _offset, data in _iter_records(handle):
                    out.append(unpack_record(data))
        except (OSError, CorruptScrollStateError):
            return []
        return out


def _load_scroll_state_path() -> Path:
    """Return preferred store path, falling back to the legacy location when needed."""
    if SCROLL_STATE_PATH.exists():
        return SCROLL_STATE_PATH
    if SCROLL_STATE_PATH == DEFAULT_SCROLL_STATE_PATH and LEGACY_SCROLL_STATE_PATH.exists():
        return LEGACY_SCROLL_STATE_PATH
    return SCROLL_STATE_PATH


def load_scroll_state(document_path: str, font_path: str) -> ScrollRecord | None:
    """Load a record from the per-user store file."""
    return ScrollStateStore(_load_scroll_state_path()).load(document_path, font_path)


def save_scroll_state(record: ScrollRecord) -> None:
    """Persist a record into the per-user store file."""
    ScrollStateStore(SCROLL_STATE_PATH).save(record)

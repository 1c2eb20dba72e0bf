"""Unit tests for the chunked line-record store."""

from __future__ import annotations

import unittest
from unittest import mock

from txtview.errors import LayoutAllocationError
from txtview.layout import LineRecord, LineStore


def _record(index: int, height: int = 10) -> LineRecord:
    return LineRecord(y_position=index * height, height=height, start_offset=index, length=1)


class LineStoreTests(unittest.TestCase):
    def test_new_store_is_empty_with_one_chunk(self) -> None:
        store = LineStore(chunk_capacity=4)

        self.assertEqual(len(store), 0)
        self.assertEqual(store.chunk_count, 1)
        self.assertIsNone(store.last())
        self.assertEqual(store.stats.total_blocks, 1)

    def test_rejects_non_positive_capacity(self) -> None:
        with self.assertRaises(ValueError):
            LineStore(chunk_capacity=0)

    def test_append_spills_into_new_chunks(self) -> None:
        store = LineStore(chunk_capacity=3)
        for index in range(7):
            store.append(_record(index))

        self.assertEqual(len(store), 7)
        self.assertEqual(store.chunk_count, 3)
        self.assertEqual([record.start_offset for record in store], list(range(7)))
        self.assertEqual(store.get(5), _record(5))
        self.assertEqual(store[3], _record(3))
        self.assertEqual(store.last(), _record(6))

    def test_get_out_of_range_raises_index_error(self) -> None:
        store = LineStore(chunk_capacity=2)
        store.append(_record(0))

        with self.assertRaises(IndexError):
            store.get(1)
        with self.assertRaises(IndexError):
            store.get(-1)

    def test_reset_keeps_chunks_for_reuse(self) -> None:
        store = LineStore(chunk_capacity=2)
        for index in range(5):
            store.append(_record(index))
        store.total_height = 50
        store.built_width = 100

        store.reset()

        self.assertEqual(len(store), 0)
        self.assertEqual(store.chunk_count, 3)
        self.assertEqual(store.total_height, 0)
        self.assertEqual(list(store), [])

        for index in range(4):
            store.append(_record(index))
        self.assertEqual(store.chunk_count, 3)
        self.assertEqual(len(list(store)), 4)

    def test_release_drops_chunks_and_store_stays_usable(self) -> None:
        store = LineStore(chunk_capacity=2)
        for index in range(3):
            store.append(_record(index))

        store.release()

        self.assertEqual(store.chunk_count, 0)
        self.assertEqual(store.stats.total_blocks, 0)
        store.append(_record(0))
        self.assertEqual(len(store), 1)
        self.assertEqual(store.chunk_count, 1)

    def test_allocation_failure_raises_layout_allocation_error(self) -> None:
        store = LineStore(chunk_capacity=1)
        store.append(_record(0))

        with mock.patch.object(store, "_allocate_chunk", side_effect=LayoutAllocationError("boom", line_count=1)):
            with self.assertRaises(LayoutAllocationError) as ctx:
                store.append(_record(1))

        self.assertEqual(ctx.exception.line_count, 1)
        self.assertEqual(len(store), 1)

    def test_is_stale_compares_width_and_line_height(self) -> None:
        store = LineStore()
        store.built_width = 100
        store.line_height = 14

        self.assertFalse(store.is_stale(100, 14))
        self.assertTrue(store.is_stale(90, 14))
        self.assertTrue(store.is_stale(100, 15))

    def test_record_end_offset_and_bottom(self) -> None:
        record = LineRecord(y_position=20, height=12, start_offset=5, length=7, is_wrapped=True)

        self.assertEqual(record.end_offset, 12)
        self.assertEqual(record.bottom, 32)


if __name__ == "__main__":
    unittest.main()

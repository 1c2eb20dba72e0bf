"""Unit tests for terminal-cell width measurement."""

from __future__ import annotations

import unittest

from txtview.errors import MeasurementError
from txtview.layout import CellWidthOracle
from txtview.layout.measure import char_display_width, plain_display_width


class CellWidthTests(unittest.TestCase):
    def test_ascii_is_one_cell_per_character(self) -> None:
        self.assertEqual(CellWidthOracle()(b"hello"), 5)

    def test_wide_and_combining_characters(self) -> None:
        self.assertEqual(plain_display_width("日本"), 4)
        self.assertEqual(plain_display_width("é"), 1)

    def test_tabs_expand_to_next_stop(self) -> None:
        self.assertEqual(char_display_width("\t", 0), 8)
        self.assertEqual(char_display_width("\t", 3), 5)
        self.assertEqual(plain_display_width("ab\tc"), 9)

    def test_split_code_point_cannot_be_measured(self) -> None:
        with self.assertRaises(MeasurementError):
            CellWidthOracle()("é".encode("utf-8")[:1])


if __name__ == "__main__":
    unittest.main()

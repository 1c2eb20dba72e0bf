"""Config loading and validation tests."""

from __future__ import annotations

import json
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from txtview.runtime import config
from txtview.runtime.config import (
    ViewerConfig,
    is_ttf_file,
    load_config,
    load_viewer_config,
    parse_color,
    viewer_config_from_mapping,
)


class ConfigFileTests(unittest.TestCase):
    def test_missing_file_yields_empty_mapping(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            self.assertEqual(load_config(Path(tmp) / "config.json"), {})

    def test_malformed_json_is_ignored_with_warning(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "config.json"
            path.write_text("{not json", encoding="utf-8")

            with self.assertLogs("txtview.runtime.config", level="WARNING"):
                self.assertEqual(load_config(path), {})

    def test_non_object_json_is_ignored(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "config.json"
            path.write_text("[1, 2, 3]", encoding="utf-8")
            self.assertEqual(load_config(path), {})

    def test_load_viewer_config_reads_values(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "config.json"
            path.write_text(
                json.dumps(
                    {
                        "font": "~/fonts/Mono.TTF",
                        "font_size": 18,
                        "bg_color": "10, 20, 30",
                        "text_color": [200, 210, 220],
                        "encoding": "cp1252",
                        "ignore_linebreaks": 1,
                        "inverted_colors": True,
                        "width": 800,
                        "height": "600",
                    }
                ),
                encoding="utf-8",
            )

            loaded = load_viewer_config(path)

        self.assertEqual(loaded.font_path, Path("~/fonts/Mono.TTF").expanduser())
        self.assertEqual(loaded.font_size, 18)
        self.assertEqual(loaded.bg_color, (10, 20, 30))
        self.assertEqual(loaded.text_color, (200, 210, 220))
        self.assertEqual(loaded.encoding, "cp1252")
        self.assertTrue(loaded.ignore_linebreaks)
        self.assertTrue(loaded.inverted_colors)
        self.assertEqual((loaded.width, loaded.height), (800, 600))
        self.assertFalse(loaded.fullscreen)

    def test_default_path_falls_back_to_legacy_location(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            default = root / "config" / "config.json"
            legacy = root / "legacy" / "config.json"
            legacy.parent.mkdir()
            legacy.write_text('{"font_size": 22}', encoding="utf-8")

            with (
                mock.patch.object(config, "CONFIG_PATH", default),
                mock.patch.object(config, "DEFAULT_CONFIG_PATH", default),
                mock.patch.object(config, "LEGACY_CONFIG_PATH", legacy),
            ):
                loaded = load_viewer_config()

        self.assertEqual(loaded.font_size, 22)


class ConfigValidationTests(unittest.TestCase):
    def test_invalid_values_keep_defaults(self) -> None:
        loaded = viewer_config_from_mapping(
            {
                "font": "font.otf",
                "font_size": 0,
                "bg_color": "red",
                "text_color": [1, 2],
                "width": True,
                "ignore_linebreaks": "yes",
            }
        )

        self.assertEqual(loaded, ViewerConfig())

    def test_mapping_overlays_base(self) -> None:
        base = ViewerConfig(font_size=30, width=500)
        loaded = viewer_config_from_mapping({"width": 640}, base)

        self.assertEqual(loaded.font_size, 30)
        self.assertEqual(loaded.width, 640)

    def test_parse_color(self) -> None:
        self.assertEqual(parse_color("1,2,3"), (1, 2, 3))
        self.assertEqual(parse_color(" 300 , -4 , 128 "), (255, 0, 128))
        self.assertEqual(parse_color([0, 0, 0]), (0, 0, 0))
        self.assertIsNone(parse_color("1,2"))
        self.assertIsNone(parse_color("a,b,c"))
        self.assertIsNone(parse_color([True, 0, 0]))
        self.assertIsNone(parse_color(None))

    def test_is_ttf_file(self) -> None:
        self.assertTrue(is_ttf_file("DejaVuSansMono.ttf"))
        self.assertTrue(is_ttf_file("/fonts/UPPER.TTF"))
        self.assertFalse(is_ttf_file("font.otf"))
        self.assertFalse(is_ttf_file(".ttf"))
        self.assertFalse(is_ttf_file("ttf"))


if __name__ == "__main__":
    unittest.main()

"""CLI argument handling tests.

Verifies option layering over the config file, ``--render`` output and the
translation of fatal startup errors into ``SystemExit``.
"""

from __future__ import annotations

import io
import sys
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from txtview import cli
from txtview.errors import MissingFontError
from txtview.runtime.config import ViewerConfig


class CliTests(unittest.TestCase):
    def _write(self, root: Path, name: str, content: str) -> Path:
        path = root / name
        path.write_text(content, encoding="utf-8")
        return path

    def test_launches_viewer_with_config_defaults(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            target = self._write(root, "book.txt", "hello\n")
            config_path = self._write(root, "config.json", '{"font_size": 20, "width": 320}')

            argv = ["txtview", str(target), "--config", str(config_path)]
            with mock.patch.object(sys, "argv", argv), mock.patch("txtview.cli.run_viewer") as run_viewer:
                cli.main()

        run_viewer.assert_called_once()
        config, path = run_viewer.call_args.args
        self.assertEqual(path, target)
        self.assertEqual(config, ViewerConfig(font_size=20, width=320))

    def test_command_line_overrides_config(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            target = self._write(root, "book.txt", "hello\n")
            config_path = self._write(root, "config.json", '{"font_size": 20, "inverted_colors": false}')

            argv = [
                "txtview",
                str(target),
                "--config",
                str(config_path),
                "--font-size",
                "9",
                "--font",
                "/fonts/Mono.ttf",
                "--bg-color",
                "0,0,32",
                "--inverted-colors",
                "--ignore-linebreaks",
                "--fullscreen",
                "--height",
                "480",
            ]
            with mock.patch.object(sys, "argv", argv), mock.patch("txtview.cli.run_viewer") as run_viewer:
                cli.main()

        config, _path = run_viewer.call_args.args
        self.assertEqual(config.font_size, 9)
        self.assertEqual(config.font_path, Path("/fonts/Mono.ttf"))
        self.assertEqual(config.bg_color, (0, 0, 32))
        self.assertTrue(config.inverted_colors)
        self.assertTrue(config.ignore_linebreaks)
        self.assertTrue(config.fullscreen)
        self.assertEqual(config.height, 480)

    def test_missing_document_exits(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            argv = ["txtview", str(Path(tmp) / "missing.txt")]
            with mock.patch.object(sys, "argv", argv), mock.patch("txtview.cli.run_viewer") as run_viewer:
                with self.assertRaises(SystemExit) as ctx:
                    cli.main()

        run_viewer.assert_not_called()
        self.assertIn("Path not found", str(ctx.exception))

    def test_missing_font_becomes_system_exit(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            target = self._write(Path(tmp), "book.txt", "hello")
            argv = ["txtview", str(target), "--config", str(Path(tmp) / "none.json")]
            error = MissingFontError('Failed to load font "/x.ttf"', path=Path("/x.ttf"))
            with mock.patch.object(sys, "argv", argv), mock.patch("txtview.cli.run_viewer", side_effect=error):
                with self.assertRaises(SystemExit) as ctx:
                    cli.main()

        self.assertIn("Failed to load font", str(ctx.exception))

    def test_rejects_non_ttf_font_and_bad_values(self) -> None:
        for extra in (["--font", "font.otf"], ["--font-size", "0"], ["--text-color", "1,2"]):
            with mock.patch.object(sys, "argv", ["txtview", "book.txt", *extra]), mock.patch(
                "sys.stderr", new_callable=io.StringIO
            ):
                with self.assertRaises(SystemExit) as ctx:
                    cli.main()
            self.assertEqual(ctx.exception.code, 2, extra)

    def test_render_prints_wrapped_text(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            target = self._write(Path(tmp), "book.txt", "ab cd ef\n\nxyz")
            argv = [
                "txtview",
                str(target),
                "--render",
                "--max-cols",
                "5",
                "--config",
                str(Path(tmp) / "none.json"),
            ]
            stdout = io.StringIO()
            with (
                mock.patch.object(sys, "argv", argv),
                mock.patch.object(sys, "stdout", stdout),
                mock.patch("txtview.cli.run_viewer") as run_viewer,
            ):
                cli.main()

        run_viewer.assert_not_called()
        self.assertEqual(stdout.getvalue(), "ab cd\nef\n\nxyz\n")

    def test_render_honors_ignore_linebreaks(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            target = self._write(Path(tmp), "book.txt", "ab\ncd")
            argv = [
                "txtview",
                str(target),
                "--render",
                "--ignore-linebreaks",
                "--max-cols",
                "20",
                "--config",
                str(Path(tmp) / "none.json"),
            ]
            stdout = io.StringIO()
            with mock.patch.object(sys, "argv", argv), mock.patch.object(sys, "stdout", stdout):
                cli.main()

        self.assertEqual(stdout.getvalue(), "ab cd\n")


if __name__ == "__main__":
    unittest.main()

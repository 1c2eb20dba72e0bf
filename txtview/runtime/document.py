"""Document state: source text, derived text, both layouts and scroll offsets.

One ``DocumentState`` owns everything the renderer needs for the open
document. Both the normal and the linebreak-collapsed layouts are built
eagerly and kept live, so switching modes never triggers a rebuild. Every
mutation ends with both scroll offsets clamped to their own layout.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from ..errors import LayoutAllocationError, MissingDocumentError
from ..layout import LineStore, WidthOracle, build_layout, clamp_scroll, collapse, max_scroll
from .config import Color
from .scroll_state import ScrollRecord

logger = logging.getLogger(__name__)

MARGINS = 4
LINE_SPACING = 1.2


def line_height_for(font_size: int) -> int:
    """Pixel height of one visual line at ``font_size``."""
    return max(1, int(font_size * LINE_SPACING))


def layout_width_for(window_width: int) -> int:
    """Usable text width inside the window margins."""
    return max(1, window_width - 2 * MARGINS)


def read_document(path: Path, encoding: str | None = None) -> bytes:
    """Read ``path`` and return its contents as UTF-8 bytes.

    An explicit ``encoding`` is decoded with replacement characters for bad
    bytes. Without one, UTF-8 (with or without BOM) is tried before Latin-1.
    """
    try:
        raw = path.read_bytes()
    except OSError as exc:
        raise MissingDocumentError(f"Failed to load text file: {path}", path=path) from exc

    if encoding:
        try:
            return raw.decode(encoding, errors="replace").encode("utf-8")
        except LookupError:
            logger.warning("Unknown encoding %r for %s; detecting instead", encoding, path)

    try:
        return raw.decode("utf-8-sig").encode("utf-8")
    except UnicodeDecodeError:
        # Latin-1 maps every byte, so this cannot fail.
        return raw.decode("latin-1").encode("utf-8")


@dataclass
class DocumentState:
    """Display state for the single open document."""

    path: Path
    text: bytes
    font_path: Path
    font_size: int
    width: int
    height: int
    text_color: Color = (0, 0, 0)
    bg_color: Color = (255, 255, 255)
    ignore_linebreaks: bool = False
    inverted_colors: bool = False
    scroll_position: int = 0
    scroll_position_adjusted: int = 0
    collapsed_text: bytes = b""
    normal_layout: LineStore = field(default_factory=LineStore)
    adjusted_layout: LineStore = field(default_factory=LineStore)

    def __post_init__(self) -> None:
        if len(self.collapsed_text) != len(self.text):
            self.collapsed_text = collapse(self.text)

    @property
    def max_width(self) -> int:
        return layout_width_for(self.width)

    @property
    def line_height(self) -> int:
        return line_height_for(self.font_size)

    def active_text(self) -> bytes:
        return self.collapsed_text if self.ignore_linebreaks else self.text

    def active_layout(self) -> LineStore:
        return self.adjusted_layout if self.ignore_linebreaks else self.normal_layout

    @property
    def active_scroll(self) -> int:
        return self.scroll_position_adjusted if self.ignore_linebreaks else self.scroll_position

    @active_scroll.setter
    def active_scroll(self, value: int) -> None:
        if self.ignore_linebreaks:
            self.scroll_position_adjusted = value
        else:
            self.scroll_position = value

    def line_text(self, start_offset: int, length: int) -> str:
        """Decode one record's byte range of the active text for display.

        NUL bytes come back as U+FFFD since fonts refuse to draw them.
        """
        text = self.active_text()
        start = max(0, min(start_offset, len(text)))
        end = max(start, min(start + length, len(text)))
        return text[start:end].decode("utf-8", errors="replace").replace("\x00", "\ufffd")

    def rebuild_layouts(self, measure: WidthOracle) -> None:
        """Rebuild both layouts for the current font size and width.

        On failure both stores are left empty so they never disagree about the
        font and width they were built for.
        """
        try:
            build_layout(self.text, measure, self.max_width, self.line_height, store=self.normal_layout)
            build_layout(
                self.collapsed_text,
                measure,
                self.max_width,
                self.line_height,
                store=self.adjusted_layout,
            )
        except LayoutAllocationError:
            self.normal_layout.reset()
            self.adjusted_layout.reset()
            self.scroll_position = 0
            self.scroll_position_adjusted = 0
            raise
        self.enforce_scroll_boundaries()

    def layouts_stale(self) -> bool:
        """Return whether either store was built for another width or font size."""
        return self.normal_layout.is_stale(self.max_width, self.line_height) or self.adjusted_layout.is_stale(
            self.max_width, self.line_height
        )

    def _scroll_ratios(self) -> tuple[float, float]:
        normal_total = self.normal_layout.total_height
        adjusted_total = self.adjusted_layout.total_height
        ratio = self.scroll_position / normal_total if normal_total > 0 else 0.0
        ratio_adjusted = self.scroll_position_adjusted / adjusted_total if adjusted_total > 0 else 0.0
        return ratio, ratio_adjusted

    def _rebuild_keeping_position(self, measure: WidthOracle) -> None:
        ratio, ratio_adjusted = self._scroll_ratios()
        self.rebuild_layouts(measure)
        self.scroll_position = int(ratio * self.normal_layout.total_height)
        self.scroll_position_adjusted = int(ratio_adjusted * self.adjusted_layout.total_height)
        self.enforce_scroll_boundaries()

    def change_font_size(self, new_size: int, measure: WidthOracle) -> bool:
        """Relayout at ``new_size`` keeping the relative position in both layouts.

        ``measure`` must already measure with the new size. Sizes below 1 are
        ignored and return ``False``.
        """
        if new_size <= 0:
            return False
        self.font_size = new_size
        self._rebuild_keeping_position(measure)
        return True

    def resize(self, width: int, height: int, measure: WidthOracle) -> bool:
        """Apply a new window size; returns whether the layouts were rebuilt.

        A width change invalidates every wrap point and rebuilds both layouts.
        A height change only moves the scroll limits.
        """
        self.width = max(1, width)
        self.height = max(1, height)
        if self.layouts_stale():
            self._rebuild_keeping_position(measure)
            return True
        self.enforce_scroll_boundaries()
        return False

    def enforce_scroll_boundaries(self) -> None:
        """Clamp both scroll offsets into their own layout's scrollable range."""
        self.scroll_position = clamp_scroll(self.scroll_position, self.normal_layout.total_height, self.height)
        self.scroll_position_adjusted = clamp_scroll(
            self.scroll_position_adjusted,
            self.adjusted_layout.total_height,
            self.height,
        )

    def max_active_scroll(self) -> int:
        return max_scroll(self.active_layout().total_height, self.height)

    def scroll_by(self, delta: int) -> None:
        self.active_scroll = clamp_scroll(
            self.active_scroll + delta,
            self.active_layout().total_height,
            self.height,
        )

    def line_up(self) -> None:
        self.scroll_by(-self.font_size)

    def line_down(self) -> None:
        self.scroll_by(self.font_size)

    def page_up(self) -> None:
        self.scroll_by(-self.height)

    def page_down(self) -> None:
        self.scroll_by(self.height)

    def scroll_to_top(self) -> None:
        self.active_scroll = 0

    def scroll_to_bottom(self) -> None:
        self.active_scroll = self.max_active_scroll()

    def toggle_linebreaks(self) -> None:
        """Switch between the normal and collapsed layouts without relayout."""
        self.ignore_linebreaks = not self.ignore_linebreaks

    def toggle_inverted(self) -> None:
        self.inverted_colors = not self.inverted_colors

    def colors(self) -> tuple[Color, Color]:
        """Return ``(foreground, background)`` honoring color inversion."""
        if self.inverted_colors:
            return self.bg_color, self.text_color
        return self.text_color, self.bg_color

    def to_scroll_record(self) -> ScrollRecord:
        return ScrollRecord(
            document_path=str(self.path),
            font_path=str(self.font_path),
            font_size=self.font_size,
            scroll_position=self.scroll_position,
            scroll_position_adjusted=self.scroll_position_adjusted,
            ignore_linebreaks=self.ignore_linebreaks,
            inverted_colors=self.inverted_colors,
        )

    def apply_scroll_record(self, record: ScrollRecord) -> None:
        """Restore saved font size, offsets and modes; layouts must be rebuilt after."""
        if record.font_size > 0:
            self.font_size = record.font_size
        self.scroll_position = max(0, record.scroll_position)
        self.scroll_position_adjusted = max(0, record.scroll_position_adjusted)
        self.ignore_linebreaks = record.ignore_linebreaks
        self.inverted_colors = record.inverted_colors

    def release_layouts(self) -> None:
        self.normal_layout.release()
        self.adjusted_layout.release()


def load_document(
    path: Path,
    *,
    encoding: str | None,
    font_path: Path,
    font_size: int,
    width: int,
    height: int,
    text_color: Color = (0, 0, 0),
    bg_color: Color = (255, 255, 255),
    ignore_linebreaks: bool = False,
    inverted_colors: bool = False,
) -> DocumentState:
    """Read ``path`` and return a document whose layouts are not built yet."""
    text = read_document(path, encoding)
    return DocumentState(
        path=path,
        text=text,
        font_path=font_path,
        font_size=font_size,
        width=width,
        height=height,
        text_color=text_color,
        bg_color=bg_color,
        ignore_linebreaks=ignore_linebreaks,
        inverted_colors=inverted_colors,
    )

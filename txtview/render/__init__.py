"""Rendering of the active layout and of transient status messages.

Defines the render context (status font plus the current message) and draws
frames onto a surface. Only lines intersecting the viewport are visited. The
surface and fonts are duck-typed so frames can be rendered against fakes.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from ..layout import visible_lines
from ..runtime.config import Color
from ..runtime.document import MARGINS, DocumentState

if TYPE_CHECKING:
    import pygame

MIN_MESSAGE_PADDING = 4


@dataclass(frozen=True)
class StatusMessage:
    """A centered message box shown until ``until_ms``."""

    text: str
    until_ms: int
    x: int
    y: int
    padding: int
    fg: Color
    bg: Color


@dataclass
class RenderContext:
    status_font: Any
    message: StatusMessage | None = None

    def show_message(
        self,
        text: str,
        now_ms: int,
        duration_ms: int,
        x: int,
        y: int,
        padding: int,
        fg: Color,
        bg: Color,
    ) -> None:
        self.message = StatusMessage(text, now_ms + duration_ms, x, y, padding, fg, bg)

    def clear_message(self) -> None:
        self.message = None

    def message_visible(self, now_ms: int) -> bool:
        return self.message is not None and now_ms < self.message.until_ms

    def expire_message(self, now_ms: int) -> bool:
        """Drop a message whose time is up; returns whether one was dropped."""
        if self.message is None or now_ms < self.message.until_ms:
            return False
        self.message = None
        return True


def draw_status_message(ctx: RenderContext, surface: pygame.Surface, now_ms: int) -> None:
    """Draw the active message as a framed box centered on its anchor point."""
    if not ctx.message_visible(now_ms):
        return
    message = ctx.message
    assert message is not None
    padding = max(MIN_MESSAGE_PADDING, message.padding)
    w, h = ctx.status_font.size(message.text)
    left = message.x - (w >> 1) - padding
    top = message.y - (h >> 1) - padding
    box_w = w + 2 * padding
    box_h = h + 2 * padding
    surface.fill(message.bg, (left, top, box_w, box_h))
    surface.fill(message.fg, (left + 2, top + 2, box_w - 4, box_h - 4))
    surface.fill(message.bg, (left + 3, top + 3, box_w - 6, box_h - 6))
    label = ctx.status_font.render(message.text, True, message.fg)
    surface.blit(label, (message.x - (w >> 1), message.y - (h >> 1)))


def render_document(
    ctx: RenderContext,
    surface: pygame.Surface,
    doc: DocumentState,
    font: pygame.font.Font,
    now_ms: int,
) -> int:
    """Draw the visible part of the active layout; returns lines drawn."""
    fg, bg = doc.colors()
    surface.fill(bg)

    drawn = 0
    for _index, record, screen_y in visible_lines(doc.active_layout(), doc.active_scroll, doc.height):
        if record.length <= 0 or screen_y < -record.height:
            continue
        line = font.render(doc.line_text(record.start_offset, record.length), True, fg)
        surface.blit(line, (MARGINS, screen_y))
        drawn += 1

    draw_status_message(ctx, surface, now_ms)
    return drawn


__all__ = [
    "RenderContext",
    "StatusMessage",
    "draw_status_message",
    "render_document",
]

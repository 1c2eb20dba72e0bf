"""Runtime composition layer for txtview.

Opens the window, loads the document and its saved position, builds both
layouts, wires key and resize callbacks and starts the loop. The scroll
position is saved when the loop ends normally.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path

import pygame

from ..errors import LayoutAllocationError, MissingFontError
from ..input import ViewerKeyActions, build_key_registry
from ..layout import scroll_percent
from ..render import RenderContext, draw_status_message, render_document
from ..render.fonts import FontWidthOracle, open_font, open_status_font, resolve_font_path
from .config import ViewerConfig
from .document import DocumentState, load_document
from .loop import KEY, QUIT, RESIZE, LoopState, RuntimeLoopCallbacks, RuntimeLoopTiming, ViewerEvent, run_main_loop
from .scroll_state import load_scroll_state, save_scroll_state

logger = logging.getLogger(__name__)

MESSAGE_DURATION_MS = 1000
MESSAGE_PADDING = 5
KEY_REPEAT_DELAY_MS = 500
KEY_REPEAT_INTERVAL_MS = 30


def _translate_event(event: pygame.event.Event) -> ViewerEvent | None:
    if event.type == pygame.QUIT:
        return ViewerEvent(QUIT)
    if event.type == pygame.KEYDOWN:
        return ViewerEvent(KEY, key=pygame.key.name(event.key))
    if event.type == pygame.VIDEORESIZE:
        return ViewerEvent(RESIZE, width=event.w, height=event.h)
    return None


def poll_viewer_events() -> list[ViewerEvent]:
    events = []
    for event in pygame.event.get():
        translated = _translate_event(event)
        if translated is not None:
            events.append(translated)
    return events


class ViewerSession:
    """Live objects of one viewer window and the actions bound to keys."""

    def __init__(
        self,
        doc: DocumentState,
        font: pygame.font.Font,
        screen: pygame.Surface,
        ctx: RenderContext,
        *,
        fullscreen: bool = False,
    ) -> None:
        self.doc = doc
        self.font = font
        self.screen = screen
        self.ctx = ctx
        self.fullscreen = fullscreen
        self.state = LoopState()
        self._title = ""
        self.clock = pygame.time.Clock()
        self.keys = build_key_registry(
            ViewerKeyActions(
                increase_font_size=lambda: self.change_font_size(1),
                decrease_font_size=lambda: self.change_font_size(-1),
                toggle_inverted=self._run(doc.toggle_inverted),
                toggle_linebreaks=self._run(doc.toggle_linebreaks),
                scroll_to_top=self._run(doc.scroll_to_top),
                scroll_to_bottom=self._run(doc.scroll_to_bottom),
                line_up=self._run(doc.line_up),
                line_down=self._run(doc.line_down),
                page_up=self._run(doc.page_up),
                page_down=self._run(doc.page_down),
                quit=self.quit,
            )
        )

    @staticmethod
    def _run(action: Callable[[], None]) -> Callable[[], bool]:
        def handler() -> bool:
            action()
            return True

        return handler

    def measure(self) -> FontWidthOracle:
        return FontWidthOracle(self.font)

    def show_message(self, text: str) -> None:
        # Message colors are the configured pair swapped, regardless of inversion.
        self.ctx.show_message(
            text,
            pygame.time.get_ticks(),
            MESSAGE_DURATION_MS,
            self.doc.width >> 1,
            self.doc.height >> 1,
            MESSAGE_PADDING,
            self.doc.bg_color,
            self.doc.text_color,
        )

    def _layout_failed(self) -> None:
        logger.warning("Layouts unavailable for %s; showing an empty page", self.doc.path)
        self.show_message("Layout failed")

    def rebuild_layouts(self) -> bool:
        try:
            self.doc.rebuild_layouts(self.measure())
        except LayoutAllocationError:
            self._layout_failed()
            return False
        return True

    def change_font_size(self, delta: int) -> bool:
        new_size = self.doc.font_size + delta
        if new_size <= 0:
            return False
        self.show_message(f"Reloading (font size {new_size})")
        self.render()

        try:
            font = open_font(self.doc.font_path, new_size)
        except MissingFontError as exc:
            logger.warning("%s; keeping font size %d", exc, self.doc.font_size)
            return True
        self.font = font
        try:
            self.doc.change_font_size(new_size, self.measure())
        except LayoutAllocationError:
            self._layout_failed()
        return True

    def handle_resize(self, width: int, height: int) -> None:
        if self.fullscreen:
            return
        surface = pygame.display.get_surface()
        if surface is not None:
            self.screen = surface
            width, height = surface.get_size()
        try:
            self.doc.resize(width, height, self.measure())
        except LayoutAllocationError:
            self._layout_failed()

    def quit(self) -> bool:
        self.state.running = False
        return False

    def expire_message(self) -> bool:
        return self.ctx.expire_message(pygame.time.get_ticks())

    def window_title(self) -> str:
        store = self.doc.active_layout()
        percent = scroll_percent(self.doc.active_scroll, store.total_height, self.doc.height)
        return f"{self.doc.path.name} ({percent:.0f}%)"

    def render(self) -> None:
        render_document(self.ctx, self.screen, self.doc, self.font, pygame.time.get_ticks())
        title = self.window_title()
        if title != self._title:
            pygame.display.set_caption(title)
            self._title = title
        pygame.display.flip()

    def wait_frame(self, frames_per_second: int) -> None:
        self.clock.tick(frames_per_second)

    def callbacks(self) -> RuntimeLoopCallbacks:
        return RuntimeLoopCallbacks(
            poll_events=poll_viewer_events,
            handle_key=self.keys.dispatch,
            handle_resize=self.handle_resize,
            expire_message=self.expire_message,
            render=self.render,
            wait_frame=self.wait_frame,
        )


def _show_progress(ctx: RenderContext, screen: pygame.Surface, config: ViewerConfig, text: str) -> None:
    """Paint a blank frame with a centered progress message."""
    width, height = screen.get_size()
    now = pygame.time.get_ticks()
    screen.fill(config.bg_color)
    ctx.show_message(
        text,
        now,
        MESSAGE_DURATION_MS,
        width >> 1,
        height >> 1,
        MESSAGE_PADDING,
        config.bg_color,
        config.text_color,
    )
    draw_status_message(ctx, screen, now)
    pygame.display.flip()


def _restore_saved_state(doc: DocumentState, font: pygame.font.Font, config: ViewerConfig) -> pygame.font.Font:
    record = load_scroll_state(str(doc.path), str(doc.font_path))
    if record is None:
        return font
    doc.apply_scroll_record(record)
    if doc.font_size == config.font_size:
        return font
    try:
        return open_font(doc.font_path, doc.font_size)
    except MissingFontError as exc:
        logger.warning("%s; using font size %d", exc, config.font_size)
        doc.font_size = config.font_size
        return font


def save_position(doc: DocumentState) -> bool:
    """Save the scroll record of ``doc`` unless its layouts failed to build.

    A failed build leaves both offsets at 0, which must not replace the
    position saved by an earlier session.
    """
    if doc.layouts_stale():
        logger.warning("Layouts unavailable for %s; keeping the saved position", doc.path)
        return False
    save_scroll_state(doc.to_scroll_record())
    return True


def run_viewer(config: ViewerConfig, document_path: Path) -> None:
    """Open a window for ``document_path`` and run until the user quits.

    Raises ``MissingFontError`` or ``MissingDocumentError`` when startup
    cannot proceed.
    """
    pygame.init()
    try:
        flags = pygame.FULLSCREEN if config.fullscreen else pygame.RESIZABLE
        screen = pygame.display.set_mode((config.width, config.height), flags)
        width, height = screen.get_size()
        ctx = RenderContext(status_font=open_status_font())

        _show_progress(ctx, screen, config, "Creating Viewer")
        font_path = resolve_font_path(config.font_path)
        font = open_font(font_path, config.font_size)
        logger.info("Using font %s at %dpt", font_path, config.font_size)

        _show_progress(ctx, screen, config, "Loading TXT File")
        doc = load_document(
            document_path,
            encoding=config.encoding,
            font_path=font_path,
            font_size=config.font_size,
            width=width,
            height=height,
            text_color=config.text_color,
            bg_color=config.bg_color,
            ignore_linebreaks=config.ignore_linebreaks,
            inverted_colors=config.inverted_colors,
        )
        font = _restore_saved_state(doc, font, config)

        pygame.mouse.set_visible(False)
        pygame.key.set_repeat(KEY_REPEAT_DELAY_MS, KEY_REPEAT_INTERVAL_MS)

        _show_progress(ctx, screen, config, "Calculating Layouts")
        session = ViewerSession(doc, font, screen, ctx, fullscreen=config.fullscreen)
        if session.rebuild_layouts():
            ctx.clear_message()

        run_main_loop(session.state, RuntimeLoopTiming(), session.callbacks())
        save_position(doc)
        doc.release_layouts()
    finally:
        pygame.quit()

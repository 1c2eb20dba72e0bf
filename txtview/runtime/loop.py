"""Main interactive event loop for the viewer window.

Each iteration drains pending events, applies them, redraws when something
changed and then waits for the next frame. Feature logic lives in callbacks.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass

logger = logging.getLogger(__name__)

QUIT = "quit"
KEY = "key"
RESIZE = "resize"


@dataclass(frozen=True)
class ViewerEvent:
    """Backend-neutral input event."""

    kind: str
    key: str = ""
    width: int = 0
    height: int = 0


@dataclass(frozen=True)
class RuntimeLoopTiming:
    frames_per_second: int = 60


@dataclass
class LoopState:
    running: bool = True
    dirty: bool = True


@dataclass(frozen=True)
class RuntimeLoopCallbacks:
    """Injected operations used by ``run_main_loop``."""

    poll_events: Callable[[], Iterable[ViewerEvent]]
    handle_key: Callable[[str], bool | None]
    handle_resize: Callable[[int, int], None]
    expire_message: Callable[[], bool]
    render: Callable[[], None]
    wait_frame: Callable[[int], None]


def run_main_loop(state: LoopState, timing: RuntimeLoopTiming, callbacks: RuntimeLoopCallbacks) -> None:
    """Run until a quit event arrives or a handler clears ``state.running``."""
    while state.running:
        for event in callbacks.poll_events():
            if event.kind == QUIT:
                state.running = False
                break
            if event.kind == KEY:
                if callbacks.handle_key(event.key):
                    state.dirty = True
            elif event.kind == RESIZE:
                callbacks.handle_resize(event.width, event.height)
                state.dirty = True
            if not state.running:
                break

        if not state.running:
            break

        if callbacks.expire_message():
            state.dirty = True

        if state.dirty:
            callbacks.render()
            state.dirty = False

        callbacks.wait_frame(timing.frames_per_second)

    logger.debug("Main loop finished")

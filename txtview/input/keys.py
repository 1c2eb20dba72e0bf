"""Default viewer key bindings.

Letter keys mirror the device buttons the viewer was first written for; the
navigation keys are their desktop equivalents.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from .key_registry import KeyComboBinding, KeyComboRegistry

Action = Callable[[], bool | None]


@dataclass(frozen=True)
class ViewerKeyActions:
    """Operations the default bindings dispatch to."""

    increase_font_size: Action
    decrease_font_size: Action
    toggle_inverted: Action
    toggle_linebreaks: Action
    scroll_to_top: Action
    scroll_to_bottom: Action
    line_up: Action
    line_down: Action
    page_up: Action
    page_down: Action
    quit: Action


def build_key_registry(actions: ViewerKeyActions) -> KeyComboRegistry:
    return KeyComboRegistry().register_bindings(
        KeyComboBinding(("a",), actions.increase_font_size),
        KeyComboBinding(("b",), actions.decrease_font_size),
        KeyComboBinding(("x",), actions.toggle_inverted),
        KeyComboBinding(("y",), actions.toggle_linebreaks),
        KeyComboBinding(("k", "home"), actions.scroll_to_top),
        KeyComboBinding(("s", "end"), actions.scroll_to_bottom),
        KeyComboBinding(("u", "up"), actions.line_up),
        KeyComboBinding(("d", "down"), actions.line_down),
        KeyComboBinding(("m", "page up"), actions.page_up),
        KeyComboBinding(("n", "page down"), actions.page_down),
        KeyComboBinding(("q", "escape"), actions.quit),
    )

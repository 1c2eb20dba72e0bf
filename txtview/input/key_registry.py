"""Key-name dispatch table for viewer shortcuts."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass


def normalize_key_name(key: str) -> str:
    """Fold a pygame key name (``"Page Up"``, ``"A"``) to its registry token."""
    return " ".join(key.split()).lower()


@dataclass(frozen=True)
class KeyComboBinding:
    """One or more key names that trigger the same action."""

    combos: tuple[str, ...]
    handler: Callable[[], bool | None]


class KeyComboRegistry:
    def __init__(self, normalize: Callable[[str], str] | None = None) -> None:
        self._normalize = normalize if normalize is not None else normalize_key_name
        self._handlers: dict[str, Callable[[], bool | None]] = {}

    def register_binding(self, binding: KeyComboBinding) -> KeyComboRegistry:
        """Register one binding, replacing any handler already bound to its keys."""
        for combo in binding.combos:
            self._handlers[self._normalize(combo)] = binding.handler
        return self

    def register_bindings(self, *bindings: KeyComboBinding) -> KeyComboRegistry:
        for binding in bindings:
            self.register_binding(binding)
        return self

    def bound_keys(self) -> frozenset[str]:
        return frozenset(self._handlers)

    def dispatch(self, key: str) -> bool | None:
        """Run the handler bound to ``key``.

        Returns ``None`` for unbound keys, otherwise whatever the handler
        returns (``True`` when the frame needs redrawing).
        """
        handler = self._handlers.get(self._normalize(key))
        if handler is None:
            return None
        return handler()

"""Keyboard dispatch for the viewer."""

from __future__ import annotations

from .key_registry import KeyComboBinding, KeyComboRegistry, normalize_key_name
from .keys import ViewerKeyActions, build_key_registry

__all__ = [
    "KeyComboBinding",
    "KeyComboRegistry",
    "ViewerKeyActions",
    "build_key_registry",
    "normalize_key_name",
]

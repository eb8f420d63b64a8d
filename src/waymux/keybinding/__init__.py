"""Keybinding parsing subpackage.

Public surface
--------------
- Keybinding        — parsed modifier mask + keysym
- KeybindingError   — malformed keybinding string
- Modifier          — modifier bitmask (wlroots bit values)
- parse_keybinding  — "Super+Shift+B" -> Keybinding
- keysym_from_name  — symbolic key name -> keysym
"""
from __future__ import annotations

from waymux.keybinding.keysyms import keysym_from_name, keysym_name
from waymux.keybinding.parser import Keybinding, KeybindingError, Modifier, parse_keybinding

__all__ = [
    "Keybinding",
    "KeybindingError",
    "Modifier",
    "keysym_from_name",
    "keysym_name",
    "parse_keybinding",
]

"""Keybinding strings such as ``"Super+Shift+B"``.

A keybinding string is a ``+``-separated list of tokens.  Every token but
the last must be a modifier name (``super``/``mod4``, ``ctrl``, ``alt``,
``shift``; case-insensitive); the last token is a key name resolved
through :mod:`waymux.keybinding.keysyms`.

Classes
-------
- Modifier         — modifier bitmask using the wlroots bit values
- Keybinding       — parsed (modifier mask, keysym) pair
- KeybindingError  — raised for malformed keybinding strings

Functions
---------
- parse_keybinding — string -> Keybinding
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import IntFlag

from waymux.keybinding.keysyms import keysym_from_name, keysym_name


class Modifier(IntFlag):
    """Keyboard modifier bits, numerically identical to ``WLR_MODIFIER_*``."""

    NONE = 0
    SHIFT = 1
    CAPS = 2
    CTRL = 4
    ALT = 8
    MOD2 = 16
    MOD3 = 32
    LOGO = 64
    MOD5 = 128


_MODIFIER_NAMES: dict[str, Modifier] = {
    "super": Modifier.LOGO,
    "ctrl": Modifier.CTRL,
    "alt": Modifier.ALT,
    "shift": Modifier.SHIFT,
    "mod4": Modifier.LOGO,  # X11 synonym for Super
}

# Display order for Keybinding.__str__
_DISPLAY_ORDER: tuple[tuple[Modifier, str], ...] = (
    (Modifier.LOGO, "Super"),
    (Modifier.CTRL, "Ctrl"),
    (Modifier.ALT, "Alt"),
    (Modifier.SHIFT, "Shift"),
)


class KeybindingError(ValueError):
    """Raised when a keybinding string cannot be parsed."""

    def __init__(self, text: str, reason: str) -> None:
        self.text = text
        self.reason = reason
        super().__init__(f"Invalid keybinding {text!r}: {reason}")


@dataclass(frozen=True)
class Keybinding:
    """A modifier mask plus a keysym.

    Attributes
    ----------
    modifiers:
        Exact set of modifiers that must be held.
    keysym:
        XKB keysym of the non-modifier key.
    """

    modifiers: Modifier
    keysym: int

    def matches(self, modifiers: int, keysym: int) -> bool:
        """Return True when both fields are exactly equal.

        Extra or missing modifier bits are a non-match.
        """
        return int(self.modifiers) == int(modifiers) and self.keysym == keysym

    def __str__(self) -> str:
        parts = [label for flag, label in _DISPLAY_ORDER if self.modifiers & flag]
        parts.append(keysym_name(self.keysym))
        return "+".join(parts)


def parse_keybinding(text: str) -> Keybinding:
    """Parse ``text`` into a :class:`Keybinding`.

    Parameters
    ----------
    text:
        A string such as ``"Super+J"`` or ``"Ctrl+Shift+Q"``.

    Returns
    -------
    Keybinding

    Raises
    ------
    KeybindingError
        If the string is empty, contains an empty token, names an unknown
        modifier or key, or consists of modifiers only.
    """
    if not text or not text.strip():
        raise KeybindingError(text, "empty keybinding")

    tokens = [token.strip() for token in text.split("+")]
    if any(not token for token in tokens):
        raise KeybindingError(text, "empty token")

    *modifier_tokens, key_token = tokens

    mask = Modifier.NONE
    for token in modifier_tokens:
        flag = _MODIFIER_NAMES.get(token.lower())
        if flag is None:
            raise KeybindingError(text, f"unknown modifier {token!r}")
        mask |= flag

    if key_token.lower() in _MODIFIER_NAMES:
        raise KeybindingError(text, "missing key")

    keysym = keysym_from_name(key_token)
    if keysym is None:
        raise KeybindingError(text, f"unknown key {key_token!r}")

    return Keybinding(modifiers=mask, keysym=keysym)

"""Symbolic key names and their XKB keysym values.

Only the keys that make sense as the final token of a keybinding are
listed: printable ASCII, editing and navigation keys, the keypad,
function keys and the common XF86 media keys.  Lookup is
case-insensitive, so ``"j"``, ``"J"`` and ``"Page_up"`` all resolve.

Functions
---------
- keysym_from_name  — resolve a key name to its keysym, or ``None``
- keysym_name       — canonical name for a keysym (for display)
"""
from __future__ import annotations

NO_SYMBOL: int = 0

_NAMED_KEYS: dict[str, int] = {
    # Printable ASCII punctuation
    "space": 0x0020,
    "exclam": 0x0021,
    "quotedbl": 0x0022,
    "numbersign": 0x0023,
    "dollar": 0x0024,
    "percent": 0x0025,
    "ampersand": 0x0026,
    "apostrophe": 0x0027,
    "parenleft": 0x0028,
    "parenright": 0x0029,
    "asterisk": 0x002A,
    "plus": 0x002B,
    "comma": 0x002C,
    "minus": 0x002D,
    "period": 0x002E,
    "slash": 0x002F,
    "colon": 0x003A,
    "semicolon": 0x003B,
    "less": 0x003C,
    "equal": 0x003D,
    "greater": 0x003E,
    "question": 0x003F,
    "at": 0x0040,
    "bracketleft": 0x005B,
    "backslash": 0x005C,
    "bracketright": 0x005D,
    "asciicircum": 0x005E,
    "underscore": 0x005F,
    "grave": 0x0060,
    "braceleft": 0x007B,
    "bar": 0x007C,
    "braceright": 0x007D,
    "asciitilde": 0x007E,
    # TTY function keys
    "BackSpace": 0xFF08,
    "Tab": 0xFF09,
    "Linefeed": 0xFF0A,
    "Clear": 0xFF0B,
    "Return": 0xFF0D,
    "Pause": 0xFF13,
    "Scroll_Lock": 0xFF14,
    "Sys_Req": 0xFF15,
    "Escape": 0xFF1B,
    "Delete": 0xFFFF,
    # Cursor control
    "Home": 0xFF50,
    "Left": 0xFF51,
    "Up": 0xFF52,
    "Right": 0xFF53,
    "Down": 0xFF54,
    "Prior": 0xFF55,
    "Page_Up": 0xFF55,
    "Next": 0xFF56,
    "Page_Down": 0xFF56,
    "End": 0xFF57,
    "Begin": 0xFF58,
    # Misc functions
    "Print": 0xFF61,
    "Insert": 0xFF63,
    "Menu": 0xFF67,
    "Num_Lock": 0xFF7F,
    # Keypad
    "KP_Enter": 0xFF8D,
    "KP_Multiply": 0xFFAA,
    "KP_Add": 0xFFAB,
    "KP_Subtract": 0xFFAD,
    "KP_Decimal": 0xFFAE,
    "KP_Divide": 0xFFAF,
    # Lock keys
    "Caps_Lock": 0xFFE5,
    # XF86 media keys
    "XF86MonBrightnessUp": 0x1008FF02,
    "XF86MonBrightnessDown": 0x1008FF03,
    "XF86AudioLowerVolume": 0x1008FF11,
    "XF86AudioMute": 0x1008FF12,
    "XF86AudioRaiseVolume": 0x1008FF13,
    "XF86AudioPlay": 0x1008FF14,
    "XF86AudioStop": 0x1008FF15,
    "XF86AudioPrev": 0x1008FF16,
    "XF86AudioNext": 0x1008FF17,
}

# Letters fold to their lowercase keysym, the same way a case-insensitive
# XKB lookup resolves them.
for _code in range(ord("a"), ord("z") + 1):
    _NAMED_KEYS[chr(_code)] = _code
for _code in range(ord("0"), ord("9") + 1):
    _NAMED_KEYS[chr(_code)] = _code
for _n in range(10):
    _NAMED_KEYS[f"KP_{_n}"] = 0xFFB0 + _n
for _n in range(1, 36):
    _NAMED_KEYS[f"F{_n}"] = 0xFFBE + _n - 1

_BY_FOLDED_NAME: dict[str, int] = {name.lower(): sym for name, sym in _NAMED_KEYS.items()}

# First name wins, so "Page_Up" displays as "Prior" like xkb_keysym_get_name.
_NAME_BY_KEYSYM: dict[int, str] = {}
for _name, _sym in _NAMED_KEYS.items():
    _NAME_BY_KEYSYM.setdefault(_sym, _name)


def keysym_from_name(name: str) -> int | None:
    """Return the keysym for ``name`` (case-insensitive), or ``None``."""
    if not name:
        return None
    return _BY_FOLDED_NAME.get(name.lower())


def keysym_name(keysym: int) -> str:
    """Return a display name for ``keysym``; hex for unknown values."""
    name = _NAME_BY_KEYSYM.get(keysym)
    if name is None:
        return f"0x{keysym:x}"
    return name.upper() if len(name) == 1 else name

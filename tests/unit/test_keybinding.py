"""Unit tests for waymux.keybinding (parser and keysym table)."""
from __future__ import annotations

import pytest

from waymux.keybinding import (
    Keybinding,
    KeybindingError,
    Modifier,
    keysym_from_name,
    keysym_name,
    parse_keybinding,
)


# ---------------------------------------------------------------------------
# Keysym table
# ---------------------------------------------------------------------------


class TestKeysyms:
    def test_letters_map_to_lowercase_keysym(self) -> None:
        assert keysym_from_name("B") == ord("b")
        assert keysym_from_name("b") == ord("b")

    def test_digits(self) -> None:
        assert keysym_from_name("1") == ord("1")

    def test_named_keys_are_case_insensitive(self) -> None:
        assert keysym_from_name("Return") == 0xFF0D
        assert keysym_from_name("return") == 0xFF0D
        assert keysym_from_name("ESCAPE") == 0xFF1B

    def test_function_keys(self) -> None:
        assert keysym_from_name("F1") == 0xFFBE
        assert keysym_from_name("F12") == 0xFFC9

    def test_unknown_name(self) -> None:
        assert keysym_from_name("NotAKey") is None
        assert keysym_from_name("") is None

    def test_keysym_name_uppercases_letters(self) -> None:
        assert keysym_name(ord("k")) == "K"


# ---------------------------------------------------------------------------
# parse_keybinding
# ---------------------------------------------------------------------------


class TestParseKeybinding:
    def test_super_shift_b(self) -> None:
        binding = parse_keybinding("Super+Shift+B")
        assert binding.modifiers == Modifier.LOGO | Modifier.SHIFT
        assert binding.keysym == ord("b")

    def test_modifier_bit_values(self) -> None:
        binding = parse_keybinding("Super+Shift+B")
        assert int(binding.modifiers) == 64 | 1

    def test_ctrl_alt(self) -> None:
        binding = parse_keybinding("Ctrl+Alt+Delete")
        assert binding.modifiers == Modifier.CTRL | Modifier.ALT
        assert binding.keysym == 0xFFFF

    def test_mod4_is_super(self) -> None:
        assert parse_keybinding("Mod4+J") == parse_keybinding("Super+J")

    def test_modifiers_case_insensitive(self) -> None:
        assert parse_keybinding("super+SHIFT+b") == parse_keybinding("Super+Shift+B")

    def test_key_without_modifiers(self) -> None:
        binding = parse_keybinding("F5")
        assert binding.modifiers == Modifier.NONE

    def test_whitespace_around_tokens(self) -> None:
        assert parse_keybinding(" Super + K ") == parse_keybinding("Super+K")

    def test_modifiers_only_fails(self) -> None:
        with pytest.raises(KeybindingError, match="missing key"):
            parse_keybinding("Super+Shift")

    def test_unknown_key_fails(self) -> None:
        with pytest.raises(KeybindingError, match="unknown key"):
            parse_keybinding("Super+NotAKey")

    def test_unknown_modifier_fails(self) -> None:
        with pytest.raises(KeybindingError, match="unknown modifier"):
            parse_keybinding("Hyper+K")

    def test_empty_fails(self) -> None:
        with pytest.raises(KeybindingError):
            parse_keybinding("")

    def test_empty_token_fails(self) -> None:
        with pytest.raises(KeybindingError, match="empty token"):
            parse_keybinding("Super++K")

    def test_error_is_value_error(self) -> None:
        with pytest.raises(ValueError):
            parse_keybinding("Super+")

    def test_error_carries_text(self) -> None:
        with pytest.raises(KeybindingError) as info:
            parse_keybinding("Super+NotAKey")
        assert info.value.text == "Super+NotAKey"


# ---------------------------------------------------------------------------
# Keybinding
# ---------------------------------------------------------------------------


class TestKeybinding:
    def test_matches_exact(self) -> None:
        binding = Keybinding(Modifier.LOGO, ord("k"))
        assert binding.matches(64, ord("k"))

    def test_extra_modifier_does_not_match(self) -> None:
        binding = Keybinding(Modifier.LOGO, ord("k"))
        assert not binding.matches(Modifier.LOGO | Modifier.SHIFT, ord("k"))

    def test_other_key_does_not_match(self) -> None:
        binding = Keybinding(Modifier.LOGO, ord("k"))
        assert not binding.matches(Modifier.LOGO, ord("j"))

    def test_str(self) -> None:
        assert str(parse_keybinding("shift+super+b")) == "Super+Shift+B"

    def test_frozen(self) -> None:
        binding = Keybinding(Modifier.LOGO, ord("k"))
        with pytest.raises(AttributeError):
            binding.keysym = 1  # type: ignore[misc]

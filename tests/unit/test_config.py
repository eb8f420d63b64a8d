"""Unit tests for waymux.config (paths and keybinding configuration)."""
from __future__ import annotations

from pathlib import Path

import pytest

from waymux.config import (
    DEFAULT_KEYBINDINGS,
    Action,
    ConfigError,
    RuntimeDirError,
    WaymuxConfig,
    find_config_file,
    load_config,
    paths,
)
from waymux.keybinding import Keybinding, Modifier


def _write_config(directory: Path, text: str) -> Path:
    path = directory / "waymux" / "config.toml"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


# ---------------------------------------------------------------------------
# paths
# ---------------------------------------------------------------------------


class TestPaths:
    def test_runtime_dir_requires_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("XDG_RUNTIME_DIR", raising=False)
        with pytest.raises(RuntimeDirError):
            paths.runtime_dir()

    def test_empty_runtime_dir_is_unset(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("XDG_RUNTIME_DIR", "")
        with pytest.raises(RuntimeDirError):
            paths.socket_dir()

    def test_socket_layout(self, runtime_dir: Path) -> None:
        assert paths.socket_dir() == runtime_dir / "waymux"
        assert paths.control_socket_path("work") == runtime_dir / "waymux" / "work.sock"
        assert paths.registry_dir() == runtime_dir / "waymux" / "registry"

    def test_socket_name_is_basename(self, runtime_dir: Path) -> None:
        assert paths.control_socket_path("../../evil").parent == runtime_dir / "waymux"

    def test_config_home_honours_xdg(self, config_home: Path) -> None:
        assert paths.config_home() == config_home
        assert paths.profiles_dir() == config_home / "waymux" / "profiles.d"
        assert paths.default_config_path() == config_home / "waymux" / "config.toml"

    def test_config_home_fallback(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("HOME", str(tmp_path))
        monkeypatch.delenv("XDG_CONFIG_HOME", raising=False)
        assert paths.config_home() == tmp_path / ".config"


# ---------------------------------------------------------------------------
# WaymuxConfig
# ---------------------------------------------------------------------------


class TestWaymuxConfig:
    def test_defaults(self) -> None:
        config = WaymuxConfig()
        assert config.binding_for(Action.NEXT_TAB) == Keybinding(Modifier.LOGO, ord("k"))
        assert config.binding_for(Action.PREV_TAB) == Keybinding(Modifier.LOGO, ord("j"))
        assert config.binding_for(Action.CLOSE_TAB) == Keybinding(Modifier.LOGO, ord("d"))
        assert config.binding_for(Action.OPEN_LAUNCHER) == Keybinding(Modifier.LOGO, ord("n"))
        assert config.binding_for(Action.TOGGLE_BACKGROUND) == Keybinding(Modifier.LOGO, ord("b"))
        assert config.binding_for(Action.SHOW_BACKGROUND_DIALOG) == Keybinding(
            Modifier.LOGO | Modifier.SHIFT, ord("b")
        )

    def test_every_action_has_a_default(self) -> None:
        assert set(DEFAULT_KEYBINDINGS) == set(Action)

    def test_action_for(self) -> None:
        config = WaymuxConfig()
        assert config.action_for(Modifier.LOGO, ord("k")) is Action.NEXT_TAB
        assert config.action_for(Modifier.LOGO | Modifier.SHIFT, ord("b")) is (
            Action.SHOW_BACKGROUND_DIALOG
        )
        assert config.action_for(Modifier.CTRL, ord("k")) is None

    def test_instances_do_not_share_bindings(self) -> None:
        first = WaymuxConfig()
        first.keybindings[Action.NEXT_TAB] = Keybinding(Modifier.CTRL, ord("x"))
        assert WaymuxConfig().binding_for(Action.NEXT_TAB) == Keybinding(Modifier.LOGO, ord("k"))


# ---------------------------------------------------------------------------
# find_config_file / load_config
# ---------------------------------------------------------------------------


class TestLoadConfig:
    def test_no_file_gives_defaults(self, config_home: Path) -> None:
        config = load_config()
        assert config.config_path is None
        assert config.keybindings == DEFAULT_KEYBINDINGS

    def test_xdg_file_is_found(self, config_home: Path) -> None:
        path = _write_config(config_home, "")
        assert find_config_file() == path

    def test_home_fallback_is_found(self, config_home: Path, tmp_path: Path) -> None:
        path = _write_config(tmp_path / "home" / ".config", "")
        assert find_config_file() == path

    def test_missing_custom_path(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="not found"):
            load_config(tmp_path / "nope.toml")

    def test_overrides(self, config_home: Path) -> None:
        path = _write_config(
            config_home,
            '[keybindings]\nnext_tab = "Ctrl+Tab"\ntoggle_background = "Ctrl+B"\n',
        )
        config = load_config()
        assert config.config_path == path
        assert config.binding_for(Action.NEXT_TAB) == Keybinding(Modifier.CTRL, 0xFF09)
        assert config.binding_for(Action.TOGGLE_BACKGROUND) == Keybinding(Modifier.CTRL, ord("b"))
        assert config.binding_for(Action.PREV_TAB) == DEFAULT_KEYBINDINGS[Action.PREV_TAB]

    def test_custom_path(self, tmp_path: Path) -> None:
        path = tmp_path / "custom.toml"
        path.write_text('[keybindings]\nclose_tab = "Super+Q"\n', encoding="utf-8")
        config = load_config(path)
        assert config.binding_for(Action.CLOSE_TAB) == Keybinding(Modifier.LOGO, ord("q"))

    def test_invalid_binding_fails_whole_load(self, config_home: Path) -> None:
        _write_config(config_home, '[keybindings]\nnext_tab = "Super+NotAKey"\n')
        with pytest.raises(ConfigError, match="next_tab"):
            load_config()

    def test_non_string_binding_fails(self, config_home: Path) -> None:
        _write_config(config_home, "[keybindings]\nnext_tab = 5\n")
        with pytest.raises(ConfigError, match="must be a string"):
            load_config()

    def test_toml_syntax_error(self, config_home: Path) -> None:
        _write_config(config_home, "[keybindings\n")
        with pytest.raises(ConfigError, match="TOML"):
            load_config()

    def test_keybindings_must_be_table(self, config_home: Path) -> None:
        _write_config(config_home, 'keybindings = "Super+K"\n')
        with pytest.raises(ConfigError):
            load_config()

    def test_unknown_action_is_ignored(
        self, config_home: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        _write_config(config_home, '[keybindings]\nteleport = "Super+T"\n')
        with caplog.at_level("WARNING"):
            config = load_config()
        assert config.keybindings == DEFAULT_KEYBINDINGS
        assert "teleport" in caplog.text

    def test_config_error_is_value_error(self, tmp_path: Path) -> None:
        with pytest.raises(ValueError):
            load_config(tmp_path / "missing.toml")

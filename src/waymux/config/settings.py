"""waymux configuration file.

The configuration file is TOML.  Only the ``[keybindings]`` table is
currently read; it maps fixed action names to keybinding strings::

    [keybindings]
    next_tab = "Super+K"
    show_background_dialog = "Super+Shift+B"

Actions left out keep their built-in default.  A value that is present
but invalid fails the whole load.

Classes
-------
- Action        — enum of bindable actions
- WaymuxConfig  — loaded configuration
- ConfigError   — raised for unreadable or invalid configuration files

Functions
---------
- load_config   — locate, parse and validate the configuration file
- find_config_file
"""
from __future__ import annotations

import logging
import tomllib
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from waymux.config import paths
from waymux.keybinding import Keybinding, KeybindingError, Modifier, parse_keybinding

logger = logging.getLogger(__name__)


class Action(str, Enum):
    """Actions that can be bound to a key combination."""

    NEXT_TAB = "next_tab"
    PREV_TAB = "prev_tab"
    CLOSE_TAB = "close_tab"
    OPEN_LAUNCHER = "open_launcher"
    TOGGLE_BACKGROUND = "toggle_background"
    SHOW_BACKGROUND_DIALOG = "show_background_dialog"


DEFAULT_KEYBINDINGS: dict[Action, Keybinding] = {
    Action.NEXT_TAB: Keybinding(Modifier.LOGO, ord("k")),
    Action.PREV_TAB: Keybinding(Modifier.LOGO, ord("j")),
    Action.CLOSE_TAB: Keybinding(Modifier.LOGO, ord("d")),
    Action.OPEN_LAUNCHER: Keybinding(Modifier.LOGO, ord("n")),
    Action.TOGGLE_BACKGROUND: Keybinding(Modifier.LOGO, ord("b")),
    Action.SHOW_BACKGROUND_DIALOG: Keybinding(Modifier.LOGO | Modifier.SHIFT, ord("b")),
}


class ConfigError(ValueError):
    """Raised when the configuration file cannot be used.

    Parameters
    ----------
    message:
        Human-readable description of the problem.
    path:
        The offending file, when known.
    """

    def __init__(self, message: str, path: Path | None = None) -> None:
        self.path = path
        prefix = f"{path}: " if path is not None else ""
        super().__init__(f"{prefix}{message}")


@dataclass
class WaymuxConfig:
    """Resolved configuration with every action bound.

    Attributes
    ----------
    keybindings:
        One binding per :class:`Action`.
    config_path:
        The file the configuration was read from, ``None`` for defaults.
    """

    keybindings: dict[Action, Keybinding] = field(
        default_factory=lambda: dict(DEFAULT_KEYBINDINGS)
    )
    config_path: Path | None = None

    def binding_for(self, action: Action) -> Keybinding:
        return self.keybindings[action]

    def action_for(self, modifiers: int, keysym: int) -> Action | None:
        """Return the action bound to ``(modifiers, keysym)``, if any."""
        for action, binding in self.keybindings.items():
            if binding.matches(modifiers, keysym):
                return action
        return None


def find_config_file(custom_path: str | Path | None = None) -> Path | None:
    """Locate the configuration file.

    Search order: ``custom_path`` (must exist), then
    ``$XDG_CONFIG_HOME/waymux/config.toml``, then
    ``~/.config/waymux/config.toml``.

    Returns
    -------
    Path | None
        The file to load, or ``None`` when no configuration exists.

    Raises
    ------
    ConfigError
        If ``custom_path`` was given but is not a regular file.
    """
    if custom_path is not None:
        path = Path(custom_path)
        if not path.is_file():
            raise ConfigError("custom config path not found", path)
        logger.debug("Using custom config path: %s", path)
        return path

    for candidate in (paths.default_config_path(), paths.fallback_config_path()):
        if candidate.is_file():
            logger.debug("Found config at: %s", candidate)
            return candidate
    return None


def _parse_keybindings(table: object, path: Path) -> dict[Action, Keybinding]:
    if not isinstance(table, dict):
        raise ConfigError("[keybindings] must be a table", path)

    known = {action.value: action for action in Action}
    bindings = dict(DEFAULT_KEYBINDINGS)
    for key, value in table.items():
        action = known.get(key)
        if action is None:
            logger.warning("Ignoring unknown keybinding action %r in %s", key, path)
            continue
        if not isinstance(value, str):
            raise ConfigError(f"keybinding for {key!r} must be a string", path)
        try:
            bindings[action] = parse_keybinding(value)
        except KeybindingError as exc:
            raise ConfigError(f"invalid keybinding for {key!r}: {exc.reason}", path) from exc
    return bindings


def load_config(custom_path: str | Path | None = None) -> WaymuxConfig:
    """Load the configuration, falling back to defaults when none exists.

    Parameters
    ----------
    custom_path:
        Explicit configuration file (the ``-c`` option).

    Returns
    -------
    WaymuxConfig

    Raises
    ------
    ConfigError
        On a missing custom path, TOML syntax errors, or any invalid
        keybinding.  No partially applied configuration is returned.
    """
    path = find_config_file(custom_path)
    if path is None:
        logger.info("No config file found, using default keybindings")
        return WaymuxConfig()

    logger.info("Loading config from: %s", path)
    try:
        with path.open("rb") as fh:
            document = tomllib.load(fh)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"TOML parse error: {exc}", path) from exc
    except OSError as exc:
        raise ConfigError(f"cannot read config: {exc.strerror or exc}", path) from exc

    bindings = dict(DEFAULT_KEYBINDINGS)
    if "keybindings" in document:
        bindings = _parse_keybindings(document["keybindings"], path)

    logger.info("Config loaded successfully")
    return WaymuxConfig(keybindings=bindings, config_path=path)

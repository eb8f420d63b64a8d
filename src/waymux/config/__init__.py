"""Configuration subpackage.

Public surface
--------------
- Action, WaymuxConfig, ConfigError, load_config  — keybinding configuration
- RuntimeDirError                                   — XDG_RUNTIME_DIR missing
- paths                                             — XDG path helpers
"""
from __future__ import annotations

from waymux.config import paths
from waymux.config.paths import RuntimeDirError
from waymux.config.settings import (
    DEFAULT_KEYBINDINGS,
    Action,
    ConfigError,
    WaymuxConfig,
    find_config_file,
    load_config,
)

__all__ = [
    "Action",
    "ConfigError",
    "DEFAULT_KEYBINDINGS",
    "RuntimeDirError",
    "WaymuxConfig",
    "find_config_file",
    "load_config",
    "paths",
]

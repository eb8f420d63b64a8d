"""XDG locations used by waymux.

Runtime state (control sockets, registry records) lives under
``$XDG_RUNTIME_DIR/waymux``.  User configuration and profiles live under
``$XDG_CONFIG_HOME/waymux``, falling back to ``~/.config/waymux`` when
``XDG_CONFIG_HOME`` is unset or empty.

All functions read the environment at call time so tests can point them
elsewhere with ``monkeypatch.setenv``.
"""
from __future__ import annotations

import os
from pathlib import Path

APP_DIR_NAME = "waymux"
SOCKET_SUFFIX = ".sock"
CONFIG_FILE_NAME = "config.toml"
PROFILES_DIR_NAME = "profiles.d"
REGISTRY_DIR_NAME = "registry"


class RuntimeDirError(RuntimeError):
    """Raised when ``XDG_RUNTIME_DIR`` is not set."""

    def __init__(self) -> None:
        super().__init__("XDG_RUNTIME_DIR is not set")


def runtime_dir() -> Path:
    """Return ``$XDG_RUNTIME_DIR``.

    Raises
    ------
    RuntimeDirError
        If the variable is unset or empty.
    """
    value = os.environ.get("XDG_RUNTIME_DIR")
    if not value:
        raise RuntimeDirError()
    return Path(value)


def socket_dir() -> Path:
    """Directory holding one control socket per running instance."""
    return runtime_dir() / APP_DIR_NAME


def control_socket_path(instance_name: str) -> Path:
    """Control socket path for ``instance_name``."""
    safe_name = os.path.basename(instance_name)
    return socket_dir() / f"{safe_name}{SOCKET_SUFFIX}"


def registry_dir() -> Path:
    """Directory holding one TOML record per running instance."""
    return socket_dir() / REGISTRY_DIR_NAME


def config_home() -> Path:
    """``$XDG_CONFIG_HOME`` or ``~/.config``."""
    value = os.environ.get("XDG_CONFIG_HOME")
    if value:
        return Path(value)
    return Path.home() / ".config"


def default_config_path() -> Path:
    return config_home() / APP_DIR_NAME / CONFIG_FILE_NAME


def fallback_config_path() -> Path:
    return Path.home() / ".config" / APP_DIR_NAME / CONFIG_FILE_NAME


def profiles_dir() -> Path:
    """Directory searched for ``<name>.toml`` profiles after the cwd."""
    return config_home() / APP_DIR_NAME / PROFILES_DIR_NAME

"""waymux — session-control core of a Wayland tab multiplexer.

Public API
----------
The stable public surface is everything exported from this module.
Anything inside submodules not re-exported here is considered private
and may change without notice.

Example
-------
>>> import waymux
>>> waymux.__version__
'0.1.0'
"""
from __future__ import annotations

__version__: str = "0.1.0"

# Keybindings and configuration
from waymux.keybinding import Keybinding, KeybindingError, Modifier, parse_keybinding
from waymux.config import (
    Action,
    ConfigError,
    RuntimeDirError,
    WaymuxConfig,
    load_config,
)

# Registry
from waymux.registry import (
    FilesystemRegistry,
    InstanceAlreadyRegisteredError,
    RegistryError,
    RegistryRecord,
)

# Profiles
from waymux.profile import (
    Profile,
    ProfileError,
    ProfileLockedError,
    ProfileNotFoundError,
    SessionSpawner,
    TabSpec,
    available_profiles,
    list_profiles,
    load_profile,
)

# Host, tabs and control
from waymux.host import HeadlessHost, HeadlessView, View, ViewHost
from waymux.tabs import Tab, TabDirectory, TabState
from waymux.control import (
    Command,
    CommandDispatcher,
    ControlClientError,
    ControlRequest,
    ControlResponse,
    ControlServer,
    ControlServerError,
    ProtocolError,
    parse_request,
    send_command,
)

# Session lifecycle
from waymux.session import InstanceManager, MuxSession

__all__ = [
    "__version__",
    # Keybindings and configuration
    "Action",
    "ConfigError",
    "Keybinding",
    "KeybindingError",
    "Modifier",
    "RuntimeDirError",
    "WaymuxConfig",
    "load_config",
    "parse_keybinding",
    # Registry
    "FilesystemRegistry",
    "InstanceAlreadyRegisteredError",
    "RegistryError",
    "RegistryRecord",
    # Profiles
    "Profile",
    "ProfileError",
    "ProfileLockedError",
    "ProfileNotFoundError",
    "SessionSpawner",
    "TabSpec",
    "available_profiles",
    "list_profiles",
    "load_profile",
    # Host, tabs and control
    "Command",
    "CommandDispatcher",
    "ControlClientError",
    "ControlRequest",
    "ControlResponse",
    "ControlServer",
    "ControlServerError",
    "HeadlessHost",
    "HeadlessView",
    "ProtocolError",
    "Tab",
    "TabDirectory",
    "TabState",
    "View",
    "ViewHost",
    "parse_request",
    "send_command",
    # Session lifecycle
    "InstanceManager",
    "MuxSession",
]

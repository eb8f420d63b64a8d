"""Instance registry subpackage.

Public surface
--------------
- FilesystemRegistry              — TOML-file-per-instance registry
- RegistryRecord                  — one running instance
- RegistryError                   — filesystem failure
- InstanceAlreadyRegisteredError  — duplicate instance name
"""
from __future__ import annotations

from waymux.registry.filesystem import (
    FilesystemRegistry,
    InstanceAlreadyRegisteredError,
    RegistryError,
)
from waymux.registry.record import RegistryRecord

__all__ = [
    "FilesystemRegistry",
    "InstanceAlreadyRegisteredError",
    "RegistryError",
    "RegistryRecord",
]

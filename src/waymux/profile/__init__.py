"""Profile subpackage: declarative session descriptions and spawning.

Public surface
--------------
- Profile, TabSpec          — validated profile models
- load_profile              — find and parse ``<name>.toml``
- list_profiles, available_profiles
- ProfileError, ProfileNotFoundError, ProfileLockedError
- SessionSpawner            — start tab processes
"""
from __future__ import annotations

from waymux.profile.loader import (
    ProfileError,
    ProfileLockedError,
    ProfileNotFoundError,
    available_profiles,
    find_profile_file,
    list_profiles,
    load_profile,
    load_profile_file,
    parse_profile,
)
from waymux.profile.model import Profile, TabSpec
from waymux.profile.spawner import SessionSpawner, exit_code_from_returncode

__all__ = [
    "Profile",
    "ProfileError",
    "ProfileLockedError",
    "ProfileNotFoundError",
    "SessionSpawner",
    "TabSpec",
    "available_profiles",
    "exit_code_from_returncode",
    "find_profile_file",
    "list_profiles",
    "load_profile",
    "load_profile_file",
    "parse_profile",
]

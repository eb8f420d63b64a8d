"""Profile discovery and loading.

``<name>.toml`` is looked up in the current directory first, then in
``$XDG_CONFIG_HOME/waymux/profiles.d`` (``~/.config/waymux/profiles.d``
when ``XDG_CONFIG_HOME`` is unset).  Example document::

    working_dir = "~/src/project"
    proxy_command = ["distrobox", "enter", "dev", "--"]

    [env]
    EDITOR = "hx"

    [[tabs]]
    command = "kitty"
    title = "shell"

    [[tabs]]
    command = "foot"
    args = ["-e", "htop"]
    background = true

Classes
-------
- ProfileError          — document cannot be parsed or validated
- ProfileNotFoundError  — no file for the requested name
- ProfileLockedError    — profile already claimed by another instance

Functions
---------
- find_profile_file, load_profile, load_profile_file, parse_profile
- list_profiles, available_profiles
"""
from __future__ import annotations

import logging
import os
import tomllib
from pathlib import Path
from typing import TYPE_CHECKING

from pydantic import ValidationError

from waymux.config import paths
from waymux.profile.model import Profile

if TYPE_CHECKING:
    from waymux.registry import FilesystemRegistry

logger = logging.getLogger(__name__)

_FILE_EXTENSION = ".toml"


class ProfileError(ValueError):
    """Raised when a profile document is malformed."""

    def __init__(self, name: str, reason: str) -> None:
        self.name = name
        self.reason = reason
        super().__init__(f"Profile {name!r}: {reason}")


class ProfileNotFoundError(ProfileError):
    """Raised when no ``<name>.toml`` exists in any search location."""

    def __init__(self, name: str) -> None:
        super().__init__(name, "profile file not found")


class ProfileLockedError(RuntimeError):
    """Raised when another running instance already uses the profile."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Profile {name!r} is already in use by another waymux instance")


def search_dirs() -> list[Path]:
    """Directories searched for profiles, in priority order."""
    return [Path.cwd(), paths.profiles_dir()]


def find_profile_file(name: str) -> Path:
    """Return the file holding profile ``name``.

    Raises
    ------
    ProfileNotFoundError
        If no regular file ``<name>.toml`` exists in :func:`search_dirs`.
    """
    file_name = f"{os.path.basename(name)}{_FILE_EXTENSION}"
    for directory in search_dirs():
        candidate = directory / file_name
        if candidate.is_file():
            return candidate
    logger.error("Profile file not found: %s", file_name)
    raise ProfileNotFoundError(name)


def _format_validation_error(exc: ValidationError) -> str:
    problems = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error["loc"])
        problems.append(f"{location}: {error['msg']}")
    return "; ".join(problems)


def parse_profile(name: str, document: dict[str, object]) -> Profile:
    """Validate an already-parsed TOML ``document`` as profile ``name``.

    Raises
    ------
    ProfileError
        If any field has the wrong type or a tab lacks ``command``.
    """
    try:
        return Profile.model_validate({**document, "name": name})
    except ValidationError as exc:
        raise ProfileError(name, _format_validation_error(exc)) from exc


def load_profile_file(path: str | Path, name: str | None = None) -> Profile:
    """Parse the profile stored at ``path``.

    Parameters
    ----------
    path:
        TOML file to read.
    name:
        Profile name; defaults to the file stem.
    """
    path = Path(path)
    profile_name = name or path.stem
    logger.debug("Loading profile from: %s", path)
    try:
        with path.open("rb") as fh:
            document = tomllib.load(fh)
    except FileNotFoundError:
        raise ProfileNotFoundError(profile_name) from None
    except tomllib.TOMLDecodeError as exc:
        raise ProfileError(profile_name, f"TOML parse error: {exc}") from exc
    except OSError as exc:
        raise ProfileError(profile_name, f"cannot read {path}: {exc}") from exc

    profile = parse_profile(profile_name, document)
    if not profile.tabs:
        logger.info("Profile %r has no tabs defined", profile_name)
    logger.info("Loaded profile %r with %d tabs", profile_name, len(profile.tabs))
    return profile


def load_profile(name: str) -> Profile:
    """Locate and parse profile ``name``.

    Raises
    ------
    ProfileNotFoundError
        If no file exists for ``name``.
    ProfileError
        If the file is not a valid profile.
    """
    return load_profile_file(find_profile_file(name), name=name)


def list_profiles(profiles_dir: str | Path | None = None) -> list[str]:
    """Return the sorted names of the profiles in the profile directory.

    Profiles that only exist in the current directory are not listed.
    """
    directory = Path(profiles_dir) if profiles_dir is not None else paths.profiles_dir()
    if not directory.is_dir():
        return []
    return sorted(
        path.stem for path in directory.glob(f"*{_FILE_EXTENSION}") if path.is_file()
    )


def available_profiles(
    registry: FilesystemRegistry,
    profiles_dir: str | Path | None = None,
) -> list[str]:
    """Return the listed profiles that no running instance has claimed."""
    return [
        name
        for name in list_profiles(profiles_dir)
        if not registry.is_profile_locked(name)
    ]

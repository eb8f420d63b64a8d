"""Filesystem instance registry.

Every running waymux instance owns one TOML file under
``$XDG_RUNTIME_DIR/waymux/registry/``.  Other instances scan the directory
to find out whether a profile is already in use.

The mutual exclusion this provides is advisory: ``register`` checks for an
existing record and then creates one, so two instances starting at the
same moment can both pass.  Passing ``exclusive=True`` replaces the check
with an exclusive create (``open(..., "x")``), which closes the race for
the record file itself but not for the profile lock scan.

Classes
-------
- FilesystemRegistry               — TOML-file-per-instance registry
- RegistryError                    — unexpected filesystem failure
- InstanceAlreadyRegisteredError   — a record already exists for the name
"""
from __future__ import annotations

import logging
import os
import tomllib
from pathlib import Path

import tomli_w
from pydantic import ValidationError

from waymux.config import paths
from waymux.registry.record import RegistryRecord

logger = logging.getLogger(__name__)

_FILE_EXTENSION = ".toml"


class RegistryError(RuntimeError):
    """Raised when the registry directory or a record cannot be written."""


class InstanceAlreadyRegisteredError(RegistryError):
    """Raised by ``register`` when a record for the instance already exists."""

    def __init__(self, instance_name: str, path: Path) -> None:
        self.instance_name = instance_name
        self.path = path
        super().__init__(f"Instance {instance_name!r} is already registered at {path}")


class FilesystemRegistry:
    """Registry of running instances backed by one TOML file each.

    Parameters
    ----------
    registry_dir:
        Directory holding the records.  Defaults to
        ``$XDG_RUNTIME_DIR/waymux/registry``, resolved on construction.
    exclusive:
        Use an exclusive create instead of check-then-create in
        ``register``.
    """

    def __init__(
        self,
        registry_dir: str | Path | None = None,
        *,
        exclusive: bool = False,
    ) -> None:
        self._registry_dir: Path = (
            Path(registry_dir) if registry_dir is not None else paths.registry_dir()
        )
        self._exclusive = exclusive

    @property
    def registry_dir(self) -> Path:
        return self._registry_dir

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _ensure_dir(self) -> None:
        try:
            self._registry_dir.mkdir(mode=0o755, parents=True, exist_ok=True)
        except OSError as exc:
            raise RegistryError(
                f"Failed to create registry directory {self._registry_dir}: {exc}"
            ) from exc

    def _path_for(self, instance_name: str) -> Path:
        """Return the record path for ``instance_name``.

        The name is reduced to its basename so that ``../x`` cannot escape
        the registry directory.
        """
        safe_name = os.path.basename(instance_name)
        return self._registry_dir / f"{safe_name}{_FILE_EXTENSION}"

    def _read(self, path: Path) -> RegistryRecord:
        with path.open("rb") as fh:
            return RegistryRecord.model_validate(tomllib.load(fh))

    # ------------------------------------------------------------------
    # Public interface
    # ------------------------------------------------------------------

    def register(
        self,
        instance_name: str,
        pid: int,
        profile_name: str | None = None,
    ) -> RegistryRecord:
        """Create the record for ``instance_name``.

        Parameters
        ----------
        instance_name:
            Name of the instance being registered.
        pid:
            Process id of the instance.
        profile_name:
            Profile claimed by the instance, if any.

        Returns
        -------
        RegistryRecord
            The record that was written.

        Raises
        ------
        InstanceAlreadyRegisteredError
            If a record for ``instance_name`` already exists.
        RegistryError
            If the directory or file cannot be written.
        """
        record = RegistryRecord(name=instance_name, pid=pid, profile=profile_name)
        self._ensure_dir()
        path = self._path_for(instance_name)

        if not self._exclusive and path.exists():
            raise InstanceAlreadyRegisteredError(instance_name, path)

        mode = "x" if self._exclusive else "w"
        try:
            with open(path, mode, encoding="utf-8") as fh:
                fh.write(tomli_w.dumps(record.to_document()))
        except FileExistsError:
            raise InstanceAlreadyRegisteredError(instance_name, path) from None
        except OSError as exc:
            raise RegistryError(f"Failed to create registry file {path}: {exc}") from exc

        logger.info("Registered instance %r in registry", instance_name)
        return record

    def unregister(self, instance_name: str) -> None:
        """Remove the record for ``instance_name``.

        A missing record is not an error.

        Raises
        ------
        RegistryError
            If the file exists but cannot be removed.
        """
        path = self._path_for(instance_name)
        try:
            path.unlink()
        except FileNotFoundError:
            logger.debug(
                "Registry file for instance %r does not exist (already unregistered?)",
                instance_name,
            )
            return
        except OSError as exc:
            raise RegistryError(f"Failed to remove registry file {path}: {exc}") from exc
        logger.info("Unregistered instance %r from registry", instance_name)

    def exists(self, instance_name: str) -> bool:
        return self._path_for(instance_name).exists()

    def get(self, instance_name: str) -> RegistryRecord:
        """Return the record for ``instance_name``.

        Raises
        ------
        KeyError
            If no readable record exists.
        """
        path = self._path_for(instance_name)
        try:
            return self._read(path)
        except FileNotFoundError:
            raise KeyError(f"Instance {instance_name!r} not found at {path}") from None
        except (OSError, tomllib.TOMLDecodeError, ValidationError) as exc:
            raise KeyError(f"Instance {instance_name!r} has an unreadable record: {exc}") from exc

    def list_records(self) -> list[RegistryRecord]:
        """Return every readable record, sorted by instance name.

        Corrupt or unreadable records are skipped.
        """
        if not self._registry_dir.is_dir():
            return []

        records: list[RegistryRecord] = []
        for path in sorted(self._registry_dir.glob(f"*{_FILE_EXTENSION}")):
            if not path.is_file():
                continue
            try:
                records.append(self._read(path))
            except (OSError, tomllib.TOMLDecodeError, ValidationError) as exc:
                logger.debug("Skipping unreadable registry record %s: %s", path, exc)
                continue
        return sorted(records, key=lambda record: record.name)

    def is_profile_locked(self, profile_name: str | None) -> bool:
        """Return True if any registered instance claims ``profile_name``.

        ``None`` never counts as locked; a missing registry directory means
        nothing is locked.
        """
        if profile_name is None:
            return False
        return any(record.profile == profile_name for record in self.list_records())

    def __repr__(self) -> str:
        return (
            f"FilesystemRegistry(registry_dir={str(self._registry_dir)!r}, "
            f"exclusive={self._exclusive!r})"
        )

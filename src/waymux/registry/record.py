"""Registry record model.

Classes
-------
- RegistryRecord  — one running waymux instance
"""
from __future__ import annotations

import os

from pydantic import BaseModel, Field


class RegistryRecord(BaseModel):
    """A running instance as stored in ``registry/<name>.toml``.

    Parameters
    ----------
    name:
        Instance name (``-i`` option, ``default`` otherwise).
    pid:
        Process id of the instance.
    profile:
        Name of the profile the instance was started with, if any.
    """

    name: str = Field(min_length=1)
    pid: int = Field(gt=0)
    profile: str | None = None

    model_config = {"frozen": True, "extra": "ignore"}

    def to_document(self) -> dict[str, object]:
        """Return the TOML document for this record (``profile`` omitted when unset)."""
        return self.model_dump(exclude_none=True)

    def is_alive(self) -> bool:
        """Return True when a process with ``pid`` still exists.

        A process owned by another user counts as alive.
        """
        try:
            os.kill(self.pid, 0)
        except ProcessLookupError:
            return False
        except PermissionError:
            return True
        return True

"""Profile domain models.

A profile is a named, declarative description of a working session: a
list of tab commands plus settings shared by all of them.  Both types are
immutable pydantic models; a document either validates completely or not
at all.

Classes
-------
- TabSpec  — one tab to spawn
- Profile  — a whole session description
"""
from __future__ import annotations

from pydantic import BaseModel, Field, StrictBool, StrictStr, field_validator


class TabSpec(BaseModel):
    """One entry of a profile's ``tabs`` array.

    Parameters
    ----------
    command:
        Executable to run (looked up on ``PATH``).  Required.
    title:
        Optional display title.
    args:
        Extra arguments passed after ``command``.
    background:
        Start the tab in the background (hidden from ring navigation).
    """

    command: StrictStr = Field(min_length=1)
    title: StrictStr | None = None
    args: list[StrictStr] = Field(default_factory=list)
    background: StrictBool = False

    model_config = {"frozen": True, "extra": "ignore"}

    def argv(self, proxy_command: list[str] | None = None) -> list[str]:
        """Return ``[*proxy_command, command, *args]``."""
        return [*(proxy_command or []), self.command, *self.args]


class Profile(BaseModel):
    """A parsed profile document.

    Parameters
    ----------
    name:
        Profile name (the file stem it was loaded from).
    working_dir:
        Directory every tab starts in.  ``None`` inherits the cwd.
    proxy_command:
        Argument prefix prepended to every tab command, e.g.
        ``["distrobox", "enter", "dev", "--"]``.  A bare string in the
        document becomes a one-element list.
    env:
        Environment variables set for every tab.
    tabs:
        Tabs to spawn, in order.
    """

    name: StrictStr = Field(min_length=1)
    working_dir: StrictStr | None = None
    proxy_command: list[StrictStr] = Field(default_factory=list)
    env: dict[StrictStr, StrictStr] = Field(default_factory=dict)
    tabs: list[TabSpec] = Field(default_factory=list)

    model_config = {"frozen": True, "extra": "ignore"}

    @field_validator("proxy_command", mode="before")
    @classmethod
    def _wrap_single_command(cls, value: object) -> object:
        if isinstance(value, str):
            return [value]
        return value

    def background_count(self) -> int:
        return sum(1 for tab in self.tabs if tab.background)

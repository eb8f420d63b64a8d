"""Abstract interfaces for the windowing host.

The session core never draws anything.  It talks to the host through the
two interfaces defined here: :class:`View` wraps one client window owned
by the host, :class:`ViewHost` is the host itself.

Classes
-------
- View      — one externally-owned client window
- ViewHost  — display-side operations requested by the core
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from waymux.tabs.directory import Tab

UnmapCallback = Callable[[], None]


class View(ABC):
    """A client window.

    The host owns the window; a tab only borrows it.  Implementations
    must tolerate any method being called after the window has started
    closing.
    """

    @property
    @abstractmethod
    def title(self) -> str | None:
        """Window title, ``None`` when the client has not set one."""

    @property
    @abstractmethod
    def app_id(self) -> str | None:
        """Application identifier, ``None`` when unknown."""

    @property
    @abstractmethod
    def pid(self) -> int | None:
        """Process id of the client, ``None`` when unknown."""

    @abstractmethod
    def close(self, on_unmapped: UnmapCallback) -> None:
        """Ask the client to close.

        Parameters
        ----------
        on_unmapped:
            Must be called exactly once, when the window has actually
            disappeared.  It may be called synchronously.
        """

    @abstractmethod
    def set_activated(self, activated: bool) -> None:
        """Give or take keyboard focus decoration."""

    @abstractmethod
    def position(self) -> None:
        """Size and place the window in the content area."""


class ViewHost(ABC):
    """Operations the core asks of the windowing host."""

    @abstractmethod
    def show_tab(self, tab: Tab) -> None:
        """Make the tab's view visible."""

    @abstractmethod
    def hide_tab(self, tab: Tab) -> None:
        """Hide the tab's view."""

    @abstractmethod
    def refresh_tab_bar(self) -> None:
        """Redraw the tab bar after the tab list changed."""

    @abstractmethod
    def show_launcher(self) -> None:
        """Open the application launcher surface."""

    @abstractmethod
    def show_background_picker(self) -> None:
        """Open the background-tab picker surface."""

"""Ordered tab collection of one waymux instance.

Tabs are kept in creation order.  At most one tab is active; once
anything has been activated, exactly one tab is active while the
directory is non-empty.  Ring navigation (:meth:`TabDirectory.next`,
:meth:`TabDirectory.prev`) wraps around and skips background tabs.

Destroying a tab that still owns a view is a two-step affair: the tab
leaves the order at once and becomes ``CLOSING``; it only becomes
``FREED`` when the view reports that it has unmapped.

Classes
-------
- TabState      — lifecycle of a tab
- Tab           — one tab, wrapping an optional view
- TabDirectory  — the ordered collection
"""
from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum

from waymux.host.base import View, ViewHost

logger = logging.getLogger(__name__)

UNKNOWN_APP_ID = "(unknown)"
UNNAMED_TITLE = "(unnamed)"


class TabState(str, Enum):
    """Lifecycle of a :class:`Tab`."""

    OPEN = "open"
    CLOSING = "closing"
    FREED = "freed"


@dataclass(eq=False)
class Tab:
    """One tab.

    Tabs compare by identity.  ``view`` is ``None`` once the tab has been
    detached from its window during teardown.
    """

    view: View | None = None
    background: bool = False
    visible: bool = False
    state: TabState = TabState.OPEN

    @property
    def title(self) -> str:
        title = self.view.title if self.view is not None else None
        return title or UNNAMED_TITLE

    @property
    def app_id(self) -> str:
        app_id = self.view.app_id if self.view is not None else None
        return app_id or UNKNOWN_APP_ID

    @property
    def is_open(self) -> bool:
        return self.state is TabState.OPEN


class TabDirectory:
    """Tab order, active pointer and view lookup.

    Parameters
    ----------
    host:
        Receives show/hide and tab-bar refresh requests.
    """

    def __init__(self, host: ViewHost) -> None:
        self._host = host
        self._order: list[Tab] = []
        self._by_view: dict[int, Tab] = {}
        self._active: Tab | None = None

    # ------------------------------------------------------------------
    # Creation / destruction
    # ------------------------------------------------------------------

    def create(self, view: View | None) -> Tab:
        """Append a new hidden, inactive, foreground tab for ``view``."""
        tab = Tab(view=view)
        self._order.append(tab)
        if view is not None:
            self._by_view[id(view)] = tab
        self._host.refresh_tab_bar()
        logger.debug("Created tab for view %r", view)
        return tab

    def destroy(self, tab: Tab) -> None:
        """Remove ``tab`` and release its view.

        A tab with a view moves to ``CLOSING`` and asks the view to close;
        the view's unmap callback is the only path to ``FREED``.  Calling
        this again on a tab that is not ``OPEN`` does nothing.
        """
        if not tab.is_open:
            logger.debug("Ignoring destroy of tab in state %s", tab.state.value)
            return

        if self._active is tab:
            self._active = None
        if tab in self._order:
            self._order.remove(tab)

        view = tab.view
        if view is None:
            tab.state = TabState.FREED
            logger.debug("Destroyed tab")
        else:
            self._by_view.pop(id(view), None)
            tab.view = None
            tab.state = TabState.CLOSING
            view.close(lambda: self._release(tab))
            logger.debug("Destroyed tab (view cleanup deferred)")

        self._host.refresh_tab_bar()

    def _release(self, tab: Tab) -> None:
        if tab.state is TabState.CLOSING:
            tab.state = TabState.FREED
            logger.debug("Tab view unmapped, tab freed")

    def view_unmapped(self, view: View) -> Tab | None:
        """Handle a view that went away without being asked to.

        The matching tab is destroyed.  If it was active, the next
        foreground tab (or failing that, any remaining tab) is activated.

        Returns
        -------
        Tab | None
            The destroyed tab, or ``None`` if no live tab owned ``view``.
        """
        tab = self.find_by_view(view)
        if tab is None:
            return None

        replacement = self.successor(tab) if self._active is tab else None
        self._by_view.pop(id(view), None)
        tab.view = None
        self.destroy(tab)

        if replacement is not None:
            self.activate(replacement)
        return tab

    # ------------------------------------------------------------------
    # Activation / flags
    # ------------------------------------------------------------------

    def activate(self, tab: Tab) -> None:
        """Show and focus ``tab``, hiding the previously active one."""
        if not tab.is_open or tab not in self._order:
            logger.debug("Ignoring activation of a tab that is not in the directory")
            return
        if self._active is tab:
            return

        previous = self._active
        if previous is not None:
            previous.visible = False
            self._host.hide_tab(previous)
            if previous.view is not None:
                previous.view.set_activated(False)

        tab.visible = True
        self._active = tab
        self._host.show_tab(tab)
        if tab.view is not None:
            tab.view.set_activated(True)
            tab.view.position()

        self._host.refresh_tab_bar()
        logger.debug("Activated tab %d", self._order.index(tab))

    def set_background(self, tab: Tab, background: bool) -> None:
        """Set the background flag; order and activation are untouched."""
        tab.background = background
        self._host.refresh_tab_bar()

    # ------------------------------------------------------------------
    # Navigation / lookup
    # ------------------------------------------------------------------

    def _step(self, tab: Tab, direction: int) -> Tab | None:
        try:
            start = self._order.index(tab)
        except ValueError:
            return None
        size = len(self._order)
        for offset in range(1, size):
            candidate = self._order[(start + direction * offset) % size]
            if not candidate.background:
                return candidate
        return tab

    def next(self, tab: Tab) -> Tab | None:
        """Following foreground tab, wrapping; ``tab`` itself if none other."""
        return self._step(tab, 1)

    def prev(self, tab: Tab) -> Tab | None:
        """Preceding foreground tab, wrapping; ``tab`` itself if none other."""
        return self._step(tab, -1)

    def successor(self, tab: Tab) -> Tab | None:
        """Tab to activate once ``tab`` is gone.

        The next foreground tab, else any other tab, else ``None``.
        """
        candidate = self.next(tab)
        if candidate is not None and candidate is not tab:
            return candidate
        return next((other for other in self._order if other is not tab), None)

    def count(self) -> int:
        """Number of tabs, background tabs included."""
        return len(self._order)

    def find_by_view(self, view: View) -> Tab | None:
        return self._by_view.get(id(view))

    def tabs(self) -> list[Tab]:
        """Snapshot of the tab order."""
        return list(self._order)

    def index_of(self, tab: Tab) -> int | None:
        try:
            return self._order.index(tab)
        except ValueError:
            return None

    def get(self, index: int) -> Tab | None:
        """Tab at ``index``; ``None`` when out of range."""
        if 0 <= index < len(self._order):
            return self._order[index]
        return None

    @property
    def active(self) -> Tab | None:
        return self._active

    def __len__(self) -> int:
        return len(self._order)

    def __iter__(self) -> Iterator[Tab]:
        return iter(list(self._order))

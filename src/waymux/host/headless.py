"""Headless host implementation.

Records every request instead of drawing.  Used by the ``waymux`` command
when no display backend is available, and by the test-suite.

Classes
-------
- HeadlessView  — in-memory view with a manual unmap
- HeadlessHost  — ViewHost that records calls
"""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from waymux.host.base import UnmapCallback, View, ViewHost

if TYPE_CHECKING:
    from waymux.tabs.directory import Tab

logger = logging.getLogger(__name__)


class HeadlessView(View):
    """A view with no window behind it.

    Parameters
    ----------
    title, app_id, pid:
        Values reported to the core.
    auto_unmap:
        When True, :meth:`close` fires the unmap callback immediately.
        Otherwise the callback is held until :meth:`unmap` is called,
        which mimics a client taking time to go away.
    """

    def __init__(
        self,
        title: str | None = None,
        app_id: str | None = None,
        pid: int | None = None,
        *,
        auto_unmap: bool = False,
    ) -> None:
        self._title = title
        self._app_id = app_id
        self._pid = pid
        self.auto_unmap = auto_unmap
        self.activated = False
        self.position_calls = 0
        self.close_requested = False
        self._on_unmapped: UnmapCallback | None = None

    @property
    def title(self) -> str | None:
        return self._title

    @property
    def app_id(self) -> str | None:
        return self._app_id

    @property
    def pid(self) -> int | None:
        return self._pid

    def close(self, on_unmapped: UnmapCallback) -> None:
        self.close_requested = True
        self._on_unmapped = on_unmapped
        if self.auto_unmap:
            self.unmap()

    def unmap(self) -> None:
        """Fire the pending unmap callback, if any."""
        callback, self._on_unmapped = self._on_unmapped, None
        if callback is not None:
            callback()

    def set_activated(self, activated: bool) -> None:
        self.activated = activated

    def position(self) -> None:
        self.position_calls += 1

    def __repr__(self) -> str:
        return f"HeadlessView(title={self._title!r}, app_id={self._app_id!r}, pid={self._pid!r})"


class HeadlessHost(ViewHost):
    """A ViewHost that only keeps a log of requests.

    ``calls`` holds ``(operation, tab_or_None)`` tuples in request order.
    """

    def __init__(self) -> None:
        self.calls: list[tuple[str, Tab | None]] = []
        self.visible: set[int] = set()

    # ------------------------------------------------------------------
    # ViewHost interface
    # ------------------------------------------------------------------

    def show_tab(self, tab: Tab) -> None:
        self.calls.append(("show_tab", tab))
        self.visible.add(id(tab))

    def hide_tab(self, tab: Tab) -> None:
        self.calls.append(("hide_tab", tab))
        self.visible.discard(id(tab))

    def refresh_tab_bar(self) -> None:
        self.calls.append(("refresh_tab_bar", None))

    def show_launcher(self) -> None:
        logger.info("Launcher requested (headless host, nothing to show)")
        self.calls.append(("show_launcher", None))

    def show_background_picker(self) -> None:
        logger.info("Background picker requested (headless host, nothing to show)")
        self.calls.append(("show_background_picker", None))

    # ------------------------------------------------------------------
    # Extras
    # ------------------------------------------------------------------

    def count(self, operation: str) -> int:
        """Return how many times ``operation`` was requested."""
        return sum(1 for name, _ in self.calls if name == operation)

    def clear(self) -> None:
        self.calls.clear()

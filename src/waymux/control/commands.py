"""Execution of control commands against a running session.

Every command runs synchronously to completion, so two commands never
interleave.  Protocol errors are turned into ``ERROR`` responses here and
never reach the caller.

Classes
-------
- CommandDispatcher  — maps a ControlRequest onto session operations
"""
from __future__ import annotations

import logging
import subprocess
from collections.abc import Callable
from typing import TYPE_CHECKING

from waymux.control.protocol import (
    TAB_INDEX_OUT_OF_RANGE,
    Command,
    ControlRequest,
    ControlResponse,
    ProtocolError,
    parse_request,
)

if TYPE_CHECKING:
    from waymux.session.state import MuxSession
    from waymux.tabs.directory import Tab

logger = logging.getLogger(__name__)


class CommandDispatcher:
    """Run control commands on ``session``.

    Parameters
    ----------
    session:
        The instance whose tabs, host and spawner the commands act on.
    """

    def __init__(self, session: MuxSession) -> None:
        self._session = session
        self._handlers: dict[Command, Callable[[ControlRequest], ControlResponse]] = {
            Command.LIST_TABS: self._list_tabs,
            Command.FOCUS_TAB: self._focus_tab,
            Command.CLOSE_TAB: self._close_tab,
            Command.NEW_TAB: self._new_tab,
            Command.SHOW_LAUNCHER: self._show_launcher,
            Command.BACKGROUND: self._background,
            Command.FOREGROUND: self._foreground,
        }

    def handle_line(self, line: str) -> str:
        """Parse, execute and encode the response to one command line."""
        logger.debug("Control command: %r", line)
        try:
            request = parse_request(line)
        except ProtocolError as exc:
            return ControlResponse.error(exc.message).encode()
        return self.execute(request).encode()

    def execute(self, request: ControlRequest) -> ControlResponse:
        return self._handlers[request.command](request)

    # ------------------------------------------------------------------
    # Handlers
    # ------------------------------------------------------------------

    def _tab_at(self, request: ControlRequest) -> Tab:
        tab = self._session.tabs.get(request.index if request.index is not None else -1)
        if tab is None:
            raise ProtocolError(TAB_INDEX_OUT_OF_RANGE)
        return tab

    def _list_tabs(self, request: ControlRequest) -> ControlResponse:
        tabs = self._session.tabs.tabs()
        lines = tuple(f"{index}: [{tab.app_id}] {tab.title}" for index, tab in enumerate(tabs))
        return ControlResponse.success(str(len(tabs)), lines)

    def _focus_tab(self, request: ControlRequest) -> ControlResponse:
        try:
            tab = self._tab_at(request)
        except ProtocolError as exc:
            return ControlResponse.error(exc.message)
        self._session.tabs.activate(tab)
        return ControlResponse.success()

    def _close_tab(self, request: ControlRequest) -> ControlResponse:
        try:
            tab = self._tab_at(request)
        except ProtocolError as exc:
            return ControlResponse.error(exc.message)
        if request.force:
            logger.info("Force-closing tab %d", request.index)
        self._session.close_tab(tab)
        return ControlResponse.success()

    def _new_tab(self, request: ControlRequest) -> ControlResponse:
        try:
            child = self._session.spawner.spawn_command(request.argv)
        except OSError as exc:
            reason = exc.strerror or str(exc)
            logger.error("Failed to spawn %s: %s", request.argv[0], reason)
            return ControlResponse.error(f"Failed to spawn: {reason}")
        except (ValueError, subprocess.SubprocessError) as exc:
            logger.error("Failed to spawn %s: %s", request.argv[0], exc)
            return ControlResponse.error(f"Failed to spawn: {exc}")
        logger.debug("Started new tab process with pid %d", child.pid)
        return ControlResponse.success()

    def _show_launcher(self, request: ControlRequest) -> ControlResponse:
        self._session.host.show_launcher()
        return ControlResponse.success()

    def _set_background(self, request: ControlRequest, background: bool) -> ControlResponse:
        try:
            tab = self._tab_at(request)
        except ProtocolError as exc:
            return ControlResponse.error(exc.message)
        self._session.tabs.set_background(tab, background)
        return ControlResponse.success()

    def _background(self, request: ControlRequest) -> ControlResponse:
        return self._set_background(request, True)

    def _foreground(self, request: ControlRequest) -> ControlResponse:
        return self._set_background(request, False)

"""Per-instance session state.

``MuxSession`` bundles everything one running instance needs: its name,
the profile it was started with, configuration, the windowing host, the
tab directory and the spawner.  The host reports view events and key
presses to it; the control dispatcher operates on it.

Classes
-------
- MuxSession  — the session struct and its event handlers
"""
from __future__ import annotations

import logging

from waymux.config import Action, WaymuxConfig
from waymux.host.base import View, ViewHost
from waymux.profile.spawner import SessionSpawner
from waymux.tabs.directory import Tab, TabDirectory

logger = logging.getLogger(__name__)


class MuxSession:
    """State of one waymux instance.

    Parameters
    ----------
    instance_name:
        Name of the instance (socket and registry key).
    host:
        The windowing host.
    config:
        Keybinding configuration; defaults when omitted.
    spawner:
        Child process spawner; a new one is created when omitted.
    profile_name:
        Profile the instance was started with, if any.
    display_socket:
        Display socket name exported to children.
    """

    def __init__(
        self,
        instance_name: str,
        host: ViewHost,
        config: WaymuxConfig | None = None,
        spawner: SessionSpawner | None = None,
        profile_name: str | None = None,
        display_socket: str | None = None,
    ) -> None:
        self.instance_name = instance_name
        self.profile_name = profile_name
        self.display_socket = display_socket
        self.config = config or WaymuxConfig()
        self.host = host
        self.tabs = TabDirectory(host)
        self.spawner = spawner or SessionSpawner(instance_name, display_socket)

    # ------------------------------------------------------------------
    # View events
    # ------------------------------------------------------------------

    def view_mapped(self, view: View) -> Tab:
        """A client window appeared: give it a tab.

        Windows of background profile tabs go straight to the background;
        anything else becomes the active tab.  A background tab is still
        activated when no tab is active yet, so a non-empty directory always
        has an active tab.
        """
        tab = self.tabs.create(view)
        if self.spawner.claim_background(view.pid):
            logger.info("Placing view of pid %s in the background", view.pid)
            self.tabs.set_background(tab, True)
            if self.tabs.active is None:
                self.tabs.activate(tab)
        else:
            self.tabs.activate(tab)
        return tab

    def view_unmapped(self, view: View) -> Tab | None:
        return self.tabs.view_unmapped(view)

    # ------------------------------------------------------------------
    # Tab operations
    # ------------------------------------------------------------------

    def close_tab(self, tab: Tab) -> None:
        """Destroy ``tab``; if it was active, activate its successor."""
        replacement = self.tabs.successor(tab) if self.tabs.active is tab else None
        self.tabs.destroy(tab)
        if replacement is not None:
            self.tabs.activate(replacement)

    def toggle_background(self) -> None:
        """Send the active tab to the background, or bring it back."""
        tab = self.tabs.active
        if tab is None:
            return
        if tab.background:
            self.tabs.set_background(tab, False)
            return

        self.tabs.set_background(tab, True)
        following = self.tabs.next(tab)
        if following is not None and following is not tab:
            self.tabs.activate(following)

    def restore_background(self, tab: Tab) -> None:
        """Bring a background tab back to the foreground and focus it."""
        self.tabs.set_background(tab, False)
        self.tabs.activate(tab)

    def background_tabs(self) -> list[Tab]:
        return [tab for tab in self.tabs.tabs() if tab.background]

    # ------------------------------------------------------------------
    # Keyboard
    # ------------------------------------------------------------------

    def handle_key(self, modifiers: int, keysym: int) -> bool:
        """Run the action bound to the key press.

        Returns
        -------
        bool
            True if the key press was bound (and thus consumed).
        """
        action = self.config.action_for(modifiers, keysym)
        if action is None:
            return False
        logger.debug("Key press bound to %s", action.value)
        self.run_action(action)
        return True

    def run_action(self, action: Action) -> None:
        active = self.tabs.active
        if action is Action.NEXT_TAB:
            if active is not None:
                target = self.tabs.next(active)
                if target is not None:
                    self.tabs.activate(target)
        elif action is Action.PREV_TAB:
            if active is not None:
                target = self.tabs.prev(active)
                if target is not None:
                    self.tabs.activate(target)
        elif action is Action.CLOSE_TAB:
            if active is not None:
                self.close_tab(active)
        elif action is Action.OPEN_LAUNCHER:
            self.host.show_launcher()
        elif action is Action.TOGGLE_BACKGROUND:
            self.toggle_background()
        elif action is Action.SHOW_BACKGROUND_DIALOG:
            self.host.show_background_picker()

    def __repr__(self) -> str:
        return (
            f"MuxSession(instance_name={self.instance_name!r}, "
            f"profile_name={self.profile_name!r}, tabs={self.tabs.count()})"
        )

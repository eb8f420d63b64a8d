"""Child process spawning for profiles, ``new-tab`` and the primary client.

Every child gets the environment of this instance: ``WAYLAND_DISPLAY``
points at the instance's display socket, ``WAYMUX_INSTANCE`` names the
instance (so ``waymuxctl`` run inside a tab talks to the right socket),
and the parent's ``WAYLAND_SOCKET`` and ``DISPLAY`` are removed.

Children are detached once exec succeeds.  Only the primary client is
watched: its exit ends the instance.

Classes
-------
- SessionSpawner  — starts and tracks child processes
"""
from __future__ import annotations

import asyncio
import logging
import os
import signal
import subprocess
from collections.abc import Mapping, Sequence

from waymux.profile.model import Profile, TabSpec

logger = logging.getLogger(__name__)

SCRUBBED_VARIABLES: tuple[str, ...] = ("WAYLAND_SOCKET", "DISPLAY")
FIREFOX_COMMANDS: frozenset[str] = frozenset({"firefox", "firefox-bin"})


def _reset_signals() -> None:
    """Runs in the child between fork and exec."""
    signal.pthread_sigmask(signal.SIG_SETMASK, set())
    for signum in (signal.SIGINT, signal.SIGTERM, signal.SIGHUP, signal.SIGCHLD, signal.SIGPIPE):
        signal.signal(signum, signal.SIG_DFL)


def exit_code_from_returncode(returncode: int) -> int:
    """Map a Popen return code to a shell-style exit status.

    A child killed by signal N reports ``-N``; shells report ``128 + N``.
    """
    if returncode < 0:
        return 128 - returncode
    return returncode


def with_firefox_new_instance(argv: Sequence[str]) -> list[str]:
    """Insert ``--new-instance`` after a Firefox executable.

    Without it Firefox hands the request to an already running browser on
    another display instead of opening a window in this instance.
    """
    argv = list(argv)
    if argv and os.path.basename(argv[0]) in FIREFOX_COMMANDS and "--new-instance" not in argv[1:]:
        logger.debug("Adding --new-instance flag for Firefox")
        argv.insert(1, "--new-instance")
    return argv


class SessionSpawner:
    """Start child processes on behalf of one instance.

    Parameters
    ----------
    instance_name:
        Exported to children as ``WAYMUX_INSTANCE``.
    display_socket:
        Exported to children as ``WAYLAND_DISPLAY``; when ``None`` the
        inherited value is left alone.
    """

    def __init__(self, instance_name: str, display_socket: str | None = None) -> None:
        self.instance_name = instance_name
        self.display_socket = display_socket
        self._children: list[subprocess.Popen[bytes]] = []
        self._pending_background: set[int] = set()

    # ------------------------------------------------------------------
    # Environment
    # ------------------------------------------------------------------

    def child_environment(self, extra: Mapping[str, str] | None = None) -> dict[str, str]:
        """Return the environment for a new child."""
        env = dict(os.environ)
        for name in SCRUBBED_VARIABLES:
            env.pop(name, None)
        if self.display_socket:
            env["WAYLAND_DISPLAY"] = self.display_socket
        else:
            logger.warning("No display socket known, children inherit the parent display")
        env["WAYMUX_INSTANCE"] = self.instance_name
        if extra:
            env.update(extra)
        return env

    # ------------------------------------------------------------------
    # Spawning
    # ------------------------------------------------------------------

    def spawn(
        self,
        argv: Sequence[str],
        *,
        cwd: str | None = None,
        env: Mapping[str, str] | None = None,
    ) -> subprocess.Popen[bytes]:
        """Start ``argv`` and track the child.

        Raises
        ------
        ValueError
            If ``argv`` is empty.
        OSError
            If the working directory is unusable or the executable cannot
            be run.  Nothing keeps running in that case.
        """
        if not argv:
            raise ValueError("empty command")
        self.reap()
        child = subprocess.Popen(
            list(argv),
            cwd=cwd,
            env=self.child_environment(env),
            stdin=subprocess.DEVNULL,
            close_fds=True,
            restore_signals=True,
            preexec_fn=_reset_signals,
        )
        self._children.append(child)
        logger.debug("Started %s with pid %d", argv[0], child.pid)
        return child

    def spawn_command(self, argv: Sequence[str]) -> subprocess.Popen[bytes]:
        """Start an ad-hoc tab command (the ``new-tab`` control command)."""
        argv = with_firefox_new_instance(argv)
        logger.debug("Executing: %s", argv[0])
        return self.spawn(argv)

    def spawn_tab(self, profile: Profile, tab: TabSpec) -> subprocess.Popen[bytes] | None:
        """Start one profile tab; failures are logged and return ``None``."""
        working_dir = os.path.expanduser(profile.working_dir) if profile.working_dir else None
        argv = tab.argv(profile.proxy_command)
        logger.info("Spawning profile tab: %s", tab.command)
        try:
            child = self.spawn(argv, cwd=working_dir, env=profile.env)
        except OSError as exc:
            if working_dir is not None and exc.filename == working_dir:
                logger.error("Failed to change to working directory %s: %s", working_dir, exc.strerror)
            else:
                logger.error("Failed to spawn profile tab %s: %s", tab.command, exc.strerror or exc)
            return None
        except (ValueError, subprocess.SubprocessError) as exc:
            logger.error("Failed to spawn profile tab %s: %s", tab.command, exc)
            return None

        if tab.background:
            self._pending_background.add(child.pid)
        return child

    def spawn_profile(self, profile: Profile) -> int:
        """Start every tab of ``profile``.

        A failing tab does not stop the remaining ones.

        Returns
        -------
        int
            Number of tabs that were started.
        """
        if profile.working_dir:
            logger.debug("Profile working directory: %s", profile.working_dir)
        for index, arg in enumerate(profile.proxy_command):
            logger.debug("Profile proxy command arg %d: %s", index, arg)
        if profile.env:
            logger.debug("Profile environment variables: %d", len(profile.env))
        if profile.background_count():
            logger.debug("Profile has %d background tabs", profile.background_count())

        started = 0
        for index, tab in enumerate(profile.tabs):
            if self.spawn_tab(profile, tab) is None:
                logger.error("Failed to spawn tab %d (%s)", index, tab.command)
                continue
            started += 1
        return started

    async def spawn_primary(self, argv: Sequence[str]) -> asyncio.subprocess.Process:
        """Start the primary client whose exit terminates the instance."""
        if not argv:
            raise ValueError("empty command")
        process = await asyncio.create_subprocess_exec(
            *argv,
            env=self.child_environment(),
            stdin=subprocess.DEVNULL,
            restore_signals=True,
            preexec_fn=_reset_signals,
        )
        logger.debug("Primary client %s created with pid %d", argv[0], process.pid)
        return process

    # ------------------------------------------------------------------
    # Bookkeeping
    # ------------------------------------------------------------------

    def claim_background(self, pid: int | None) -> bool:
        """Return True (once) if ``pid`` belongs to a background profile tab."""
        if pid is None or pid not in self._pending_background:
            return False
        self._pending_background.discard(pid)
        return True

    @property
    def pending_background(self) -> frozenset[int]:
        return frozenset(self._pending_background)

    @property
    def children(self) -> list[subprocess.Popen[bytes]]:
        return list(self._children)

    def reap(self) -> int:
        """Collect children that have exited; return how many were reaped."""
        running: list[subprocess.Popen[bytes]] = []
        reaped = 0
        for child in self._children:
            if child.poll() is None:
                running.append(child)
                continue
            reaped += 1
            self._pending_background.discard(child.pid)
            logger.debug("Child %d exited with status %d", child.pid, child.returncode)
        self._children = running
        return reaped

"""Instance lifecycle: startup, serving and shutdown.

Startup order matters.  The runtime directory is resolved first, then the
profile lock is checked before any child process exists, then the
profile is loaded and its tabs are spawned.  Only then does the instance
register itself and open its control socket.  The primary client is
started last.

Classes
-------
- InstanceManager  — drives one instance from start to stop
"""
from __future__ import annotations

import asyncio
import contextlib
import logging
import os
import signal
from collections.abc import Sequence

from waymux.config import WaymuxConfig, paths
from waymux.control.commands import CommandDispatcher
from waymux.control.server import ControlServer
from waymux.host.base import ViewHost
from waymux.profile.loader import ProfileLockedError, load_profile
from waymux.profile.model import Profile
from waymux.profile.spawner import SessionSpawner, exit_code_from_returncode
from waymux.registry import FilesystemRegistry, RegistryError
from waymux.session.state import MuxSession

logger = logging.getLogger(__name__)

DEFAULT_INSTANCE_NAME = "default"
REAP_INTERVAL = 1.0


class InstanceManager:
    """Run one waymux instance.

    Parameters
    ----------
    host:
        The windowing host.
    instance_name:
        Name used for the control socket and the registry record.
    config:
        Keybinding configuration; defaults when omitted.
    registry:
        Instance registry; the default runtime-directory registry when
        omitted.
    display_socket:
        Display socket exported to children as ``WAYLAND_DISPLAY``.
    socket_path:
        Explicit control socket path (tests).
    reap_interval:
        Seconds between collections of exited tab processes.
    """

    def __init__(
        self,
        host: ViewHost,
        *,
        instance_name: str = DEFAULT_INSTANCE_NAME,
        config: WaymuxConfig | None = None,
        registry: FilesystemRegistry | None = None,
        display_socket: str | None = None,
        socket_path: str | os.PathLike[str] | None = None,
        reap_interval: float = REAP_INTERVAL,
    ) -> None:
        self.host = host
        self.instance_name = instance_name
        self.config = config or WaymuxConfig()
        self.display_socket = display_socket
        self._registry = registry
        self._socket_path = socket_path
        self.reap_interval = reap_interval
        self._session: MuxSession | None = None
        self._control: ControlServer | None = None
        self._primary: asyncio.subprocess.Process | None = None
        self._reaper: asyncio.Task[None] | None = None
        self._registered = False
        self._stopped = False
        self._stop_requested = asyncio.Event()

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def session(self) -> MuxSession:
        if self._session is None:
            raise RuntimeError("Instance has not been started")
        return self._session

    @property
    def control(self) -> ControlServer | None:
        return self._control

    @property
    def registry(self) -> FilesystemRegistry | None:
        return self._registry

    @property
    def primary(self) -> asyncio.subprocess.Process | None:
        return self._primary

    @property
    def is_registered(self) -> bool:
        return self._registered

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(
        self,
        profile_name: str | None = None,
        primary_argv: Sequence[str] | None = None,
    ) -> MuxSession:
        """Bring the instance up.

        Raises
        ------
        RuntimeDirError
            If ``XDG_RUNTIME_DIR`` is not set.
        ProfileLockedError
            If another running instance already uses ``profile_name``.
        ProfileError
            If the profile cannot be found or parsed.
        ControlServerError
            If the control socket cannot be created.
        OSError
            If the primary client cannot be started.
        """
        paths.runtime_dir()
        if self._registry is None:
            self._registry = FilesystemRegistry()

        profile: Profile | None = None
        if profile_name is not None:
            if self._registry.is_profile_locked(profile_name):
                logger.error("Profile %r is already in use by another waymux instance", profile_name)
                raise ProfileLockedError(profile_name)
            profile = load_profile(profile_name)

        spawner = SessionSpawner(self.instance_name, self.display_socket)
        self._session = MuxSession(
            self.instance_name,
            self.host,
            config=self.config,
            spawner=spawner,
            profile_name=profile_name,
            display_socket=self.display_socket,
        )

        if profile is not None:
            started = spawner.spawn_profile(profile)
            logger.info("Spawned %d of %d profile tabs", started, len(profile.tabs))

        try:
            self._registry.register(self.instance_name, os.getpid(), profile_name)
            self._registered = True
        except RegistryError as exc:
            logger.error("Failed to register instance %r: %s", self.instance_name, exc)

        dispatcher = CommandDispatcher(self._session)
        self._control = ControlServer(self.instance_name, dispatcher.handle_line, self._socket_path)
        try:
            await self._control.start()
            self._reaper = asyncio.ensure_future(self._reap_children(spawner))
            if primary_argv:
                self._primary = await spawner.spawn_primary(primary_argv)
        except BaseException:
            await self.stop()
            raise

        logger.info("waymux instance %r started", self.instance_name)
        return self._session

    async def _reap_children(self, spawner: SessionSpawner) -> None:
        """Collect exited tab processes so they do not linger as zombies."""
        while True:
            await asyncio.sleep(self.reap_interval)
            reaped = spawner.reap()
            if reaped:
                logger.debug("Reaped %d exited child process(es)", reaped)

    def request_stop(self) -> None:
        """Ask :meth:`run` to return; safe to call from a signal handler."""
        logger.info("Stop requested")
        self._stop_requested.set()

    def install_signal_handlers(self) -> None:
        loop = asyncio.get_running_loop()
        for signum in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(signum, self.request_stop)

    async def run(self) -> int:
        """Serve until a stop is requested or the primary client exits.

        Returns
        -------
        int
            The primary client's shell-style exit status when its exit
            ended the run, else 0.
        """
        waiters: set[asyncio.Task[object]] = {
            asyncio.ensure_future(self._stop_requested.wait()),
        }
        primary_waiter: asyncio.Task[int] | None = None
        if self._primary is not None:
            primary_waiter = asyncio.ensure_future(self._primary.wait())
            waiters.add(primary_waiter)

        try:
            done, pending = await asyncio.wait(waiters, return_when=asyncio.FIRST_COMPLETED)
        finally:
            for waiter in waiters:
                if not waiter.done():
                    waiter.cancel()

        exit_code = 0
        if primary_waiter is not None and primary_waiter in done:
            exit_code = exit_code_from_returncode(primary_waiter.result())
            logger.info("Primary client exited with status %d", exit_code)

        await self.stop()
        return exit_code

    async def stop(self) -> None:
        """Close the control socket, unregister and reap children.

        Calling it again does nothing.
        """
        if self._stopped:
            return
        self._stopped = True

        if self._reaper is not None:
            reaper, self._reaper = self._reaper, None
            reaper.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await reaper

        if self._control is not None:
            await self._control.stop()

        if self._registered and self._registry is not None:
            try:
                self._registry.unregister(self.instance_name)
            except RegistryError as exc:
                logger.error("Failed to unregister instance %r: %s", self.instance_name, exc)
            self._registered = False

        if self._session is not None:
            self._session.spawner.reap()
        logger.info("waymux instance %r stopped", self.instance_name)

    async def serve(
        self,
        profile_name: str | None = None,
        primary_argv: Sequence[str] | None = None,
    ) -> int:
        """``start`` then ``run``, with SIGINT/SIGTERM requesting a stop."""
        await self.start(profile_name, primary_argv)
        try:
            self.install_signal_handlers()
            return await self.run()
        finally:
            await self.stop()

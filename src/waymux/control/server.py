"""Unix domain socket server for the control protocol.

The server listens on ``$XDG_RUNTIME_DIR/waymux/<instance>.sock``.  Each
accepted connection is served by a :class:`ControlClient` running on the
instance's event loop::

    OPEN --line--> PROCESSING --responses written--> HALF_CLOSED --EOF--> CLOSED

Lines are accumulated in a fixed 4096-byte buffer.  Every complete line of
one read is dispatched in order; the responses are written in order and
the write side is then shut down once.  Lines that arrive after that can
no longer be answered and are dropped.  A line longer than the buffer
drops the connection.

Classes
-------
- ClientState         — connection state machine
- ControlClient       — one accepted connection
- ControlServer       — listening socket plus client set
- ControlServerError  — socket could not be set up
"""
from __future__ import annotations

import asyncio
import logging
import os
from collections.abc import Callable
from enum import Enum
from pathlib import Path

from waymux.config import paths
from waymux.control.protocol import BUFFER_SIZE

logger = logging.getLogger(__name__)

LineHandler = Callable[[str], str]


class ControlServerError(RuntimeError):
    """Raised when the control socket cannot be created or bound."""

    def __init__(self, socket_path: Path, reason: str) -> None:
        self.socket_path = socket_path
        self.reason = reason
        super().__init__(f"Control socket {socket_path}: {reason}")


class ClientState(str, Enum):
    OPEN = "open"
    PROCESSING = "processing"
    HALF_CLOSED = "half_closed"
    CLOSED = "closed"


class ControlClient:
    """One control connection.

    Parameters
    ----------
    reader, writer:
        Streams of the accepted connection.
    handler:
        Turns one command line into the full response text.
    """

    def __init__(
        self,
        reader: asyncio.StreamReader,
        writer: asyncio.StreamWriter,
        handler: LineHandler,
    ) -> None:
        self._reader = reader
        self._writer = writer
        self._handler = handler
        self._buffer = bytearray()
        self.state = ClientState.OPEN

    def _take_lines(self) -> list[str]:
        lines = []
        while True:
            newline = self._buffer.find(b"\n")
            if newline < 0:
                return lines
            raw = bytes(self._buffer[:newline])
            del self._buffer[: newline + 1]
            lines.append(raw.decode("utf-8", errors="replace"))

    async def _respond(self, lines: list[str]) -> None:
        responses = []
        for line in lines:
            if self.state is ClientState.HALF_CLOSED:
                logger.warning("Dropping command received after response was sent: %r", line)
                continue
            self.state = ClientState.PROCESSING
            responses.append(self._handler(line))

        if not responses:
            return
        self._writer.write("".join(responses).encode("utf-8"))
        await self._writer.drain()
        if self._writer.can_write_eof():
            self._writer.write_eof()
        self.state = ClientState.HALF_CLOSED

    async def serve(self) -> None:
        """Read and answer commands until the peer goes away."""
        try:
            while self.state is not ClientState.CLOSED:
                try:
                    data = await self._reader.read(BUFFER_SIZE - len(self._buffer))
                except (ConnectionError, OSError) as exc:
                    logger.error("Error reading from control client: %s", exc)
                    break
                if not data:
                    break

                self._buffer.extend(data)
                try:
                    await self._respond(self._take_lines())
                except (ConnectionError, OSError) as exc:
                    logger.error("Failed to send response to control client: %s", exc)
                    break

                if len(self._buffer) >= BUFFER_SIZE:
                    logger.error("Client buffer overflow, disconnecting")
                    break
        finally:
            self.close()

    def close(self) -> None:
        if self.state is ClientState.CLOSED:
            return
        self.state = ClientState.CLOSED
        self._writer.close()


class ControlServer:
    """Control socket of one instance.

    Parameters
    ----------
    instance_name:
        Used to derive the socket path.
    handler:
        Called with each command line; returns the response text.
    socket_path:
        Explicit socket path, bypassing the runtime-directory layout.
    """

    def __init__(
        self,
        instance_name: str,
        handler: LineHandler,
        socket_path: str | Path | None = None,
    ) -> None:
        self.instance_name = instance_name
        self._handler = handler
        self._socket_path = Path(socket_path) if socket_path is not None else None
        self._server: asyncio.Server | None = None
        self._clients: set[ControlClient] = set()

    @property
    def socket_path(self) -> Path:
        if self._socket_path is None:
            self._socket_path = paths.control_socket_path(self.instance_name)
        return self._socket_path

    @property
    def is_serving(self) -> bool:
        return self._server is not None and self._server.is_serving()

    @property
    def client_count(self) -> int:
        return len(self._clients)

    async def start(self) -> None:
        """Create the socket directory, replace any stale socket and listen.

        Raises
        ------
        ControlServerError
            If the directory or socket cannot be created.
        """
        path = self.socket_path
        try:
            path.parent.mkdir(mode=0o755, parents=True, exist_ok=True)
        except OSError as exc:
            raise ControlServerError(path, f"cannot create socket directory: {exc.strerror}") from exc
        try:
            path.unlink(missing_ok=True)
        except OSError as exc:
            raise ControlServerError(path, f"cannot remove stale socket: {exc.strerror}") from exc

        try:
            self._server = await asyncio.start_unix_server(self._accept, path=str(path))
        except OSError as exc:
            raise ControlServerError(path, f"cannot bind: {exc.strerror or exc}") from exc
        logger.info("Control socket listening on %s", path)

    async def _accept(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        client = ControlClient(reader, writer, self._handler)
        self._clients.add(client)
        logger.debug("Control client connected")
        try:
            await client.serve()
        finally:
            self._clients.discard(client)
            logger.debug("Control client disconnected")

    async def stop(self) -> None:
        """Close all clients and the socket, then remove the socket file."""
        if self._server is None:
            return
        server, self._server = self._server, None
        server.close()
        for client in list(self._clients):
            client.close()
        await server.wait_closed()

        path = self.socket_path
        path.unlink(missing_ok=True)
        try:
            os.rmdir(path.parent)
        except OSError:
            logger.debug("Socket directory %s not removed (not empty)", path.parent)
        logger.info("Control server stopped")

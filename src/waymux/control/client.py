"""Blocking client for the control socket, used by ``waymuxctl``.

Functions
---------
- resolve_socket_path  — find the socket of the instance to talk to
- send_command         — send one command line and parse the response
"""
from __future__ import annotations

import logging
import os
import socket
from pathlib import Path

from waymux.config import paths
from waymux.control.protocol import BUFFER_SIZE, ControlResponse

logger = logging.getLogger(__name__)

DEFAULT_INSTANCE = "default"
INSTANCE_ENV_VAR = "WAYMUX_INSTANCE"


class ControlClientError(RuntimeError):
    """Raised when no instance can be reached."""


def resolve_socket_path(instance_name: str | None = None) -> Path:
    """Return the control socket to connect to.

    Resolution order: ``instance_name``, then ``$WAYMUX_INSTANCE``, then
    the ``default`` instance if its socket exists, then the first socket
    found in the socket directory.

    Raises
    ------
    ControlClientError
        If no socket can be found.
    """
    name = instance_name or os.environ.get(INSTANCE_ENV_VAR)
    if name:
        return paths.control_socket_path(name)

    default = paths.control_socket_path(DEFAULT_INSTANCE)
    if default.exists():
        return default

    directory = paths.socket_dir()
    if not directory.is_dir():
        raise ControlClientError(f"No waymux socket directory found at {directory}")
    candidates = sorted(directory.glob(f"*{paths.SOCKET_SUFFIX}"))
    if not candidates:
        raise ControlClientError(f"No waymux socket found in {directory}")
    return candidates[0]


def send_command(line: str, socket_path: str | Path, timeout: float | None = 5.0) -> ControlResponse:
    """Send ``line`` and return the parsed response.

    The server half-closes the connection when its response is complete,
    so the reply is read until EOF.

    Raises
    ------
    ControlClientError
        If the socket cannot be reached or the connection fails.
    ProtocolError
        If the reply is not a valid response.
    """
    chunks: list[bytes] = []
    try:
        with socket.socket(socket.AF_UNIX, socket.SOCK_STREAM) as sock:
            sock.settimeout(timeout)
            sock.connect(str(socket_path))
            sock.sendall(f"{line}\n".encode("utf-8"))
            while True:
                chunk = sock.recv(BUFFER_SIZE)
                if not chunk:
                    break
                chunks.append(chunk)
    except OSError as exc:
        raise ControlClientError(f"Failed to talk to waymux at {socket_path}: {exc}") from exc

    text = b"".join(chunks).decode("utf-8", errors="replace")
    logger.debug("Response from %s: %r", socket_path, text)
    return ControlResponse.parse(text)

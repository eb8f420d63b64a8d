"""Control protocol subpackage: socket server, command dispatch and client.

Public surface
--------------
- Command, ControlRequest, ControlResponse, ProtocolError, parse_request
- CommandDispatcher
- ControlServer, ControlServerError
- resolve_socket_path, send_command, ControlClientError
"""
from __future__ import annotations

from waymux.control.client import ControlClientError, resolve_socket_path, send_command
from waymux.control.commands import CommandDispatcher
from waymux.control.protocol import (
    Command,
    ControlRequest,
    ControlResponse,
    ProtocolError,
    format_request,
    parse_request,
)
from waymux.control.server import ClientState, ControlClient, ControlServer, ControlServerError

__all__ = [
    "ClientState",
    "Command",
    "CommandDispatcher",
    "ControlClient",
    "ControlClientError",
    "ControlRequest",
    "ControlResponse",
    "ControlServer",
    "ControlServerError",
    "ProtocolError",
    "format_request",
    "parse_request",
    "resolve_socket_path",
    "send_command",
]

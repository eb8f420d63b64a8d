"""Line protocol spoken over the control socket.

A client sends one command per ``\\n``-terminated line.  Each command gets
a response whose first line is a status line, ``OK [detail]`` or
``ERROR <message>``, optionally followed by data lines.  When a batch of
responses is written the server half-closes the write side of the
connection, so a client simply reads until EOF.

Commands::

    list-tabs
    focus-tab <index>
    close-tab [--force] <index>
    new-tab -- <command> [args...]
    show-launcher
    background <index>
    foreground <index>

Classes
-------
- Command          — enum of command words
- ControlRequest   — a parsed command line
- ControlResponse  — status plus data lines
- ProtocolError    — malformed command or response

Functions
---------
- parse_request    — command line -> ControlRequest
- format_request   — ControlRequest -> command line
"""
from __future__ import annotations

import shlex
from dataclasses import dataclass
from enum import Enum

BUFFER_SIZE = 4096

MISSING_TAB_INDEX = "Missing tab index"
INVALID_TAB_INDEX = "Invalid tab index"
TAB_INDEX_OUT_OF_RANGE = "Tab index out of range"
MISSING_COMMAND = "Missing command"
INVALID_COMMAND_LINE = "Invalid command line"
UNKNOWN_COMMAND = "Unknown command"

FORCE_FLAG = "--force"
ARGV_SEPARATOR = "--"


class ProtocolError(ValueError):
    """Raised for a command or response line that cannot be understood.

    ``message`` is the text sent back after ``ERROR``.
    """

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class Command(str, Enum):
    """Command words of the control protocol."""

    LIST_TABS = "list-tabs"
    FOCUS_TAB = "focus-tab"
    CLOSE_TAB = "close-tab"
    NEW_TAB = "new-tab"
    SHOW_LAUNCHER = "show-launcher"
    BACKGROUND = "background"
    FOREGROUND = "foreground"

    @property
    def takes_index(self) -> bool:
        return self in _INDEX_COMMANDS


_INDEX_COMMANDS = frozenset(
    {Command.FOCUS_TAB, Command.CLOSE_TAB, Command.BACKGROUND, Command.FOREGROUND}
)


@dataclass(frozen=True)
class ControlRequest:
    """A parsed command line.

    Attributes
    ----------
    command:
        The command word.
    index:
        Tab index for commands that take one.
    argv:
        Program and arguments for ``new-tab``.
    force:
        ``close-tab --force``.
    """

    command: Command
    index: int | None = None
    argv: tuple[str, ...] = ()
    force: bool = False


def _parse_index(text: str) -> int:
    text = text.strip()
    if not text:
        raise ProtocolError(MISSING_TAB_INDEX)
    if not (text.isascii() and text.isdigit()):
        raise ProtocolError(INVALID_TAB_INDEX)
    return int(text)


def parse_request(line: str) -> ControlRequest:
    """Parse one command line (without its trailing newline).

    Raises
    ------
    ProtocolError
        With the exact message to report back to the client.
    """
    line = line.rstrip("\r")
    word, _, rest = line.partition(" ")
    try:
        command = Command(word)
    except ValueError:
        raise ProtocolError(UNKNOWN_COMMAND) from None

    if command in (Command.LIST_TABS, Command.SHOW_LAUNCHER):
        if rest.strip():
            raise ProtocolError(UNKNOWN_COMMAND)
        return ControlRequest(command)

    if command is Command.NEW_TAB:
        return ControlRequest(command, argv=_parse_new_tab(rest))

    force = False
    if command is Command.CLOSE_TAB:
        flag, _, remainder = rest.strip().partition(" ")
        if flag == FORCE_FLAG:
            force = True
            rest = remainder
    return ControlRequest(command, index=_parse_index(rest), force=force)


def _parse_new_tab(rest: str) -> tuple[str, ...]:
    rest = rest.strip()
    if not rest:
        raise ProtocolError(MISSING_COMMAND)
    separator, _, command_line = rest.partition(" ")
    if separator != ARGV_SEPARATOR:
        raise ProtocolError(UNKNOWN_COMMAND)
    try:
        argv = shlex.split(command_line)
    except ValueError:
        raise ProtocolError(INVALID_COMMAND_LINE) from None
    if not argv:
        raise ProtocolError(MISSING_COMMAND)
    return tuple(argv)


def format_request(request: ControlRequest) -> str:
    """Render ``request`` as a command line without the newline."""
    parts = [request.command.value]
    if request.command is Command.NEW_TAB:
        parts.append(ARGV_SEPARATOR)
        parts.append(shlex.join(request.argv))
    elif request.command.takes_index:
        if request.force:
            parts.append(FORCE_FLAG)
        parts.append(str(request.index))
    return " ".join(parts)


@dataclass(frozen=True)
class ControlResponse:
    """One response: a status line plus data lines."""

    ok: bool
    message: str = ""
    lines: tuple[str, ...] = ()

    @classmethod
    def success(cls, message: str = "", lines: tuple[str, ...] = ()) -> ControlResponse:
        return cls(ok=True, message=message, lines=lines)

    @classmethod
    def error(cls, message: str) -> ControlResponse:
        return cls(ok=False, message=message)

    @property
    def status_line(self) -> str:
        word = "OK" if self.ok else "ERROR"
        return f"{word} {self.message}" if self.message else word

    def encode(self) -> str:
        """Wire text, every line ``\\n``-terminated."""
        return "".join(f"{line}\n" for line in (self.status_line, *self.lines))

    @classmethod
    def parse(cls, text: str) -> ControlResponse:
        """Parse the full text a client read before EOF.

        Raises
        ------
        ProtocolError
            If the text is empty or the status word is not OK/ERROR.
        """
        if not text.strip():
            raise ProtocolError("Empty response")
        status, *lines = text.splitlines()
        word, _, message = status.partition(" ")
        if word not in ("OK", "ERROR"):
            raise ProtocolError(f"Malformed status line: {status!r}")
        return cls(ok=word == "OK", message=message, lines=tuple(lines))

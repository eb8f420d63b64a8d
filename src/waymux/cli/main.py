"""CLI entry points for waymux.

Invoked as::

    waymux [OPTIONS] [PROFILE] [-- APPLICATION...]
    waymuxctl [OPTIONS] COMMAND [ARGS]...

``waymux`` runs one instance.  Without a display backend it drives the
headless host, which keeps the control socket, registry record and
profile tabs fully functional.

waymuxctl commands
------------------
- list-tabs            — List all tabs of the instance
- focus-tab NUM        — Switch to tab NUM
- close-tab [--force] NUM
- new-tab -- CMD...    — Open a new tab running CMD
- show-launcher        — Open the application launcher
- background NUM       — Move tab NUM to the background
- foreground NUM       — Bring tab NUM back to the foreground
- instances            — List registered instances
- profiles             — List profiles and whether they are in use
- version              — Show version information
"""
from __future__ import annotations

import asyncio
import logging
import os
import sys
from typing import NoReturn

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from waymux import __version__

console = Console()
err_console = Console(stderr=True)

_APPLICATION_KEY = "waymux.application"

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _configure_logging(debug: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


class _ApplicationCommand(click.Command):
    """Command that treats everything after ``--`` as the application argv."""

    def parse_args(self, ctx: click.Context, args: list[str]) -> list[str]:
        if "--" in args:
            separator = args.index("--")
            ctx.meta[_APPLICATION_KEY] = args[separator + 1 :]
            args = args[:separator]
        return super().parse_args(ctx, args)


def _fail(message: str) -> NoReturn:
    err_console.print(f"[red]{escape(message)}[/red]", highlight=False)
    sys.exit(1)


# ---------------------------------------------------------------------------
# waymux
# ---------------------------------------------------------------------------


@click.command(cls=_ApplicationCommand)
@click.version_option(__version__, "-v", "--version", prog_name="waymux")
@click.option("-c", "--config", "config_path", default=None, help="Path to config file.")
@click.option("-D", "--debug", is_flag=True, help="Enable debug logging.")
@click.option(
    "-i",
    "--instance",
    default="default",
    show_default=True,
    help="Instance name (control socket and registry key).",
)
@click.argument("profile", required=False)
@click.pass_context
def waymux_cli(
    ctx: click.Context,
    config_path: str | None,
    debug: bool,
    instance: str,
    profile: str | None,
) -> None:
    """Run a waymux instance, optionally with PROFILE and a primary APPLICATION.

    Use -- before APPLICATION when it takes arguments.
    """
    from waymux.config import ConfigError, RuntimeDirError, load_config
    from waymux.control.server import ControlServerError
    from waymux.host.headless import HeadlessHost
    from waymux.profile.loader import ProfileError, ProfileLockedError
    from waymux.session.manager import InstanceManager

    _configure_logging(debug)
    application: list[str] = ctx.meta.get(_APPLICATION_KEY, [])

    try:
        config = load_config(config_path)
    except ConfigError as exc:
        _fail(f"Failed to load config: {exc}")

    manager = InstanceManager(
        HeadlessHost(),
        instance_name=instance,
        config=config,
        display_socket=os.environ.get("WAYLAND_DISPLAY"),
    )
    if profile is not None:
        logging.getLogger(__name__).info("Loading profile: %s", profile)

    try:
        exit_code = asyncio.run(manager.serve(profile, application or None))
    except (RuntimeDirError, ProfileLockedError, ProfileError, ControlServerError) as exc:
        _fail(str(exc))
    except OSError as exc:
        _fail(f"Failed to spawn primary client: {exc}")

    sys.exit(exit_code)


# ---------------------------------------------------------------------------
# waymuxctl root group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(__version__, prog_name="waymuxctl")
@click.option(
    "-i",
    "--instance",
    default=None,
    envvar="WAYMUX_INSTANCE",
    help="Instance to control (default: $WAYMUX_INSTANCE, then 'default', then any).",
)
@click.pass_context
def ctl_cli(ctx: click.Context, instance: str | None) -> None:
    """Control a running waymux instance."""
    ctx.ensure_object(dict)
    ctx.obj["instance"] = instance


def _forward(ctx: click.Context, line: str) -> None:
    """Send ``line`` to the instance, print data lines, exit 1 on ERROR."""
    from waymux.config import RuntimeDirError
    from waymux.control.client import ControlClientError, resolve_socket_path, send_command
    from waymux.control.protocol import ProtocolError

    try:
        socket_path = resolve_socket_path(ctx.obj["instance"])
        response = send_command(line, socket_path)
    except (ControlClientError, RuntimeDirError, ProtocolError) as exc:
        _fail(f"ERROR: {exc}")

    if not response.ok:
        _fail(response.status_line)
    for data_line in response.lines:
        click.echo(data_line)


# ---------------------------------------------------------------------------
# Tab commands
# ---------------------------------------------------------------------------


@ctl_cli.command(name="list-tabs")
@click.pass_context
def list_tabs_command(ctx: click.Context) -> None:
    """List all tabs."""
    _forward(ctx, "list-tabs")


@ctl_cli.command(name="focus-tab")
@click.argument("index")
@click.pass_context
def focus_tab_command(ctx: click.Context, index: str) -> None:
    """Switch to tab INDEX."""
    _forward(ctx, f"focus-tab {index}")


@ctl_cli.command(name="close-tab")
@click.option("--force", is_flag=True, help="Close without asking the application.")
@click.argument("index")
@click.pass_context
def close_tab_command(ctx: click.Context, force: bool, index: str) -> None:
    """Close tab INDEX."""
    _forward(ctx, f"close-tab --force {index}" if force else f"close-tab {index}")


@ctl_cli.command(name="new-tab")
@click.argument("command", nargs=-1, required=True)
@click.pass_context
def new_tab_command(ctx: click.Context, command: tuple[str, ...]) -> None:
    """Open a new tab running COMMAND (use -- before it)."""
    from waymux.control.protocol import Command, ControlRequest, format_request

    _forward(ctx, format_request(ControlRequest(Command.NEW_TAB, argv=command)))


@ctl_cli.command(name="show-launcher")
@click.pass_context
def show_launcher_command(ctx: click.Context) -> None:
    """Open the application launcher."""
    _forward(ctx, "show-launcher")


@ctl_cli.command(name="background")
@click.argument("index")
@click.pass_context
def background_command(ctx: click.Context, index: str) -> None:
    """Move tab INDEX to the background."""
    _forward(ctx, f"background {index}")


@ctl_cli.command(name="foreground")
@click.argument("index")
@click.pass_context
def foreground_command(ctx: click.Context, index: str) -> None:
    """Bring tab INDEX back to the foreground."""
    _forward(ctx, f"foreground {index}")


# ---------------------------------------------------------------------------
# Registry and profile listings
# ---------------------------------------------------------------------------


@ctl_cli.command(name="instances")
def instances_command() -> None:
    """List registered waymux instances."""
    from waymux.config import RuntimeDirError
    from waymux.registry import FilesystemRegistry

    try:
        records = FilesystemRegistry().list_records()
    except RuntimeDirError as exc:
        _fail(str(exc))

    if not records:
        console.print("[yellow]No running instances.[/yellow]")
        return

    table = Table(title="waymux instances")
    table.add_column("Instance", style="bold cyan")
    table.add_column("PID", justify="right")
    table.add_column("Profile")
    table.add_column("Status")
    for record in records:
        status = "[green]running[/green]" if record.is_alive() else "[red]stale[/red]"
        table.add_row(record.name, str(record.pid), record.profile or "-", status)
    console.print(table)


@ctl_cli.command(name="profiles")
def profiles_command() -> None:
    """List profiles and whether a running instance uses them."""
    from waymux.config import RuntimeDirError
    from waymux.profile.loader import list_profiles
    from waymux.registry import FilesystemRegistry

    names = list_profiles()
    if not names:
        console.print("[yellow]No profiles found.[/yellow]")
        return

    try:
        registry: FilesystemRegistry | None = FilesystemRegistry()
    except RuntimeDirError:
        registry = None

    table = Table(title="waymux profiles")
    table.add_column("Profile", style="bold cyan")
    table.add_column("Status")
    for name in names:
        locked = registry is not None and registry.is_profile_locked(name)
        table.add_row(name, "[red]in use[/red]" if locked else "[green]available[/green]")
    console.print(table)


@ctl_cli.command(name="version")
def version_command() -> None:
    """Show detailed version information."""
    console.print(f"[bold]waymux[/bold] v{__version__}")
    console.print(f"Python {sys.version.split()[0]}")


if __name__ == "__main__":
    ctl_cli()

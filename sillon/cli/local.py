from __future__ import annotations

from dataclasses import dataclass

import typer
from rich.panel import Panel

from sillon.config import settings
from sillon.connections import ConfigManager
from sillon.local import FileStateStore, LaunchConfig, LifecycleController, RuntimeDetector

from ._common import handle_errors
from ._output import print_json
from .console import console

local_app = typer.Typer(help="Manage a local CouchDB instance.", no_args_is_help=True)


@dataclass
class LocalOptions:
    config: LaunchConfig
    instance: str
    runtime: str | None
    timeout: int
    cleanup_on_timeout: bool


def build_controller(options: LocalOptions) -> LifecycleController:
    return LifecycleController(
        options.config,
        FileStateStore.for_instance(settings.instances_dir, options.instance),
        detector=RuntimeDetector(forced=options.runtime),
        health_timeout=options.timeout,
        cleanup_on_timeout=options.cleanup_on_timeout,
    )


@local_app.callback()
def local_callback(
    ctx: typer.Context,
    version: str = typer.Option(settings.COUCHDB_VERSION, "--version", "-v", help="CouchDB version"),
    port: int = typer.Option(settings.COUCHDB_PORT, "--port", "-p", help="Port to bind"),
    admin: str = typer.Option(settings.COUCHDB_ADMIN_USER, "--admin", help="Admin username"),
    password: str = typer.Option(settings.COUCHDB_ADMIN_PASSWORD, "--password", help="Admin password"),
    instance: str = typer.Option(settings.SILLON_INSTANCE, "--instance", help="Name of the managed instance"),
    runtime: str | None = typer.Option(
        settings.SILLON_RUNTIME,
        "--runtime",
        help="Force a runtime: container-daemonless, container-daemon, source-package-manager or raw-binary",
    ),
    timeout: int = typer.Option(
        settings.HEALTH_TIMEOUT_SECONDS, "--timeout", help="Seconds to wait for CouchDB to become ready"
    ),
    cleanup_on_timeout: bool = typer.Option(
        False, "--cleanup-on-timeout", help="Stop the instance again if it never becomes ready"
    ),
) -> None:
    """Options shared by the local subcommands."""
    ctx.obj = LocalOptions(
        config=LaunchConfig(
            version=version,
            port=port,
            admin_user=admin,
            admin_pass=password,
            data_dir=settings.couchdb_data_dir(version),
        ),
        instance=instance,
        runtime=runtime,
        timeout=timeout,
        cleanup_on_timeout=cleanup_on_timeout,
    )


@local_app.command(name="up")
def up(
    ctx: typer.Context,
    connect: bool = typer.Option(True, "--connect/--no-connect", help="Save as the default connection"),
) -> None:
    """Start local CouchDB."""
    options: LocalOptions = ctx.obj
    console.print("[cyan]Starting local CouchDB...[/cyan]")

    with handle_errors("Failed to start"):
        url = build_controller(options).start()

    console.print(f"[green]✓ CouchDB {options.config.version} running[/green]")
    console.print(f"[dim]  URL:   {url}[/dim]", highlight=False)
    console.print(f"[dim]  Admin: {options.config.admin_user} / {options.config.admin_pass}[/dim]", highlight=False)

    if connect:
        ConfigManager().set_default_connection(url)
        console.print("[dim]  Saved as default connection[/dim]")


@local_app.command(name="down")
def down(ctx: typer.Context) -> None:
    """Stop local CouchDB."""
    console.print("[cyan]Stopping local CouchDB...[/cyan]")
    with handle_errors("Failed to stop"):
        build_controller(ctx.obj).stop()
    console.print("[green]✓ CouchDB stopped[/green]")


@local_app.command(name="status")
def status(
    ctx: typer.Context,
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Check local CouchDB status."""
    with handle_errors("Failed to read status"):
        current = build_controller(ctx.obj).status()

    if json_output:
        print_json(current.to_dict())
        return

    if current.running:
        console.print(
            Panel(
                f"URL:     {current.url}\n"
                f"Handle:  {current.handle}\n"
                f"Version: {current.version}\n"
                f"Runtime: {current.runtime_kind}",
                title="[green]✓ CouchDB is running[/green]",
                border_style="green",
                expand=False,
            )
        )
    else:
        console.print("[yellow]○ CouchDB is not running[/yellow]")
        console.print("[dim]  Run: sillon local up[/dim]")

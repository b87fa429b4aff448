from __future__ import annotations

import typer

from sillon.connections import ConfigManager

from ._common import get_client, handle_errors, resolve_db
from ._output import format_bytes, print_json
from .console import console

db_app = typer.Typer(help="Database operations.", no_args_is_help=True)


@db_app.command(name="list")
def list_databases(json_output: bool = typer.Option(False, "--json", help="Output as JSON")) -> None:
    """List all databases."""
    with handle_errors(), get_client() as client:
        dbs = client.list_databases()

    if json_output:
        print_json(dbs)
        return

    console.print("[cyan]Databases:[/cyan]")
    for db in dbs:
        console.print(f"  [blue]▸[/blue] {db}")
    console.print(f"[dim]\nTotal: {len(dbs)} databases[/dim]")


@db_app.command(name="create")
def create_database(
    name: str = typer.Argument(..., help="Database name"),
    partitioned: bool = typer.Option(False, "--partitioned", help="Create as partitioned database"),
) -> None:
    """Create a new database."""
    with handle_errors(), get_client() as client:
        client.create_database(name, partitioned=partitioned)
    console.print(f'[green]✓ Created database "{name}"[/green]')
    if partitioned:
        console.print("[dim]  (partitioned)[/dim]")


@db_app.command(name="delete")
def delete_database(
    name: str = typer.Argument(..., help="Database name"),
    force: bool = typer.Option(False, "--force", "-f", help="Skip confirmation"),
) -> None:
    """Delete a database."""
    if not force and not typer.confirm(f'This will permanently delete "{name}". Continue?'):
        console.print("[yellow]Aborted.[/yellow]")
        raise typer.Exit(1)

    with handle_errors(), get_client() as client:
        client.delete_database(name)
    console.print(f'[green]✓ Deleted database "{name}"[/green]')


@db_app.command(name="info")
def database_info(
    name: str | None = typer.Argument(None, help="Database name (falls back to current db)"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Show database information."""
    with handle_errors():
        db = resolve_db(name)
        with get_client() as client:
            info = client.database_info(db)

    if json_output:
        print_json(info)
        return

    console.print(f"[cyan]Database: {db}[/cyan]")
    console.print(f"  [dim]Documents:[/dim] {info.get('doc_count')}")
    console.print(f"  [dim]Deleted:[/dim] {info.get('doc_del_count')}")
    console.print(f"  [dim]Size:[/dim] {format_bytes((info.get('sizes') or {}).get('active', 0))}")
    console.print(f"  [dim]Update sequence:[/dim] {info.get('update_seq')}")
    if (info.get("props") or {}).get("partitioned"):
        console.print("  [dim]Type:[/dim] partitioned")


@db_app.command(name="use")
def use_database(name: str = typer.Argument(..., help="Database to use by default")) -> None:
    """Set the current database used when a command omits one."""
    ConfigManager().set_current_db(name)
    console.print(f'[green]✓ Using database "{name}"[/green]')


@db_app.command(name="compact")
def compact_database(
    name: str | None = typer.Argument(None, help="Database name (falls back to current db)"),
    ddoc: str | None = typer.Option(None, "--ddoc", help="Compact this design document's views instead"),
    cleanup: bool = typer.Option(False, "--cleanup", help="Also remove unreferenced view index files"),
) -> None:
    """Trigger compaction for a database or one of its view indexes."""
    with handle_errors():
        db = resolve_db(name)
        with get_client() as client:
            if ddoc:
                client.compact_view(db, ddoc.removeprefix("_design/"))
            else:
                client.compact(db)
            if cleanup:
                client.view_cleanup(db)
    target = f"views of _design/{ddoc.removeprefix('_design/')}" if ddoc else f'"{db}"'
    console.print(f"[green]✓ Compaction started for {target}[/green]")

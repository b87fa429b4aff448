from __future__ import annotations

import json
from typing import Any

import typer
from rich.table import Table

from sillon.exceptions import SillonException

from ._common import get_client, handle_errors, parse_json, resolve_db
from ._output import print_json
from .console import console

view_app = typer.Typer(help="Design document views.", no_args_is_help=True)


def split_view_name(name: str) -> tuple[str, str]:
    """Split ``ddoc/view`` (or ``_design/ddoc/view``) into its two parts."""
    parts = name.removeprefix("_design/").split("/")
    if len(parts) != 2 or not all(parts):
        raise SillonException(f'"{name}" is not of the form <ddoc>/<view>')
    return parts[0], parts[1]


def render_rows(result: dict[str, Any], title: str) -> None:
    rows = result.get("rows", [])
    table = Table(title=title)
    table.add_column("ID", style="dim")
    table.add_column("Key")
    table.add_column("Value")
    for row in rows:
        table.add_row(str(row.get("id", "")), repr_json(row.get("key")), repr_json(row.get("value")))
    console.print(table)
    total = result.get("total_rows")
    console.print(f"[dim]{len(rows)} rows" + (f" of {total}" if total is not None else "") + "[/dim]")


def repr_json(value: Any) -> str:
    return json.dumps(value)


@view_app.command(name="list")
def list_views(
    db: str | None = typer.Argument(None, help="Database name (falls back to current db)"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """List the views defined by each design document."""
    with handle_errors():
        name = resolve_db(db)
        with get_client() as client:
            result = client.design_docs(name, include_docs=True)

    views = {
        row["id"].removeprefix("_design/"): sorted((row.get("doc") or {}).get("views", {}))
        for row in result.get("rows", [])
    }
    if json_output:
        print_json(views)
        return

    if not views:
        console.print(f'[dim]No design documents in "{name}"[/dim]')
        return
    for ddoc, names in views.items():
        console.print(f"[cyan]_design/{ddoc}[/cyan]")
        for view in names:
            console.print(f"  [blue]▸[/blue] {ddoc}/{view}")


@view_app.command(name="get")
def get_design_doc(
    ddoc: str = typer.Argument(..., help="Design document name"),
    db: str | None = typer.Argument(None, help="Database name (falls back to current db)"),
) -> None:
    """Show a design document."""
    with handle_errors():
        name = resolve_db(db)
        with get_client() as client:
            doc = client.get_document(name, f"_design/{ddoc.removeprefix('_design/')}")
    print_json(doc)


@view_app.command(name="query")
def query_view(
    view: str = typer.Argument(..., help="View as <ddoc>/<view>"),
    db: str | None = typer.Argument(None, help="Database name (falls back to current db)"),
    key: str | None = typer.Option(None, "--key", help="Exact key (JSON)"),
    startkey: str | None = typer.Option(None, "--startkey", help="Start key (JSON)"),
    endkey: str | None = typer.Option(None, "--endkey", help="End key (JSON)"),
    limit: int | None = typer.Option(None, "--limit", help="Max number of rows"),
    skip: int | None = typer.Option(None, "--skip", help="Rows to skip"),
    descending: bool = typer.Option(False, "--descending", help="Reverse order"),
    include_docs: bool = typer.Option(False, "--include-docs", help="Include documents"),
    reduce: bool = typer.Option(True, "--reduce/--no-reduce", help="Use the reduce function"),
    group: bool = typer.Option(False, "--group", help="Group reduce results by key"),
    group_level: int | None = typer.Option(None, "--group-level", help="Group by key prefix of this length"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Query a view."""
    with handle_errors():
        ddoc, view_name = split_view_name(view)
        name = resolve_db(db)
        with get_client() as client:
            result = client.query_view(
                name,
                ddoc,
                view_name,
                key=parse_json(key, "--key"),
                startkey=parse_json(startkey, "--startkey"),
                endkey=parse_json(endkey, "--endkey"),
                limit=limit,
                skip=skip,
                descending=descending,
                include_docs=include_docs,
                reduce=None if reduce else False,
                group=group,
                group_level=group_level,
            )

    if json_output:
        print_json(result)
        return
    render_rows(result, f"{ddoc}/{view_name}")

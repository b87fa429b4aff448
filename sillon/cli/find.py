from __future__ import annotations

import json
from typing import Any

import typer
from rich.markup import escape
from rich.table import Table

from sillon.exceptions import SillonException

from ._common import get_client, handle_errors, parse_json, read_stdin_json, resolve_db, split_csv
from ._output import print_json
from .console import console

index_app = typer.Typer(help="Manage Mango indexes.", no_args_is_help=True)


def build_mango_query(
    parsed: Any,
    *,
    limit: int | None = None,
    skip: int | None = None,
    fields: str | None = None,
    sort: str | None = None,
    index: str | None = None,
    bookmark: str | None = None,
    stats: bool = False,
) -> dict[str, Any]:
    """Accept a full query or a bare selector; command line options take precedence."""
    if not isinstance(parsed, dict):
        raise SillonException("JSON must be an object with a 'selector' key or a bare selector object")
    query = dict(parsed) if "selector" in parsed else {"selector": parsed}

    if limit is not None:
        query["limit"] = limit
    if skip is not None:
        query["skip"] = skip
    if bookmark:
        query["bookmark"] = bookmark
    if stats:
        query["execution_stats"] = True
    if fields:
        query["fields"] = split_csv(fields)
    if sort:
        query["sort"] = parse_json(sort, "--sort")
    if index:
        query["use_index"] = index
    return query


def preview_doc(doc: dict[str, Any]) -> str:
    keys = [k for k in doc if not k.startswith("_")]
    preview = ", ".join(f"{k}: {json.dumps(doc[k])[:24]}" for k in keys[:4])
    return "{ " + preview + (", …" if len(keys) > 4 else "") + " }"


def render_find_result(result: dict[str, Any], title: str) -> None:
    docs = result.get("docs", [])
    console.print(f'[cyan]🔎 "{title}"[/cyan][dim] ({len(docs)} result(s))[/dim]')
    if result.get("warning"):
        console.print(f"[yellow]  ⚠  {result['warning']}[/yellow]")

    if not docs:
        console.print("[dim]  (no results)[/dim]")
    for doc in docs:
        rev = f" [dim]rev: {str(doc['_rev'])[:10]}…[/dim]" if doc.get("_rev") else ""
        console.print(f"  [blue]▸[/blue] {doc.get('_id')}{rev}", highlight=False)
        if any(not k.startswith("_") for k in doc):
            console.print(f"    [dim]{escape(preview_doc(doc))}[/dim]", highlight=False)

    if result.get("bookmark"):
        console.print(f"[dim]\n  Next page: --bookmark {result['bookmark']}[/dim]")
    stats = result.get("execution_stats")
    if stats:
        console.print(
            f"[dim]\n  Stats: {stats.get('results_returned')} returned, "
            f"{stats.get('total_docs_examined')} docs examined, "
            f"{stats.get('execution_time_ms', 0):.2f}ms[/dim]"
        )


def find(
    db: str | None = typer.Argument(None, help="Database name (falls back to current db)"),
    limit: int | None = typer.Option(None, "--limit", help="Max number of results"),
    skip: int | None = typer.Option(None, "--skip", help="Documents to skip"),
    fields: str | None = typer.Option(None, "--fields", help="Comma-separated list of fields to return"),
    sort: str | None = typer.Option(None, "--sort", help='Sort order as JSON array, e.g. \'["name"]\''),
    index: str | None = typer.Option(None, "--index", help="Use a specific index (name or ddoc/name)"),
    bookmark: str | None = typer.Option(None, "--bookmark", help="Pagination bookmark from a previous response"),
    stats: bool = typer.Option(False, "--stats", help="Include execution statistics"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Query documents using a Mango selector (reads JSON from stdin)."""
    with handle_errors():
        name = resolve_db(db)
        query = build_mango_query(
            read_stdin_json("a Mango query"),
            limit=limit,
            skip=skip,
            fields=fields,
            sort=sort,
            index=index,
            bookmark=bookmark,
            stats=stats,
        )
        with get_client() as client:
            result = client.mango_query(name, query)

    if json_output:
        print_json(result)
        return
    render_find_result(result, name)


@index_app.command(name="list")
def list_indexes(
    db: str | None = typer.Argument(None, help="Database name (falls back to current db)"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """List Mango indexes."""
    with handle_errors():
        name = resolve_db(db)
        with get_client() as client:
            result = client.list_indexes(name)

    indexes = result.get("indexes", [])
    if json_output:
        print_json(indexes)
        return

    table = Table(title=f'Indexes in "{name}"')
    table.add_column("Name", style="bold")
    table.add_column("Design doc")
    table.add_column("Type")
    table.add_column("Fields")
    for idx in indexes:
        fields = ", ".join(
            f if isinstance(f, str) else " ".join(f"{k} {v}" for k, v in f.items())
            for f in (idx.get("def") or {}).get("fields", [])
        )
        table.add_row(idx.get("name", ""), idx.get("ddoc") or "", idx.get("type", ""), fields)
    console.print(table)


@index_app.command(name="create")
def create_index(
    db: str | None = typer.Argument(None, help="Database name (falls back to current db)"),
    json_output: bool = typer.Option(False, "--json", help="Output response as JSON"),
) -> None:
    """Create a Mango index (reads JSON from stdin)."""
    with handle_errors():
        name = resolve_db(db)
        definition = read_stdin_json("an index definition")
        if not isinstance(definition, dict):
            raise SillonException("JSON must be an object")
        if "index" in definition:
            payload = definition
        elif "fields" in definition:
            payload = {"index": definition}
        else:
            raise SillonException(
                "JSON must have an 'index' key with 'fields', e.g.:\n"
                '  { "index": { "fields": ["name"] }, "name": "by_name" }'
            )
        with get_client() as client:
            result = client.create_index(name, payload)

    if json_output:
        print_json(result)
        return
    status = "[green]✓ Created[/green]" if result.get("result") == "created" else "[yellow]● Exists[/yellow]"
    console.print(f'{status} index "{result.get("name")}"')
    console.print(f"[dim]  ddoc:[/dim] {result.get('id')}", highlight=False)


@index_app.command(name="delete")
def delete_index(
    ddoc: str = typer.Argument(..., help="Design document holding the index"),
    index_name: str = typer.Argument(..., help="Index name"),
    db: str | None = typer.Argument(None, help="Database name (falls back to current db)"),
) -> None:
    """Delete a Mango index."""
    ddoc_id = ddoc if ddoc.startswith("_design/") else f"_design/{ddoc}"
    with handle_errors():
        name = resolve_db(db)
        with get_client() as client:
            client.delete_index(name, ddoc_id, index_name)
    console.print(f'[green]✓ Deleted index "{index_name}" from {ddoc_id}[/green]')

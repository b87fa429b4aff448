from __future__ import annotations

import typer
from rich.markup import escape

from ._common import get_client, handle_errors, parse_json, read_stdin_json, resolve_db
from ._output import format_bytes, print_json
from .console import console
from .find import build_mango_query, preview_doc, render_find_result
from .view import render_rows

partition_app = typer.Typer(help="Partitioned database operations.", no_args_is_help=True)


@partition_app.command(name="info")
def info(
    partition: str = typer.Argument(..., help="Partition key"),
    db: str | None = typer.Argument(None, help="Database name (falls back to current db)"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Show information about a partition."""
    with handle_errors():
        name = resolve_db(db)
        with get_client() as client:
            data = client.partition_info(name, partition)

    if json_output:
        print_json(data)
        return

    sizes = data.get("sizes") or {}
    console.print(f'[cyan]🗂️  Partition: [bold]{partition}[/bold] in "{name}"[/cyan]')
    console.print(f"  [dim]Documents:[/dim]      {data.get('doc_count')}")
    console.print(f"  [dim]Deleted:[/dim]        {data.get('doc_del_count')}")
    console.print(f"  [dim]Size (active):[/dim]  {format_bytes(sizes.get('active', 0))}")
    console.print(f"  [dim]Size (ext):[/dim]     {format_bytes(sizes.get('external', 0))}")


@partition_app.command(name="list")
def list_documents(
    partition: str = typer.Argument(..., help="Partition key"),
    db: str | None = typer.Argument(None, help="Database name (falls back to current db)"),
    limit: int | None = typer.Option(None, "--limit", help="Max number of results"),
    skip: int | None = typer.Option(None, "--skip", help="Documents to skip"),
    descending: bool = typer.Option(False, "--descending", help="Reverse order"),
    include_docs: bool = typer.Option(False, "--include-docs", help="Include full document bodies"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """List documents in a partition."""
    with handle_errors():
        name = resolve_db(db)
        with get_client() as client:
            result = client.partition_docs(
                name, partition, limit=limit, skip=skip, descending=descending, include_docs=include_docs
            )

    if json_output:
        print_json(result)
        return

    all_rows = result.get("rows", [])
    total = result.get("total_rows", len(all_rows))
    rows = [row for row in all_rows if not (row.get("value") or {}).get("deleted")]
    console.print(f'[cyan]📄 "{name}:{partition}"[/cyan][dim] ({total} total)[/dim]')
    if not rows:
        console.print("[dim]  (no documents)[/dim]")
        return

    for row in rows:
        rev = (row.get("value") or {}).get("rev", "")
        console.print(f"  [blue]▸[/blue] {row['id']}  [dim]rev: {rev[:10]}…[/dim]", highlight=False)
        doc = row.get("doc")
        if include_docs and doc and any(not k.startswith("_") for k in doc):
            console.print(f"    [dim]{escape(preview_doc(doc))}[/dim]", highlight=False)

    if len(all_rows) < total:
        console.print(f"[dim]\n  Showing {len(all_rows)} of {total}. Use --limit / --skip to paginate.[/dim]")


@partition_app.command(name="find")
def find(
    partition: str = typer.Argument(..., help="Partition key"),
    db: str | None = typer.Argument(None, help="Database name (falls back to current db)"),
    limit: int | None = typer.Option(None, "--limit", help="Max number of results"),
    skip: int | None = typer.Option(None, "--skip", help="Documents to skip"),
    fields: str | None = typer.Option(None, "--fields", help="Comma-separated list of fields to return"),
    sort: str | None = typer.Option(None, "--sort", help="Sort order as JSON array"),
    bookmark: str | None = typer.Option(None, "--bookmark", help="Pagination bookmark"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Query a partition using a Mango selector (reads JSON from stdin)."""
    with handle_errors():
        name = resolve_db(db)
        query = build_mango_query(
            read_stdin_json("a Mango query"), limit=limit, skip=skip, fields=fields, sort=sort, bookmark=bookmark
        )
        with get_client() as client:
            result = client.partition_find(name, partition, query)

    if json_output:
        print_json(result)
        return
    render_find_result(result, f"{name}:{partition}")


@partition_app.command(name="view")
def view(
    ddoc: str = typer.Argument(..., help="Design document name"),
    view_name: str = typer.Argument(..., help="View name"),
    partition: str = typer.Argument(..., help="Partition key"),
    db: str | None = typer.Argument(None, help="Database name (falls back to current db)"),
    key: str | None = typer.Option(None, "--key", help="Exact key (JSON)"),
    startkey: str | None = typer.Option(None, "--startkey", help="Start of key range (JSON)"),
    endkey: str | None = typer.Option(None, "--endkey", help="End of key range (JSON)"),
    limit: int | None = typer.Option(None, "--limit", help="Max rows"),
    skip: int | None = typer.Option(None, "--skip", help="Rows to skip"),
    descending: bool = typer.Option(False, "--descending", help="Reverse key order"),
    include_docs: bool = typer.Option(False, "--include-docs", help="Include full document bodies"),
    reduce: bool = typer.Option(True, "--reduce/--no-reduce", help="Use the reduce function"),
    group: bool = typer.Option(False, "--group", help="Group by key"),
    group_level: int | None = typer.Option(None, "--group-level", help="Group level depth"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Query a view within a single partition."""
    ddoc_name = ddoc.removeprefix("_design/")
    with handle_errors():
        name = resolve_db(db)
        with get_client() as client:
            result = client.query_partition_view(
                name,
                partition,
                ddoc_name,
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
    render_rows(result, f"{name}:{partition} {ddoc_name}/{view_name}")

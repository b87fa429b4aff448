from __future__ import annotations

import json

import typer
from rich.markup import escape

from ._common import get_client, handle_errors, parse_json, resolve_db, split_csv
from ._output import print_json
from .console import console

search_app = typer.Typer(help="Full-text search using Nouveau.", no_args_is_help=True)

NOUVEAU_HINT = "Nouveau search needs a CouchDB server with Nouveau enabled and configured."


@search_app.command(name="query")
def query(
    ddoc: str = typer.Argument(..., help="Design document holding the index"),
    index: str = typer.Argument(..., help="Nouveau index name"),
    search: str = typer.Argument(..., help="Lucene query string"),
    db: str | None = typer.Argument(None, help="Database name (falls back to current db)"),
    limit: int | None = typer.Option(None, "--limit", help="Max number of results (server default 25)"),
    bookmark: str | None = typer.Option(None, "--bookmark", help="Pagination bookmark from previous response"),
    include_docs: bool = typer.Option(False, "--include-docs", help="Include full document bodies"),
    fields: str | None = typer.Option(None, "--fields", help="Comma-separated fields to return from the index"),
    sort: str | None = typer.Option(None, "--sort", help="Sort order as JSON (e.g. '[\"-score\"]')"),
    counts: str | None = typer.Option(None, "--counts", help="Comma-separated facet count fields"),
    highlight_fields: str | None = typer.Option(None, "--highlight-fields", help="Comma-separated fields to highlight"),
    highlight_pre: str | None = typer.Option(None, "--highlight-pre", help="Tag opening a highlight"),
    highlight_post: str | None = typer.Option(None, "--highlight-post", help="Tag closing a highlight"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Run a Nouveau full-text query."""
    ddoc_name = ddoc.removeprefix("_design/")
    with handle_errors(hint=NOUVEAU_HINT):
        name = resolve_db(db)
        with get_client() as client:
            result = client.nouveau_search(
                name,
                ddoc_name,
                index,
                search,
                limit=limit,
                bookmark=bookmark,
                include_docs=include_docs or None,
                fields=split_csv(fields),
                sort=parse_json(sort, "--sort"),
                counts=split_csv(counts),
                highlight_fields=split_csv(highlight_fields),
                highlight_pre_tag=highlight_pre,
                highlight_post_tag=highlight_post,
            )

    if json_output:
        print_json(result)
        return

    hits = result.get("hits", [])
    console.print(
        f'[cyan]🔍 Search "{name}/{ddoc_name}/{index}"[/cyan][dim] ({result.get("total_hits", len(hits))} total hit(s))[/dim]'
    )
    console.print(f"[dim]  query: {escape(search)}[/dim]", highlight=False)
    if not hits:
        console.print("[dim]  (no results)[/dim]")
        return

    for hit in hits:
        console.print(f"\n  [blue]▸[/blue] [bold]{hit.get('id')}[/bold]", highlight=False)
        for key, value in list((hit.get("fields") or {}).items())[:5]:
            rendered = json.dumps(value)
            if len(rendered) > 60:
                rendered = rendered[:57] + "…"
            console.print(f"    [dim]{key}:[/dim] {rendered}", highlight=False)

    if result.get("bookmark"):
        console.print(f"[dim]\n  Next page: --bookmark {result['bookmark']}[/dim]")

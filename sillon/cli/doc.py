from __future__ import annotations

import typer

from sillon.exceptions import SillonException

from ._common import get_client, handle_errors, parse_json, read_stdin_json, resolve_db
from ._output import print_json
from .console import console

doc_app = typer.Typer(help="Document operations.", no_args_is_help=True)


@doc_app.command(name="list")
def list_documents(
    db: str | None = typer.Argument(None, help="Database name (falls back to current db)"),
    limit: int | None = typer.Option(None, "--limit", help="Max number of documents"),
    skip: int | None = typer.Option(None, "--skip", help="Documents to skip"),
    startkey: str | None = typer.Option(None, "--startkey", help="First document ID"),
    endkey: str | None = typer.Option(None, "--endkey", help="Last document ID"),
    descending: bool = typer.Option(False, "--descending", help="Reverse order"),
    include_docs: bool = typer.Option(False, "--include-docs", help="Include full document bodies"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """List documents in a database."""
    with handle_errors():
        name = resolve_db(db)
        with get_client() as client:
            result = client.all_docs(
                name,
                startkey=startkey,
                endkey=endkey,
                limit=limit,
                skip=skip,
                descending=descending,
                include_docs=include_docs,
            )

    if json_output:
        print_json(result)
        return

    rows = result.get("rows", [])
    console.print(f'[cyan]Documents in "{name}"[/cyan]')
    for row in rows:
        rev = (row.get("value") or {}).get("rev", "")
        console.print(f"  [blue]▸[/blue] {row['id']} [dim]{rev}[/dim]", highlight=False)
    console.print(f"[dim]\nShowing {len(rows)} of {result.get('total_rows', len(rows))}[/dim]")


@doc_app.command(name="get")
def get_document(
    doc_id: str = typer.Argument(..., help="Document ID"),
    db: str | None = typer.Argument(None, help="Database name (falls back to current db)"),
) -> None:
    """Get a document."""
    with handle_errors():
        name = resolve_db(db)
        with get_client() as client:
            doc = client.get_document(name, doc_id)
    print_json(doc)


@doc_app.command(name="put")
def put_document(
    db: str | None = typer.Argument(None, help="Database name (falls back to current db)"),
    body: str | None = typer.Option(None, "--data", "-d", help="Document JSON (read from stdin when omitted)"),
    doc_id: str | None = typer.Option(None, "--id", help="Document ID (overrides _id in the body)"),
    json_output: bool = typer.Option(False, "--json", help="Output response as JSON"),
) -> None:
    """Insert or update a document. Without an ID the server assigns one."""
    with handle_errors():
        name = resolve_db(db)
        doc = parse_json(body, "--data") if body is not None else read_stdin_json("a document")
        if not isinstance(doc, dict):
            raise SillonException("A document must be a JSON object")
        if doc_id:
            doc["_id"] = doc_id
        with get_client() as client:
            result = client.put_document(name, doc) if doc.get("_id") else client.create_document(name, doc)

    if json_output:
        print_json(result)
        return
    console.print(f"[green]✓ Saved {result.get('id')}[/green] [dim]rev {result.get('rev')}[/dim]", highlight=False)


@doc_app.command(name="delete")
def delete_document(
    doc_id: str = typer.Argument(..., help="Document ID"),
    db: str | None = typer.Argument(None, help="Database name (falls back to current db)"),
    rev: str | None = typer.Option(None, "--rev", help="Revision to delete (defaults to the current one)"),
) -> None:
    """Delete a document."""
    with handle_errors():
        name = resolve_db(db)
        with get_client() as client:
            current_rev = rev or client.get_document(name, doc_id)["_rev"]
            client.delete_document(name, doc_id, current_rev)
    console.print(f"[green]✓ Deleted {doc_id}[/green]")

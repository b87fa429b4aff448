from __future__ import annotations

import re
import time
from typing import Any

import typer

from sillon.exceptions import SillonException

from ._common import get_client, handle_errors, split_csv
from ._output import print_json
from .console import console

repl_app = typer.Typer(help="Replication operations.", no_args_is_help=True)

STATE_STYLES = {"completed": "green", "triggered": "cyan", "error": "red"}


def endpoint_url(endpoint: str | dict[str, Any]) -> str:
    return endpoint if isinstance(endpoint, str) else endpoint.get("url", "?")


def styled_state(state: str | None) -> str:
    style = STATE_STYLES.get(state or "", "dim")
    return f"[{style}]{state or 'unknown'}[/{style}]"


def default_job_id(source: str, target: str) -> str:
    def clean(value: str) -> str:
        return re.sub(r"[^a-z0-9]", "_", value, flags=re.IGNORECASE)

    return f"rep-{clean(source)}-to-{clean(target)}-{int(time.time() * 1000)}"


@repl_app.command(name="setup")
def setup(
    source: str = typer.Argument(..., help="Source database or URL"),
    target: str = typer.Argument(..., help="Target database or URL"),
    continuous: bool = typer.Option(False, "--continuous", "-c", help="Continuous replication"),
    create_target: bool = typer.Option(False, "--create-target", help="Create the target database if missing"),
    filter_fn: str | None = typer.Option(None, "--filter", help="Filter function (ddoc/name)"),
    doc_ids: str | None = typer.Option(None, "--doc-ids", help="Comma-separated document IDs to replicate"),
    json_output: bool = typer.Option(False, "--json", help="Output response as JSON"),
) -> None:
    """Trigger a one-time (or continuous) replication via /_replicate."""
    with handle_errors(), get_client() as client:
        result = client.replicate(
            source,
            target,
            continuous=continuous,
            create_target=create_target,
            filter=filter_fn,
            doc_ids=split_csv(doc_ids),
        )

    if json_output:
        print_json(result)
        return

    console.print("[green]✓ Replication started[/green]")
    console.print(f"  [dim]source:[/dim]     {source}", highlight=False)
    console.print(f"  [dim]target:[/dim]     {target}", highlight=False)
    if continuous:
        console.print("  [dim]mode:[/dim]       continuous")
    if result.get("session_id"):
        console.print(f"  [dim]session:[/dim]    {result['session_id']}")
    if "source_last_seq" in result:
        console.print(f"  [dim]last_seq:[/dim]   {result['source_last_seq']}")


@repl_app.command(name="jobs")
def jobs(json_output: bool = typer.Option(False, "--json", help="Output as JSON")) -> None:
    """List persistent replication jobs from _replicator."""
    with handle_errors(), get_client() as client:
        result = client.list_replication_jobs()

    docs = [row["doc"] for row in result.get("rows", []) if not row["id"].startswith("_design/") and row.get("doc")]
    if json_output:
        print_json(docs)
        return

    console.print(f"[cyan]🔁 Replication jobs ({len(docs)})[/cyan]")
    if not docs:
        console.print("[dim]  (none)[/dim]")
        return
    for job in docs:
        mode = " [dim]\\[continuous][/dim]" if job.get("continuous") else ""
        console.print(f"\n  [blue]▸[/blue] [bold]{job['_id']}[/bold]{mode}", highlight=False)
        console.print(f"    [dim]source:[/dim] {endpoint_url(job.get('source', '?'))}", highlight=False)
        console.print(f"    [dim]target:[/dim] {endpoint_url(job.get('target', '?'))}", highlight=False)
        if job.get("_replication_state"):
            console.print(f"    [dim]state:[/dim]  {styled_state(job['_replication_state'])}")
        if job.get("_replication_id"):
            console.print(f"    [dim]rep id:[/dim] {job['_replication_id']}")


@repl_app.command(name="add")
def add(
    source: str = typer.Argument(..., help="Source database or URL"),
    target: str = typer.Argument(..., help="Target database or URL"),
    job_id: str | None = typer.Option(None, "--id", help="Document ID for the job (generated if omitted)"),
    continuous: bool = typer.Option(False, "--continuous", "-c", help="Continuous replication"),
    create_target: bool = typer.Option(False, "--create-target", help="Create the target database if missing"),
    filter_fn: str | None = typer.Option(None, "--filter", help="Filter function (ddoc/name)"),
    doc_ids: str | None = typer.Option(None, "--doc-ids", help="Comma-separated document IDs to replicate"),
    json_output: bool = typer.Option(False, "--json", help="Output response as JSON"),
) -> None:
    """Add a persistent replication job to _replicator."""
    job: dict[str, Any] = {"_id": job_id or default_job_id(source, target), "source": source, "target": target}
    if continuous:
        job["continuous"] = True
    if create_target:
        job["create_target"] = True
    if filter_fn:
        job["filter"] = filter_fn
    if doc_ids:
        job["doc_ids"] = split_csv(doc_ids)

    with handle_errors(), get_client() as client:
        result = client.create_replication_job(job)

    if json_output:
        print_json(result)
        return
    console.print(f'[green]✓ Replication job "{result.get("id")}" created[/green]')
    console.print(f"  [dim]source:[/dim] {source}", highlight=False)
    console.print(f"  [dim]target:[/dim] {target}", highlight=False)
    if continuous:
        console.print("  [dim]mode:[/dim]   continuous")


@repl_app.command(name="cancel")
def cancel(job_id: str = typer.Argument(..., help="Replication job ID")) -> None:
    """Cancel (delete) a persistent replication job from _replicator."""
    with handle_errors(), get_client() as client:
        job = client.get_replication_job(job_id)
        if not job.get("_rev"):
            raise SillonException("Job has no _rev, cannot delete")
        client.delete_replication_job(job_id, job["_rev"])
    console.print(f'[green]✓ Replication job "{job_id}" cancelled[/green]')


@repl_app.command(name="status")
def status(json_output: bool = typer.Option(False, "--json", help="Output as JSON")) -> None:
    """Show active replication tasks from /_active_tasks."""
    with handle_errors(), get_client() as client:
        tasks = client.replication_tasks()

    if json_output:
        print_json(tasks)
        return

    console.print(f"[cyan]⚡ Active replication tasks ({len(tasks)})[/cyan]")
    if not tasks:
        console.print("[dim]  (none)[/dim]")
        return
    for task in tasks:
        console.print(f"\n  [blue]▸[/blue] [dim]source:[/dim] {task.get('source', '?')}", highlight=False)
        console.print(f"    [dim]target:[/dim] {task.get('target', '?')}", highlight=False)
        if "progress" in task:
            console.print(f"    [dim]progress:[/dim] {task['progress']}%")
        counts = " ".join(f"{k.split('_')[1]}: {task[k]}" for k in ("docs_read", "docs_written") if k in task)
        if counts:
            console.print(f"    [dim]docs:[/dim]    {counts}")
        if task.get("continuous"):
            console.print("    [dim]mode:[/dim]    continuous")
        if task.get("replication_id"):
            console.print(f"    [dim]rep id:[/dim]  {task['replication_id']}")


@repl_app.command(name="conflicts")
def conflicts(
    db: str = typer.Argument(..., help="Database name"),
    limit: int = typer.Option(100, "--limit", help="Max documents to check"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """List documents with conflicts in a database."""
    with handle_errors(), get_client() as client:
        result = client.conflicts(db, limit=limit)

    conflicted = [
        row["doc"] for row in result.get("rows", []) if row.get("doc") and row["doc"].get("_conflicts")
    ]
    if json_output:
        print_json(conflicted)
        return

    console.print(f'[cyan]⚠️  Conflicts in "{db}" ({len(conflicted)} documents)[/cyan]')
    if not conflicted:
        console.print("[green]  ✓ No conflicts found[/green]")
        return
    for doc in conflicted:
        console.print(f"\n  [red]▸[/red] [bold]{doc['_id']}[/bold]", highlight=False)
        console.print(f"    [dim]winning rev:[/dim] {doc.get('_rev')}")
        console.print(f"    [dim]conflict revs:[/dim] {len(doc['_conflicts'])}")
        for rev in doc["_conflicts"]:
            console.print(f"      [dim]-[/dim] {rev}")
    console.print('[dim]\n  Tip: use "sillon doc get <id> <db>" to inspect a conflicted document[/dim]')

from __future__ import annotations

from datetime import datetime

import typer

from ._common import get_client, handle_errors
from ._output import print_json
from .console import console

server_app = typer.Typer(help="Server and cluster information.", no_args_is_help=True)


def progress_bar(percent: float, width: int = 20) -> str:
    filled = max(0, min(width, round(percent / 100 * width)))
    return "[green]" + "█" * filled + "[/green][dim]" + "░" * (width - filled) + "[/dim]"


@server_app.command(name="info")
def info(json_output: bool = typer.Option(False, "--json", help="Output as JSON")) -> None:
    """Show CouchDB server information."""
    with handle_errors(), get_client() as client:
        data = client.server_info()

    if json_output:
        print_json(data)
        return

    console.print("[cyan]🛋️  CouchDB Server[/cyan]")
    console.print(f"  [dim]status:[/dim]  {data.get('couchdb')}")
    console.print(f"  [dim]version:[/dim] [bold]{data.get('version')}[/bold]")
    vendor = data.get("vendor")
    if vendor:
        suffix = f" {vendor['version']}" if vendor.get("version") else ""
        console.print(f"  [dim]vendor:[/dim]  {vendor.get('name')}{suffix}")


@server_app.command(name="membership")
def membership(json_output: bool = typer.Option(False, "--json", help="Output as JSON")) -> None:
    """Show cluster node membership."""
    with handle_errors(), get_client() as client:
        data = client.membership()

    if json_output:
        print_json(data)
        return

    cluster_nodes = data.get("cluster_nodes", [])
    all_nodes = data.get("all_nodes", [])
    console.print("[cyan]🌐 Cluster Membership[/cyan]")
    console.print(f"\n  [dim]Cluster nodes:[/dim] ({len(cluster_nodes)})")
    for node in cluster_nodes:
        marker = "[green]●[/green]" if node in all_nodes else "[yellow]○[/yellow]"
        console.print(f"    {marker} {node}", highlight=False)

    outsiders = [node for node in all_nodes if node not in cluster_nodes]
    if outsiders:
        console.print(f"\n  [dim]All nodes (not in cluster):[/dim] ({len(outsiders)})")
        for node in outsiders:
            console.print(f"    [yellow]○[/yellow] {node}", highlight=False)


@server_app.command(name="tasks")
def tasks(
    task_type: str | None = typer.Option(None, "--type", help="Filter by task type (e.g. replication, indexer)"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Show active background tasks."""
    with handle_errors(), get_client() as client:
        active = client.active_tasks()

    if task_type:
        active = [task for task in active if task.get("type") == task_type]
    if json_output:
        print_json(active)
        return

    type_filter = f" \\[{task_type}]" if task_type else ""
    console.print(f"[cyan]⚡ Active Tasks{type_filter} ({len(active)})[/cyan]")
    if not active:
        console.print("[dim]  (none)[/dim]")
        return

    for task in active:
        node = f" [dim]on {task['node']}[/dim]" if task.get("node") else ""
        console.print(f"\n  [blue]▸[/blue] [bold]{task.get('type', 'unknown')}[/bold]{node}", highlight=False)
        if task.get("database"):
            console.print(f"    [dim]database:[/dim]  {task['database']}", highlight=False)
        if task.get("design_document"):
            console.print(f"    [dim]ddoc:[/dim]      {task['design_document']}", highlight=False)
        if "progress" in task:
            percent = float(task["progress"])
            console.print(f"    [dim]progress:[/dim]  {progress_bar(percent)} {percent:g}%")
        if task.get("started_on"):
            started = datetime.fromtimestamp(int(task["started_on"])).strftime("%H:%M:%S")
            console.print(f"    [dim]started:[/dim]   {started}")
        if task.get("source"):
            console.print(f"    [dim]source:[/dim]    {task['source']}", highlight=False)
        if task.get("target"):
            console.print(f"    [dim]target:[/dim]    {task['target']}", highlight=False)
        if "docs_written" in task:
            console.print(f"    [dim]written:[/dim]   {task['docs_written']}")


@server_app.command(name="scheduler")
def scheduler(
    docs: bool = typer.Option(False, "--docs", help="Show scheduler docs instead of running jobs"),
    limit: int | None = typer.Option(None, "--limit", help="Max results to show"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Show replication scheduler state (jobs and docs)."""
    with handle_errors(), get_client() as client:
        result = client.scheduler_docs(limit=limit) if docs else client.scheduler_jobs(limit=limit)

    if json_output:
        print_json(result)
        return

    if docs:
        entries = result.get("docs", [])
        console.print(f"[cyan]📋 Scheduler Docs ({result.get('total_rows', len(entries))} total)[/cyan]")
        if not entries:
            console.print("[dim]  (none)[/dim]")
            return
        for doc in entries:
            style = {"completed": "green", "running": "cyan", "failed": "red", "crashing": "red"}.get(
                doc.get("state") or "", "yellow"
            )
            console.print(f"\n  [blue]▸[/blue] [bold]{doc.get('doc_id') or doc.get('id')}[/bold]", highlight=False)
            console.print(f"    [dim]state:[/dim]    [{style}]{doc.get('state')}[/{style}]")
            console.print(f"    [dim]source:[/dim]   {doc.get('source')}", highlight=False)
            console.print(f"    [dim]target:[/dim]   {doc.get('target')}", highlight=False)
            if doc.get("error_count"):
                console.print(f"    [dim]errors:[/dim]   [red]{doc['error_count']}[/red]")
            if doc.get("last_updated"):
                console.print(f"    [dim]updated:[/dim]  {doc['last_updated']}")
        return

    jobs = result.get("jobs", [])
    console.print(f"[cyan]⚙️  Scheduler Jobs ({result.get('total_rows', len(jobs))} total, {len(jobs)} shown)[/cyan]")
    if not jobs:
        console.print("[dim]  (none)[/dim]")
        return
    for job in jobs:
        console.print(f"\n  [blue]▸[/blue] [bold]{job.get('id')}[/bold]", highlight=False)
        console.print(f"    [dim]source:[/dim]  {job.get('source')}", highlight=False)
        console.print(f"    [dim]target:[/dim]  {job.get('target')}", highlight=False)
        if job.get("node"):
            console.print(f"    [dim]node:[/dim]    {job['node']}", highlight=False)
        if job.get("start_time"):
            console.print(f"    [dim]started:[/dim] {job['start_time']}")
        history = job.get("history") or []
        if history:
            last = history[0]
            reason = f" - {last['reason']}" if last.get("reason") else ""
            console.print(f"    [dim]last:[/dim]    {last.get('type')}{reason}", highlight=False)


@server_app.command(name="stats")
def stats(
    node: str = typer.Option("_local", "--node", help="Node name"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Show node statistics."""
    with handle_errors(), get_client() as client:
        data = client.node_stats(node)

    if json_output:
        print_json(data)
        return

    console.print(f"[cyan]📈 Node Stats: {node}[/cyan]")
    # the full stats tree is large, show the counters people usually look for
    curated = [
        ("httpd.requests", ("httpd", "requests")),
        ("httpd.bulk_requests", ("httpd", "bulk_requests")),
        ("couchdb.open_dbs", ("couchdb", "open_databases")),
        ("couchdb.open_files", ("couchdb", "open_os_files")),
    ]
    for label, (group, metric) in curated:
        entry = (data.get(group) or {}).get(metric)
        if entry is not None:
            console.print(f"  [dim]{label + ':':<21}[/dim] {entry.get('value', 0)}")
    console.print("[dim]\n  Tip: use --json for full stats[/dim]")

import logging

import typer
from dotenv import load_dotenv

from sillon.log import setup_logger as _setup_logger

from .connect import connect, connections_app
from .db import db_app
from .doc import doc_app
from .find import find, index_app
from .local import local_app
from .partition import partition_app
from .repl import repl_app
from .search import search_app
from .server import server_app
from .view import view_app

_cli_logging_configured = False


def configure_cli_logging() -> None:
    """Configure CLI log levels once at runtime (not at import time)."""
    global _cli_logging_configured
    if _cli_logging_configured:
        return
    _cli_logging_configured = True

    # Suppress noisy third-party logs for CLI execution only.
    for logger_name in ("httpx", "httpcore"):
        logging.getLogger(logger_name).setLevel(logging.WARNING)
    _setup_logger()


cli_app = typer.Typer(
    help=("""[bold]sillon[/bold]\nRun a local CouchDB and work with CouchDB servers from the terminal."""),
    no_args_is_help=True,
    rich_markup_mode="rich",
)


@cli_app.callback()
def cli_callback() -> None:
    """Configure CLI logging before command execution."""
    configure_cli_logging()


cli_app.add_typer(local_app, name="local", help="Manage a local CouchDB instance (Podman, Docker, Mise or binary).")
cli_app.command(name="connect")(connect)
cli_app.add_typer(connections_app, name="connections", help="Manage saved connections.")
cli_app.add_typer(db_app, name="db", help="Database operations.")
cli_app.add_typer(doc_app, name="doc", help="Document operations.")
cli_app.add_typer(view_app, name="view", help="Design document views.")
cli_app.command(name="find")(find)
cli_app.add_typer(index_app, name="index", help="Manage Mango indexes.")
cli_app.add_typer(repl_app, name="repl", help="Replication operations.")
cli_app.add_typer(server_app, name="server", help="Server and cluster information.")
cli_app.add_typer(partition_app, name="partition", help="Partitioned database operations.")
cli_app.add_typer(search_app, name="search", help="Full-text search using Nouveau.")


def main() -> None:
    load_dotenv()
    cli_app()


if __name__ == "__main__":  # pragma: no cover - manual CLI invocation
    main()

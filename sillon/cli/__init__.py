"""sillon CLI package."""

__all__ = [
    "cli_app",
    "local_app",
    "db_app",
    "doc_app",
    "view_app",
    "index_app",
    "repl_app",
    "server_app",
    "partition_app",
    "search_app",
]

from .commands import cli_app
from .db import db_app
from .doc import doc_app
from .find import index_app
from .local import local_app
from .partition import partition_app
from .repl import repl_app
from .search import search_app
from .server import server_app
from .view import view_app

from __future__ import annotations

import json
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import httpx
import structlog

from sillon.client import CouchClient
from sillon.connections import ConfigManager
from sillon.exceptions import SillonException

from ._output import output_error

LOG = structlog.get_logger()


def get_client() -> CouchClient:
    conn = ConfigManager().get_active_connection()
    return CouchClient(conn.url)


def resolve_db(arg: str | None) -> str:
    if arg:
        return arg
    current = ConfigManager().get_current_db()
    if current:
        return current
    raise SillonException("No database specified.\n  Pass a database name or run: sillon db use <name>")


def parse_json(value: str | None, option: str) -> Any:
    if value is None:
        return None
    try:
        return json.loads(value)
    except json.JSONDecodeError as e:
        raise SillonException(f"{option} must be valid JSON: {e.msg}") from e


def split_csv(value: str | None) -> list[str] | None:
    if not value:
        return None
    return [item.strip() for item in value.split(",") if item.strip()]


def read_stdin_json(what: str) -> Any:
    if sys.stdin.isatty():
        raise SillonException(f"Expected {what} as JSON on stdin")
    raw = sys.stdin.read()
    if not raw.strip():
        raise SillonException(f"Expected {what} as JSON on stdin")
    try:
        return json.loads(raw)
    except json.JSONDecodeError as e:
        raise SillonException(f"Invalid JSON on stdin: {e.msg}") from e


@contextmanager
def handle_errors(action: str = "", *, hint: str = "") -> Iterator[None]:
    """Turn expected failures into a message on stderr and exit code 1."""
    try:
        yield
    except SillonException as e:
        LOG.debug("Command failed", action=action, exc_info=True)
        output_error(f"{action}: {e.message}" if action else str(e.message), hint=hint)
    except httpx.HTTPError as e:
        LOG.debug("Command failed", action=action, exc_info=True)
        output_error(f"{action}: {e}" if action else str(e), hint="Check the connection with: sillon server info")

from __future__ import annotations

import json
import sys
from typing import Any

import typer
from rich.markup import escape
from rich.table import Table

from .console import console, err_console


def print_json(data: Any) -> None:
    json.dump(data, sys.stdout, indent=2, default=str)
    sys.stdout.write("\n")


def output(data: Any, *, json_mode: bool = False, title: str | None = None) -> None:
    if json_mode:
        print_json(data)
        return
    if isinstance(data, list) and data and isinstance(data[0], dict):
        table = Table(title=title)
        for key in data[0]:
            table.add_column(key.replace("_", " ").title())
        for row in data:
            table.add_row(*[str(v) for v in row.values()])
        console.print(table)
    elif isinstance(data, dict):
        if title:
            console.print(f"[cyan]{title}[/cyan]")
        for key, value in data.items():
            console.print(f"  [dim]{key}:[/dim] {value}")
    else:
        console.print(str(data))


def output_error(message: str, *, hint: str = "", exit_code: int = 1) -> None:
    err_console.print(f"[red]Error: {escape(message)}[/red]", highlight=False)
    if hint:
        err_console.print(f"[yellow]Hint: {escape(hint)}[/yellow]", highlight=False)
    raise typer.Exit(exit_code)


def format_bytes(size: int | float) -> str:
    if not size:
        return "0 B"
    for unit in ("B", "KB", "MB", "GB"):
        if abs(size) < 1024 or unit == "GB":
            return f"{round(size, 2):g} {unit}"
        size /= 1024
    return f"{size} GB"

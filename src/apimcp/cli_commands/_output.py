"""Shared CLI output formatters."""

from __future__ import annotations

import json
from typing import Any

from rich.console import Console
from rich.table import Table

from apimcp.compiler.compiler import CompileResult  # noqa: TC001

console = Console()
err_console = Console(stderr=True)


def print_tools_table(result: CompileResult) -> None:
    """Pretty-print compiled tools, then any skipped operations."""
    table = Table(title="Compiled Tools")
    table.add_column("Name", style="cyan")
    table.add_column("Operation")
    table.add_column("Required")
    table.add_column("Description")

    for tool in result.tools:
        table.add_row(
            tool.name,
            f"{tool.operation.method} {tool.operation.path}",
            ", ".join(tool.input_schema.required) or "-",
            _truncate(tool.description),
        )

    console.print(table)

    if result.skipped:
        console.print(f"\n[yellow]Skipped {len(result.skipped)} operation(s):[/yellow]")
        for skipped in result.skipped:
            console.print(f"  {skipped.method} {skipped.path}: {skipped.reason}")


def print_tools_json(result: CompileResult) -> None:
    console.print_json(json.dumps([tool.to_listing() for tool in result.tools]))


def print_result(value: Any) -> None:
    """Print a tool result: JSON values pretty-printed, text as-is."""
    if isinstance(value, str):
        console.print(value, markup=False, highlight=False)
    else:
        console.print_json(json.dumps(value, default=str))


def _truncate(text: str, max_len: int = 80) -> str:
    if len(text) <= max_len:
        return text
    return text[: max_len - 3] + "..."

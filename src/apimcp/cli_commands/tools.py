"""``apimcp tools`` — compile a description and call its tools directly."""

from __future__ import annotations

import asyncio
import json
import sys
from typing import Any

import click

from apimcp.cli_commands._options import parse_headers, target_api_options
from apimcp.cli_commands._output import console, print_result, print_tools_json, print_tools_table


@click.group()
def tools() -> None:
    """Compile and call tools."""


@tools.command("list")
@click.argument("description")
@click.option("--json", "as_json", is_flag=True, help="Output the tools/list payload as JSON.")
def list_tools(description: str, as_json: bool) -> None:
    """List the tools compiled from DESCRIPTION.

    DESCRIPTION is a path or http(s) URL of an OpenAPI document (JSON or YAML).
    """
    from apimcp.compiler.compiler import compile_description
    from apimcp.host.loader import load_description

    try:
        document = asyncio.run(load_description(description))
    except Exception as exc:
        console.print(f"[red]Load error:[/red] {exc}")
        sys.exit(1)

    result = compile_description(document)
    if as_json:
        print_tools_json(result)
        return

    if not result.tools:
        console.print("[yellow]No tools compiled.[/yellow]")
        return

    print_tools_table(result)


@tools.command("call")
@click.argument("description")
@click.argument("name")
@click.option("--args", "raw_args", default="{}", help="Tool arguments as a JSON object.")
@target_api_options
def call(
    description: str,
    name: str,
    raw_args: str,
    base_url: str | None,
    api_key: str | None,
    headers: tuple[str, ...],
) -> None:
    """Validate arguments and call tool NAME from DESCRIPTION once."""
    from apimcp.compiler.compiler import generate_tools
    from apimcp.host.loader import load_description
    from apimcp.host.settings import BridgeSettings
    from apimcp.invoker.invoker import ToolInvoker
    from apimcp.protocol.validation import validate_arguments

    try:
        arguments = json.loads(raw_args)
    except json.JSONDecodeError as exc:
        console.print(f"[red]Invalid --args:[/red] {exc}")
        sys.exit(1)
    if not isinstance(arguments, dict):
        console.print("[red]Invalid --args:[/red] expected a JSON object")
        sys.exit(1)

    settings = BridgeSettings(
        spec_url=description,
        base_url=base_url or "",
        api_key=api_key,
        headers=parse_headers(headers),
    )

    async def _call() -> Any:
        document = await load_description(description, timeout=settings.timeout)
        tool = next((t for t in generate_tools(document) if t.name == name), None)
        if tool is None:
            msg = f"Tool not found: {name}"
            raise LookupError(msg)
        validate_arguments(tool.input_schema, arguments)
        return await ToolInvoker(settings.target_config(document)).execute(tool, arguments)

    try:
        result = asyncio.run(_call())
    except Exception as exc:
        console.print(f"[red]Call error:[/red] {exc}")
        sys.exit(1)

    print_result(result)

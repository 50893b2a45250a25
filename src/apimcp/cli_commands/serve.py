"""``apimcp serve`` — answer MCP requests over stdio."""

from __future__ import annotations

import asyncio
import logging

import click

from apimcp.cli_commands._options import parse_headers, target_api_options
from apimcp.cli_commands._output import err_console


@click.command()
@click.argument("description", required=False, envvar="OPENAPI_SPEC_URL")
@target_api_options
@click.option("--otlp-endpoint", default=None, help="Export traces via OTLP/gRPC to this endpoint.")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging on stderr.")
def serve(
    description: str | None,
    base_url: str | None,
    api_key: str | None,
    headers: tuple[str, ...],
    otlp_endpoint: str | None,
    verbose: bool,
) -> None:
    """Serve the tools of DESCRIPTION over stdio.

    DESCRIPTION defaults to $OPENAPI_SPEC_URL.  Logs go to stderr; stdout
    carries one JSON-RPC response per line.
    """
    from rich.logging import RichHandler

    from apimcp.host.bridge import BridgeHost
    from apimcp.host.errors import SettingsError
    from apimcp.host.settings import BridgeSettings
    from apimcp.host.stdio import serve_stdio

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
    )

    if otlp_endpoint:
        from apimcp.utils.telemetry import configure_telemetry

        configure_telemetry(otlp_endpoint=otlp_endpoint)

    try:
        settings = BridgeSettings.from_env(
            spec_url=description,
            base_url=base_url,
            api_key=api_key,
            headers=parse_headers(headers) or None,
        )
    except SettingsError as exc:
        raise click.UsageError(str(exc)) from exc
    if not settings.spec_url:
        raise click.UsageError("DESCRIPTION is required (or set OPENAPI_SPEC_URL).")

    try:
        asyncio.run(serve_stdio(BridgeHost(settings)))
    except KeyboardInterrupt:
        err_console.print("Interrupted.")

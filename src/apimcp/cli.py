"""apimcp CLI entrypoint."""

from __future__ import annotations

import click

from apimcp import __version__


@click.group()
@click.version_option(version=__version__, prog_name="apimcp")
def main() -> None:
    """apimcp — serve an OpenAPI-described REST API as MCP tools."""


# Register subcommands
from apimcp.cli_commands import register_commands  # noqa: E402

register_commands(main)

if __name__ == "__main__":
    main()

"""Options shared by the ``tools call`` and ``serve`` commands."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, TypeVar

import click

F = TypeVar("F", bound=Callable[..., Any])


def target_api_options(func: F) -> F:
    """Attach ``--base-url``, ``--api-key`` and ``--header`` to a command."""
    func = click.option(
        "--header",
        "headers",
        multiple=True,
        help="Static header sent with every call, as 'Name: value'. Repeatable.",
    )(func)
    func = click.option(
        "--api-key",
        envvar="API_KEY",
        default=None,
        help="Bearer token for the target API.",
    )(func)
    func = click.option(
        "--base-url",
        envvar="API_BASE_URL",
        default=None,
        help="Target API base URL (defaults to the description's first server).",
    )(func)
    return func


def parse_headers(values: tuple[str, ...]) -> dict[str, str]:
    """Turn repeated ``Name: value`` options into a header mapping."""
    headers: dict[str, str] = {}
    for raw in values:
        name, sep, value = raw.partition(":")
        if not sep or not name.strip():
            msg = f"expected 'Name: value', got {raw!r}"
            raise click.BadParameter(msg, param_hint="--header")
        headers[name.strip()] = value.strip()
    return headers

"""Description loader — fetch an OpenAPI document from a URL or a file.

JSON documents are parsed with the json module; anything else goes through
``yaml.safe_load``.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import httpx
import yaml

from apimcp.host.errors import DescriptionLoadError


async def load_description(
    location: str,
    *,
    client: httpx.AsyncClient | None = None,
    timeout: float | None = 30.0,
) -> dict[str, Any]:
    """Return the parsed description found at *location*.

    ``http://`` and ``https://`` locations are fetched with httpx; anything
    else is read as a local path.

    Raises:
        DescriptionLoadError: If the document cannot be read or is not a mapping.
    """
    if not location:
        raise DescriptionLoadError("<unset>", "no description location configured")

    if location.startswith(("http://", "https://")):
        raw = await _fetch(location, client=client, timeout=timeout)
    else:
        try:
            raw = Path(location).read_text(encoding="utf-8")
        except OSError as exc:
            raise DescriptionLoadError(location, str(exc)) from exc

    return parse_description(raw, location=location)


def parse_description(raw: str, *, location: str = "<string>") -> dict[str, Any]:
    """Parse a JSON or YAML document into a mapping."""
    data: Any
    try:
        data = json.loads(raw)
    except json.JSONDecodeError:
        try:
            data = yaml.safe_load(raw)
        except yaml.YAMLError as exc:
            raise DescriptionLoadError(location, f"parse error: {exc}") from exc
    if not isinstance(data, dict):
        raise DescriptionLoadError(location, "document is not a mapping")
    return data


async def _fetch(url: str, *, client: httpx.AsyncClient | None, timeout: float | None) -> str:
    try:
        if client is not None:
            response = await client.get(url)
        else:
            async with httpx.AsyncClient(timeout=timeout, follow_redirects=True) as owned:
                response = await owned.get(url)
        response.raise_for_status()
    except httpx.HTTPError as exc:
        raise DescriptionLoadError(url, str(exc)) from exc
    return response.text

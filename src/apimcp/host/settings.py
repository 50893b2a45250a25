"""Bridge settings — description location, target API and session header."""

from __future__ import annotations

import json
import os
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, Field

from apimcp.host.errors import SettingsError
from apimcp.invoker.config import TargetAPIConfig


class BridgeSettings(BaseModel):
    """Everything the host needs to build a router for one API.

    ``base_url`` may stay empty; the first ``servers`` entry of the
    description is used instead.
    """

    spec_url: str = ""
    base_url: str = ""
    api_key: str | None = None
    headers: dict[str, str] = Field(default_factory=lambda: dict[str, str]())
    timeout: float | None = 30.0
    session_header: str = "X-Session-ID"
    default_session: str = "default"

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None, **overrides: Any) -> BridgeSettings:
        """Read ``OPENAPI_SPEC_URL``, ``API_BASE_URL``, ``API_KEY``,
        ``API_HEADERS`` (a JSON object) and ``API_TIMEOUT``.

        Keyword *overrides* that are not ``None`` win over the environment.
        """
        env = os.environ if environ is None else environ
        values: dict[str, Any] = {
            "spec_url": env.get("OPENAPI_SPEC_URL", ""),
            "base_url": env.get("API_BASE_URL", ""),
            "api_key": env.get("API_KEY") or None,
        }

        raw_headers = env.get("API_HEADERS")
        if raw_headers:
            try:
                headers = json.loads(raw_headers)
            except json.JSONDecodeError as exc:
                raise SettingsError(f"API_HEADERS is not valid JSON: {exc}") from exc
            if not isinstance(headers, dict):
                raise SettingsError("API_HEADERS must be a JSON object")
            values["headers"] = {str(k): str(v) for k, v in headers.items()}

        raw_timeout = env.get("API_TIMEOUT")
        if raw_timeout:
            try:
                values["timeout"] = float(raw_timeout)
            except ValueError as exc:
                raise SettingsError(f"API_TIMEOUT is not a number: {raw_timeout}") from exc

        values.update({key: value for key, value in overrides.items() if value is not None})
        return cls.model_validate(values)

    def target_config(self, description: Mapping[str, Any] | None = None) -> TargetAPIConfig:
        """Build the invoker config, falling back to the description's first server."""
        base_url = self.base_url or _first_server_url(description)
        return TargetAPIConfig(
            base_url=base_url,
            headers=dict(self.headers),
            api_key=self.api_key,
            timeout=self.timeout,
        )


def _first_server_url(description: Mapping[str, Any] | None) -> str:
    if not description:
        return ""
    servers = description.get("servers")
    if isinstance(servers, list) and servers and isinstance(servers[0], dict):
        url = servers[0].get("url")
        if isinstance(url, str):
            return url
    return ""

"""Target API configuration — where and how tool calls are sent."""

from pydantic import BaseModel, Field


class TargetAPIConfig(BaseModel):
    """Connection settings for the API behind the tools.

    ``timeout`` is applied to every outbound request (seconds, ``None``
    disables it).  ``api_key`` is sent as a bearer token.
    """

    base_url: str = ""
    headers: dict[str, str] = Field(default_factory=lambda: dict[str, str]())
    api_key: str | None = None
    timeout: float | None = 30.0

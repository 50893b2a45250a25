"""Hosting boundary — description loading, settings and transports."""

from apimcp.host.bridge import BridgeHost, HostResponse, server_error
from apimcp.host.errors import DescriptionLoadError, SettingsError
from apimcp.host.loader import load_description, parse_description
from apimcp.host.settings import BridgeSettings
from apimcp.host.stdio import serve_stdio

__all__ = [
    "BridgeHost",
    "BridgeSettings",
    "DescriptionLoadError",
    "HostResponse",
    "SettingsError",
    "load_description",
    "parse_description",
    "serve_stdio",
    "server_error",
]

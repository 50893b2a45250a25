"""apimcp — serve any OpenAPI-described REST API as Model Context Protocol tools."""

from __future__ import annotations

from typing import TYPE_CHECKING

__version__ = "0.1.0"

if TYPE_CHECKING:
    from apimcp.compiler.compiler import generate_tools as generate_tools
    from apimcp.invoker.invoker import ToolInvoker as ToolInvoker
    from apimcp.protocol.router import ProtocolRouter as ProtocolRouter

_LAZY_EXPORTS = {
    "generate_tools": "apimcp.compiler.compiler",
    "ProtocolRouter": "apimcp.protocol.router",
    "ToolInvoker": "apimcp.invoker.invoker",
}


def __getattr__(name: str) -> object:
    module_path = _LAZY_EXPORTS.get(name)
    if module_path is not None:
        import importlib

        mod = importlib.import_module(module_path)
        return getattr(mod, name)
    raise AttributeError(f"module 'apimcp' has no attribute {name!r}")

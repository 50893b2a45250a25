"""Tool registry — an immutable snapshot behind an atomically swapped reference."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

    from apimcp.compiler.models import ToolDefinition


class RegistrySnapshot:
    """Ordered, read-only collection of compiled tools with name lookup.

    When names collide the first tool wins the lookup; the compiler already
    guarantees unique names.
    """

    __slots__ = ("_by_name", "_tools")

    def __init__(self, tools: Iterable[ToolDefinition] = ()) -> None:
        self._tools: tuple[ToolDefinition, ...] = tuple(tools)
        by_name: dict[str, ToolDefinition] = {}
        for tool in self._tools:
            by_name.setdefault(tool.name, tool)
        self._by_name = by_name

    def __len__(self) -> int:
        return len(self._tools)

    def __iter__(self) -> Iterator[ToolDefinition]:
        return iter(self._tools)

    def get(self, name: str) -> ToolDefinition | None:
        return self._by_name.get(name)

    def page(self, offset: int, size: int) -> tuple[ToolDefinition, ...]:
        return self._tools[offset : offset + size]


class ToolRegistry:
    """Holds the current :class:`RegistrySnapshot`.

    ``replace()`` rebinds a single attribute, so readers see either the old
    or the new snapshot, never a partially updated one.
    """

    def __init__(self, tools: Iterable[ToolDefinition] = ()) -> None:
        self._snapshot = RegistrySnapshot(tools)

    @property
    def snapshot(self) -> RegistrySnapshot:
        return self._snapshot

    def replace(self, tools: Iterable[ToolDefinition]) -> RegistrySnapshot:
        snapshot = RegistrySnapshot(tools)
        self._snapshot = snapshot
        return snapshot

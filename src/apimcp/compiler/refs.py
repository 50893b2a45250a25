"""Local ``$ref`` resolution against the description's shared components.

Only same-document references (``#/components/...``) are followed.  External
references are left untouched in schemas and reported as
:class:`UnresolvedReferenceError` where a concrete object is required.
"""

from __future__ import annotations

import logging
from typing import Any

from apimcp.compiler.errors import UnresolvedReferenceError

logger = logging.getLogger(__name__)

_REF = "$ref"


def is_reference(obj: object) -> bool:
    return isinstance(obj, dict) and _REF in obj


class RefResolver:
    """Resolve JSON pointers against one API description document."""

    def __init__(self, document: dict[str, Any]) -> None:
        self._document = document
        self._inlined: dict[str, Any] = {}

    def resolve(self, obj: Any) -> Any:
        """Follow *obj*'s reference chain until a non-reference object is reached.

        Raises:
            UnresolvedReferenceError: For external, missing or circular references.
        """
        seen: set[str] = set()
        while is_reference(obj):
            ref = obj[_REF]
            if not isinstance(ref, str) or ref in seen:
                raise UnresolvedReferenceError(str(ref))
            seen.add(ref)
            obj = self._lookup(ref)
        return obj

    def inline_schema(self, schema: Any) -> Any:
        """Return a copy of *schema* with every local reference inlined.

        A reference back into a schema that is already being expanded yields
        an empty (unconstrained) schema.  External references stay as-is.
        Each reference is expanded once per resolver, so the returned schema
        may share nested objects with other inlined schemas and must be
        treated as read-only.
        """
        inlined, _ = self._inline(schema, ())
        return inlined

    def _inline(self, node: Any, expanding: tuple[str, ...]) -> tuple[Any, frozenset[str]]:
        # Returns the copy plus the refs that were cut as cycles below *node*.
        if isinstance(node, list):
            items = [self._inline(item, expanding) for item in node]
            cut = frozenset[str]().union(*(c for _, c in items))
            return [value for value, _ in items], cut
        if not isinstance(node, dict):
            return node, frozenset()
        if is_reference(node):
            return self._inline_reference(node, expanding)
        entries = {key: self._inline(value, expanding) for key, value in node.items()}
        cut = frozenset[str]().union(*(c for _, c in entries.values()))
        return {key: value for key, (value, _) in entries.items()}, cut

    def _inline_reference(
        self, node: dict[str, Any], expanding: tuple[str, ...]
    ) -> tuple[Any, frozenset[str]]:
        ref = node[_REF]
        if not isinstance(ref, str) or not ref.startswith("#/"):
            logger.warning("Leaving external schema reference unresolved: %s", ref)
            return dict(node), frozenset()
        if ref in expanding:
            return {}, frozenset({ref})
        if ref in self._inlined:
            return self._inlined[ref], frozenset()
        try:
            target = self._lookup(ref)
        except UnresolvedReferenceError:
            logger.warning("Leaving missing schema reference unresolved: %s", ref)
            return dict(node), frozenset()

        inlined, cut = self._inline(target, (*expanding, ref))
        cut -= {ref}
        # Only expansions that did not stop at an enclosing ref are reusable.
        if not cut:
            self._inlined[ref] = inlined
        return inlined, cut

    def _lookup(self, ref: str) -> Any:
        if not ref.startswith("#/"):
            raise UnresolvedReferenceError(ref)
        node: Any = self._document
        for token in ref[2:].split("/"):
            key = token.replace("~1", "/").replace("~0", "~")
            if isinstance(node, dict) and key in node:
                node = node[key]
            elif isinstance(node, list) and key.isdigit() and int(key) < len(node):
                node = node[int(key)]
            else:
                raise UnresolvedReferenceError(ref)
        return node

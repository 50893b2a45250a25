"""Tool name derivation.

Names are lowercase, underscore-separated tokens.  Normalization alone does
not make names unique, so the compiler passes every candidate through
:func:`unique_name` against the names already taken in the registry.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Container

_INVALID_CHARS = re.compile(r"[^a-zA-Z0-9_]")
_UPPER = re.compile(r"([A-Z])")
_UNDERSCORE_RUNS = re.compile(r"_+")


def normalize_tool_name(base_id: str) -> str:
    """Normalize *base_id* into a lowercase, underscore-separated token.

    ``getUserById`` becomes ``get_user_by_id`` and ``get_/users/{id}`` becomes
    ``get_users_id_``.
    """
    name = _INVALID_CHARS.sub("_", base_id)
    name = _UPPER.sub(r"_\1", name).lower()
    name = _UNDERSCORE_RUNS.sub("_", name)
    return name.lstrip("_")


def candidate_name(method: str, path: str, operation_id: str | None) -> str:
    """Derive the normalized name for one operation.

    The declared ``operationId`` wins; when it is absent, or normalizes to
    nothing, ``{method}_{path}`` is used instead.
    """
    if operation_id:
        name = normalize_tool_name(operation_id)
        if name:
            return name
    return normalize_tool_name(f"{method}_{path}")


def unique_name(candidate: str, taken: Container[str]) -> str:
    """Return *candidate*, or the first ``candidate_N`` (N >= 2) not in *taken*."""
    if candidate not in taken:
        return candidate
    suffix = 2
    while f"{candidate}_{suffix}" in taken:
        suffix += 1
    return f"{candidate}_{suffix}"

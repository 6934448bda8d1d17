"""Helpers shared across tool modules.

This module has NO dependency on the dispatcher, so tool modules can
import it freely.
"""

from __future__ import annotations

from typing import Any, TypeVar, cast

from mcp.types import ToolAnnotations

from planka_mcp.models import CardType

_T = TypeVar("_T")

READ_ONLY = ToolAnnotations(readOnlyHint=True, destructiveHint=False)
MUTATING = ToolAnnotations(readOnlyHint=False, destructiveHint=False)
DESTRUCTIVE = ToolAnnotations(readOnlyHint=False, destructiveHint=True)

CARD_TYPES = [t.value for t in CardType]


def _parse_args(arguments: dict[str, Any], cls: type[_T]) -> _T:
    """Cast tool arguments to a typed dict for static analysis.

    The dispatcher validates presence and JSON types against the tool's
    input schema before any handler runs; this is type narrowing only.
    """
    return cast(_T, arguments)


def _id_property(description: str) -> dict[str, Any]:
    return {"type": "string", "minLength": 1, "description": description}


def _card_type(value: str | None) -> CardType | None:
    return None if value is None else CardType(value.lower())

"""Validation of tool params against their declared input schema.

Pure functions with no I/O. Only the subset of JSON Schema that tool
definitions use is checked: ``required``, per-property ``type``, ``enum``
and ``minLength``. Unknown params are ignored.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from planka_mcp.errors import InvalidParams

_JSON_TYPES: dict[str, tuple[type, ...]] = {
    "string": (str,),
    "number": (int, float),
    "integer": (int,),
    "boolean": (bool,),
    "object": (dict,),
    "array": (list,),
}


def _matches_type(value: Any, expected: str) -> bool:
    allowed = _JSON_TYPES.get(expected)
    if allowed is None:
        return True
    # bool is an int subclass; JSON keeps them apart
    if isinstance(value, bool) and expected != "boolean":
        return False
    return isinstance(value, allowed)


def check_param(name: str, value: Any, prop: Mapping[str, Any]) -> str | None:
    """Return a reason string if *value* violates *prop*, else ``None``."""
    expected = prop.get("type")
    if isinstance(expected, str) and not _matches_type(value, expected):
        return f"must be of type {expected}"
    choices = prop.get("enum")
    if choices is not None and value not in choices:
        return "must be one of " + ", ".join(repr(c) for c in choices)
    if expected == "string" and prop.get("minLength") and len(value) < prop["minLength"]:
        return "must not be empty"
    return None


def validate_params(schema: Mapping[str, Any], params: Mapping[str, Any]) -> None:
    """Raise InvalidParams naming the first offending field.

    Required fields are checked first, in declaration order, then every
    supplied property that the schema describes. ``null`` for an optional
    property counts as absent.
    """
    properties: Mapping[str, Any] = schema.get("properties", {})
    for name in schema.get("required", []):
        if params.get(name) is None:
            raise InvalidParams(name, "is required")

    for name, prop in properties.items():
        if name not in params or params[name] is None:
            continue
        reason = check_param(name, params[name], prop)
        if reason is not None:
            raise InvalidParams(name, reason)

"""Message envelopes for the newline-delimited stdio protocol.

Requests::

    {"protocol_version": "1.0", "method": "create_card", "params": {...}, "id": 2}

Responses carry the same ``id`` and exactly one of ``result`` / ``error``.
A request without an ``id`` (or with ``"id": null``) is a notification and
never gets a response.
"""

from __future__ import annotations

import json
import math
from dataclasses import dataclass, field
from typing import Any

from planka_mcp.errors import ErrorObject, InvalidRequest, ParseError

PROTOCOL_VERSION = "1.0"

RequestId = str | int | float


@dataclass(frozen=True)
class Request:
    method: str
    params: dict[str, Any] = field(default_factory=dict)
    id: RequestId | None = None

    @property
    def is_notification(self) -> bool:
        return self.id is None


def _is_valid_id(value: object) -> bool:
    # bool is an int subclass but not an acceptable id
    return value is None or (isinstance(value, (str, int, float)) and not isinstance(value, bool))


def _reject_constant(name: str) -> Any:
    msg = f"{name} is not valid JSON"
    raise ParseError(msg)


def _finite_float(text: str) -> float:
    value = float(text)
    if not math.isfinite(value):
        msg = f"number {text} is out of range"
        raise ParseError(msg)
    return value


def parse_message(line: str | bytes) -> Request:
    """Decode one input line into a :class:`Request`.

    Raises ParseError when the text is not JSON and InvalidRequest when the
    JSON is not a well-formed envelope. InvalidRequest carries the request id
    whenever it could be recovered so the error reply can echo it.

    Raw bytes must be strict UTF-8. ``NaN``, ``Infinity`` and numbers that
    overflow a float are parse errors.
    """
    try:
        text = line.decode("utf-8") if isinstance(line, bytes) else line
        raw = json.loads(text, parse_constant=_reject_constant, parse_float=_finite_float)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise ParseError(str(exc)) from exc

    if not isinstance(raw, dict):
        msg = "message must be a JSON object"
        raise InvalidRequest(msg)

    request_id = raw.get("id")
    if not _is_valid_id(request_id):
        msg = "id must be a string, a number or null"
        raise InvalidRequest(msg)

    version = raw.get("protocol_version")
    if version != PROTOCOL_VERSION:
        msg = f"unsupported protocol_version {version!r} (expected {PROTOCOL_VERSION!r})"
        raise InvalidRequest(msg, request_id)

    method = raw.get("method")
    if not isinstance(method, str) or not method:
        msg = "method must be a non-empty string"
        raise InvalidRequest(msg, request_id)

    params = raw.get("params")
    if params is None:
        params = {}
    elif not isinstance(params, dict):
        msg = "params must be an object"
        raise InvalidRequest(msg, request_id)

    return Request(method=method, params=params, id=request_id)


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------


def success_response(request_id: RequestId | None, result: Any) -> dict[str, Any]:
    return {"protocol_version": PROTOCOL_VERSION, "result": result, "id": request_id}


def error_response(request_id: RequestId | None, error: ErrorObject) -> dict[str, Any]:
    return {"protocol_version": PROTOCOL_VERSION, "error": dict(error), "id": request_id}


def encode(response: dict[str, Any]) -> str:
    """Serialize a response envelope as one newline-terminated line."""
    return json.dumps(response, ensure_ascii=False, allow_nan=False, separators=(",", ":"), default=str) + "\n"

"""Error taxonomy and its translation to protocol error objects.

Every failure inside the server is one of the exception classes below.
``to_error_object`` is the only place where they become caller-visible
``(code, message, data)`` triples, so nothing raw ever reaches stdout.
"""

from __future__ import annotations

from typing import Any, NotRequired, TypedDict

PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603


class ErrorObject(TypedDict):
    """Wire shape of the ``error`` member of a response envelope."""

    code: int
    message: str
    data: NotRequired[Any]


class PlankaMCPError(Exception):
    """Base class for every error raised by planka-mcp."""


class ConfigError(PlankaMCPError):
    """Startup-time misconfiguration. Fatal before the dispatch loop starts."""


# ---------------------------------------------------------------------------
# Dispatcher-boundary errors
# ---------------------------------------------------------------------------


class ParseError(PlankaMCPError):
    """The input line is not valid JSON."""


class InvalidRequest(PlankaMCPError):
    """The message parsed but its envelope shape is wrong.

    ``request_id`` is the id we could still recover from the message, if any.
    """

    def __init__(self, reason: str, request_id: str | int | float | None = None) -> None:
        super().__init__(reason)
        self.request_id = request_id


class MethodNotFound(PlankaMCPError):
    def __init__(self, method: str) -> None:
        super().__init__(method)
        self.method = method


class InvalidParams(PlankaMCPError):
    """Params failed schema validation; ``field`` names the first offender."""

    def __init__(self, field: str, reason: str) -> None:
        super().__init__(f"{field}: {reason}")
        self.field = field
        self.reason = reason


# ---------------------------------------------------------------------------
# Upstream errors
# ---------------------------------------------------------------------------


class AuthError(PlankaMCPError):
    """The kanban service rejected our credentials (or login failed)."""


class UpstreamError(PlankaMCPError):
    """Non-auth 4xx/5xx from the kanban service.

    ``safe_message`` has already been truncated and scrubbed of credential
    material by the gateway.
    """

    def __init__(self, status: int, safe_message: str) -> None:
        super().__init__(f"HTTP {status}: {safe_message}")
        self.status = status
        self.safe_message = safe_message


class TransportError(PlankaMCPError):
    """Connection refused, timeout, or another network-level failure."""


class DecodeError(PlankaMCPError):
    """The kanban service answered with a body we cannot trust."""


class InternalError(PlankaMCPError):
    """Catch-all for failures that fit no other category."""


# ---------------------------------------------------------------------------
# Translation
# ---------------------------------------------------------------------------


def to_error_object(exc: BaseException) -> ErrorObject:
    """Map any exception to its stable external representation.

    Unclassified exceptions collapse to a generic internal error; their
    text is never echoed because it may contain upstream internals.
    """
    if isinstance(exc, ParseError):
        return ErrorObject(code=PARSE_ERROR, message="Parse error")
    if isinstance(exc, InvalidRequest):
        return ErrorObject(code=INVALID_REQUEST, message=f"Invalid request: {exc}")
    if isinstance(exc, MethodNotFound):
        return ErrorObject(code=METHOD_NOT_FOUND, message=f"Method not found: {exc.method}")
    if isinstance(exc, InvalidParams):
        return ErrorObject(
            code=INVALID_PARAMS,
            message=f"Invalid params: {exc.field} {exc.reason}",
            data={"field": exc.field},
        )
    if isinstance(exc, AuthError):
        return ErrorObject(code=INTERNAL_ERROR, message="Authentication with the kanban service failed")
    if isinstance(exc, UpstreamError):
        return ErrorObject(
            code=INTERNAL_ERROR,
            message=f"Kanban service error (HTTP {exc.status}): {exc.safe_message}",
            data={"status": exc.status},
        )
    if isinstance(exc, TransportError):
        return ErrorObject(code=INTERNAL_ERROR, message="Could not reach the kanban service")
    if isinstance(exc, DecodeError):
        return ErrorObject(code=INTERNAL_ERROR, message="Unexpected response from the kanban service")
    return ErrorObject(code=INTERNAL_ERROR, message="Internal error")

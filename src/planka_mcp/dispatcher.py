"""Request dispatcher for the planka-mcp stdio protocol.

Reads one message per line, validates and routes it, and runs each tool
call as its own asyncio task so a slow Planka round trip never blocks the
next request. Responses may complete out of order; each one is written as
a single newline-terminated line under the output lock.

End of input is the only shutdown signal. In-flight tool calls are allowed
to finish before :meth:`Dispatcher.run` returns.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import AsyncIterable
from typing import Any

from planka_mcp import __version__
from planka_mcp.errors import InvalidRequest, MethodNotFound, ParseError, PlankaMCPError, to_error_object
from planka_mcp.gateway import PlankaGateway
from planka_mcp.protocol import (
    PROTOCOL_VERSION,
    Request,
    encode,
    error_response,
    parse_message,
    success_response,
)
from planka_mcp.registry import ToolDescriptor, ToolRegistry
from planka_mcp.transport import LineWriter
from planka_mcp.validation import validate_params

logger = logging.getLogger(__name__)

SERVER_NAME = "planka-mcp"
LIST_TOOLS = "list_tools"
PING = "ping"
INITIALIZE = "initialize"
INITIALIZED = "notifications/initialized"
CANCELLED = "notifications/cancelled"


class OutputSink:
    """The single serialization point for stdout."""

    def __init__(self, writer: LineWriter) -> None:
        self._writer = writer
        self._lock = asyncio.Lock()

    async def send(self, line: str) -> None:
        """Write one line. A failed write is logged, never raised, so the
        remaining in-flight calls still run to completion.
        """
        async with self._lock:
            try:
                await self._writer.write(line)
            except (OSError, ValueError) as exc:
                logger.error("output_write_failed", extra={"error": type(exc).__name__}, exc_info=True)


class Dispatcher:
    def __init__(self, registry: ToolRegistry, gateway: PlankaGateway) -> None:
        self._registry = registry
        self._gateway = gateway
        self._builtins = {
            LIST_TOOLS: self._list_tools,
            PING: self._ping,
            INITIALIZE: self._initialize,
            INITIALIZED: self._client_notice,
            CANCELLED: self._client_notice,
        }

    # ── Main loop ──────────────────────────────────────────────────────────

    async def run(self, lines: AsyncIterable[str | bytes], writer: LineWriter) -> None:
        sink = OutputSink(writer)
        logger.info("Dispatcher started, waiting for requests")
        async with asyncio.TaskGroup() as tasks:
            async for line in lines:
                text = line.strip()
                if not text:
                    continue
                await self._accept(text, sink, tasks)
            logger.info("Input closed, draining in-flight requests")
        logger.info("Dispatcher stopped")

    async def _accept(self, text: str | bytes, sink: OutputSink, tasks: asyncio.TaskGroup) -> None:
        try:
            request = parse_message(text)
        except ParseError as exc:
            logger.warning("Failed to parse message: %s", exc)
            await sink.send(encode(error_response(None, to_error_object(exc))))
            return
        except InvalidRequest as exc:
            logger.warning("Invalid request: %s", exc, extra={"request_id": exc.request_id})
            await sink.send(encode(error_response(exc.request_id, to_error_object(exc))))
            return

        builtin = self._builtins.get(request.method)
        if builtin is not None:
            result = builtin()
            if not request.is_notification:
                await sink.send(encode(success_response(request.id, result)))
            return

        try:
            descriptor = self._resolve(request)
        except PlankaMCPError as exc:
            self._log_rejection(request, exc)
            if not request.is_notification:
                await sink.send(encode(error_response(request.id, to_error_object(exc))))
            return

        tasks.create_task(self._execute(request, descriptor, sink), name=f"{request.method}:{request.id}")

    def _resolve(self, request: Request) -> ToolDescriptor:
        descriptor = self._registry.lookup(request.method)
        if descriptor is None:
            raise MethodNotFound(request.method)
        validate_params(descriptor.input_schema, request.params)
        return descriptor

    @staticmethod
    def _log_rejection(request: Request, exc: PlankaMCPError) -> None:
        level = logging.ERROR if request.is_notification else logging.WARNING
        logger.log(
            level,
            "Rejected %s: %s",
            "notification" if request.is_notification else "request",
            exc,
            extra={"tool": request.method, "request_id": request.id, "error": type(exc).__name__},
        )

    # ── Tool execution ─────────────────────────────────────────────────────

    async def _execute(self, request: Request, descriptor: ToolDescriptor, sink: OutputSink) -> None:
        t0 = time.monotonic()
        extra: dict[str, Any] = {
            "tool": descriptor.name,
            "request_id": request.id,
            # keys only: values may carry user content
            "args_data": sorted(request.params),
        }
        try:
            result = await descriptor.handler(self._gateway, request.params)
            line = encode(success_response(request.id, result))
        except Exception as exc:
            extra["duration_ms"] = round((time.monotonic() - t0) * 1000, 1)
            extra["error"] = type(exc).__name__
            # Notifications get no reply, so this log line is their only trace.
            event = "notification_error" if request.is_notification else "tool_error"
            logger.error(event, extra=extra, exc_info=not isinstance(exc, PlankaMCPError))
            if request.is_notification:
                return
            line = encode(error_response(request.id, to_error_object(exc)))
        else:
            extra["duration_ms"] = round((time.monotonic() - t0) * 1000, 1)
            logger.info("tool_call", extra=extra)
            if request.is_notification:
                return
        await sink.send(line)

    # ── Built-in methods ───────────────────────────────────────────────────

    def _list_tools(self) -> dict[str, Any]:
        return {"tools": [d.describe() for d in self._registry.describe_all()]}

    @staticmethod
    def _ping() -> dict[str, Any]:
        return {}

    @staticmethod
    def _client_notice() -> dict[str, Any]:
        logger.info("Client notification received")
        return {}

    @staticmethod
    def _initialize() -> dict[str, Any]:
        return {
            "protocol_version": PROTOCOL_VERSION,
            "server_info": {"name": SERVER_NAME, "version": __version__},
            "capabilities": {"tools": {"list_changed": False}},
        }


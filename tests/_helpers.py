"""Test doubles shared across test modules."""

from __future__ import annotations

import asyncio
import json
from collections.abc import AsyncIterator
from typing import Any

import httpx

from planka_mcp.gateway import LOGIN_PATH

BASE_URL = "http://planka.test"
EMAIL = "bot@example.com"
PASSWORD = "hunter2-secret"

Reply = tuple[int, Any]


class FakePlanka:
    """Routes requests by (method, path) and issues tokens on login.

    Each route holds a queue of ``(status, body)`` replies; the last reply
    repeats once the queue is exhausted. Requests carrying a token not in
    ``valid_tokens`` get a 401.
    """

    def __init__(self, tokens: list[str] | None = None) -> None:
        self.tokens = tokens or ["T1"]
        self.valid_tokens: set[str] = set(self.tokens)
        self.requests: list[httpx.Request] = []
        self.login_calls = 0
        self.login_status = 200
        self.login_delay = 0.0
        self._routes: dict[tuple[str, str], list[Reply]] = {}

    def route(self, method: str, path: str, *replies: Reply) -> None:
        self._routes[(method, path)] = list(replies)

    def calls(self, method: str, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == method and _path(r) == path]

    @staticmethod
    def body(request: httpx.Request) -> Any:
        return json.loads(request.content)

    async def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.method == "POST" and request.url.path == LOGIN_PATH:
            return await self._login()

        auth = request.headers.get("Authorization", "")
        if auth.removeprefix("Bearer ") not in self.valid_tokens:
            return httpx.Response(401, json={"message": "Unauthorized"})

        replies = self._routes.get((request.method, _path(request)))
        if not replies:
            return httpx.Response(404, json={"message": "Not found"})
        status, body = replies.pop(0) if len(replies) > 1 else replies[0]
        if body is None:
            return httpx.Response(status)
        if isinstance(body, str):
            return httpx.Response(status, text=body)
        return httpx.Response(status, json=body)

    async def _login(self) -> httpx.Response:
        self.login_calls += 1
        if self.login_delay:
            await asyncio.sleep(self.login_delay)
        if self.login_status != 200:
            return httpx.Response(self.login_status, json={"message": "Invalid credentials"})
        token = self.tokens[min(self.login_calls, len(self.tokens)) - 1]
        return httpx.Response(200, json={"item": token})


class ListWriter:
    """Collects written chunks in memory."""

    def __init__(self) -> None:
        self.chunks: list[str] = []

    async def write(self, data: str) -> None:
        self.chunks.append(data)

    @property
    def text(self) -> str:
        return "".join(self.chunks)

    @property
    def responses(self) -> list[dict[str, Any]]:
        return [json.loads(line) for line in self.text.splitlines()]


async def feed(messages: list[Any]) -> AsyncIterator[str | bytes]:
    for message in messages:
        yield message if isinstance(message, (str, bytes)) else json.dumps(message) + "\n"


def request(method: str, params: dict[str, Any] | None = None, request_id: Any = None) -> dict[str, Any]:
    """Build a request envelope; ``request_id=None`` makes a notification."""
    envelope: dict[str, Any] = {"protocol_version": "1.0", "method": method}
    if params is not None:
        envelope["params"] = params
    if request_id is not None:
        envelope["id"] = request_id
    return envelope


def _path(request: httpx.Request) -> str:
    """The path as sent on the wire, percent-escapes intact."""
    return request.url.raw_path.decode("ascii").split("?", 1)[0]

"""Typed async client for the Planka REST API.

Every call goes through :meth:`PlankaGateway._request`, which obtains a token
from the credential manager, retries exactly once after a 401/403 with a
refreshed token, and maps every other failure to the error taxonomy in
:mod:`planka_mcp.errors`. Response bodies are treated as untrusted input and
decoded through :mod:`planka_mcp.models`.
"""

from __future__ import annotations

import logging
import re
from typing import Any
from urllib.parse import quote

import httpx

from planka_mcp.auth import CredentialManager, build_credentials
from planka_mcp.config import Settings
from planka_mcp.errors import AuthError, DecodeError, TransportError, UpstreamError
from planka_mcp.models import DEFAULT_POSITION, Board, Card, CardType, KanbanList, Project

logger = logging.getLogger(__name__)

LOGIN_PATH = "/api/access-tokens"
_AUTH_STATUSES = frozenset({401, 403})
_MAX_SAFE_MESSAGE = 200
_REDACTED = "***"
_BEARER_RE = re.compile(r"(?i)bearer\s+\S+")
_JWT_RE = re.compile(r"eyJ[\w-]+\.[\w-]+\.[\w-]*")
_WHITESPACE_RE = re.compile(r"\s+")


def _segment(value: str) -> str:
    """Quote an identifier for safe use as one URL path segment."""
    return quote(value, safe="")


class PlankaGateway:
    """One method per Planka capability, returning domain entities."""

    def __init__(
        self,
        settings: Settings,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        credentials: CredentialManager | None = None,
    ) -> None:
        self._settings = settings
        self._client = httpx.AsyncClient(
            base_url=settings.base_url.rstrip("/"),
            timeout=httpx.Timeout(settings.timeout),
            headers={"Accept": "application/json"},
            transport=transport,
        )
        self._secrets: set[str] = {s for s in (settings.token, settings.password) if s}
        self.credentials = credentials or build_credentials(settings, self.login)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> PlankaGateway:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    # ── Auth ───────────────────────────────────────────────────────────────

    async def login(self, email: str, password: str) -> str:
        """Exchange email/password for an access token.

        Used by the credential manager; never call it directly from handlers.
        """
        try:
            response = await self._client.post(LOGIN_PATH, json={"emailOrUsername": email, "password": password})
        except httpx.HTTPError as exc:
            logger.error("Failed to send authentication request: %s", type(exc).__name__)
            msg = f"login request failed: {type(exc).__name__}"
            raise TransportError(msg) from exc

        if response.is_error:
            logger.error("Authentication failed with HTTP %d", response.status_code)
            msg = f"login rejected with HTTP {response.status_code}"
            raise AuthError(msg)

        data = self._json(response)
        token = data.get("item") if isinstance(data, dict) else None
        if not isinstance(token, str) or not token:
            msg = "no token in login response"
            raise DecodeError(msg)
        self._secrets.add(token)
        return token

    # ── Transport ──────────────────────────────────────────────────────────

    async def _send(self, method: str, path: str, token: str, payload: dict[str, Any] | None) -> httpx.Response:
        headers = {"Authorization": f"Bearer {token}"}
        try:
            return await self._client.request(method, path, json=payload, headers=headers)
        except httpx.TimeoutException as exc:
            logger.error("Request %s %s timed out", method, path)
            msg = f"{method} {path} timed out"
            raise TransportError(msg) from exc
        except httpx.HTTPError as exc:
            logger.error("Request %s %s failed: %s", method, path, type(exc).__name__)
            msg = f"{method} {path} failed: {type(exc).__name__}"
            raise TransportError(msg) from exc

    async def _request(self, method: str, path: str, payload: dict[str, Any] | None = None) -> Any:
        """Issue one API call, refreshing credentials once on 401/403."""
        for attempt in (1, 2):
            token = await self.credentials.acquire()
            self._secrets.add(token)
            logger.debug("API request %s %s (attempt %d)", method, path, attempt)
            response = await self._send(method, path, token, payload)

            if response.status_code in _AUTH_STATUSES:
                logger.warning("Planka rejected credentials for %s %s (HTTP %d)", method, path, response.status_code)
                self.credentials.invalidate(token)
                continue

            if response.is_error:
                safe = self.safe_message(response)
                logger.error("API request %s %s failed with HTTP %d: %s", method, path, response.status_code, safe)
                raise UpstreamError(response.status_code, safe)

            if method == "DELETE" or not response.content:
                return None
            return self._json(response)

        msg = f"{method} {path} rejected after credential refresh"
        raise AuthError(msg)

    @staticmethod
    def _json(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as exc:
            msg = f"response body is not JSON (HTTP {response.status_code})"
            raise DecodeError(msg) from exc

    def safe_message(self, response: httpx.Response) -> str:
        """Derive a caller-safe message from an error response body.

        Prefers the API's ``message``/``error`` field, strips anything that
        looks like a credential, and truncates.
        """
        text = ""
        try:
            data = response.json()
        except ValueError:
            text = response.text
        else:
            if isinstance(data, dict):
                for key in ("message", "error", "code"):
                    if isinstance(data.get(key), str):
                        text = data[key]
                        break
        text = text or response.reason_phrase or "request failed"
        return self.redact(text)

    def redact(self, text: str) -> str:
        for secret in sorted(self._secrets, key=len, reverse=True):
            text = text.replace(secret, _REDACTED)
        text = _BEARER_RE.sub(_REDACTED, text)
        text = _JWT_RE.sub(_REDACTED, text)
        text = _WHITESPACE_RE.sub(" ", text).strip()
        if len(text) > _MAX_SAFE_MESSAGE:
            text = text[: _MAX_SAFE_MESSAGE - 3] + "..."
        return text

    # ── Decoding helpers ───────────────────────────────────────────────────

    @staticmethod
    def _field(data: Any, key: str) -> Any:
        if not isinstance(data, dict) or key not in data:
            msg = f"response is missing {key!r}"
            raise DecodeError(msg)
        return data[key]

    @classmethod
    def _included(cls, data: Any, key: str) -> list[Any]:
        included = cls._field(data, "included")
        if not isinstance(included, dict):
            msg = "'included' is not an object"
            raise DecodeError(msg)
        items = included.get(key, [])
        if not isinstance(items, list):
            msg = f"'included.{key}' is not a list"
            raise DecodeError(msg)
        return items

    # ── Projects & boards ──────────────────────────────────────────────────

    async def list_projects(self) -> list[Project]:
        data = await self._request("GET", "/api/projects")
        items = self._field(data, "items")
        if not isinstance(items, list):
            msg = "'items' is not a list"
            raise DecodeError(msg)
        projects = [Project.from_api(item) for item in items]
        logger.info("Listed %d projects", len(projects))
        return projects

    async def list_boards(self, project_id: str) -> list[Board]:
        data = await self._request("GET", f"/api/projects/{_segment(project_id)}")
        boards = [Board.from_api(item) for item in self._included(data, "boards")]
        logger.info("Listed %d boards for project %s", len(boards), project_id)
        return boards

    async def create_board(self, project_id: str, name: str, position: float | None = None) -> Board:
        payload = {"name": name, "position": DEFAULT_POSITION if position is None else position}
        data = await self._request("POST", f"/api/projects/{_segment(project_id)}/boards", payload)
        board = Board.from_api(self._field(data, "item"))
        logger.info("Created board %s in project %s", board.id, project_id)
        return board

    # ── Lists ──────────────────────────────────────────────────────────────

    async def list_lists(self, board_id: str) -> list[KanbanList]:
        data = await self._request("GET", f"/api/boards/{_segment(board_id)}")
        lists = [KanbanList.from_api(item) for item in self._included(data, "lists")]
        logger.info("Listed %d lists for board %s", len(lists), board_id)
        return lists

    async def create_list(self, board_id: str, name: str, position: float | None = None) -> KanbanList:
        payload = {"name": name, "position": DEFAULT_POSITION if position is None else position}
        data = await self._request("POST", f"/api/boards/{_segment(board_id)}/lists", payload)
        kanban_list = KanbanList.from_api(self._field(data, "item"))
        logger.info("Created list %s on board %s", kanban_list.id, board_id)
        return kanban_list

    async def delete_list(self, list_id: str) -> None:
        logger.warning("Deleting list %s and all its cards", list_id)
        await self._request("DELETE", f"/api/lists/{_segment(list_id)}")
        logger.info("Deleted list %s", list_id)

    # ── Cards ──────────────────────────────────────────────────────────────

    async def list_cards(self, board_id: str) -> list[Card]:
        data = await self._request("GET", f"/api/boards/{_segment(board_id)}")
        cards = [Card.from_api(item) for item in self._included(data, "cards")]
        logger.info("Listed %d cards for board %s", len(cards), board_id)
        return cards

    async def create_card(
        self,
        list_id: str,
        name: str,
        *,
        card_type: CardType = CardType.PROJECT,
        description: str | None = None,
        due_date: str | None = None,
        is_due_completed: bool | None = None,
        position: float | None = None,
    ) -> Card:
        payload: dict[str, Any] = {
            "type": card_type.value,
            "name": name,
            "position": DEFAULT_POSITION if position is None else position,
        }
        if description is not None:
            payload["description"] = description
        if due_date is not None:
            payload["dueDate"] = due_date
        if is_due_completed is not None:
            payload["isDueCompleted"] = is_due_completed
        data = await self._request("POST", f"/api/lists/{_segment(list_id)}/cards", payload)
        card = Card.from_api(self._field(data, "item"))
        logger.info("Created card %s in list %s", card.id, list_id)
        return card

    async def update_card(
        self,
        card_id: str,
        *,
        name: str | None = None,
        description: str | None = None,
        card_type: CardType | None = None,
        due_date: str | None = None,
        is_due_completed: bool | None = None,
        board_id: str | None = None,
        cover_attachment_id: str | None = None,
    ) -> Card:
        changes: dict[str, Any] = {
            "name": name,
            "description": description,
            "type": card_type.value if card_type is not None else None,
            "dueDate": due_date,
            "isDueCompleted": is_due_completed,
            "boardId": board_id,
            "coverAttachmentId": cover_attachment_id,
        }
        payload = {k: v for k, v in changes.items() if v is not None}
        data = await self._request("PATCH", f"/api/cards/{_segment(card_id)}", payload)
        card = Card.from_api(self._field(data, "item"))
        logger.info("Updated card %s (%s)", card_id, ", ".join(sorted(payload)) or "no changes")
        return card

    async def move_card(self, card_id: str, list_id: str, position: float | None = None) -> Card:
        payload = {"listId": list_id, "position": DEFAULT_POSITION if position is None else position}
        data = await self._request("PATCH", f"/api/cards/{_segment(card_id)}", payload)
        card = Card.from_api(self._field(data, "item"))
        logger.info("Moved card %s to list %s", card_id, list_id)
        return card

    async def delete_card(self, card_id: str) -> None:
        logger.warning("Deleting card %s", card_id)
        await self._request("DELETE", f"/api/cards/{_segment(card_id)}")
        logger.info("Deleted card %s", card_id)

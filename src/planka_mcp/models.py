"""Kanban domain entities decoded from Planka API responses.

Decoding is permissive: unknown keys are ignored and both the API's
camelCase and snake_case spellings are accepted. Only the fields we need
are required; a missing or empty identifier raises DecodeError.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from planka_mcp.errors import DecodeError

# Planka orders items by position; 65535 puts a new item at the end.
DEFAULT_POSITION = 65535.0


class CardType(str, Enum):
    PROJECT = "project"
    STORY = "story"


def _lookup(data: dict[str, Any], *keys: str) -> Any:
    for key in keys:
        if key in data and data[key] is not None:
            return data[key]
    return None


def _require_str(data: dict[str, Any], kind: str, *keys: str) -> str:
    value = _lookup(data, *keys)
    if value is None:
        msg = f"{kind} is missing required field {keys[0]!r}"
        raise DecodeError(msg)
    if isinstance(value, bool) or not isinstance(value, (str, int)):
        msg = f"{kind} field {keys[0]!r} has unexpected type {type(value).__name__}"
        raise DecodeError(msg)
    text = str(value)
    if keys[0].lower().endswith("id") and not text:
        msg = f"{kind} has an empty {keys[0]!r}"
        raise DecodeError(msg)
    return text


def _optional_str(data: dict[str, Any], *keys: str) -> str | None:
    value = _lookup(data, *keys)
    return None if value is None else str(value)


def _optional_float(data: dict[str, Any], kind: str, *keys: str) -> float | None:
    value = _lookup(data, *keys)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        msg = f"{kind} field {keys[0]!r} is not a number"
        raise DecodeError(msg)
    return float(value)


def _optional_bool(data: dict[str, Any], *keys: str) -> bool | None:
    value = _lookup(data, *keys)
    return value if isinstance(value, bool) else None


def _as_record(data: Any, kind: str) -> dict[str, Any]:
    if not isinstance(data, dict):
        msg = f"{kind} must be a JSON object, got {type(data).__name__}"
        raise DecodeError(msg)
    return data


def _compact(values: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in values.items() if v is not None}


@dataclass(frozen=True)
class Project:
    id: str
    name: str
    slug: str | None = None

    @classmethod
    def from_api(cls, data: Any) -> Project:
        record = _as_record(data, "project")
        return cls(
            id=_require_str(record, "project", "id"),
            name=_require_str(record, "project", "name"),
            slug=_optional_str(record, "slug"),
        )

    def to_dict(self) -> dict[str, Any]:
        return _compact({"id": self.id, "name": self.name, "slug": self.slug})


@dataclass(frozen=True)
class Board:
    id: str
    name: str
    project_id: str | None = None
    position: float | None = None

    @classmethod
    def from_api(cls, data: Any) -> Board:
        record = _as_record(data, "board")
        return cls(
            id=_require_str(record, "board", "id"),
            name=_require_str(record, "board", "name"),
            project_id=_optional_str(record, "projectId", "project_id"),
            position=_optional_float(record, "board", "position"),
        )

    def to_dict(self) -> dict[str, Any]:
        return _compact({"id": self.id, "name": self.name, "project_id": self.project_id, "position": self.position})


@dataclass(frozen=True)
class KanbanList:
    """A column on a board (Planka calls these "lists")."""

    id: str
    name: str
    board_id: str
    position: float | None = None

    @classmethod
    def from_api(cls, data: Any) -> KanbanList:
        record = _as_record(data, "list")
        return cls(
            id=_require_str(record, "list", "id"),
            name=_require_str(record, "list", "name"),
            board_id=_require_str(record, "list", "boardId", "board_id"),
            position=_optional_float(record, "list", "position"),
        )

    def to_dict(self) -> dict[str, Any]:
        return _compact({"id": self.id, "name": self.name, "board_id": self.board_id, "position": self.position})


@dataclass(frozen=True)
class Card:
    id: str
    name: str
    list_id: str
    board_id: str | None = None
    description: str | None = None
    position: float | None = None
    type: str | None = None
    due_date: str | None = None
    is_due_completed: bool | None = None

    @classmethod
    def from_api(cls, data: Any) -> Card:
        record = _as_record(data, "card")
        return cls(
            id=_require_str(record, "card", "id"),
            name=_require_str(record, "card", "name"),
            list_id=_require_str(record, "card", "listId", "list_id"),
            board_id=_optional_str(record, "boardId", "board_id"),
            description=_optional_str(record, "description"),
            position=_optional_float(record, "card", "position"),
            type=_optional_str(record, "type"),
            due_date=_optional_str(record, "dueDate", "due_date"),
            is_due_completed=_optional_bool(record, "isDueCompleted", "is_due_completed"),
        )

    def to_dict(self) -> dict[str, Any]:
        return _compact(
            {
                "id": self.id,
                "name": self.name,
                "list_id": self.list_id,
                "board_id": self.board_id,
                "description": self.description,
                "position": self.position,
                "type": self.type,
                "due_date": self.due_date,
                "is_due_completed": self.is_due_completed,
            }
        )

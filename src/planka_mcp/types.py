# IMPORT CONSTRAINT: this module must only import from typing and the stdlib.
"""TypedDict contracts for tool handler input arguments.

Each TypedDict mirrors the JSON Schema ``inputSchema`` on the corresponding
``mcp.types.Tool`` definition. ``TOOL_ARGS_MAP`` maps tool names to their
TypedDict class so a test can verify structural agreement.

The dispatcher validates presence and JSON types before a handler runs;
handlers use ``cast()`` for type narrowing only.
"""

# NOTE: Do NOT add ``from __future__ import annotations`` to this module.
# It breaks TypedDict.__required_keys__ / __optional_keys__ introspection,
# which the contract test depends on.

from typing import NotRequired, TypedDict

# ---------------------------------------------------------------------------
# projects.py handlers
# ---------------------------------------------------------------------------


class ListProjectsArgs(TypedDict):
    pass


class ListBoardsArgs(TypedDict):
    project_id: str


class CreateBoardArgs(TypedDict):
    project_id: str
    name: str
    position: NotRequired[float]


# ---------------------------------------------------------------------------
# lists.py handlers
# ---------------------------------------------------------------------------


class ListListsArgs(TypedDict):
    board_id: str


class CreateListArgs(TypedDict):
    board_id: str
    name: str
    position: NotRequired[float]


class DeleteListArgs(TypedDict):
    list_id: str


# ---------------------------------------------------------------------------
# cards.py handlers
# ---------------------------------------------------------------------------


class ListCardsArgs(TypedDict):
    board_id: str


class CreateCardArgs(TypedDict):
    list_id: str
    name: str
    type: NotRequired[str]
    description: NotRequired[str]
    due_date: NotRequired[str]
    is_due_completed: NotRequired[bool]
    position: NotRequired[float]


class UpdateCardArgs(TypedDict):
    card_id: str
    name: NotRequired[str]
    description: NotRequired[str]
    type: NotRequired[str]
    due_date: NotRequired[str]
    is_due_completed: NotRequired[bool]
    board_id: NotRequired[str]
    cover_attachment_id: NotRequired[str]


class MoveCardArgs(TypedDict):
    card_id: str
    list_id: str
    position: NotRequired[float]


class DeleteCardArgs(TypedDict):
    card_id: str


TOOL_ARGS_MAP: dict[str, type] = {
    "list_projects": ListProjectsArgs,
    "list_boards": ListBoardsArgs,
    "create_board": CreateBoardArgs,
    "list_lists": ListListsArgs,
    "create_list": CreateListArgs,
    "delete_list": DeleteListArgs,
    "list_cards": ListCardsArgs,
    "create_card": CreateCardArgs,
    "update_card": UpdateCardArgs,
    "move_card": MoveCardArgs,
    "delete_card": DeleteCardArgs,
}

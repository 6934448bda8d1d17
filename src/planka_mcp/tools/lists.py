"""Tools for lists (the columns of a board)."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from mcp.types import Tool

from planka_mcp.tools.common import DESTRUCTIVE, MUTATING, READ_ONLY, _id_property, _parse_args
from planka_mcp.types import CreateListArgs, DeleteListArgs, ListListsArgs

if TYPE_CHECKING:
    from planka_mcp.gateway import PlankaGateway
    from planka_mcp.registry import Handler


def register() -> tuple[list[Tool], dict[str, Handler]]:
    """Return (tool_definitions, handler_map) for list tools."""
    tools = [
        Tool(
            name="list_lists",
            description="List all lists (columns) on a board",
            inputSchema={
                "type": "object",
                "properties": {"board_id": _id_property("The board ID")},
                "required": ["board_id"],
            },
            annotations=READ_ONLY,
        ),
        Tool(
            name="create_list",
            description="Create a new list (column) on a board",
            inputSchema={
                "type": "object",
                "properties": {
                    "board_id": _id_property("The board ID to create the list on"),
                    "name": {"type": "string", "description": "The list name"},
                    "position": {"type": "number", "description": "Position on the board (default: last)"},
                },
                "required": ["board_id", "name"],
            },
            annotations=MUTATING,
        ),
        Tool(
            name="delete_list",
            description="Delete a list and all its cards",
            inputSchema={
                "type": "object",
                "properties": {"list_id": _id_property("The list ID to delete")},
                "required": ["list_id"],
            },
            annotations=DESTRUCTIVE,
        ),
    ]

    handlers: dict[str, Handler] = {
        "list_lists": _handle_list_lists,
        "create_list": _handle_create_list,
        "delete_list": _handle_delete_list,
    }

    return tools, handlers


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------


async def _handle_list_lists(gateway: PlankaGateway, arguments: dict[str, Any]) -> list[dict[str, Any]]:
    args = _parse_args(arguments, ListListsArgs)
    return [kanban_list.to_dict() for kanban_list in await gateway.list_lists(args["board_id"])]


async def _handle_create_list(gateway: PlankaGateway, arguments: dict[str, Any]) -> dict[str, Any]:
    args = _parse_args(arguments, CreateListArgs)
    kanban_list = await gateway.create_list(args["board_id"], args["name"], position=args.get("position"))
    return kanban_list.to_dict()


async def _handle_delete_list(gateway: PlankaGateway, arguments: dict[str, Any]) -> dict[str, Any]:
    args = _parse_args(arguments, DeleteListArgs)
    await gateway.delete_list(args["list_id"])
    return {"deleted": True, "id": args["list_id"]}

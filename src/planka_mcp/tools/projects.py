"""Tools for projects and boards."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from mcp.types import Tool

from planka_mcp.tools.common import MUTATING, READ_ONLY, _id_property, _parse_args
from planka_mcp.types import CreateBoardArgs, ListBoardsArgs

if TYPE_CHECKING:
    from planka_mcp.gateway import PlankaGateway
    from planka_mcp.registry import Handler


def register() -> tuple[list[Tool], dict[str, Handler]]:
    """Return (tool_definitions, handler_map) for project/board tools."""
    tools = [
        Tool(
            name="list_projects",
            description="List all Planka projects",
            inputSchema={"type": "object", "properties": {}, "required": []},
            annotations=READ_ONLY,
        ),
        Tool(
            name="list_boards",
            description="List all boards in a project",
            inputSchema={
                "type": "object",
                "properties": {"project_id": _id_property("The project ID")},
                "required": ["project_id"],
            },
            annotations=READ_ONLY,
        ),
        Tool(
            name="create_board",
            description="Create a new board in a project",
            inputSchema={
                "type": "object",
                "properties": {
                    "project_id": _id_property("The project ID to create the board in"),
                    "name": {"type": "string", "description": "The board name"},
                    "position": {"type": "number", "description": "Position among the project's boards (default: last)"},
                },
                "required": ["project_id", "name"],
            },
            annotations=MUTATING,
        ),
    ]

    handlers: dict[str, Handler] = {
        "list_projects": _handle_list_projects,
        "list_boards": _handle_list_boards,
        "create_board": _handle_create_board,
    }

    return tools, handlers


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------


async def _handle_list_projects(gateway: PlankaGateway, arguments: dict[str, Any]) -> list[dict[str, Any]]:
    return [project.to_dict() for project in await gateway.list_projects()]


async def _handle_list_boards(gateway: PlankaGateway, arguments: dict[str, Any]) -> list[dict[str, Any]]:
    args = _parse_args(arguments, ListBoardsArgs)
    return [board.to_dict() for board in await gateway.list_boards(args["project_id"])]


async def _handle_create_board(gateway: PlankaGateway, arguments: dict[str, Any]) -> dict[str, Any]:
    args = _parse_args(arguments, CreateBoardArgs)
    board = await gateway.create_board(args["project_id"], args["name"], position=args.get("position"))
    return board.to_dict()

"""Tools for cards: list, create, update, move, delete."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from mcp.types import Tool

from planka_mcp.models import CardType
from planka_mcp.tools.common import CARD_TYPES, DESTRUCTIVE, MUTATING, READ_ONLY, _card_type, _id_property, _parse_args
from planka_mcp.types import CreateCardArgs, DeleteCardArgs, ListCardsArgs, MoveCardArgs, UpdateCardArgs

if TYPE_CHECKING:
    from planka_mcp.gateway import PlankaGateway
    from planka_mcp.registry import Handler


def register() -> tuple[list[Tool], dict[str, Handler]]:
    """Return (tool_definitions, handler_map) for card tools."""
    tools = [
        Tool(
            name="list_cards",
            description="List all cards on a board",
            inputSchema={
                "type": "object",
                "properties": {"board_id": _id_property("The board ID")},
                "required": ["board_id"],
            },
            annotations=READ_ONLY,
        ),
        Tool(
            name="create_card",
            description="Create a new card in a list",
            inputSchema={
                "type": "object",
                "properties": {
                    "list_id": _id_property("The list ID to create the card in"),
                    "name": {"type": "string", "description": "The card title"},
                    "type": {
                        "type": "string",
                        "enum": CARD_TYPES,
                        "default": CardType.PROJECT.value,
                        "description": "Type of the card (project or story)",
                    },
                    "description": {"type": "string", "description": "Optional card description"},
                    "due_date": {"type": "string", "format": "date-time", "description": "Optional due date (ISO 8601)"},
                    "is_due_completed": {"type": "boolean", "description": "Whether the due date is completed"},
                    "position": {"type": "number", "description": "Position in the list (default: last)"},
                },
                "required": ["list_id", "name"],
            },
            annotations=MUTATING,
        ),
        Tool(
            name="update_card",
            description="Update a card's properties (name, description, type, due date, etc.)",
            inputSchema={
                "type": "object",
                "properties": {
                    "card_id": _id_property("The card ID to update"),
                    "name": {"type": "string", "description": "New card title"},
                    "description": {"type": "string", "description": "New card description"},
                    "type": {"type": "string", "enum": CARD_TYPES, "description": "Card type"},
                    "due_date": {"type": "string", "format": "date-time", "description": "Due date (ISO 8601)"},
                    "is_due_completed": {"type": "boolean", "description": "Whether the due date is completed"},
                    "board_id": {"type": "string", "description": "Move card to a different board"},
                    "cover_attachment_id": {"type": "string", "description": "Set cover image attachment ID"},
                },
                "required": ["card_id"],
            },
            annotations=MUTATING,
        ),
        Tool(
            name="move_card",
            description="Move a card to a different list",
            inputSchema={
                "type": "object",
                "properties": {
                    "card_id": _id_property("The card ID to move"),
                    "list_id": _id_property("The target list ID"),
                    "position": {"type": "number", "description": "Position in the list (default: last)"},
                },
                "required": ["card_id", "list_id"],
            },
            annotations=MUTATING,
        ),
        Tool(
            name="delete_card",
            description="Delete a card",
            inputSchema={
                "type": "object",
                "properties": {"card_id": _id_property("The card ID to delete")},
                "required": ["card_id"],
            },
            annotations=DESTRUCTIVE,
        ),
    ]

    handlers: dict[str, Handler] = {
        "list_cards": _handle_list_cards,
        "create_card": _handle_create_card,
        "update_card": _handle_update_card,
        "move_card": _handle_move_card,
        "delete_card": _handle_delete_card,
    }

    return tools, handlers


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------


async def _handle_list_cards(gateway: PlankaGateway, arguments: dict[str, Any]) -> list[dict[str, Any]]:
    args = _parse_args(arguments, ListCardsArgs)
    return [card.to_dict() for card in await gateway.list_cards(args["board_id"])]


async def _handle_create_card(gateway: PlankaGateway, arguments: dict[str, Any]) -> dict[str, Any]:
    args = _parse_args(arguments, CreateCardArgs)
    card = await gateway.create_card(
        args["list_id"],
        args["name"],
        card_type=_card_type(args.get("type")) or CardType.PROJECT,
        description=args.get("description"),
        due_date=args.get("due_date"),
        is_due_completed=args.get("is_due_completed"),
        position=args.get("position"),
    )
    return card.to_dict()


async def _handle_update_card(gateway: PlankaGateway, arguments: dict[str, Any]) -> dict[str, Any]:
    args = _parse_args(arguments, UpdateCardArgs)
    card = await gateway.update_card(
        args["card_id"],
        name=args.get("name"),
        description=args.get("description"),
        card_type=_card_type(args.get("type")),
        due_date=args.get("due_date"),
        is_due_completed=args.get("is_due_completed"),
        board_id=args.get("board_id"),
        cover_attachment_id=args.get("cover_attachment_id"),
    )
    return card.to_dict()


async def _handle_move_card(gateway: PlankaGateway, arguments: dict[str, Any]) -> dict[str, Any]:
    args = _parse_args(arguments, MoveCardArgs)
    card = await gateway.move_card(args["card_id"], args["list_id"], position=args.get("position"))
    return card.to_dict()


async def _handle_delete_card(gateway: PlankaGateway, arguments: dict[str, Any]) -> dict[str, Any]:
    args = _parse_args(arguments, DeleteCardArgs)
    await gateway.delete_card(args["card_id"])
    return {"deleted": True, "id": args["card_id"]}

"""Tool registry: the single source of truth for the protocol surface.

Tools are registered once at startup and the registry is then frozen.
Lookups after that are read-only, so concurrent handlers never race on it.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from mcp.types import Tool

from planka_mcp.errors import ConfigError

if TYPE_CHECKING:
    from planka_mcp.gateway import PlankaGateway

logger = logging.getLogger(__name__)

Handler = Callable[["PlankaGateway", dict[str, Any]], Awaitable[Any]]
ToolModule = Callable[[], tuple[list[Tool], dict[str, Handler]]]


class DuplicateToolError(ConfigError):
    """Two tools were registered under the same name."""


class RegistryFrozenError(ConfigError):
    """A tool was registered after startup completed."""


@dataclass(frozen=True)
class ToolDescriptor:
    name: str
    description: str
    input_schema: MappingProxyType[str, Any]
    handler: Handler
    destructive: bool = False

    @classmethod
    def from_tool(cls, tool: Tool, handler: Handler) -> ToolDescriptor:
        """Build a descriptor from an MCP tool definition.

        ``destructive`` comes from the ``destructiveHint`` annotation.
        """
        hints = tool.annotations.model_dump(by_alias=True) if tool.annotations is not None else {}
        destructive = bool(hints.get("destructiveHint"))
        return cls(
            name=tool.name,
            description=tool.description or "",
            input_schema=MappingProxyType(dict(tool.inputSchema)),
            handler=handler,
            destructive=destructive,
        )

    def describe(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "input_schema": dict(self.input_schema),
            "destructive": self.destructive,
        }


class ToolRegistry:
    def __init__(self) -> None:
        self._tools: dict[str, ToolDescriptor] = {}
        self._frozen = False

    def register(self, descriptor: ToolDescriptor) -> None:
        if self._frozen:
            msg = f"Cannot register {descriptor.name!r}: registry is frozen"
            raise RegistryFrozenError(msg)
        if descriptor.name in self._tools:
            msg = f"Duplicate tool name: {descriptor.name!r}"
            raise DuplicateToolError(msg)
        self._tools[descriptor.name] = descriptor

    def freeze(self) -> None:
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def lookup(self, name: str) -> ToolDescriptor | None:
        return self._tools.get(name)

    def describe_all(self) -> list[ToolDescriptor]:
        """All descriptors, in registration order."""
        return list(self._tools.values())

    def __len__(self) -> int:
        return len(self._tools)

    def __contains__(self, name: object) -> bool:
        return name in self._tools


def register_module(registry: ToolRegistry, module: ToolModule) -> None:
    """Register every tool returned by a tool module's ``register()``."""
    tools, handlers = module()
    tool_names = {t.name for t in tools}
    if tool_names != set(handlers):
        msg = f"tool/handler mismatch: tools={sorted(tool_names - set(handlers))}, handlers={sorted(set(handlers) - tool_names)}"
        raise ConfigError(msg)
    for tool in tools:
        registry.register(ToolDescriptor.from_tool(tool, handlers[tool.name]))


def build_registry(modules: Iterable[ToolModule] | None = None) -> ToolRegistry:
    """Assemble and freeze the registry from the tool modules."""
    if modules is None:
        from planka_mcp.tools import cards, lists, projects

        modules = (projects.register, lists.register, cards.register)

    registry = ToolRegistry()
    for module in modules:
        register_module(registry, module)
    registry.freeze()
    logger.info("Registered %d tools", len(registry))
    return registry

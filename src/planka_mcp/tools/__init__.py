"""Tool definitions and handlers, one module per kanban domain.

Each module exposes ``register() -> (list[Tool], dict[name, handler])``;
:func:`planka_mcp.registry.build_registry` collects them at startup.
"""

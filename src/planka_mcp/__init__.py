"""planka-mcp: a stdio tool server for the Planka kanban board."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("planka-mcp")
except PackageNotFoundError:
    __version__ = "0.0.0-dev"

__all__ = ["__version__"]

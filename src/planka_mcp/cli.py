"""Command-line entry point.

Usage:
    planka-mcp --url https://planka.example.com --token <token>
    PLANKA_URL=... PLANKA_EMAIL=... PLANKA_PASSWORD=... planka-mcp

Every option can also come from its environment variable, so an MCP client can
launch the server with no arguments at all.
"""

from __future__ import annotations

import asyncio
import os
import sys
from typing import Any

import click

from planka_mcp import __version__
from planka_mcp.config import DEFAULT_LOG_LEVEL, DEFAULT_TIMEOUT_SECONDS, Settings
from planka_mcp.dispatcher import Dispatcher
from planka_mcp.errors import ConfigError
from planka_mcp.gateway import PlankaGateway
from planka_mcp.logging import setup_logging
from planka_mcp.registry import ToolRegistry, build_registry
from planka_mcp.transport import stdio_streams

_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


async def _serve(settings: Settings, registry: ToolRegistry) -> None:
    async with PlankaGateway(settings) as gateway, stdio_streams() as (lines, writer):
        await Dispatcher(registry, gateway).run(lines, writer)


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------

# option name -> environment variable it overrides
_OPTION_ENV = {
    "url": "PLANKA_URL",
    "token": "PLANKA_TOKEN",
    "email": "PLANKA_EMAIL",
    "password": "PLANKA_PASSWORD",
    "timeout": "PLANKA_TIMEOUT",
    "token_ttl": "PLANKA_TOKEN_TTL",
    "log_level": "PLANKA_MCP_LOG_LEVEL",
    "log_file": "PLANKA_MCP_LOG_FILE",
}


def _settings_from(options: dict[str, Any]) -> Settings:
    """Layer command-line options over the process environment."""
    environ = dict(os.environ)
    for name, value in options.items():
        if value is not None:
            environ[_OPTION_ENV[name]] = str(value)
    return Settings.from_env(environ)


@click.command()
@click.version_option(version=__version__, prog_name="planka-mcp")
@click.option("--url", help="Base URL of the Planka instance [env: PLANKA_URL]")
@click.option("--token", help="Static API token, skips login [env: PLANKA_TOKEN]")
@click.option("--email", help="Email or username for password login [env: PLANKA_EMAIL]")
@click.option("--password", help="Password for password login [env: PLANKA_PASSWORD]")
@click.option("--timeout", type=float, help=f"Per-request timeout in seconds (default {DEFAULT_TIMEOUT_SECONDS:g}) [env: PLANKA_TIMEOUT]")
@click.option("--token-ttl", type=float, help="Re-login after this many seconds [env: PLANKA_TOKEN_TTL]")
@click.option(
    "--log-level",
    type=click.Choice(_LOG_LEVELS, case_sensitive=False),
    help=f"Log level (default {DEFAULT_LOG_LEVEL}) [env: PLANKA_MCP_LOG_LEVEL]",
)
@click.option("--log-file", help="Also write JSON logs to this file [env: PLANKA_MCP_LOG_FILE]")
def main(**options: Any) -> None:
    """Serve Planka kanban tools over stdio (one JSON message per line)."""
    try:
        settings = _settings_from(options)
    except ConfigError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)

    logger = setup_logging(settings.log_level, settings.log_file)
    registry = build_registry()
    logger.info("server_start", extra={"tool": "server", "args_data": {"url": settings.base_url, "tools": len(registry)}})
    asyncio.run(_serve(settings, registry))
    logger.info("server_stop", extra={"tool": "server"})

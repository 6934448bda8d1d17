"""Fixtures for planka-mcp tests."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Awaitable, Callable, Iterator
from typing import Any

import httpx
import pytest

from planka_mcp.config import Settings
from planka_mcp.dispatcher import Dispatcher
from planka_mcp.gateway import PlankaGateway
from planka_mcp.logging import LOGGER_NAME
from planka_mcp.registry import ToolRegistry, build_registry
from tests._helpers import BASE_URL, EMAIL, PASSWORD, FakePlanka, ListWriter, feed


@pytest.fixture
def password_settings() -> Settings:
    return Settings(base_url=BASE_URL, email=EMAIL, password=PASSWORD)


@pytest.fixture
def token_settings() -> Settings:
    return Settings(base_url=BASE_URL, token="static-token")


@pytest.fixture
def planka() -> FakePlanka:
    return FakePlanka()


@pytest.fixture
async def gateway(password_settings: Settings, planka: FakePlanka) -> AsyncIterator[PlankaGateway]:
    """A password-mode gateway talking to the fake server."""
    gw = PlankaGateway(password_settings, transport=httpx.MockTransport(planka.handler))
    yield gw
    await gw.aclose()


@pytest.fixture
def registry() -> ToolRegistry:
    return build_registry()


@pytest.fixture
def dispatch(registry: ToolRegistry, gateway: PlankaGateway) -> Callable[..., Awaitable[ListWriter]]:
    """Run a dispatcher over the given messages until input ends."""

    async def _run(*messages: Any) -> ListWriter:
        writer = ListWriter()
        await Dispatcher(registry, gateway).run(feed(list(messages)), writer)
        return writer

    return _run


@pytest.fixture
def reset_logging() -> Iterator[None]:
    """Restore the package logger after a test that configures it."""
    logger = logging.getLogger(LOGGER_NAME)
    saved = (logger.handlers[:], logger.level, logger.propagate)
    yield
    for handler in logger.handlers[:]:
        if handler not in saved[0]:
            logger.removeHandler(handler)
            handler.close()
    logger.setLevel(saved[1])
    logger.propagate = saved[2]

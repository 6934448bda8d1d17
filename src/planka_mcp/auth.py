"""Credential management for the Planka gateway.

Two modes:

* ``StaticTokenCredentials`` hands out a configured bearer token.
* ``PasswordCredentials`` logs in with email/password on first use and
  caches the resulting token. Concurrent callers that find no usable token
  share a single in-flight login: exactly one login request reaches Planka
  and every waiter receives the same token or the same ``AuthError``.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from typing import Protocol

from planka_mcp.config import Settings
from planka_mcp.errors import AuthError, PlankaMCPError

logger = logging.getLogger(__name__)

LoginFn = Callable[[str, str], Awaitable[str]]


class CredentialManager(Protocol):
    async def acquire(self) -> str: ...

    def invalidate(self, token: str) -> None: ...


class StaticTokenCredentials:
    """A fixed bearer token. Never refreshed."""

    def __init__(self, token: str) -> None:
        self._token = token

    async def acquire(self) -> str:
        return self._token

    def invalidate(self, token: str) -> None:
        # Nothing to refresh; the gateway still retries once with the same token.
        return None

    def __repr__(self) -> str:
        return "StaticTokenCredentials(token=***)"


class PasswordCredentials:
    """Email/password login with a cached token and single-flight refresh."""

    def __init__(
        self,
        email: str,
        password: str,
        login: LoginFn,
        *,
        token_ttl: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._email = email
        self._password = password
        self._login = login
        self._token_ttl = token_ttl
        self._clock = clock
        self._token: str | None = None
        self._expires_at: float | None = None
        self._inflight: asyncio.Future[str] | None = None

    def __repr__(self) -> str:
        return f"PasswordCredentials(email={self._email!r}, password=***)"

    def _cached(self) -> str | None:
        if self._token is None:
            return None
        if self._expires_at is not None and self._clock() >= self._expires_at:
            logger.info("Cached Planka token expired")
            self._token = None
            self._expires_at = None
            return None
        return self._token

    async def acquire(self) -> str:
        token = self._cached()
        if token is not None:
            return token

        if self._inflight is not None:
            logger.debug("Login already in progress, waiting for its result")
            # shield: a cancelled waiter must not cancel the shared login
            return await asyncio.shield(self._inflight)

        future: asyncio.Future[str] = asyncio.get_running_loop().create_future()
        self._inflight = future
        try:
            token = await self._perform_login()
        except AuthError as exc:
            _fail(future, exc)
            raise
        except Exception as exc:
            logger.error("Planka login crashed: %s", type(exc).__name__, exc_info=True)
            error = AuthError("login did not complete")
            _fail(future, error)
            raise error from exc
        except BaseException:
            _fail(future, AuthError("login did not complete"))
            raise
        else:
            self._token = token
            self._expires_at = None if self._token_ttl is None else self._clock() + self._token_ttl
            future.set_result(token)
            return token
        finally:
            self._inflight = None

    async def _perform_login(self) -> str:
        logger.info("Authenticating with Planka as %s", self._email)
        try:
            token = await self._login(self._email, self._password)
        except AuthError:
            logger.error("Planka login rejected for %s", self._email)
            raise
        except PlankaMCPError as exc:
            logger.error("Planka login failed: %s", type(exc).__name__)
            msg = f"login failed: {type(exc).__name__}"
            raise AuthError(msg) from exc
        if not token:
            msg = "login response did not contain a token"
            raise AuthError(msg)
        logger.info("Authentication successful, token cached")
        return token

    def invalidate(self, token: str) -> None:
        """Drop the cached token if it is still *token*.

        A stale 401 from a request that started before a refresh must not
        discard the newer token.
        """
        if self._token is not None and self._token == token:
            logger.info("Planka rejected the cached token; it will be refreshed on next use")
            self._token = None
            self._expires_at = None


def _fail(future: asyncio.Future[str], error: AuthError) -> None:
    future.set_exception(error)
    # Mark retrieved so a login nobody else waited on is not reported as a leak.
    future.exception()


def build_credentials(settings: Settings, login: LoginFn) -> CredentialManager:
    if settings.token:
        return StaticTokenCredentials(settings.token)
    assert settings.email is not None and settings.password is not None
    return PasswordCredentials(settings.email, settings.password, login, token_ttl=settings.token_ttl)

"""Tests for credential management and single-flight login."""

from __future__ import annotations

import asyncio

import pytest

from planka_mcp.auth import PasswordCredentials, StaticTokenCredentials, build_credentials
from planka_mcp.config import Settings
from planka_mcp.errors import AuthError, TransportError


class FakeLogin:
    """Counts calls; each login waits on ``gate`` so callers can pile up."""

    def __init__(self, tokens: list[str] | None = None, error: Exception | None = None) -> None:
        self.tokens = tokens or ["T1", "T2", "T3"]
        self.error = error
        self.calls = 0
        self.gate = asyncio.Event()
        self.gate.set()

    async def __call__(self, email: str, password: str) -> str:
        self.calls += 1
        await self.gate.wait()
        if self.error is not None:
            raise self.error
        return self.tokens[self.calls - 1]


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


class TestStaticToken:
    async def test_returns_token(self) -> None:
        creds = StaticTokenCredentials("abc")
        assert await creds.acquire() == "abc"
        creds.invalidate("abc")
        assert await creds.acquire() == "abc"

    def test_repr_hides_token(self) -> None:
        assert "abc" not in repr(StaticTokenCredentials("abc"))


class TestSingleFlight:
    async def test_concurrent_callers_share_one_login(self) -> None:
        login = FakeLogin()
        login.gate.clear()
        creds = PasswordCredentials("a@b.c", "pw", login)

        waiters = [asyncio.create_task(creds.acquire()) for _ in range(10)]
        await asyncio.sleep(0)
        login.gate.set()
        tokens = await asyncio.gather(*waiters)

        assert login.calls == 1
        assert set(tokens) == {"T1"}

    async def test_concurrent_callers_share_failure(self) -> None:
        login = FakeLogin(error=AuthError("rejected"))
        login.gate.clear()
        creds = PasswordCredentials("a@b.c", "pw", login)

        waiters = [asyncio.create_task(creds.acquire()) for _ in range(5)]
        await asyncio.sleep(0)
        login.gate.set()
        results = await asyncio.gather(*waiters, return_exceptions=True)

        assert login.calls == 1
        assert all(isinstance(r, AuthError) for r in results)
        assert len({id(r) for r in results}) == 1

    async def test_failure_is_not_cached(self) -> None:
        login = FakeLogin(error=AuthError("rejected"))
        creds = PasswordCredentials("a@b.c", "pw", login)
        with pytest.raises(AuthError):
            await creds.acquire()
        login.error = None
        assert await creds.acquire() == "T2"
        assert login.calls == 2

    async def test_other_failures_become_auth_errors(self) -> None:
        creds = PasswordCredentials("a@b.c", "pw", FakeLogin(error=TransportError("refused")))
        with pytest.raises(AuthError, match="TransportError"):
            await creds.acquire()

    async def test_unexpected_login_failure_is_shared(self) -> None:
        login = FakeLogin(error=RuntimeError("bug in login"))
        login.gate.clear()
        creds = PasswordCredentials("a@b.c", "pw", login)

        waiters = [asyncio.create_task(creds.acquire()) for _ in range(3)]
        await asyncio.sleep(0)
        login.gate.set()
        results = await asyncio.gather(*waiters, return_exceptions=True)

        assert all(isinstance(r, AuthError) for r in results)
        assert len({id(r) for r in results}) == 1
        assert isinstance(results[0].__cause__, RuntimeError)

    async def test_empty_token_is_auth_error(self) -> None:
        creds = PasswordCredentials("a@b.c", "pw", FakeLogin(tokens=[""]))
        with pytest.raises(AuthError):
            await creds.acquire()

    async def test_cancelled_waiter_does_not_cancel_login(self) -> None:
        login = FakeLogin()
        login.gate.clear()
        creds = PasswordCredentials("a@b.c", "pw", login)

        leader = asyncio.create_task(creds.acquire())
        await asyncio.sleep(0)
        follower = asyncio.create_task(creds.acquire())
        await asyncio.sleep(0)
        follower.cancel()
        login.gate.set()

        assert await leader == "T1"
        with pytest.raises(asyncio.CancelledError):
            await follower


class TestCaching:
    async def test_token_cached(self) -> None:
        login = FakeLogin()
        creds = PasswordCredentials("a@b.c", "pw", login)
        assert await creds.acquire() == "T1"
        assert await creds.acquire() == "T1"
        assert login.calls == 1

    async def test_invalidate_forces_relogin(self) -> None:
        login = FakeLogin()
        creds = PasswordCredentials("a@b.c", "pw", login)
        await creds.acquire()
        creds.invalidate("T1")
        assert await creds.acquire() == "T2"

    async def test_stale_invalidate_keeps_newer_token(self) -> None:
        login = FakeLogin()
        creds = PasswordCredentials("a@b.c", "pw", login)
        await creds.acquire()
        creds.invalidate("T1")
        await creds.acquire()
        creds.invalidate("T1")
        assert await creds.acquire() == "T2"
        assert login.calls == 2

    async def test_ttl_expiry(self) -> None:
        login = FakeLogin()
        clock = FakeClock()
        creds = PasswordCredentials("a@b.c", "pw", login, token_ttl=60, clock=clock)
        assert await creds.acquire() == "T1"
        clock.now += 59
        assert await creds.acquire() == "T1"
        clock.now += 1
        assert await creds.acquire() == "T2"

    def test_repr_hides_password(self) -> None:
        assert "pw-secret" not in repr(PasswordCredentials("a@b.c", "pw-secret", FakeLogin()))


class TestBuildCredentials:
    def test_token_settings(self, token_settings: Settings) -> None:
        assert isinstance(build_credentials(token_settings, FakeLogin()), StaticTokenCredentials)

    def test_password_settings(self, password_settings: Settings) -> None:
        assert isinstance(build_credentials(password_settings, FakeLogin()), PasswordCredentials)

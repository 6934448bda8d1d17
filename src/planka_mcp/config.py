"""Runtime settings, read from the environment (or CLI overrides)."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from urllib.parse import urlparse

from planka_mcp.errors import ConfigError

DEFAULT_TIMEOUT_SECONDS = 30.0
DEFAULT_LOG_LEVEL = "INFO"


@dataclass(frozen=True)
class Settings:
    base_url: str
    token: str | None = None
    email: str | None = None
    password: str | None = None
    timeout: float = DEFAULT_TIMEOUT_SECONDS
    token_ttl: float | None = None
    log_level: str = DEFAULT_LOG_LEVEL
    log_file: str | None = None

    def __post_init__(self) -> None:
        parsed = urlparse(self.base_url)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            msg = f"PLANKA_URL must be an http(s) URL, got {self.base_url!r}"
            raise ConfigError(msg)
        if not self.token:
            if not self.email:
                msg = "PLANKA_TOKEN or PLANKA_EMAIL must be set"
                raise ConfigError(msg)
            if not self.password:
                msg = "PLANKA_PASSWORD must be set when using PLANKA_EMAIL"
                raise ConfigError(msg)
        if self.timeout <= 0:
            msg = f"timeout must be positive, got {self.timeout}"
            raise ConfigError(msg)
        if self.token_ttl is not None and self.token_ttl <= 0:
            msg = f"token TTL must be positive, got {self.token_ttl}"
            raise ConfigError(msg)

    @property
    def uses_static_token(self) -> bool:
        return bool(self.token)

    def __repr__(self) -> str:
        # Never render secrets, even in tracebacks.
        mode = "token" if self.uses_static_token else f"email={self.email!r}"
        return f"Settings(base_url={self.base_url!r}, auth={mode}, timeout={self.timeout})"

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Settings:
        env = os.environ if environ is None else environ
        base_url = env.get("PLANKA_URL", "").strip()
        if not base_url:
            msg = "PLANKA_URL not set"
            raise ConfigError(msg)
        return cls(
            base_url=base_url,
            token=env.get("PLANKA_TOKEN") or None,
            email=env.get("PLANKA_EMAIL") or None,
            password=env.get("PLANKA_PASSWORD") or None,
            timeout=_parse_float(env, "PLANKA_TIMEOUT", DEFAULT_TIMEOUT_SECONDS),
            token_ttl=_parse_float(env, "PLANKA_TOKEN_TTL", None),
            log_level=env.get("PLANKA_MCP_LOG_LEVEL", DEFAULT_LOG_LEVEL).upper(),
            log_file=env.get("PLANKA_MCP_LOG_FILE") or None,
        )


def _parse_float(env: Mapping[str, str], name: str, default: float | None) -> float | None:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        msg = f"{name} must be a number, got {raw!r}"
        raise ConfigError(msg) from None

"""Request configuration loaded from the environment or built in code."""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from enum import StrEnum
from typing import Self
from urllib.parse import quote

from dotenv import load_dotenv

from quotefetch.errors import ConfigError

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)
NO_PROXY_SENTINELS = {"", "no_proxy", "none"}


class BatchPolicy(StrEnum):
    """How batch operations react to a per-symbol failure."""

    FAIL_FAST = "fail_fast"
    PARTIAL = "partial"


def normalize_batch_policy(
    value: str | None,
    default: BatchPolicy = BatchPolicy.FAIL_FAST,
) -> BatchPolicy:
    """Map user-facing policy names onto BatchPolicy."""
    mapping = {
        "fail_fast": BatchPolicy.FAIL_FAST,
        "fail-fast": BatchPolicy.FAIL_FAST,
        "failfast": BatchPolicy.FAIL_FAST,
        "strict": BatchPolicy.FAIL_FAST,
        "partial": BatchPolicy.PARTIAL,
        "partial_success": BatchPolicy.PARTIAL,
        "partial-success": BatchPolicy.PARTIAL,
        "lenient": BatchPolicy.PARTIAL,
    }
    if value is None or not value.strip():
        return default
    candidate = value.strip().lower()
    if candidate not in mapping:
        raise ConfigError(
            f"batch policy must be one of fail_fast, partial (got '{value}')"
        )
    return mapping[candidate]


def parse_int(value: str | None, default: int, *, field_name: str) -> int:
    """Parse an integer environment string, falling back to the default."""
    if value is None or not value.strip():
        return default
    try:
        return int(value.strip())
    except ValueError as exc:
        raise ConfigError(f"{field_name} must be an integer (got '{value}')") from exc


@dataclass(frozen=True)
class ProxyConfig:
    """Explicit per-request proxy settings."""

    host: str
    port: int
    username: str | None = None
    password: str | None = None
    scheme: str = "http"

    def url(self) -> str:
        return f"{self.scheme}://{self._auth(redact=False)}{self.host}:{self.port}"

    def redacted_url(self) -> str:
        """Proxy URL safe for log output."""
        return f"{self.scheme}://{self._auth(redact=True)}{self.host}:{self.port}"

    def _auth(self, *, redact: bool) -> str:
        if not self.username:
            return ""
        user = quote(self.username, safe="")
        if self.password is None:
            return f"{user}@"
        secret = "***" if redact else quote(self.password, safe="")
        return f"{user}:{secret}@"

    def validate(self) -> Self:
        if not self.host.strip():
            raise ConfigError("proxy host must not be empty")
        if not 1 <= self.port <= 65535:
            raise ConfigError(f"proxy port must be between 1 and 65535 (got {self.port})")
        if self.password and not self.username:
            raise ConfigError("proxy password requires a proxy username")
        if self.scheme not in {"http", "https", "socks5", "socks5h"}:
            raise ConfigError(f"unsupported proxy scheme '{self.scheme}'")
        return self

    @classmethod
    def from_env(cls) -> Self | None:
        """Build proxy settings from QUOTEFETCH_PROXY_* variables, if any."""
        host = os.getenv("QUOTEFETCH_PROXY_HOST", "").strip()
        if host.lower() in NO_PROXY_SENTINELS:
            return None
        username = os.getenv("QUOTEFETCH_PROXY_USERNAME", "").strip() or None
        password = os.getenv("QUOTEFETCH_PROXY_PASSWORD", "") or None
        proxy = cls(
            host=host,
            port=parse_int(os.getenv("QUOTEFETCH_PROXY_PORT"), 8080, field_name="proxy port"),
            username=username,
            password=password,
            scheme=os.getenv("QUOTEFETCH_PROXY_SCHEME", "http").strip().lower() or "http",
        )
        return proxy.validate()


@dataclass(frozen=True)
class RequestConfig:
    """Immutable settings shared by every fetch; safe to share across threads."""

    proxy: ProxyConfig | None = None
    user_agent: str = DEFAULT_USER_AGENT
    timeout_ms: int = 10_000
    max_retries: int = 3
    batch_size: int = 10
    backoff_base_ms: int = 500
    backoff_max_ms: int = 30_000
    batch_policy: BatchPolicy = BatchPolicy.FAIL_FAST
    max_workers: int = 1
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        policy = self.batch_policy
        if isinstance(policy, str) and not isinstance(policy, BatchPolicy):
            object.__setattr__(self, "batch_policy", normalize_batch_policy(policy))

    @property
    def timeout_seconds(self) -> float:
        return self.timeout_ms / 1000.0

    @classmethod
    def from_env(cls) -> Self:
        """Create a config from environment variables (and a .env file)."""
        load_dotenv()
        raw = cls(
            proxy=ProxyConfig.from_env(),
            user_agent=os.getenv("QUOTEFETCH_USER_AGENT", "").strip() or DEFAULT_USER_AGENT,
            timeout_ms=parse_int(
                os.getenv("QUOTEFETCH_TIMEOUT_MS"), 10_000, field_name="timeout_ms"
            ),
            max_retries=parse_int(
                os.getenv("QUOTEFETCH_MAX_RETRIES"), 3, field_name="max_retries"
            ),
            batch_size=parse_int(os.getenv("QUOTEFETCH_BATCH_SIZE"), 10, field_name="batch_size"),
            backoff_base_ms=parse_int(
                os.getenv("QUOTEFETCH_BACKOFF_BASE_MS"), 500, field_name="backoff_base_ms"
            ),
            backoff_max_ms=parse_int(
                os.getenv("QUOTEFETCH_BACKOFF_MAX_MS"), 30_000, field_name="backoff_max_ms"
            ),
            batch_policy=normalize_batch_policy(os.getenv("QUOTEFETCH_BATCH_POLICY")),
            max_workers=parse_int(os.getenv("QUOTEFETCH_MAX_WORKERS"), 1, field_name="max_workers"),
            log_level=str(os.getenv("LOG_LEVEL", "INFO")).strip().upper(),
        )
        return raw.validate()

    def with_overrides(self, **kwargs: object) -> Self:
        """Return a new config with updated values."""
        updated = replace(self, **kwargs)
        return updated.validate()

    def validate(self) -> Self:
        """Validate config fields."""
        if self.timeout_ms <= 0:
            raise ConfigError("timeout_ms must be positive")
        if self.max_retries < 0:
            raise ConfigError("max_retries cannot be negative")
        if self.batch_size <= 0:
            raise ConfigError("batch_size must be positive")
        if self.backoff_base_ms < 0 or self.backoff_max_ms < 0:
            raise ConfigError("backoff delays cannot be negative")
        if self.backoff_max_ms < self.backoff_base_ms:
            raise ConfigError("backoff_max_ms must be at least backoff_base_ms")
        if self.max_workers <= 0:
            raise ConfigError("max_workers must be positive")
        if not isinstance(self.batch_policy, BatchPolicy):
            raise ConfigError("batch_policy must be one of fail_fast, partial")
        if not self.user_agent.strip():
            raise ConfigError("user_agent must not be empty")
        if self.proxy is not None:
            self.proxy.validate()
        return self

"""
schemedesk.config.postgres – PostgreSQL connection config (dataclass + validators).

Env vars: DATABASE_URL, DB_POOL_SIZE, DB_MAX_OVERFLOW, DB_POOL_TIMEOUT, DB_POOL_RECYCLE,
DB_ECHO, DB_APPLICATION_NAME.
"""
from __future__ import annotations

import os
from dataclasses import dataclass

_DEFAULT_URL = "postgresql://localhost/schemedesk"
_DEFAULT_APP_NAME = "schemedesk-api"


def _validate_url(url: str) -> str:
    url = (url or "").strip()
    if not url:
        raise ValueError("DATABASE_URL is required and must be non-empty")
    if not (
        url.startswith("postgresql://")
        or url.startswith("postgres://")
        or ("+asyncpg" in url and "postgresql" in url)
    ):
        raise ValueError(
            "DATABASE_URL must start with postgresql:// or postgres:// "
            "(or postgresql+asyncpg://)"
        )
    return url


def _validate_min_int(value: int, name: str, min_val: int) -> int:
    if not isinstance(value, int) or value < min_val:
        raise ValueError(f"{name} must be an integer >= {min_val}, got {value!r}")
    return value


def _truthy(raw: str) -> bool:
    return raw.strip().lower() in ("1", "true", "yes")


@dataclass(frozen=True)
class PostgresConfig:
    """
    PostgreSQL connection and pool configuration.

    Validated on construction. Use load_postgres_config() to build from env.
    """

    url: str
    """DSN (postgresql:// or postgres://). Converted to postgresql+asyncpg in engine."""

    pool_size: int = 10
    max_overflow: int = 20
    pool_timeout: int = 30
    """Seconds to wait for a pooled connection."""

    pool_recycle: int = 1800
    echo: bool = False
    application_name: str = _DEFAULT_APP_NAME

    def __post_init__(self) -> None:
        _validate_url(self.url)
        _validate_min_int(self.pool_size, "pool_size", 1)
        _validate_min_int(self.max_overflow, "max_overflow", 0)
        _validate_min_int(self.pool_timeout, "pool_timeout", 1)
        _validate_min_int(self.pool_recycle, "pool_recycle", 1)
        if not isinstance(self.echo, bool):
            raise ValueError("echo must be a boolean")
        if not isinstance(self.application_name, str) or not self.application_name.strip():
            raise ValueError("application_name must be a non-empty string")

    @classmethod
    def from_env(cls, **overrides: object) -> PostgresConfig:
        """
        Build config from environment variables.

        Overrides (keyword args) take precedence over env.
        """
        raw_url = overrides.get("url")
        if raw_url is None:
            raw_url = os.environ.get("DATABASE_URL", _DEFAULT_URL)

        env_int = {
            "pool_size": ("DB_POOL_SIZE", 10),
            "max_overflow": ("DB_MAX_OVERFLOW", 20),
            "pool_timeout": ("DB_POOL_TIMEOUT", 30),
            "pool_recycle": ("DB_POOL_RECYCLE", 1800),
        }
        ints = {}
        for attr, (var, default) in env_int.items():
            v = overrides.get(attr)
            ints[attr] = int(v) if v is not None else int(os.environ.get(var, default))

        echo = overrides.get("echo")
        if echo is None:
            echo = _truthy(os.environ.get("DB_ECHO", ""))
        elif isinstance(echo, str):
            echo = _truthy(echo)

        app_name = overrides.get("application_name") or os.environ.get(
            "DB_APPLICATION_NAME", _DEFAULT_APP_NAME
        )
        return cls(
            url=_validate_url(str(raw_url)),
            echo=bool(echo),
            application_name=str(app_name),
            **ints,
        )


def load_postgres_config(**overrides: object) -> PostgresConfig:
    """Load and validate PostgreSQL config from environment (with optional overrides)."""
    return PostgresConfig.from_env(**overrides)

"""
schemedesk.config.app – HTTP-facing application settings.

Env vars: CORS_ORIGINS, RATE_LIMIT, QUEUE_DEFAULT_LIMIT.
"""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import List

QUEUE_MIN_LIMIT = 10
QUEUE_MAX_LIMIT = 100


@dataclass(frozen=True)
class AppConfig:
    cors_origins: List[str] = field(
        default_factory=lambda: ["http://localhost:3000", "http://127.0.0.1:3000"]
    )
    rate_limit: str = "60/minute"
    queue_default_limit: int = 20

    def __post_init__(self) -> None:
        if "/" not in self.rate_limit:
            raise ValueError(f"rate_limit must look like '<n>/<period>', got {self.rate_limit!r}")
        if not QUEUE_MIN_LIMIT <= self.queue_default_limit <= QUEUE_MAX_LIMIT:
            raise ValueError(
                f"queue_default_limit must be within [{QUEUE_MIN_LIMIT}, {QUEUE_MAX_LIMIT}], "
                f"got {self.queue_default_limit!r}"
            )

    @classmethod
    def from_env(cls) -> AppConfig:
        raw_origins = os.environ.get("CORS_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000")
        origins = [o.strip() for o in raw_origins.split(",") if o.strip()]
        return cls(
            cors_origins=origins,
            rate_limit=os.environ.get("RATE_LIMIT", "60/minute").strip(),
            queue_default_limit=int(os.environ.get("QUEUE_DEFAULT_LIMIT", "20")),
        )


def load_app_config() -> AppConfig:
    return AppConfig.from_env()

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from dotenv import load_dotenv


@dataclass(frozen=True, slots=True)
class Settings:
    redis_url: str
    log_level: str
    # Per-game command lock: how long a holder may keep it, and how long a caller waits for it.
    lock_ttl_ms: int
    lock_wait_ms: int


def settings_from_env() -> Settings:
    return Settings(
        redis_url=os.environ.get("REDIS_URL", "redis://localhost:6379/0"),
        log_level=os.environ.get("TWISTER_LOG_LEVEL", "INFO").upper(),
        lock_ttl_ms=int(os.environ.get("TWISTER_LOCK_TTL_MS", "5000")),
        lock_wait_ms=int(os.environ.get("TWISTER_LOCK_WAIT_MS", "2000")),
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    # A local .env never overrides variables already exported in the shell.
    load_dotenv(override=False)
    return settings_from_env()

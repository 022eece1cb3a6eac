from __future__ import annotations

import redis

from twister.config import get_settings


def create_redis(url: str | None = None) -> redis.Redis:
    # decode_responses=True => strings in/out instead of bytes
    return redis.Redis.from_url(url or get_settings().redis_url, decode_responses=True)

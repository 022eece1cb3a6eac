from __future__ import annotations

import contextlib
from collections.abc import Generator

import redis

from twister.infra.redis_client import create_redis


def get_redis() -> Generator[redis.Redis, None, None]:
    """Per-request redis client. Tests override this with fakeredis."""

    client = create_redis()
    try:
        yield client
    finally:
        # Older redis-py releases have no close() on the client.
        with contextlib.suppress(AttributeError):
            client.close()

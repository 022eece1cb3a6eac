from __future__ import annotations

import asyncio
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from uuid import uuid4

import redis

from twister.config import get_settings


class GameBusyError(RuntimeError):
    """Another command held the game lock for longer than we were willing to wait."""


def lock_key(game_id: str) -> str:
    return f"twister:lock:game:{game_id}"


@asynccontextmanager
async def game_lock(
    *,
    r: redis.Redis,
    game_id: str,
    ttl_ms: int | None = None,
    wait_ms: int | None = None,
    poll_ms: int = 5,
) -> AsyncIterator[None]:
    """Serialize commands for one game across workers.

    Waits for the lock instead of rejecting, so concurrent key events queue up
    rather than get lost. Waiting yields to the event loop; other games and
    sockets keep being served meanwhile. The token check on release keeps a
    holder whose TTL expired from deleting a lock someone else now owns.
    """

    settings = get_settings()
    ttl_ms = settings.lock_ttl_ms if ttl_ms is None else ttl_ms
    wait_ms = settings.lock_wait_ms if wait_ms is None else wait_ms

    key = lock_key(game_id)
    token = uuid4().hex
    deadline = time.monotonic() + wait_ms / 1000

    while not r.set(key, token, nx=True, px=ttl_ms):
        if time.monotonic() >= deadline:
            raise GameBusyError(f"Game {game_id} is busy")
        await asyncio.sleep(poll_ms / 1000)

    try:
        yield
    finally:
        if r.get(key) == token:
            r.delete(key)

from __future__ import annotations

import asyncio

import fakeredis
import pytest

from twister.actions import dispatch_command
from twister.config import get_settings
from twister.game_store import create_game
from twister.lock import GameBusyError, game_lock, lock_key


@pytest.fixture()
def short_lock_wait(monkeypatch):
    monkeypatch.setenv("TWISTER_LOCK_WAIT_MS", "200")
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.mark.asyncio
async def test_lock_is_released_after_use() -> None:
    r = fakeredis.FakeRedis(decode_responses=True)

    async with game_lock(r=r, game_id="g1"):
        assert r.get(lock_key("g1"))

    assert r.get(lock_key("g1")) is None
    async with game_lock(r=r, game_id="g1"):
        pass


@pytest.mark.asyncio
async def test_held_lock_times_out_as_busy() -> None:
    r = fakeredis.FakeRedis(decode_responses=True)

    async with game_lock(r=r, game_id="g1"):
        with pytest.raises(GameBusyError):
            async with game_lock(r=r, game_id="g1", wait_ms=20):
                pass


@pytest.mark.asyncio
async def test_release_does_not_steal_someone_elses_lock() -> None:
    r = fakeredis.FakeRedis(decode_responses=True)

    async with game_lock(r=r, game_id="g1"):
        # Our TTL expired and another worker took over.
        r.set(lock_key("g1"), "other-token")

    assert r.get(lock_key("g1")) == "other-token"


@pytest.mark.asyncio
async def test_waiter_gets_the_lock_once_the_holder_releases() -> None:
    r = fakeredis.FakeRedis(decode_responses=True)
    order: list[str] = []

    async def holder() -> None:
        async with game_lock(r=r, game_id="g1"):
            order.append("holder in")
            await asyncio.sleep(0.05)
            order.append("holder out")

    async def waiter() -> None:
        await asyncio.sleep(0.01)
        async with game_lock(r=r, game_id="g1", wait_ms=1000):
            order.append("waiter in")

    await asyncio.gather(holder(), waiter())

    assert order == ["holder in", "holder out", "waiter in"]


@pytest.mark.asyncio
async def test_waiting_for_a_busy_game_keeps_the_event_loop_running(short_lock_wait) -> None:
    r = fakeredis.FakeRedis(decode_responses=True)
    state = create_game(r=r, seed=1)
    r.set(lock_key(str(state.game_id)), "someone-else")

    ticks = 0
    stop = asyncio.Event()

    async def heartbeat() -> None:
        nonlocal ticks
        while not stop.is_set():
            ticks += 1
            await asyncio.sleep(0.01)

    beat = asyncio.create_task(heartbeat())
    try:
        with pytest.raises(GameBusyError):
            await dispatch_command(r=r, game_id=state.game_id, command="start")
    finally:
        stop.set()
        await beat

    # 200ms of waiting at a 10ms beat; a blocked loop would manage one tick.
    assert ticks >= 5

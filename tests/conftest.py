from __future__ import annotations

from collections.abc import Callable, Generator, Iterable

import pytest

from twister.api.models import GameState


@pytest.fixture()
def make_state() -> Callable[..., GameState]:
    """Factory for a fresh lobby GameState with some slots already joined."""

    from twister import roster
    from twister.game_store import new_game_state

    def _make(*, slots: Iterable[int] = (0, 1), seed: int = 123) -> GameState:
        state = new_game_state(seed=seed)
        for slot_id in slots:
            roster.join(state, slot_id)
        return state

    return _make


@pytest.fixture()
def playing_state(make_state: Callable[..., GameState]) -> Callable[..., GameState]:
    """Factory for a mid-match GameState with hand-picked keys per slot.

    Bypasses `start()` so tests control exactly who holds what.
    """

    from twister.api.models import Phase

    def _make(keys_by_slot: dict[int, list[str]], *, pressed: Iterable[str] = ()) -> GameState:
        state = make_state(slots=sorted(keys_by_slot))
        for p in state.players:
            p.assigned_keys = list(keys_by_slot[p.slot_id])
        state.phase = Phase.playing
        state.pressed_keys = list(pressed)
        return state

    return _make


@pytest.fixture()
def client_and_redis():
    """FastAPI TestClient wired to a fakeredis instance."""

    import fakeredis
    from fastapi.testclient import TestClient

    from twister.api.deps import get_redis
    from twister.main import app

    r = fakeredis.FakeRedis(decode_responses=True)

    def _override() -> Generator[fakeredis.FakeRedis, None, None]:
        yield r

    app.dependency_overrides[get_redis] = _override
    with TestClient(app) as c:
        yield c, r
    app.dependency_overrides.clear()

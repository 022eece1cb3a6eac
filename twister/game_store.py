from __future__ import annotations

import logging
import random
from datetime import UTC, datetime
from uuid import UUID, uuid4

import redis

from twister.api.models import GameState

logger = logging.getLogger(__name__)

GAMES_SET_KEY = "twister:games"
GAME_KEY_PREFIX = "twister:game:"  # + {uuid}


class GameNotFoundError(ValueError):
    pass


def _now() -> datetime:
    return datetime.now(tz=UTC)


def _game_key(game_id: UUID) -> str:
    return f"{GAME_KEY_PREFIX}{game_id}"


def new_game_state(*, seed: int | None = None) -> GameState:
    now = _now()
    return GameState(
        game_id=uuid4(),
        created_at=now,
        last_updated_at=now,
        seed=seed or random.SystemRandom().randint(1, 2**31 - 1),
    )


def save_game(*, r: redis.Redis, state: GameState) -> None:
    state.last_updated_at = _now()
    r.set(_game_key(state.game_id), state.model_dump_json())


def create_game(*, r: redis.Redis, seed: int | None = None) -> GameState:
    state = new_game_state(seed=seed)
    save_game(r=r, state=state)
    r.sadd(GAMES_SET_KEY, str(state.game_id))
    logger.info("created game %s (seed=%s)", state.game_id, state.seed)
    return state


def get_game(*, r: redis.Redis, game_id: UUID) -> GameState | None:
    raw = r.get(_game_key(game_id))
    if not raw:
        return None
    return GameState.model_validate_json(raw)


def require_game(*, r: redis.Redis, game_id: UUID) -> GameState:
    state = get_game(r=r, game_id=game_id)
    if state is None:
        raise GameNotFoundError("Game not found")
    return state


def delete_game(*, r: redis.Redis, game_id: UUID) -> bool:
    removed = r.delete(_game_key(game_id))
    r.srem(GAMES_SET_KEY, str(game_id))
    if removed:
        logger.info("deleted game %s", game_id)
    return bool(removed)


def list_games(*, r: redis.Redis) -> list[GameState]:
    out: list[GameState] = []
    for sid in sorted(r.smembers(GAMES_SET_KEY)):
        try:
            gid = UUID(sid)
        except ValueError:
            continue
        state = get_game(r=r, game_id=gid)
        if state is not None:
            out.append(state)
    out.sort(key=lambda s: s.created_at, reverse=True)
    return out

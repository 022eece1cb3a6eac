from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Literal
from uuid import UUID

import redis

from twister.api.models import GameState
from twister.core.events import CommandResult
from twister.engine import TwisterGame
from twister.game_store import require_game, save_game
from twister.lock import game_lock
from twister.status import status_line

logger = logging.getLogger(__name__)

CommandName = Literal[
    "join",
    "leave",
    "toggle",
    "rename",
    "start",
    "reset",
    "assign",
    "keys",
    "reset_rollover",
]


@dataclass(frozen=True, slots=True)
class ActionResult:
    state: GameState
    result: CommandResult


def _apply(game: TwisterGame, command: CommandName, payload: dict[str, Any]) -> CommandResult:
    if command == "join":
        return game.join(int(payload["slot_id"]))
    if command == "leave":
        return game.leave(int(payload["slot_id"]))
    if command == "toggle":
        return game.toggle(int(payload["slot_id"]))
    if command == "rename":
        return game.rename(int(payload["slot_id"]), str(payload.get("name", "")))
    if command == "start":
        return game.start()
    if command == "reset":
        return game.reset()
    if command == "assign":
        return game.assign_next()
    if command == "keys":
        return game.key_events((str(e["key"]), bool(e["is_down"])) for e in payload["events"])
    if command == "reset_rollover":
        return game.reset_rollover()
    raise ValueError(f"Unknown command: {command}")


async def dispatch_command(
    *,
    r: redis.Redis,
    game_id: UUID,
    command: CommandName,
    payload: dict[str, Any] | None = None,
) -> ActionResult:
    """Entry point for HTTP routes and the WebSocket key channel.

    Load, apply, and save happen under the per-game lock, so commands for one
    game are applied one at a time in arrival order. Rejected commands are
    still saved: an advisory message is part of the state.
    """

    async with game_lock(r=r, game_id=str(game_id)):
        state = require_game(r=r, game_id=game_id)
        game = TwisterGame(state)
        result = _apply(game, command, payload or {})
        save_game(r=r, state=state)

    if result.accepted:
        logger.debug("game %s %s: %s", game_id, command, status_line(state))
    else:
        logger.debug("game %s %s rejected: %s", game_id, command, result.advisory or "no-op")
    return ActionResult(state=state, result=result)

from __future__ import annotations

import logging
from collections.abc import Set

from twister.api.models import GameState, Phase, PlayerState
from twister.core.events import CommandResult, GameEvent
from twister.roster import active_players

logger = logging.getLogger(__name__)

DRAW_MESSAGE = "No one is left standing. It's a draw."


def is_holding_all(player: PlayerState, pressed: Set[str]) -> bool:
    return all(k in pressed for k in player.assigned_keys)


def doomed_players(state: GameState, pressed: Set[str]) -> list[PlayerState]:
    """Alive players missing at least one of their keys in `pressed`.

    Players without keys yet cannot be eliminated.
    """

    return [p for p in active_players(state) if p.assigned_keys and not is_holding_all(p, pressed)]


def judge(state: GameState, pressed: Set[str]) -> CommandResult:
    """Eliminate players who let go of a key, then check for a winner.

    Every decision is made against the same snapshot before any flag flips, so
    eliminating one player never affects another in the same pass.
    """

    if state.phase != Phase.playing:
        return CommandResult.rejected()

    result = CommandResult(accepted=True)
    round_number = state.round.round_number

    out = doomed_players(state, pressed)
    for p in out:
        p.alive = False
        logger.info("game %s: slot %s eliminated", state.game_id, p.slot_id)
        result.events.append(
            GameEvent.now(
                type="PLAYER_ELIMINATED",
                round_number=round_number,
                payload={"slot_id": p.slot_id, "name": p.name, "missing": [k for k in p.assigned_keys if k not in pressed]},
            )
        )

    survivors = active_players(state)
    if out and survivors:
        state.round.turn_pointer %= len(survivors)

    if len(survivors) == 1:
        winner = survivors[0]
        state.winner_slot_id = winner.slot_id
        state.message = f"{winner.name} wins!"
        logger.info("game %s: slot %s wins", state.game_id, winner.slot_id)
        result.events.append(
            GameEvent.now(
                type="GAME_WON",
                round_number=round_number,
                payload={"slot_id": winner.slot_id, "name": winner.name},
            )
        )
    elif not survivors:
        # Exclusive key ownership makes this unreachable; finish cleanly anyway.
        state.winner_slot_id = None
        state.message = DRAW_MESSAGE
        logger.warning("game %s: no survivors", state.game_id)
        result.events.append(GameEvent.now(type="GAME_DRAWN", round_number=round_number))

    return result


def is_over(state: GameState) -> bool:
    return state.phase == Phase.playing and len(active_players(state)) <= 1

from __future__ import annotations

import logging
import random

from twister.api.models import GameState, Phase
from twister.core.events import CommandResult, GameEvent
from twister.core.keys import ALL_KEYS, key_label
from twister.roster import active_players

logger = logging.getLogger(__name__)

NO_KEYS_LEFT_MESSAGE = "No keys left to assign!"


def assigned_keys(state: GameState) -> set[str]:
    """Every key handed out this match, including eliminated players' keys."""

    return {k for p in state.players for k in p.assigned_keys}


def available_keys(state: GameState) -> list[str]:
    """Keys nobody has been assigned yet, in keyboard layout order.

    Assigned keys stay retired for the rest of the match even if their owner
    is eliminated.
    """

    used = assigned_keys(state)
    return [k for k in ALL_KEYS if k not in used]


def rng_for_next_draw(state: GameState) -> random.Random:
    # One stream per draw index keeps a match reproducible from its seed
    # without having to persist generator state between requests.
    return random.Random(f"{state.seed}:{len(assigned_keys(state))}")


def current_turn_slot_id(state: GameState) -> int | None:
    active = active_players(state)
    if not active:
        return None
    return active[state.round.turn_pointer % len(active)].slot_id


def assign_next(state: GameState, *, rng: random.Random | None = None) -> CommandResult:
    """Give the current turn-holder a random key from the pool and pass the turn."""

    if state.phase != Phase.playing:
        logger.debug("assign_next ignored in phase %s", state.phase.value)
        return CommandResult.rejected()

    active = active_players(state)
    if not active:
        return CommandResult.rejected()

    pool = available_keys(state)
    if not pool:
        logger.info("game %s: no keys left to assign", state.game_id)
        event = GameEvent.now(type="NO_KEYS_LEFT", round_number=state.round.round_number)
        return CommandResult(accepted=False, events=[event], advisory=NO_KEYS_LEFT_MESSAGE)

    rng = rng or rng_for_next_draw(state)
    key = pool[rng.randrange(len(pool))]

    idx = state.round.turn_pointer % len(active)
    target = active[idx]
    target.assigned_keys.append(key)

    round_number = state.round.round_number
    held = len(target.assigned_keys)
    state.round.turn_pointer = (idx + 1) % len(active)
    if state.round.turn_pointer == 0:
        state.round.round_number += 1

    plural = "s" if held > 1 else ""
    state.message = f"{target.name}: Hold {key_label(key)} (now hold {held} key{plural})."
    logger.info("game %s round %s: slot %s assigned %s", state.game_id, round_number, target.slot_id, key)

    event = GameEvent.now(
        type="KEY_ASSIGNED",
        round_number=round_number,
        payload={"slot_id": target.slot_id, "name": target.name, "key": key, "held_count": held},
    )
    return CommandResult(accepted=True, events=[event])

from __future__ import annotations

from twister.api.models import GameState, GameStatus, Phase, PlayerStatus
from twister.assignment import available_keys, current_turn_slot_id
from twister.judge import is_holding_all


def key_owners(state: GameState) -> dict[str, int]:
    """Map of key -> owning slot for alive players.

    Eliminated players keep their keys listed on them, but nobody has to hold
    those keys any more, so they are not owned.
    """

    return {k: p.slot_id for p in state.players if p.alive for k in p.assigned_keys}


def build_status(state: GameState) -> GameStatus:
    """Read-only view of a game for the rendering layer."""

    pressed = set(state.pressed_keys)
    players = [
        PlayerStatus(
            slot_id=p.slot_id,
            name=p.name,
            color=p.color,
            alive=p.alive,
            assigned_keys=list(p.assigned_keys),
            held_count=sum(1 for k in p.assigned_keys if k in pressed),
        )
        for p in state.players
    ]

    return GameStatus(
        game_id=state.game_id,
        phase=state.phase,
        round=state.round.model_copy(),
        current_turn_slot_id=current_turn_slot_id(state) if state.phase == Phase.playing else None,
        players=players,
        slot_labels=list(state.slot_labels),
        available_key_count=len(available_keys(state)),
        pressed_keys=list(state.pressed_keys),
        pressed_count=len(state.pressed_keys),
        rollover_peak=state.rollover_peak,
        winner_slot_id=state.winner_slot_id,
        is_draw=state.phase == Phase.finished and state.winner_slot_id is None,
        key_owners=key_owners(state),
        message=state.message,
        log=list(state.log),
    )


def status_line(state: GameState) -> str:
    """One-line summary for server logs."""

    parts = [f"phase={state.phase.value}", f"round={state.round.round_number}"]
    pressed = set(state.pressed_keys)
    for p in state.players:
        mark = "alive" if p.alive else "out"
        holding = "holding" if is_holding_all(p, pressed) else "missing"
        parts.append(f"{p.name}[{mark},{len(p.assigned_keys)} keys,{holding}]")
    parts.append(f"pressed={len(pressed)}/peak={state.rollover_peak}")
    return " ".join(parts)

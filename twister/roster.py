from __future__ import annotations

import logging
from dataclasses import dataclass

from twister.api.models import MAX_PLAYERS, GameState, Phase, PlayerState
from twister.core.events import CommandResult, GameEvent

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class SlotSpec:
    default_name: str
    color: str


PLAYER_SLOTS: tuple[SlotSpec, ...] = (
    SlotSpec("Player 1", "#ef4444"),  # red
    SlotSpec("Player 2", "#3b82f6"),  # blue
    SlotSpec("Player 3", "#10b981"),  # green
    SlotSpec("Player 4", "#f59e0b"),  # amber
)


def find_player(state: GameState, slot_id: int) -> PlayerState | None:
    return next((p for p in state.players if p.slot_id == slot_id), None)


def active_players(state: GameState) -> list[PlayerState]:
    """Alive players in ascending slot order (the turn order)."""

    return sorted((p for p in state.players if p.alive), key=lambda p: p.slot_id)


def _valid_slot(slot_id: int) -> bool:
    return 0 <= slot_id < MAX_PLAYERS


def join(state: GameState, slot_id: int) -> CommandResult:
    if state.phase != Phase.lobby or not _valid_slot(slot_id):
        return CommandResult.rejected()
    if find_player(state, slot_id) is not None:
        return CommandResult.rejected()

    slot = PLAYER_SLOTS[slot_id]
    player = PlayerState(
        slot_id=slot_id,
        name=state.slot_labels[slot_id] or slot.default_name,
        color=slot.color,
    )
    state.players.append(player)
    state.players.sort(key=lambda p: p.slot_id)

    logger.info("slot %s joined as %r", slot_id, player.name)
    event = GameEvent.now(
        type="PLAYER_JOINED",
        round_number=state.round.round_number,
        payload={"slot_id": slot_id, "name": player.name},
    )
    return CommandResult(accepted=True, events=[event])


def leave(state: GameState, slot_id: int) -> CommandResult:
    if state.phase != Phase.lobby:
        return CommandResult.rejected()
    player = find_player(state, slot_id)
    if player is None:
        return CommandResult.rejected()

    state.players = [p for p in state.players if p.slot_id != slot_id]

    logger.info("slot %s (%r) left", slot_id, player.name)
    event = GameEvent.now(
        type="PLAYER_LEFT",
        round_number=state.round.round_number,
        payload={"slot_id": slot_id, "name": player.name},
    )
    return CommandResult(accepted=True, events=[event])


def toggle(state: GameState, slot_id: int) -> CommandResult:
    """Join an empty slot or free an occupied one (the F1-F4 lobby hotkeys)."""

    if find_player(state, slot_id) is None:
        return join(state, slot_id)
    return leave(state, slot_id)


def rename(state: GameState, slot_id: int, text: str) -> CommandResult:
    """Rename a slot. Metadata only: allowed in every phase."""

    if not _valid_slot(slot_id):
        return CommandResult.rejected()

    name = text.strip() or PLAYER_SLOTS[slot_id].default_name
    state.slot_labels[slot_id] = name
    player = find_player(state, slot_id)
    if player is not None:
        player.name = name

    event = GameEvent.now(
        type="PLAYER_RENAMED",
        round_number=state.round.round_number,
        payload={"slot_id": slot_id, "name": name},
    )
    return CommandResult(accepted=True, events=[event])

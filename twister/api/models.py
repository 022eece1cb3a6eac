from __future__ import annotations

from datetime import datetime
from enum import StrEnum
from typing import Annotated, Any
from uuid import UUID

from pydantic import AfterValidator, BaseModel, Field

from twister.core.keys import validate_key

CanonicalKey = Annotated[str, AfterValidator(validate_key)]

MAX_PLAYERS = 4
MIN_PLAYERS_TO_START = 2

LOBBY_MESSAGE = "Join up to 4 players and press Start."


class Phase(StrEnum):
    lobby = "lobby"
    playing = "playing"
    finished = "finished"


class PlayerState(BaseModel):
    slot_id: int = Field(..., ge=0, lt=MAX_PLAYERS)
    name: str
    color: str
    alive: bool = True

    # Append-only while playing; eliminated players keep theirs for display.
    assigned_keys: list[CanonicalKey] = Field(default_factory=list)


class RoundState(BaseModel):
    round_number: int = Field(1, ge=1)

    # Index into the alive players (ascending slot order); always read modulo their count.
    turn_pointer: int = Field(0, ge=0)


def default_slot_labels() -> list[str]:
    return [f"Player {i + 1}" for i in range(MAX_PLAYERS)]


class GameState(BaseModel):
    game_id: UUID
    created_at: datetime
    last_updated_at: datetime

    # Key draws are derived from this, so a match can be replayed.
    seed: int

    phase: Phase = Phase.lobby

    # Ordered by slot_id.
    players: list[PlayerState] = Field(default_factory=list)

    round: RoundState = Field(default_factory=RoundState)

    # Editable per-slot names; used as the default name on join and kept across resets.
    slot_labels: list[str] = Field(default_factory=default_slot_labels)

    pressed_keys: list[CanonicalKey] = Field(default_factory=list)
    rollover_peak: int = Field(0, ge=0)

    winner_slot_id: int | None = None

    message: str = LOBBY_MESSAGE

    # Most recent first.
    log: list[str] = Field(default_factory=list)


class GameCreateRequest(BaseModel):
    seed: int | None = Field(None, ge=1)


class RenameRequest(BaseModel):
    name: str = Field(..., max_length=40)


class KeyEvent(BaseModel):
    key: CanonicalKey
    is_down: bool


class KeyEventBatch(BaseModel):
    events: list[KeyEvent] = Field(..., min_length=1, max_length=64)


class PlayerStatus(BaseModel):
    slot_id: int
    name: str
    color: str
    alive: bool
    assigned_keys: list[str]
    held_count: int


class GameStatus(BaseModel):
    game_id: UUID
    phase: Phase
    round: RoundState
    current_turn_slot_id: int | None = None
    players: list[PlayerStatus]
    slot_labels: list[str]
    available_key_count: int
    pressed_keys: list[str]
    pressed_count: int
    rollover_peak: int
    winner_slot_id: int | None = None
    is_draw: bool = False

    # key -> slot_id, alive players only (eliminated players' keys are no longer owned).
    key_owners: dict[str, int] = Field(default_factory=dict)

    message: str
    log: list[str]


class GameListResponse(BaseModel):
    games: list[GameStatus]


class UpdateMessage(BaseModel):
    type: str
    game_id: UUID
    events: list[dict[str, Any]] = Field(default_factory=list)
    status: GameStatus

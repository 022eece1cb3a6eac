from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Literal

EventType = Literal[
    "PLAYER_JOINED",
    "PLAYER_LEFT",
    "PLAYER_RENAMED",
    "GAME_STARTED",
    "KEY_ASSIGNED",
    "NO_KEYS_LEFT",
    "KEY_PRESSED",
    "KEY_RELEASED",
    "PLAYER_ELIMINATED",
    "GAME_WON",
    "GAME_DRAWN",
    "GAME_RESET",
    "ROLLOVER_RESET",
]


@dataclass(frozen=True, slots=True)
class GameEvent:
    type: EventType
    round_number: int
    payload: dict[str, Any]
    ts: datetime

    @staticmethod
    def now(*, type: EventType, round_number: int, payload: dict[str, Any] | None = None) -> "GameEvent":
        return GameEvent(type=type, round_number=round_number, payload=payload or {}, ts=datetime.now(timezone.utc))

    def as_message(self) -> dict[str, Any]:
        return {
            "type": self.type,
            "round_number": self.round_number,
            "payload": self.payload,
            "ts": self.ts.isoformat(),
        }


@dataclass(slots=True)
class CommandResult:
    """Outcome of one command applied to a game.

    Rejected commands are no-ops; `advisory` carries the user-visible reason
    when there is one worth showing.
    """

    accepted: bool
    events: list[GameEvent] = field(default_factory=list)
    advisory: str | None = None

    @staticmethod
    def rejected(advisory: str | None = None) -> "CommandResult":
        return CommandResult(accepted=False, advisory=advisory)

    def extend(self, other: "CommandResult") -> None:
        self.events.extend(other.events)
        if other.advisory:
            self.advisory = other.advisory

from __future__ import annotations

import logging
import random
from collections.abc import Iterable

from twister import assignment, roster
from twister.api.models import LOBBY_MESSAGE, MIN_PLAYERS_TO_START, GameState, Phase, RoundState
from twister.core.events import CommandResult, GameEvent
from twister.core.keys import sort_keys
from twister.core.pressed import PressedSetTracker, RolloverObserver
from twister.fsm import GameFSM
from twister.judge import DRAW_MESSAGE, is_over, judge

logger = logging.getLogger(__name__)

LOG_LIMIT = 50

NEED_PLAYERS_MESSAGE = f"Need at least {MIN_PLAYERS_TO_START} players to start."


def log_line(event: GameEvent) -> str | None:
    p = event.payload
    if event.type == "KEY_ASSIGNED":
        return f"Round {event.round_number}: {p['name']} assigned {p['key']}"
    if event.type == "PLAYER_ELIMINATED":
        return f"{p['name']} eliminated!"
    if event.type == "GAME_WON":
        return f"{p['name']} wins!"
    if event.type == "GAME_DRAWN":
        return DRAW_MESSAGE
    return None


class TwisterGame:
    """Game state machine for one table.

    Wraps a GameState for the duration of one command: lobby controls, the
    round trigger, and key events all go through here. Pressed-set changes are
    queued by the tracker and drained by `_react`, the only consumer, which
    feeds the rollover observer and the elimination judge in arrival order.
    """

    def __init__(self, state: GameState, *, rng: random.Random | None = None) -> None:
        self.state = state
        self._rng = rng
        self.tracker = PressedSetTracker(state.pressed_keys)
        self.rollover = RolloverObserver(current=len(self.tracker), peak=state.rollover_peak)

    # Lobby

    def join(self, slot_id: int) -> CommandResult:
        return self._record(roster.join(self.state, slot_id))

    def leave(self, slot_id: int) -> CommandResult:
        return self._record(roster.leave(self.state, slot_id))

    def toggle(self, slot_id: int) -> CommandResult:
        return self._record(roster.toggle(self.state, slot_id))

    def rename(self, slot_id: int, text: str) -> CommandResult:
        return self._record(roster.rename(self.state, slot_id, text))

    # Phase control

    def start(self) -> CommandResult:
        state = self.state
        if state.phase != Phase.lobby:
            return self._record(CommandResult.rejected())
        if len(state.players) < MIN_PLAYERS_TO_START:
            logger.debug("game %s: start rejected with %s player(s)", state.game_id, len(state.players))
            return self._record(CommandResult.rejected(NEED_PLAYERS_MESSAGE))

        for p in state.players:
            p.alive = True
            p.assigned_keys = []
        state.round = RoundState()
        state.winner_slot_id = None
        state.log = []
        self._transition("start_match")

        result = CommandResult(
            accepted=True,
            events=[
                GameEvent.now(
                    type="GAME_STARTED",
                    round_number=state.round.round_number,
                    payload={"slot_ids": [p.slot_id for p in state.players]},
                )
            ],
        )
        # Opening move.
        result.extend(assignment.assign_next(state, rng=self._rng))
        return self._record(result)

    def reset(self) -> CommandResult:
        state = self.state
        if state.phase != Phase.lobby:
            self._transition("back_to_lobby")

        state.players = []
        state.round = RoundState()
        state.winner_slot_id = None
        state.message = LOBBY_MESSAGE
        state.log = []

        logger.info("game %s: reset", state.game_id)
        return self._record(
            CommandResult(accepted=True, events=[GameEvent.now(type="GAME_RESET", round_number=1)])
        )

    # Rounds

    def assign_next(self) -> CommandResult:
        return self._record(assignment.assign_next(self.state, rng=self._rng))

    # Keyboard

    def key_event(self, key: str, is_down: bool) -> CommandResult:
        return self.key_events([(key, is_down)])

    def key_events(self, events: Iterable[tuple[str, bool]]) -> CommandResult:
        for key, is_down in events:
            if self.tracker.apply(key, is_down):
                logger.debug("game %s: %s %s", self.state.game_id, key, "down" if is_down else "up")
        return self._record(self._react())

    def reset_rollover(self) -> CommandResult:
        self.rollover.reset()
        self.state.rollover_peak = self.rollover.peak
        return self._record(
            CommandResult(
                accepted=True,
                events=[
                    GameEvent.now(
                        type="ROLLOVER_RESET",
                        round_number=self.state.round.round_number,
                        payload={"peak": self.rollover.peak},
                    )
                ],
            )
        )

    def _react(self) -> CommandResult:
        state = self.state
        result = CommandResult(accepted=False)

        for change in self.tracker.drain():
            result.accepted = True
            self.rollover.observe(change)
            result.events.append(
                GameEvent.now(
                    type="KEY_PRESSED" if change.is_down else "KEY_RELEASED",
                    round_number=state.round.round_number,
                    payload={"key": change.key, "pressed_count": len(change.snapshot)},
                )
            )

            # Judging stops once the match is decided; tracking does not.
            verdict = judge(state, change.snapshot)
            result.events.extend(verdict.events)
            if is_over(state):
                self._transition("finish")

        state.pressed_keys = sort_keys(self.tracker.snapshot)
        state.rollover_peak = self.rollover.peak
        return result

    def _transition(self, event: str) -> None:
        fsm = GameFSM(self.state)
        before = fsm.current_state.value
        fsm.send(event)
        fsm.sync_phase_to_model()
        logger.info("game %s: phase %s -> %s", self.state.game_id, before, self.state.phase.value)

    def _record(self, result: CommandResult) -> CommandResult:
        state = self.state
        if result.advisory:
            state.message = result.advisory
        for event in result.events:
            line = log_line(event)
            if line:
                state.log.insert(0, line)
        del state.log[LOG_LIMIT:]
        return result

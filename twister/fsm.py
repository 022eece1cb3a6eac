from __future__ import annotations

from statemachine import State, StateMachine

from twister.api.models import GameState, Phase


class GameFSM(StateMachine):
    """FSM wrapper around GameState.

    The engine checks preconditions (player count, survivors) and then fires
    the matching transition; the FSM only guards which phase may follow which.
    """

    lobby = State(Phase.lobby.value, value=Phase.lobby.value, initial=True)
    playing = State(Phase.playing.value, value=Phase.playing.value)
    finished = State(Phase.finished.value, value=Phase.finished.value)

    start_match = lobby.to(playing)
    finish = playing.to(finished)
    back_to_lobby = playing.to(lobby) | finished.to(lobby)

    def __init__(self, game: GameState):
        self.game = game
        super().__init__(start_value=game.phase.value)

    def sync_phase_to_model(self) -> None:
        self.game.phase = Phase(str(self.current_state.value))

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from uuid import UUID

from fastapi import WebSocket

from twister.api.models import GameStatus, UpdateMessage
from twister.core.events import GameEvent

logger = logging.getLogger(__name__)


class GameUpdateHub:
    """Pushes game status to every WebSocket watching a game.

    A socket gets one `status` message when it attaches, then a `game_updated`
    message (events + fresh status) after every command applied to its game.
    Sockets that fail a send are detached.
    """

    def __init__(self) -> None:
        self._watchers: dict[UUID, set[WebSocket]] = {}
        self._lock = asyncio.Lock()

    def watchers(self, game_id: UUID) -> int:
        return len(self._watchers.get(game_id, ()))

    async def attach(self, websocket: WebSocket, status: GameStatus) -> None:
        await websocket.accept()
        async with self._lock:
            self._watchers.setdefault(status.game_id, set()).add(websocket)
        logger.debug("websocket attached to game %s", status.game_id)

        hello = UpdateMessage(type="status", game_id=status.game_id, status=status)
        await websocket.send_json(hello.model_dump(mode="json"))

    async def detach(self, game_id: UUID, websocket: WebSocket) -> None:
        async with self._lock:
            sockets = self._watchers.get(game_id)
            if sockets is None:
                return
            sockets.discard(websocket)
            if not sockets:
                del self._watchers[game_id]
        logger.debug("websocket detached from game %s", game_id)

    async def publish(self, status: GameStatus, events: Sequence[GameEvent] = ()) -> int:
        """Send `game_updated` to the game's sockets. Returns how many got it."""

        async with self._lock:
            sockets = list(self._watchers.get(status.game_id, ()))
        if not sockets:
            return 0

        update = UpdateMessage(
            type="game_updated",
            game_id=status.game_id,
            events=[e.as_message() for e in events],
            status=status,
        )
        payload = update.model_dump(mode="json")

        outcomes = await asyncio.gather(*(ws.send_json(payload) for ws in sockets), return_exceptions=True)
        failed = [ws for ws, outcome in zip(sockets, outcomes) if isinstance(outcome, Exception)]
        for ws in failed:
            await self.detach(status.game_id, ws)
        return len(sockets) - len(failed)

    @staticmethod
    async def send_error(websocket: WebSocket, detail: list[str]) -> None:
        await websocket.send_json({"type": "error", "detail": detail})


hub = GameUpdateHub()

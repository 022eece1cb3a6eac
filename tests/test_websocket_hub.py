from __future__ import annotations

import pytest

from twister.core.events import GameEvent
from twister.status import build_status
from twister.websocket_hub import GameUpdateHub


class _FakeSocket:
    def __init__(self, *, broken: bool = False) -> None:
        self.broken = broken
        self.accepted = False
        self.sent: list[dict] = []

    async def accept(self) -> None:
        self.accepted = True

    async def send_json(self, payload: dict) -> None:
        if self.broken:
            raise RuntimeError("socket closed")
        self.sent.append(payload)


@pytest.mark.asyncio
async def test_attach_sends_current_status(make_state) -> None:
    hub = GameUpdateHub()
    status = build_status(make_state(slots=(0, 2)))
    ws = _FakeSocket()

    await hub.attach(ws, status)  # type: ignore[arg-type]

    assert ws.accepted
    assert len(ws.sent) == 1
    hello = ws.sent[0]
    assert hello["type"] == "status"
    assert hello["game_id"] == str(status.game_id)
    assert hello["events"] == []
    assert [p["slot_id"] for p in hello["status"]["players"]] == [0, 2]
    assert hub.watchers(status.game_id) == 1


@pytest.mark.asyncio
async def test_publish_reaches_only_that_game_and_drops_dead_sockets(make_state) -> None:
    hub = GameUpdateHub()
    here = build_status(make_state())
    there = build_status(make_state())
    good, dead, elsewhere = _FakeSocket(), _FakeSocket(), _FakeSocket()

    await hub.attach(good, here)  # type: ignore[arg-type]
    await hub.attach(dead, here)  # type: ignore[arg-type]
    await hub.attach(elsewhere, there)  # type: ignore[arg-type]
    dead.broken = True

    event = GameEvent.now(type="PLAYER_JOINED", round_number=1, payload={"slot_id": 0, "name": "Player 1"})
    delivered = await hub.publish(here, [event])

    assert delivered == 1
    update = good.sent[-1]
    assert update["type"] == "game_updated"
    assert update["events"][0]["type"] == "PLAYER_JOINED"
    assert update["status"]["game_id"] == str(here.game_id)
    assert len(elsewhere.sent) == 1
    assert hub.watchers(here.game_id) == 1
    assert hub.watchers(there.game_id) == 1


@pytest.mark.asyncio
async def test_detach_forgets_empty_games(make_state) -> None:
    hub = GameUpdateHub()
    status = build_status(make_state())
    ws = _FakeSocket()

    await hub.attach(ws, status)  # type: ignore[arg-type]
    await hub.detach(status.game_id, ws)  # type: ignore[arg-type]

    assert hub.watchers(status.game_id) == 0
    assert await hub.publish(status) == 0
    assert len(ws.sent) == 1


@pytest.mark.asyncio
async def test_send_error_shape() -> None:
    ws = _FakeSocket()

    await GameUpdateHub.send_error(ws, ["Unknown key"])  # type: ignore[arg-type]

    assert ws.sent == [{"type": "error", "detail": ["Unknown key"]}]

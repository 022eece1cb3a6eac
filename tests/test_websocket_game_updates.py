from __future__ import annotations


def _new_game_with_players(client) -> str:
    gid = client.post("/game").json()["game_id"]
    client.post(f"/game/{gid}/slots/0/join")
    client.post(f"/game/{gid}/slots/1/join")
    return gid


def test_ws_sends_status_on_connect(client_and_redis) -> None:
    client, _ = client_and_redis
    gid = _new_game_with_players(client)

    with client.websocket_connect(f"/ws/game/{gid}") as ws:
        msg = ws.receive_json()
        assert msg["type"] == "status"
        assert msg["game_id"] == gid
        assert [p["slot_id"] for p in msg["status"]["players"]] == [0, 1]


def test_ws_key_events_are_applied_and_broadcast(client_and_redis) -> None:
    client, _ = client_and_redis
    gid = _new_game_with_players(client)
    key = client.post(f"/game/{gid}/start").json()["players"][0]["assigned_keys"][0]

    with client.websocket_connect(f"/ws/game/{gid}") as ws:
        ws.receive_json()

        ws.send_json({"key": key, "is_down": True})
        msg = ws.receive_json()
        assert msg["type"] == "game_updated"
        assert [e["type"] for e in msg["events"]] == ["KEY_PRESSED"]
        assert msg["status"]["pressed_keys"] == [key]

        ws.send_json({"events": [{"key": key, "is_down": False}]})
        msg = ws.receive_json()
        assert [e["type"] for e in msg["events"]] == ["KEY_RELEASED", "PLAYER_ELIMINATED", "GAME_WON"]
        assert msg["status"]["phase"] == "finished"
        assert msg["status"]["winner_slot_id"] == 1


def test_ws_rejects_bad_messages_without_closing(client_and_redis) -> None:
    client, _ = client_and_redis
    gid = _new_game_with_players(client)

    with client.websocket_connect(f"/ws/game/{gid}") as ws:
        ws.receive_json()

        ws.send_json({"key": "shift", "is_down": True})
        msg = ws.receive_json()
        assert msg["type"] == "error"

        ws.send_text("not json")
        msg = ws.receive_json()
        assert msg["type"] == "error"

        ws.send_json({"key": "SPACE", "is_down": True})
        msg = ws.receive_json()
        assert msg["type"] == "game_updated"
        assert msg["status"]["pressed_keys"] == ["SPACE"]


def test_http_commands_are_pushed_to_sockets(client_and_redis) -> None:
    client, _ = client_and_redis
    gid = _new_game_with_players(client)

    with client.websocket_connect(f"/ws/game/{gid}") as ws:
        ws.receive_json()

        assert client.post(f"/game/{gid}/start").status_code == 200
        msg = ws.receive_json()
        assert msg["type"] == "game_updated"
        assert [e["type"] for e in msg["events"]] == ["GAME_STARTED", "KEY_ASSIGNED"]
        assert msg["status"]["phase"] == "playing"

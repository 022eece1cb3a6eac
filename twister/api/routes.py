from __future__ import annotations

import logging
from typing import Any
from uuid import UUID

import redis
from fastapi import APIRouter, Depends, HTTPException, Response, WebSocket, WebSocketDisconnect, status
from pydantic import ValidationError

from twister.actions import CommandName, dispatch_command
from twister.api.deps import get_redis
from twister.api.models import (
    GameCreateRequest,
    GameListResponse,
    GameStatus,
    KeyEvent,
    KeyEventBatch,
    RenameRequest,
)
from twister.game_store import GameNotFoundError, create_game, delete_game, get_game, list_games
from twister.lock import GameBusyError
from twister.status import build_status
from twister.websocket_hub import hub

logger = logging.getLogger(__name__)

router = APIRouter()


async def _run_command(
    *,
    r: redis.Redis,
    game_id: UUID,
    command: CommandName,
    payload: dict[str, Any] | None = None,
) -> GameStatus:
    try:
        applied = await dispatch_command(r=r, game_id=game_id, command=command, payload=payload)
    except GameNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    except GameBusyError as e:
        logger.warning("game %s: %s dropped, lock still held", game_id, command)
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e)) from e

    status_ = build_status(applied.state)
    await hub.publish(status_, applied.result.events)
    return status_


@router.websocket("/ws/game/{game_id}")
async def game_updates_ws(websocket: WebSocket, game_id: UUID, r: redis.Redis = Depends(get_redis)) -> None:
    """Status push channel; also accepts key events (`{key, is_down}` or `{events: [...]}`)."""

    state = get_game(r=r, game_id=game_id)
    if state is None:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    await hub.attach(websocket, build_status(state))

    try:
        while True:
            try:
                raw = await websocket.receive_json()
                if isinstance(raw, dict) and "events" in raw:
                    batch = KeyEventBatch.model_validate(raw)
                else:
                    batch = KeyEventBatch(events=[KeyEvent.model_validate(raw)])
            except ValidationError as e:
                await hub.send_error(websocket, [err["msg"] for err in e.errors()])
                continue
            except ValueError:
                await hub.send_error(websocket, ["Message is not valid JSON"])
                continue

            try:
                await _run_command(r=r, game_id=game_id, command="keys", payload=batch.model_dump())
            except HTTPException as e:
                await hub.send_error(websocket, [str(e.detail)])
    except WebSocketDisconnect:
        await hub.detach(game_id, websocket)
    except Exception:
        await hub.detach(game_id, websocket)
        raise


@router.get("/healthcheck")
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


@router.post("/game", response_model=GameStatus, status_code=status.HTTP_201_CREATED)
async def create_game_route(
    payload: GameCreateRequest | None = None,
    r: redis.Redis = Depends(get_redis),
) -> GameStatus:
    state = create_game(r=r, seed=payload.seed if payload is not None else None)
    return build_status(state)


@router.get("/game", response_model=GameListResponse)
async def list_games_route(r: redis.Redis = Depends(get_redis)) -> GameListResponse:
    return GameListResponse(games=[build_status(s) for s in list_games(r=r)])


@router.get("/game/{game_id}", response_model=GameStatus)
async def get_game_route(game_id: UUID, r: redis.Redis = Depends(get_redis)) -> GameStatus:
    state = get_game(r=r, game_id=game_id)
    if state is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Game not found")
    return build_status(state)


@router.delete("/game/{game_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_game_route(game_id: UUID, r: redis.Redis = Depends(get_redis)) -> Response:
    if not delete_game(r=r, game_id=game_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Game not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/game/{game_id}/slots/{slot_id}/join", response_model=GameStatus)
async def join_route(game_id: UUID, slot_id: int, r: redis.Redis = Depends(get_redis)) -> GameStatus:
    return await _run_command(r=r, game_id=game_id, command="join", payload={"slot_id": slot_id})


@router.post("/game/{game_id}/slots/{slot_id}/leave", response_model=GameStatus)
async def leave_route(game_id: UUID, slot_id: int, r: redis.Redis = Depends(get_redis)) -> GameStatus:
    return await _run_command(r=r, game_id=game_id, command="leave", payload={"slot_id": slot_id})


@router.post("/game/{game_id}/slots/{slot_id}/toggle", response_model=GameStatus)
async def toggle_route(game_id: UUID, slot_id: int, r: redis.Redis = Depends(get_redis)) -> GameStatus:
    return await _run_command(r=r, game_id=game_id, command="toggle", payload={"slot_id": slot_id})


@router.post("/game/{game_id}/slots/{slot_id}/rename", response_model=GameStatus)
async def rename_route(
    game_id: UUID,
    slot_id: int,
    payload: RenameRequest,
    r: redis.Redis = Depends(get_redis),
) -> GameStatus:
    return await _run_command(
        r=r, game_id=game_id, command="rename", payload={"slot_id": slot_id, "name": payload.name}
    )


@router.post("/game/{game_id}/start", response_model=GameStatus)
async def start_route(game_id: UUID, r: redis.Redis = Depends(get_redis)) -> GameStatus:
    return await _run_command(r=r, game_id=game_id, command="start")


@router.post("/game/{game_id}/reset", response_model=GameStatus)
async def reset_route(game_id: UUID, r: redis.Redis = Depends(get_redis)) -> GameStatus:
    return await _run_command(r=r, game_id=game_id, command="reset")


@router.post("/game/{game_id}/assign", response_model=GameStatus)
async def assign_route(game_id: UUID, r: redis.Redis = Depends(get_redis)) -> GameStatus:
    """Manual round trigger ("Next Round")."""

    return await _run_command(r=r, game_id=game_id, command="assign")


@router.post("/game/{game_id}/rollover/reset", response_model=GameStatus)
async def reset_rollover_route(game_id: UUID, r: redis.Redis = Depends(get_redis)) -> GameStatus:
    return await _run_command(r=r, game_id=game_id, command="reset_rollover")


@router.post("/game/{game_id}/keys", response_model=GameStatus)
async def key_events_route(
    game_id: UUID,
    payload: KeyEventBatch,
    r: redis.Redis = Depends(get_redis),
) -> GameStatus:
    return await _run_command(r=r, game_id=game_id, command="keys", payload=payload.model_dump())

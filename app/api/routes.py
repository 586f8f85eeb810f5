from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, WebSocket, WebSocketDisconnect, status
import redis

from app.api.deps import get_move_source, get_redis
from app.api.models import (
    CandidatesRequest,
    DescriptionResponse,
    MoveSelectionView,
    SelectRequest,
    SessionCreateRequest,
    SessionResponse,
    SingleMoveView,
)
from app.assets.registry import SpaceTable
from app.moves.description import describe
from app.moves.presentation import present_selection, present_single_move
from app.session_store import (
    SessionNotFoundError,
    create_session,
    get_session,
    load_selection,
    select_move,
    set_candidates,
)
from app.streams import Mailbox, read_mailbox
from app.websocket_hub import hub

router = APIRouter()


@router.websocket("/ws/session/{session_id}")
async def session_updates_ws(websocket: WebSocket, session_id: str) -> None:
    await hub.connect(session_id, websocket)

    try:
        # Keep the socket open; client can optionally send pings.
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        await hub.disconnect(session_id, websocket)
    except Exception:
        await hub.disconnect(session_id, websocket)
        raise


@router.get("/healthcheck")
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


@router.post("/sessions", response_model=SessionResponse, status_code=status.HTTP_201_CREATED)
async def create_session_route(payload: SessionCreateRequest, r: redis.Redis = Depends(get_redis)) -> SessionResponse:
    return create_session(r=r, overrides=payload.overrides)


@router.get("/sessions/{session_id}", response_model=SessionResponse)
async def get_session_route(session_id: str, r: redis.Redis = Depends(get_redis)) -> SessionResponse:
    session = get_session(r=r, session_id=session_id)
    if session is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Session not found")
    return session


@router.get("/sessions/{session_id}/moves", response_model=MoveSelectionView)
async def get_moves_route(
    session_id: str,
    r: redis.Redis = Depends(get_redis),
    source: SpaceTable = Depends(get_move_source),
) -> MoveSelectionView:
    try:
        state = load_selection(r=r, session_id=session_id)
    except SessionNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    return present_selection(state, source)


@router.put("/sessions/{session_id}/moves", response_model=MoveSelectionView)
async def set_moves_route(
    session_id: str,
    payload: CandidatesRequest,
    r: redis.Redis = Depends(get_redis),
    source: SpaceTable = Depends(get_move_source),
) -> MoveSelectionView:
    if payload.from_space is not None:
        if payload.from_space not in source:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail=f"Unknown space: {payload.from_space}",
            )
        candidates = list(source.next_moves(payload.from_space))
    else:
        candidates = payload.candidates or []

    try:
        state = set_candidates(r=r, session_id=session_id, candidates=candidates)
    except SessionNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e

    await hub.candidates_changed(session_id, state.candidates, state.current_selection())
    return present_selection(state, source)


@router.post("/sessions/{session_id}/moves/select", response_model=MoveSelectionView)
async def select_move_route(
    session_id: str,
    payload: SelectRequest,
    r: redis.Redis = Depends(get_redis),
    source: SpaceTable = Depends(get_move_source),
) -> MoveSelectionView:
    try:
        state, changed = select_move(r=r, session_id=session_id, move=payload.move)
    except SessionNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e

    # A stale pick (move no longer offered) is not an error; the client just gets the current view back.
    if changed:
        await hub.selection_changed(session_id, payload.move)
    return present_selection(state, source)


@router.get("/sessions/{session_id}/mailbox")
async def get_session_mailbox_route(
    session_id: str,
    count: int = 20,
    start: str = "-",
    end: str = "+",
    r: redis.Redis = Depends(get_redis),
) -> dict[str, object]:
    """Debug endpoint: read a session's selection events."""

    if count < 1 or count > 200:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail="count must be between 1 and 200")

    mailbox = Mailbox(session_id=session_id)
    try:
        entries = read_mailbox(r=r, mailbox=mailbox, count=count, start=start, end=end)
    except redis.RedisError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e)) from e

    messages = [{"id": mid, "fields": fields} for mid, fields in entries]
    return {"session_id": session_id, "stream": mailbox.key, "messages": messages}


@router.get("/moves/{move}/description", response_model=DescriptionResponse)
async def describe_move_route(move: str, source: SpaceTable = Depends(get_move_source)) -> DescriptionResponse:
    return DescriptionResponse(move=move, description=describe(move, source))


@router.get("/moves/{move}", response_model=SingleMoveView)
async def single_move_route(move: str, source: SpaceTable = Depends(get_move_source)) -> SingleMoveView:
    return present_single_move(move, source)

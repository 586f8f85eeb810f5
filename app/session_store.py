from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

import redis

from app.api.models import SelectionRecord, SessionResponse
from app.moves.selection import MoveSelectionState
from app.session.initializer import SessionInitializer, SessionRecord
from app.streams import Mailbox, mailbox_listener


logger = logging.getLogger(__name__)

SESSIONS_SET_KEY = "pathway:sessions"
SESSION_KEY_PREFIX = "pathway:session:"  # + {session id}
SELECTION_KEY_PREFIX = "pathway:selection:"  # + {session id}


class SessionNotFoundError(ValueError):
    pass


def _session_key(session_id: str) -> str:
    return f"{SESSION_KEY_PREFIX}{session_id}"


def _selection_key(session_id: str) -> str:
    return f"{SELECTION_KEY_PREFIX}{session_id}"


def session_to_response(record: SessionRecord) -> SessionResponse:
    return SessionResponse(id=record.id, config=dict(record.config), created_at=record.created_at)


def save_session(*, r: redis.Redis, session: SessionResponse) -> None:
    r.set(_session_key(session.id), session.model_dump_json())
    r.sadd(SESSIONS_SET_KEY, session.id)


def get_session(*, r: redis.Redis, session_id: str) -> SessionResponse | None:
    raw = r.get(_session_key(session_id))
    if not raw:
        return None
    return SessionResponse.model_validate_json(raw)


def require_session(*, r: redis.Redis, session_id: str) -> SessionResponse:
    session = get_session(r=r, session_id=session_id)
    if session is None:
        raise SessionNotFoundError(f"Session not found: {session_id}")
    return session


def create_session(
    *,
    r: redis.Redis,
    overrides: Mapping[str, Any] | None = None,
    initializer: SessionInitializer | None = None,
) -> SessionResponse:
    """Configure, initialize and persist a new session.

    Session ids are short random labels; a colliding id overwrites the older session.
    """

    init = (initializer or SessionInitializer()).configure(overrides).initialize()
    session = session_to_response(init.create_session())
    if r.exists(_session_key(session.id)):
        logger.warning("Session id %s already in use; overwriting", session.id)
        r.delete(_selection_key(session.id))
    save_session(r=r, session=session)
    return session


def save_selection(*, r: redis.Redis, session_id: str, state: MoveSelectionState) -> None:
    record = SelectionRecord(candidates=list(state.candidates), selected=state.current_selection())
    r.set(_selection_key(session_id), record.model_dump_json())


def load_selection(*, r: redis.Redis, session_id: str) -> MoveSelectionState:
    require_session(r=r, session_id=session_id)
    raw = r.get(_selection_key(session_id))
    if not raw:
        return MoveSelectionState()
    record = SelectionRecord.model_validate_json(raw)
    return MoveSelectionState.restore(candidates=record.candidates, selected=record.selected)


def set_candidates(*, r: redis.Redis, session_id: str, candidates: Iterable[str]) -> MoveSelectionState:
    state = load_selection(r=r, session_id=session_id)
    state.initialize(candidates)
    save_selection(r=r, session_id=session_id, state=state)
    return state


def select_move(*, r: redis.Redis, session_id: str, move: str) -> tuple[MoveSelectionState, bool]:
    """Record the player's pick and publish it to the session mailbox.

    Returns the state and whether the selection was accepted. Unknown moves are
    ignored rather than rejected.
    """

    state = load_selection(r=r, session_id=session_id)
    picks: list[tuple[str, bool]] = []
    changed = state.select(move, lambda m, committed: picks.append((m, committed)))
    if changed:
        # Persist before publishing so consumers never see a pick that was not stored.
        save_selection(r=r, session_id=session_id, state=state)
        publish = mailbox_listener(r=r, mailbox=Mailbox(session_id=session_id))
        for picked, committed in picks:
            publish(picked, committed)
    return state, changed

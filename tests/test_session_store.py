from __future__ import annotations

import random

import fakeredis
import pytest
import redis

from app.session.initializer import SessionInitializer
from app.session_store import (
    SessionNotFoundError,
    create_session,
    load_selection,
    require_session,
    select_move,
    set_candidates,
)
from app.streams import Mailbox, mailbox_listener, read_mailbox


@pytest.fixture()
def r() -> fakeredis.FakeRedis:
    return fakeredis.FakeRedis(decode_responses=True)


def test_selection_round_trips_through_redis(r: fakeredis.FakeRedis) -> None:
    session = create_session(r=r, overrides={"startingPoints": 50})
    assert require_session(r=r, session_id=session.id).config["startingPoints"] == 50

    set_candidates(r=r, session_id=session.id, candidates=["A", "B"])
    state, changed = select_move(r=r, session_id=session.id, move="B")
    assert changed
    assert state.current_selection() == "B"

    reloaded = load_selection(r=r, session_id=session.id)
    assert reloaded.candidates == ("A", "B")
    assert reloaded.current_selection() == "B"


def test_unknown_move_is_not_persisted_or_published(r: fakeredis.FakeRedis) -> None:
    session = create_session(r=r)
    set_candidates(r=r, session_id=session.id, candidates=["A"])

    _, changed = select_move(r=r, session_id=session.id, move="Z")
    assert not changed
    assert load_selection(r=r, session_id=session.id).current_selection() is None
    assert read_mailbox(r=r, mailbox=Mailbox(session_id=session.id)) == []


def test_missing_session_raises(r: fakeredis.FakeRedis) -> None:
    with pytest.raises(SessionNotFoundError):
        load_selection(r=r, session_id="game-1")


def test_colliding_id_overwrites_and_clears_selection(r: fakeredis.FakeRedis) -> None:
    first = create_session(r=r, initializer=SessionInitializer(rng=random.Random(3)))
    set_candidates(r=r, session_id=first.id, candidates=["A"])
    select_move(r=r, session_id=first.id, move="A")

    second = create_session(r=r, overrides={"maxPlayers": 6}, initializer=SessionInitializer(rng=random.Random(3)))
    assert second.id == first.id
    assert require_session(r=r, session_id=second.id).config["maxPlayers"] == 6
    assert load_selection(r=r, session_id=second.id).candidates == ()


def test_mailbox_listener_reports_committed_flag(r: fakeredis.FakeRedis) -> None:
    mailbox = Mailbox(session_id="game-42")
    listener = mailbox_listener(r=r, mailbox=mailbox)

    listener("ARCH-INITIATION", False)

    [(_, fields)] = read_mailbox(r=r, mailbox=mailbox)
    assert fields["move"] == "ARCH-INITIATION"
    assert fields["committed"] == "false"
    assert fields["session_id"] == "game-42"


def test_failed_save_publishes_nothing(r: fakeredis.FakeRedis, monkeypatch: pytest.MonkeyPatch) -> None:
    session = create_session(r=r)
    set_candidates(r=r, session_id=session.id, candidates=["A", "B"])

    def _down(*args: object, **kwargs: object) -> None:
        raise redis.ConnectionError("redis went away")

    monkeypatch.setattr(r, "set", _down)

    with pytest.raises(redis.ConnectionError):
        select_move(r=r, session_id=session.id, move="A")

    assert read_mailbox(r=r, mailbox=Mailbox(session_id=session.id)) == []

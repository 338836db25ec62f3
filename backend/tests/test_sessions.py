import random
import uuid
from datetime import timedelta

import pytest

from app.models.attendance_session import AttendanceSession
from app.services import sessions as session_service
from app.services.sessions import (
    create_session, find_session_by_code, generate_code,
    get_active_session, get_session, list_sessions
)

from conftest import T0, SequenceRandom


def _insert(db, code, owner_id="teacher-1", created_at=T0, minutes=5, session_id=None):
    session = AttendanceSession(
        id=session_id or str(uuid.uuid4()),
        code=code,
        owner_id=owner_id,
        created_at=created_at,
        expires_at=created_at + timedelta(minutes=minutes),
    )
    db.add(session)
    db.commit()
    return session


def test_generate_code_is_six_digits():
    rng = random.Random(7)
    for _ in range(200):
        code = generate_code(rng)
        assert len(code) == 6
        assert 100000 <= int(code) <= 999999


def test_create_session_sets_window(db):
    session = create_session(db, "teacher-1", 15, now=T0, rng=SequenceRandom([482913]))

    assert session.code == "482913"
    assert session.owner_id == "teacher-1"
    assert session.created_at == T0
    assert session.expires_at == T0 + timedelta(minutes=15)
    assert get_session(db, session.id) is session


def test_create_session_redraws_code_held_by_active_session(db):
    create_session(db, "teacher-1", 10, now=T0, rng=SequenceRandom([123456]))
    second = create_session(db, "teacher-2", 10, now=T0 + timedelta(minutes=1),
                            rng=SequenceRandom([123456, 654321]))

    assert second.code == "654321"


def test_create_session_reuses_code_of_expired_session(db):
    create_session(db, "teacher-1", 1, now=T0, rng=SequenceRandom([123456]))
    later = create_session(db, "teacher-2", 10, now=T0 + timedelta(minutes=2),
                           rng=SequenceRandom([123456]))

    assert later.code == "123456"


def test_create_session_always_succeeds_when_draws_run_out(db, monkeypatch):
    monkeypatch.setattr(session_service, "CODE_GENERATION_ATTEMPTS", 2)
    first = create_session(db, "teacher-1", 10, now=T0, rng=SequenceRandom([123456]))
    second = create_session(db, "teacher-2", 10, now=T0 + timedelta(minutes=1),
                            rng=SequenceRandom([123456, 123456]))

    assert second.code == first.code == "123456"
    # the newer active session wins the lookup
    assert find_session_by_code(db, "123456", now=T0 + timedelta(minutes=2)).id == second.id


def test_get_active_session_prefers_most_recent(db):
    _insert(db, "111111", created_at=T0, minutes=30)
    newer = _insert(db, "222222", created_at=T0 + timedelta(minutes=5), minutes=30)
    _insert(db, "333333", owner_id="teacher-2", created_at=T0 + timedelta(minutes=6), minutes=30)

    assert get_active_session(db, "teacher-1", now=T0 + timedelta(minutes=10)).id == newer.id


def test_get_active_session_none_after_expiry(db):
    session = _insert(db, "111111", minutes=5)

    assert get_active_session(db, "teacher-1", now=session.expires_at - timedelta(seconds=1)) is not None
    assert get_active_session(db, "teacher-1", now=session.expires_at) is None


def test_list_sessions_ordered_by_creation(db):
    second = _insert(db, "222222", created_at=T0 + timedelta(hours=1))
    first = _insert(db, "111111", created_at=T0)
    _insert(db, "333333", owner_id="teacher-2")

    assert [s.id for s in list_sessions(db, "teacher-1")] == [first.id, second.id]
    assert list_sessions(db, "nobody") == []


def test_find_session_by_code_unknown(db):
    _insert(db, "111111")
    assert find_session_by_code(db, "999999", now=T0) is None


def test_find_session_by_code_prefers_active(db):
    older_active = _insert(db, "555555", created_at=T0, minutes=60)
    _insert(db, "555555", created_at=T0 + timedelta(minutes=10), minutes=1)

    found = find_session_by_code(db, "555555", now=T0 + timedelta(minutes=20))
    assert found.id == older_active.id


@pytest.mark.parametrize("minutes_later", [30, 600])
def test_find_session_by_code_falls_back_to_most_recent_expired(db, minutes_later):
    _insert(db, "555555", created_at=T0, minutes=1)
    newest = _insert(db, "555555", created_at=T0 + timedelta(minutes=5), minutes=1)

    found = find_session_by_code(db, "555555", now=T0 + timedelta(minutes=minutes_later))
    assert found.id == newest.id


def test_same_tick_sessions_order_by_expiry_then_id(db):
    short = _insert(db, "777777", minutes=5, session_id="b" * 36)
    long_a = _insert(db, "777777", minutes=30, session_id="a" * 36)
    long_c = _insert(db, "777777", minutes=30, session_id="c" * 36)
    now = T0 + timedelta(minutes=1)

    assert get_active_session(db, "teacher-1", now=now).id == long_c.id
    assert find_session_by_code(db, "777777", now=now).id == long_c.id
    assert [s.id for s in list_sessions(db, "teacher-1")] == [short.id, long_a.id, long_c.id]


def test_same_tick_expired_sessions_resolve_by_id(db):
    _insert(db, "888888", minutes=1, session_id="a" * 36)
    highest_id = _insert(db, "888888", minutes=1, session_id="f" * 36)

    for _ in range(3):
        assert find_session_by_code(db, "888888", now=T0 + timedelta(hours=1)).id == highest_id.id

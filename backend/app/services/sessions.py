"""
Session Service - opens and looks up attendance sessions.

A session is a time window identified by a 6-digit code drawn uniformly from
100000-999999. Codes are not unique across all time, so two rules keep code
lookup unambiguous:

1. At creation the code is redrawn while another *active* session holds it
   (bounded by CODE_GENERATION_ATTEMPTS; creation never fails).
2. find_session_by_code prefers active sessions, most recently created first,
   and otherwise returns the most recently created expired session so the
   caller can report expiry instead of an unknown code.

Sessions created in the same clock tick are ordered by expires_at, then by
id, so "most recent" is always a total order.
"""

import os
import random
import uuid
from datetime import datetime, timedelta
from typing import List, Optional
from sqlalchemy.orm import Session

from app.clock import utcnow
from app.models.attendance_session import AttendanceSession
from app.logging_config import get_logger, log_with_context

logger = get_logger("sessions")

CODE_MIN = 100000
CODE_MAX = 999999
CODE_GENERATION_ATTEMPTS = int(os.getenv("CODE_GENERATION_ATTEMPTS", "10"))

_system_random = random.SystemRandom()


def _newest_first():
    return (AttendanceSession.created_at.desc(),
            AttendanceSession.expires_at.desc(),
            AttendanceSession.id.desc())


def _oldest_first():
    return (AttendanceSession.created_at.asc(),
            AttendanceSession.expires_at.asc(),
            AttendanceSession.id.asc())


def generate_code(rng: random.Random = None) -> str:
    """Draw a 6-digit join code uniformly from the 900,000-value space."""
    return str((rng or _system_random).randint(CODE_MIN, CODE_MAX))


def _code_in_use(db: Session, code: str, now: datetime) -> bool:
    return db.query(AttendanceSession.id).filter(
        AttendanceSession.code == code,
        AttendanceSession.expires_at > now
    ).first() is not None


def create_session(db: Session, owner_id: str, duration_minutes: int,
                   now: datetime = None, rng: random.Random = None) -> AttendanceSession:
    """
    Open a new attendance window for ``owner_id``.

    ``duration_minutes > 0`` is the caller's responsibility (the API schema
    enforces it).

    Args:
        db: Database session for persistence
        owner_id: Identifier of the instructor opening the window
        duration_minutes: Window length in minutes
        now: Creation time, defaults to the current UTC time
        rng: Optional random source for code generation

    Returns:
        The persisted AttendanceSession
    """
    now = now or utcnow()

    code = generate_code(rng)
    attempts = 1
    while _code_in_use(db, code, now) and attempts < CODE_GENERATION_ATTEMPTS:
        log_with_context(logger, "DEBUG", "Code {} held by an active session, redrawing".format(code),
                         context={"owner_id": owner_id})
        code = generate_code(rng)
        attempts += 1

    if attempts >= CODE_GENERATION_ATTEMPTS and _code_in_use(db, code, now):
        log_with_context(logger, "WARNING",
            "Code {} still held by an active session after {} draws".format(code, attempts),
            context={"owner_id": owner_id})

    session = AttendanceSession(
        id=str(uuid.uuid4()),
        code=code,
        owner_id=owner_id,
        created_at=now,
        expires_at=now + timedelta(minutes=duration_minutes)
    )
    db.add(session)
    db.commit()
    db.refresh(session)

    log_with_context(logger, "INFO", "Session opened with code {} for {} min".format(code, duration_minutes),
                     context={"session_id": session.id, "owner_id": owner_id},
                     extra_data={"expires_at": session.expires_at.isoformat(), "code_draws": attempts})
    return session


def get_session(db: Session, session_id: str) -> Optional[AttendanceSession]:
    return db.query(AttendanceSession).filter(AttendanceSession.id == session_id).first()


def get_active_session(db: Session, owner_id: str, now: datetime = None) -> Optional[AttendanceSession]:
    """The owner's most recently created session that has not expired, if any."""
    now = now or utcnow()
    return db.query(AttendanceSession).filter(
        AttendanceSession.owner_id == owner_id,
        AttendanceSession.expires_at > now
    ).order_by(*_newest_first()).first()


def list_sessions(db: Session, owner_id: str) -> List[AttendanceSession]:
    """All sessions ever opened by the owner, oldest first."""
    return db.query(AttendanceSession).filter(
        AttendanceSession.owner_id == owner_id
    ).order_by(*_oldest_first()).all()


def find_session_by_code(db: Session, code: str, now: datetime = None) -> Optional[AttendanceSession]:
    """
    Resolve a join code to a session.

    Active sessions win over expired ones; within each group the most
    recently created session wins. Returns None if no session ever used
    the code.
    """
    now = now or utcnow()
    candidates = db.query(AttendanceSession).filter(
        AttendanceSession.code == code
    ).order_by(*_newest_first()).all()

    if not candidates:
        return None

    for candidate in candidates:
        if candidate.is_active(now):
            return candidate
    return candidates[0]

"""
Admission Service - validates and records a student's attendance claim.

Validation pipeline (order is part of the contract, each failure is terminal
and writes nothing):
1. Code resolves to a session                      -> else InvalidCode
2. Session has not expired                         -> else SessionExpired
3. Student has no record for the session           -> else AlreadySigned
4. Non-empty fingerprint not used by another
   student in the session                          -> else DeviceReused
5. Persist the record with signed_at = now

Steps 3 and 4 are pre-checks. Two concurrent admissions can both pass them,
so the unique constraints on attendance_records are the real guarantee: an
IntegrityError on commit is rolled back and reported as AlreadySigned or
DeviceReused, never as a generic failure.
"""

import time
import uuid
from datetime import datetime
from typing import Callable, Dict, Iterable, List, Optional
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.clock import utcnow
from app.errors import AlreadySigned, DeviceReused, InvalidCode, SessionExpired
from app.models.attendance_record import AttendanceRecord
from app.services.sessions import find_session_by_code
from app.logging_config import get_logger, log_with_context

logger = get_logger("admission")


def _student_record(db: Session, session_id: str, student_id: str) -> Optional[AttendanceRecord]:
    return db.query(AttendanceRecord).filter(
        AttendanceRecord.session_id == session_id,
        AttendanceRecord.student_id == student_id
    ).first()


def _device_record(db: Session, session_id: str, fingerprint: str,
                   student_id: str) -> Optional[AttendanceRecord]:
    return db.query(AttendanceRecord).filter(
        AttendanceRecord.session_id == session_id,
        AttendanceRecord.device_fingerprint == fingerprint,
        AttendanceRecord.student_id != student_id
    ).first()


def admit(db: Session, code: str, student_id: str, student_name: str,
          fingerprint: Optional[str] = None, now: datetime = None,
          on_admitted: Optional[Callable[[AttendanceRecord], None]] = None) -> AttendanceRecord:
    """
    Sign ``student_id`` into the session identified by ``code``.

    Args:
        db: Database session for persistence
        code: Join code as typed or decoded from a QR payload
        student_id: Identifier of the signing student
        student_name: Display name stored on the record
        fingerprint: Device fingerprint, "" or None to skip the device check
        now: Admission time, defaults to the current UTC time
        on_admitted: Optional hook called with the record after commit

    Returns:
        The persisted AttendanceRecord

    Raises:
        InvalidCode, SessionExpired, AlreadySigned, DeviceReused
    """
    start_time = time.time()
    now = now or utcnow()
    code = (code or "").strip()
    fingerprint = fingerprint or None

    session = find_session_by_code(db, code, now=now) if code else None
    if session is None:
        raise InvalidCode()

    if session.expires_at <= now:
        raise SessionExpired()

    if _student_record(db, session.id, student_id) is not None:
        raise AlreadySigned()

    if fingerprint and _device_record(db, session.id, fingerprint, student_id) is not None:
        raise DeviceReused()

    record = AttendanceRecord(
        id=str(uuid.uuid4()),
        session_id=session.id,
        student_id=student_id,
        student_name=student_name,
        signed_at=now,
        device_fingerprint=fingerprint
    )
    db.add(record)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        log_with_context(logger, "WARNING", "Concurrent admission lost the uniqueness race",
                         context={"session_id": session.id, "student_id": student_id})
        if _student_record(db, session.id, student_id) is not None:
            raise AlreadySigned()
        raise DeviceReused()
    db.refresh(record)

    duration_ms = (time.time() - start_time) * 1000
    log_with_context(logger, "INFO", "Attendance recorded for {}".format(student_name),
                     context={"session_id": session.id, "student_id": student_id},
                     extra_data={"duration_ms": round(duration_ms, 2),
                                 "has_fingerprint": fingerprint is not None})

    if on_admitted is not None:
        on_admitted(record)
    return record


def records_for_session(db: Session, session_id: str) -> List[AttendanceRecord]:
    return db.query(AttendanceRecord).filter(
        AttendanceRecord.session_id == session_id
    ).order_by(AttendanceRecord.signed_at.asc()).all()


def records_for_student(db: Session, student_id: str) -> List[AttendanceRecord]:
    return db.query(AttendanceRecord).filter(
        AttendanceRecord.student_id == student_id
    ).order_by(AttendanceRecord.signed_at.asc()).all()


def count_records_by_session(db: Session, session_ids: Iterable[str]) -> Dict[str, int]:
    """Number of records per session id; sessions without records map to 0."""
    session_ids = list(session_ids)
    counts = {session_id: 0 for session_id in session_ids}
    if not session_ids:
        return counts
    rows = db.query(AttendanceRecord.session_id, func.count(AttendanceRecord.id)).filter(
        AttendanceRecord.session_id.in_(session_ids)
    ).group_by(AttendanceRecord.session_id).all()
    for session_id, count in rows:
        counts[session_id] = count
    return counts

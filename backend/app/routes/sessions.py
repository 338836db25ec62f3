"""
Session API routes - teacher-facing operations on attendance windows.

Provides endpoints for:
- Opening a new session
- Fetching the currently active session
- Listing session history with signature counts
- Listing the records of one session
"""

import os
import time
from datetime import datetime
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from app.clock import utcnow
from app.database import get_db
from app.dependencies import require_teacher
from app.models.attendance_record import AttendanceRecord
from app.models.attendance_session import AttendanceSession
from app.models.user import User
from app.services.admission import count_records_by_session, records_for_session
from app.services.sessions import (
    create_session, get_active_session, get_session, list_sessions
)
from app.logging_config import get_logger, log_with_context

router = APIRouter()
logger = get_logger("http")

MAX_SESSION_MINUTES = int(os.getenv("MAX_SESSION_MINUTES", "180"))


# ── Pydantic schemas ─────────────────────────────────────────

class CreateSessionRequest(BaseModel):
    """Schema for opening an attendance window."""
    duration_minutes: int = Field(..., gt=0, le=MAX_SESSION_MINUTES,
                                  description="Window length in minutes")


def serialize_session(session: AttendanceSession, now: datetime,
                      record_count: Optional[int] = None) -> dict:
    """Serialize an AttendanceSession ORM object to a dict for API response."""
    result = {
        "id": str(session.id),
        "code": session.code,
        "owner_id": str(session.owner_id),
        "created_at": session.created_at.isoformat(),
        "expires_at": session.expires_at.isoformat(),
        "active": session.is_active(now),
        "seconds_remaining": max(0, int((session.expires_at - now).total_seconds()))
    }
    if record_count is not None:
        result["record_count"] = record_count
    return result


def serialize_record(record: AttendanceRecord) -> dict:
    return {
        "id": str(record.id),
        "session_id": str(record.session_id),
        "student_id": str(record.student_id),
        "student_name": record.student_name,
        "signed_at": record.signed_at.isoformat(),
        "device_fingerprint": record.device_fingerprint
    }


@router.post("/api/sessions", status_code=201)
def open_session(request: CreateSessionRequest,
                 teacher: User = Depends(require_teacher),
                 db: Session = Depends(get_db)):
    """Open a new attendance window owned by the calling teacher."""
    now = utcnow()
    session = create_session(db, teacher.id, request.duration_minutes, now=now)
    return serialize_session(session, now, record_count=0)


@router.get("/api/sessions/active")
def read_active_session(teacher: User = Depends(require_teacher),
                        db: Session = Depends(get_db)):
    """The caller's active session (most recent if several), or null."""
    now = utcnow()
    session = get_active_session(db, teacher.id, now=now)
    if session is None:
        return None
    counts = count_records_by_session(db, [session.id])
    return serialize_session(session, now, record_count=counts[session.id])


@router.get("/api/sessions")
def read_sessions(teacher: User = Depends(require_teacher),
                  db: Session = Depends(get_db)):
    """Session history of the caller, oldest first, with signature counts."""
    start_time = time.time()
    now = utcnow()
    sessions = list_sessions(db, teacher.id)
    counts = count_records_by_session(db, [s.id for s in sessions])

    duration_ms = (time.time() - start_time) * 1000
    log_with_context(logger, "INFO", "Listed {} sessions".format(len(sessions)),
                     context={"owner_id": teacher.id},
                     extra_data={"duration_ms": round(duration_ms, 2)})

    return {"data": [serialize_session(s, now, record_count=counts[s.id]) for s in sessions]}


@router.get("/api/sessions/{session_id}/records")
def read_session_records(session_id: str,
                         teacher: User = Depends(require_teacher),
                         db: Session = Depends(get_db)):
    """Records of one of the caller's sessions, in signing order."""
    session = get_session(db, session_id)
    if not session or session.owner_id != teacher.id:
        raise HTTPException(status_code=404, detail="Session not found")

    records = records_for_session(db, session.id)
    return {
        "session": serialize_session(session, utcnow(), record_count=len(records)),
        "data": [serialize_record(r) for r in records]
    }

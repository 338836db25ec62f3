"""
Attendance API routes - student-facing signing and history.

The code may come from the keyboard or from a decoded QR payload; both are
submitted the same way.
"""

from typing import Optional
from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import require_student
from app.models.user import User
from app.routes.sessions import serialize_record
from app.services.admission import admit, records_for_student
from app.services.fingerprint import DeviceSignals, compute_fingerprint

router = APIRouter()


class SignRequest(BaseModel):
    """Schema for a signing attempt."""
    code: str = Field(..., max_length=64, description="Join code, typed or scanned")
    fingerprint: Optional[str] = Field(None, max_length=64,
                                       description="Fingerprint computed on the client")
    signals: Optional[DeviceSignals] = Field(None,
                                             description="Raw device signals to fingerprint server-side")


def resolve_fingerprint(request: SignRequest) -> str:
    """
    Explicit fingerprint first, then submitted signals.

    Without either the result is "", which skips the device check.
    """
    if request.fingerprint:
        return request.fingerprint
    if request.signals is not None:
        return compute_fingerprint(request.signals)
    return ""


@router.post("/api/attendance", status_code=201)
def sign_attendance(body: SignRequest,
                    student: User = Depends(require_student),
                    db: Session = Depends(get_db)):
    """Sign the calling student into the session matching the code."""
    fingerprint = resolve_fingerprint(body)
    record = admit(db, body.code, student.id, student.name, fingerprint)
    return serialize_record(record)


@router.get("/api/attendance/me")
def read_my_attendance(student: User = Depends(require_student),
                       db: Session = Depends(get_db)):
    """The calling student's records, oldest first."""
    return {"data": [serialize_record(r) for r in records_for_student(db, student.id)]}

"""
AttendanceRecord model - one student's signature on one session.

Records are immutable once written. The two unique constraints are the
store-level guarantee behind the admission rules: a student signs a session
at most once, and a device fingerprint is attached to at most one student
per session. NULL fingerprints never collide with each other.
"""

import uuid
from sqlalchemy import Column, Text, DateTime, ForeignKey, Index, String, UniqueConstraint
from sqlalchemy.orm import relationship
from app.database import Base


class AttendanceRecord(Base):
    """SQLAlchemy model for the attendance_records table."""
    __tablename__ = "attendance_records"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()),
                doc="Surrogate record identifier")
    session_id = Column(String(36), ForeignKey("attendance_sessions.id"), nullable=False,
                        doc="Session this record signs")
    student_id = Column(Text, nullable=False,
                        doc="Identifier of the signing student")
    student_name = Column(Text, nullable=False,
                          doc="Display name of the student at signing time")
    signed_at = Column(DateTime, nullable=False,
                       doc="Admission time (naive UTC)")
    device_fingerprint = Column(String(64), nullable=True,
                                doc="Heuristic device identifier, NULL when unavailable")

    session = relationship("AttendanceSession", back_populates="records")

    __table_args__ = (
        UniqueConstraint("session_id", "student_id", name="uq_attendance_records_session_student"),
        UniqueConstraint("session_id", "device_fingerprint", name="uq_attendance_records_session_device"),
        Index("ix_attendance_records_student_id", "student_id"),
    )

    def __repr__(self):
        return f"<AttendanceRecord(session={self.session_id}, student={self.student_id}, signed_at={self.signed_at})>"

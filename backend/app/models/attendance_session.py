"""
AttendanceSession model - a time-boxed, code-identified attendance window.

A session is active while ``now < expires_at``. There is no stored
"closed" flag; expiry is always derived from the clock.
"""

import uuid
from sqlalchemy import Column, DateTime, Index, String, Text
from sqlalchemy.orm import relationship
from app.database import Base


class AttendanceSession(Base):
    """
    SQLAlchemy model for the attendance_sessions table.

    ``code`` is not unique across all time: codes are reused once earlier
    sessions holding them have expired.
    """
    __tablename__ = "attendance_sessions"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()),
                doc="Unique session identifier")
    code = Column(String(6), nullable=False,
                  doc="6-digit join code entered (or scanned) by students")
    owner_id = Column(Text, nullable=False,
                      doc="Identifier of the instructor who opened the session")
    created_at = Column(DateTime, nullable=False,
                        doc="When the window opened (naive UTC)")
    expires_at = Column(DateTime, nullable=False,
                        doc="When the window closes (naive UTC)")

    records = relationship("AttendanceRecord", back_populates="session",
                           order_by="AttendanceRecord.signed_at")

    __table_args__ = (
        Index("ix_attendance_sessions_code", "code"),
        Index("ix_attendance_sessions_owner_id", "owner_id"),
        Index("ix_attendance_sessions_created_at", "created_at"),
    )

    def is_active(self, now) -> bool:
        return now < self.expires_at

    def __repr__(self):
        return f"<AttendanceSession(id={self.id}, code='{self.code}', owner={self.owner_id})>"

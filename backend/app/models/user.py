"""
User model - the identity directory entry for teachers and students.

Credentials are held by the external identity provider; this table only
records the {id, name, role} triple the attendance core needs.
"""

import uuid
from sqlalchemy import Column, Text, DateTime, String
from app.clock import utcnow
from app.database import Base

ROLE_TEACHER = "teacher"
ROLE_STUDENT = "student"
ROLES = (ROLE_TEACHER, ROLE_STUDENT)


class User(Base):
    """SQLAlchemy model for the users table. Names are unique."""
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()),
                doc="Unique user identifier issued at registration")
    name = Column(Text, nullable=False, unique=True,
                  doc="Display name, also used as the login name")
    role = Column(String(16), nullable=False,
                  doc="teacher | student")
    created_at = Column(DateTime, default=utcnow,
                        doc="Timestamp when the user registered")

    def __repr__(self):
        return f"<User(id={self.id}, name='{self.name}', role='{self.role}')>"

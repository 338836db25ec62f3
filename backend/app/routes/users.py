"""
User API routes - registration and "who am I" for the identity directory.
"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import get_current_user
from app.models.user import User
from app.services.identity import register_user

router = APIRouter()


class RegisterRequest(BaseModel):
    """Schema for registering a user."""
    name: str = Field(..., min_length=1, max_length=100, pattern=r"\S")
    role: str = Field(..., pattern="^(teacher|student)$")


def serialize_user(user: User) -> dict:
    return {
        "id": str(user.id),
        "name": user.name,
        "role": user.role,
        "created_at": user.created_at.isoformat() if user.created_at else None
    }


@router.post("/api/users", status_code=201)
def create_user(request: RegisterRequest, db: Session = Depends(get_db)):
    """Register a teacher or student. Duplicate names are rejected with 409."""
    user = register_user(db, request.name, request.role)
    return serialize_user(user)


@router.get("/api/users/me")
def read_current_user(user: User = Depends(get_current_user)):
    return serialize_user(user)

"""
Request dependencies resolving the caller's identity.

The identity provider in front of this service authenticates the user and
forwards their id in the X-User-ID header.
"""

from typing import Optional
from fastapi import Depends, Header, HTTPException
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.user import User, ROLE_STUDENT, ROLE_TEACHER
from app.services.identity import get_user


def get_current_user(x_user_id: Optional[str] = Header(None),
                     db: Session = Depends(get_db)) -> User:
    if not x_user_id:
        raise HTTPException(status_code=401, detail="Missing X-User-ID header")
    user = get_user(db, x_user_id)
    if not user:
        raise HTTPException(status_code=401, detail="Unknown user")
    return user


def require_teacher(user: User = Depends(get_current_user)) -> User:
    if user.role != ROLE_TEACHER:
        raise HTTPException(status_code=403, detail="Only teachers can manage sessions")
    return user


def require_student(user: User = Depends(get_current_user)) -> User:
    if user.role != ROLE_STUDENT:
        raise HTTPException(status_code=403, detail="Only students can sign attendance")
    return user

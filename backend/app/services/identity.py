"""
Identity Service - minimal user directory standing in for the identity provider.

Only the {id, name, role} triple is kept; credentials never reach this
service.
"""

import uuid
from typing import Optional
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.clock import utcnow
from app.errors import UsernameTaken
from app.models.user import User
from app.logging_config import get_logger, log_with_context

logger = get_logger("identity")


def register_user(db: Session, name: str, role: str) -> User:
    """
    Register a new user.

    Raises:
        UsernameTaken: if a user with the same (trimmed) name exists
    """
    name = name.strip()
    if db.query(User.id).filter(User.name == name).first() is not None:
        raise UsernameTaken()

    user = User(id=str(uuid.uuid4()), name=name, role=role, created_at=utcnow())
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise UsernameTaken()
    db.refresh(user)

    log_with_context(logger, "INFO", "Registered {} {}".format(role, name),
                     context={"user_id": user.id})
    return user


def get_user(db: Session, user_id: str) -> Optional[User]:
    return db.query(User).filter(User.id == user_id).first()

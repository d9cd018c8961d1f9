from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from mobile_clinic.core.errors import NotFound, ValidationError
from mobile_clinic.models.user import User

logger = logging.getLogger("mobile_clinic.auth")


def normalize_username(raw: str | None) -> str:
    username = (raw or "").strip()
    if len(username) < 3:
        raise ValidationError.for_field("username", "Username must be at least 3 characters")
    return username


def get_user_by_username(db: Session, username: str) -> User | None:
    return db.scalar(select(User).where(User.username == username))


def get_active_user(db: Session, user_id: int) -> User | None:
    user = db.get(User, user_id)
    if user is None or not user.is_active:
        return None
    return user


def get_or_create_user(db: Session, raw_username: str) -> tuple[User, bool]:
    """Return the user for ``raw_username``, creating or reactivating it.

    The boolean is True when a new row was inserted.
    """
    username = normalize_username(raw_username)
    user = get_user_by_username(db, username)
    if user is None:
        user = User(username=username, is_active=True)
        db.add(user)
        try:
            db.commit()
        except IntegrityError:
            # A concurrent first login inserted the same username.
            db.rollback()
            logger.info("Concurrent first login for %s; reusing the stored user", username)
            user = db.scalar(select(User).where(User.username == username))
            if user is None:
                raise
        else:
            db.refresh(user)
            return user, True
    if not user.is_active:
        user.is_active = True
    db.commit()
    db.refresh(user)
    return user, False


def list_active_users(db: Session) -> list[User]:
    stmt = select(User).where(User.is_active.is_(True)).order_by(User.created_at.desc(), User.id.desc())
    return list(db.scalars(stmt))


def deactivate_user(db: Session, user_id: int) -> User:
    user = db.get(User, user_id)
    if user is None:
        raise NotFound("User not found")
    user.is_active = False
    db.commit()
    db.refresh(user)
    return user

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from insightdesk.models.users import User
from insightdesk.schemas.users import ProfileUpdate


class DuplicateError(Exception):
    """Raised when a unique constraint is violated (email or external id)."""


def normalize_email(value: str | None) -> str:
    return (value or "").strip().lower()


def get_user_by_external_id(db: Session, external_id: str) -> User | None:
    stmt = select(User).where(User.external_user_id == external_id)
    return db.execute(stmt).scalar_one_or_none()


def get_user_by_email(db: Session, email: str) -> User | None:
    stmt = select(User).where(User.email == normalize_email(email))
    return db.execute(stmt).scalar_one_or_none()


def create_user(
    db: Session,
    *,
    external_id: str,
    email: str,
    name: str | None = None,
    image_url: str | None = None,
) -> User:
    obj = User(
        external_user_id=external_id,
        email=normalize_email(email),
        name=name,
        image_url=image_url,
        industry=None,
        experience=None,
        bio="",
        skills=[],
    )
    db.add(obj)
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise DuplicateError("User already exists (unique constraint hit).") from e
    db.refresh(obj)
    return obj


def link_external_id(db: Session, user: User, external_id: str) -> User:
    user.external_user_id = external_id
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise DuplicateError("External id is already linked to another user.") from e
    db.refresh(user)
    return user


def apply_profile_update(db: Session, user_id: int, data: ProfileUpdate) -> User | None:
    """Stage profile fields on the user row; the caller owns the commit."""
    obj = db.get(User, user_id)
    if not obj:
        return None

    obj.industry = data.industry
    obj.experience = data.experience
    obj.bio = data.bio
    obj.skills = list(data.skills)
    db.flush()
    return obj

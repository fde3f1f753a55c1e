from __future__ import annotations

import logging
from collections.abc import Callable

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from insightdesk.core.config import settings
from insightdesk.core.errors import (
    IdentityConflictError,
    MissingEmailError,
    PersistenceError,
    UnauthorizedError,
)
from insightdesk.core.flow_logging import flow_info
from insightdesk.crud import users as crud_users
from insightdesk.crud.users import DuplicateError, normalize_email
from insightdesk.models.users import User
from insightdesk.schemas.identity_provider import ExternalProfile
from insightdesk.services.identity_provider_client import fetch_external_profile

logger = logging.getLogger(__name__)

ProfileFetcher = Callable[[str], ExternalProfile]


def _find_by_external_id(db: Session, external_id: str) -> User | None:
    try:
        return crud_users.get_user_by_external_id(db, external_id)
    except SQLAlchemyError as exc:
        db.rollback()
        raise PersistenceError("User lookup failed.") from exc


def _find_by_email(db: Session, email: str) -> User | None:
    try:
        return crud_users.get_user_by_email(db, email)
    except SQLAlchemyError as exc:
        db.rollback()
        raise PersistenceError("User lookup failed.") from exc


def _flag_link_mismatch(user: User, external_id: str) -> None:
    logger.warning(
        "identity_link_mismatch user_id=%s linked_external_id=%s requested_external_id=%s",
        user.id,
        user.external_user_id,
        external_id,
    )
    if settings.IDENTITY_STRICT_RECONCILIATION:
        raise IdentityConflictError(
            "This email is already linked to a different sign-in identity."
        )


def _reconcile(db: Session, user: User, external_id: str) -> User:
    """
    Link a row found by email to `external_id` when it has no external id yet.
    Rows already linked are returned unchanged.
    """
    if user.external_user_id is None:
        try:
            linked = crud_users.link_external_id(db, user, external_id)
        except DuplicateError:
            # A concurrent resolution already holds this external id.
            existing = _find_by_external_id(db, external_id)
            if existing is None:
                raise PersistenceError("User link conflicted but no linked row was found.")
            return existing
        except SQLAlchemyError as exc:
            db.rollback()
            raise PersistenceError("Failed to link user identity.") from exc
        flow_info(
            logger,
            "identity_backfilled user_id=%s external_id=%s",
            linked.id,
            external_id,
            category="identity",
        )
        return linked

    if user.external_user_id != external_id:
        _flag_link_mismatch(user, external_id)
    return user


def resolve_or_create(
    db: Session,
    external_id: str | None,
    *,
    fetch_profile: ProfileFetcher | None = None,
) -> User:
    """
    Map an external identity to exactly one user row.

    Order: lookup by external id, then fetch the provider profile and look up
    by email (linking the row if needed), then create. A unique-constraint
    conflict on create means a concurrent call won; the row is re-read instead
    of retrying the write.
    """
    external_id = (external_id or "").strip()
    if not external_id:
        raise UnauthorizedError()

    user = _find_by_external_id(db, external_id)
    if user is not None:
        return user

    fetch = fetch_profile or fetch_external_profile
    profile = fetch(external_id)

    email = normalize_email(profile.preferred_email())
    if not email:
        raise MissingEmailError("Could not resolve an email address for this identity.")

    user = _find_by_email(db, email)
    if user is not None:
        return _reconcile(db, user, external_id)

    try:
        user = crud_users.create_user(
            db,
            external_id=external_id,
            email=email,
            name=profile.display_name(),
            image_url=profile.image_url,
        )
    except DuplicateError:
        logger.warning(
            "user_create_conflict external_id=%s email=%s; re-reading winner row",
            external_id,
            email,
        )
    except SQLAlchemyError as exc:
        db.rollback()
        raise PersistenceError("Failed to create user.") from exc
    else:
        flow_info(
            logger,
            "identity_user_created user_id=%s external_id=%s",
            user.id,
            external_id,
            category="identity",
        )
        return user

    user = _find_by_email(db, email) or _find_by_external_id(db, external_id)
    if user is None:
        raise PersistenceError("User creation conflicted but no matching row was found.")
    return _reconcile(db, user, external_id)

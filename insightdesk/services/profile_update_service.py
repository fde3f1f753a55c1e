from __future__ import annotations

import logging
from collections.abc import Callable

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from insightdesk.core.config import settings
from insightdesk.core.errors import PersistenceError, ProfileUpdateError, UnauthorizedError
from insightdesk.crud import users as crud_users
from insightdesk.db.transaction import TransactionHandle, run_in_transaction
from insightdesk.models.users import User
from insightdesk.schemas.request_identity import CallerIdentity
from insightdesk.schemas.users import OnboardingStatus, ProfileUpdate
from insightdesk.services import insight_cache
from insightdesk.services.insight_cache import InsightComputeFn
from insightdesk.services.insight_generator import generate_insights
from insightdesk.services.render_invalidation import signal_path_stale
from insightdesk.services.user_resolver import ProfileFetcher, resolve_or_create

logger = logging.getLogger(__name__)

ROOT_VIEW_PATH = "/"


def _require_external_id(identity: CallerIdentity | None) -> str:
    if identity is None or not identity.is_authenticated:
        raise UnauthorizedError()
    return identity.external_id.strip()


def _signal_invalidation(invalidate: Callable[[str], object]) -> None:
    try:
        invalidate(ROOT_VIEW_PATH)
    except Exception as exc:
        logger.warning("render_invalidation_error path=%s error=%s", ROOT_VIEW_PATH, exc)


def _generator_within_budget(tx: TransactionHandle) -> InsightComputeFn:
    def _generate(industry: str):
        budget = min(settings.INSIGHT_GENERATOR_TIMEOUT_SECONDS, tx.remaining())
        return generate_insights(industry, timeout_seconds=budget)

    return _generate


def get_current_user(
    db: Session,
    identity: CallerIdentity | None,
    *,
    fetch_profile: ProfileFetcher | None = None,
) -> User:
    external_id = _require_external_id(identity)
    return resolve_or_create(db, external_id, fetch_profile=fetch_profile)


def update_profile(
    db: Session,
    identity: CallerIdentity | None,
    profile_input: ProfileUpdate,
    *,
    compute_fn: InsightComputeFn | None = None,
    invalidate: Callable[[str], object] | None = None,
    fetch_profile: ProfileFetcher | None = None,
    timeout_seconds: float | None = None,
) -> User:
    """
    Save the caller's onboarding profile.

    The industry insight (created on first use of an industry) and the user
    row change commit in one transaction. Resolution of the caller happens
    before the transaction opens, so its failures surface unchanged.
    """
    external_id = _require_external_id(identity)
    user = resolve_or_create(db, external_id, fetch_profile=fetch_profile)
    user_id = user.id

    def _apply(tx: TransactionHandle) -> User:
        compute = compute_fn or _generator_within_budget(tx)
        insight_cache.get_or_compute(tx, profile_input.industry, compute)
        tx.check_deadline()
        updated = crud_users.apply_profile_update(tx.session, user_id, profile_input)
        if updated is None:
            raise PersistenceError(f"User {user_id} disappeared during profile update.")
        return updated

    try:
        updated_user = run_in_transaction(
            db,
            _apply,
            timeout_seconds=timeout_seconds or settings.PROFILE_UPDATE_TIMEOUT_SECONDS,
        )
    except Exception as exc:
        logger.exception(
            "profile_update_failed user_id=%s industry=%s error=%s",
            user_id,
            profile_input.industry,
            exc,
        )
        raise ProfileUpdateError("Failed to update profile") from exc

    _signal_invalidation(invalidate or signal_path_stale)
    return updated_user


def get_onboarding_status(db: Session, identity: CallerIdentity | None) -> OnboardingStatus:
    external_id = _require_external_id(identity)
    try:
        user = crud_users.get_user_by_external_id(db, external_id)
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("onboarding_status_failed external_id=%s", external_id)
        raise PersistenceError("Failed to check onboarding status") from exc

    # No row yet means the caller has never saved a profile.
    return OnboardingStatus(is_onboarded=user is not None and user.industry is not None)

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from insightdesk.api.deps.request_identity import get_caller_identity
from insightdesk.core.errors import InsightDeskError
from insightdesk.db.session import get_db
from insightdesk.schemas.request_identity import CallerIdentity
from insightdesk.schemas.users import OnboardingStatus, ProfileUpdate, UserOut
from insightdesk.services import profile_update_service

router = APIRouter(prefix="/profile", tags=["profile"])


def _raise_service_error(exc: InsightDeskError) -> None:
    raise HTTPException(status_code=exc.status_code, detail=exc.to_detail()) from exc


@router.get("", response_model=UserOut)
def read_profile(
    db: Session = Depends(get_db),
    identity: CallerIdentity = Depends(get_caller_identity),
):
    try:
        user = profile_update_service.get_current_user(db, identity)
    except InsightDeskError as exc:
        _raise_service_error(exc)
    return UserOut.model_validate(user)


@router.put("", response_model=UserOut)
def update_profile(
    payload: ProfileUpdate,
    db: Session = Depends(get_db),
    identity: CallerIdentity = Depends(get_caller_identity),
):
    try:
        user = profile_update_service.update_profile(db, identity, payload)
    except InsightDeskError as exc:
        _raise_service_error(exc)
    return UserOut.model_validate(user)


@router.get("/onboarding-status", response_model=OnboardingStatus)
def read_onboarding_status(
    db: Session = Depends(get_db),
    identity: CallerIdentity = Depends(get_caller_identity),
):
    try:
        return profile_update_service.get_onboarding_status(db, identity)
    except InsightDeskError as exc:
        _raise_service_error(exc)

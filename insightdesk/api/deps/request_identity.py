from __future__ import annotations

from functools import lru_cache
import logging

from fastapi import HTTPException, Request

from insightdesk.core.config import settings
from insightdesk.core.security.jwt_verifier import (
    AuthTokenValidationError,
    SessionTokenVerifier,
)
from insightdesk.schemas.request_identity import CallerIdentity

logger = logging.getLogger(__name__)

USER_ID_HEADER = "X-User-Id"


def _normalized_auth_mode() -> str:
    raw = (settings.AUTH_MODE or "legacy_header").strip().lower()
    if raw in {"legacy_header", "dual", "jwt_only"}:
        return raw
    return "legacy_header"


@lru_cache(maxsize=1)
def _get_verifier() -> SessionTokenVerifier:
    algorithms = [
        token.strip().upper()
        for token in (settings.AUTH_JWT_ALGORITHMS or "RS256").split(",")
        if token.strip()
    ]
    return SessionTokenVerifier(
        jwks_uri=settings.AUTH_JWKS_URI,
        issuer=settings.AUTH_JWT_ISSUER,
        audience=settings.AUTH_JWT_AUDIENCE,
        algorithms=algorithms or ["RS256"],
        leeway_sec=settings.AUTH_JWT_CLOCK_SKEW_SEC,
        timeout_sec=settings.AUTH_JWKS_TIMEOUT_SEC,
    )


def _extract_bearer_token(request: Request) -> str | None:
    header = request.headers.get("Authorization") or ""
    prefix = "Bearer "
    if not header.startswith(prefix):
        return None
    token = header[len(prefix) :].strip()
    return token or None


def _identity_from_header(request: Request) -> CallerIdentity:
    external_id = (request.headers.get(USER_ID_HEADER) or "").strip()
    if not external_id:
        return CallerIdentity()
    return CallerIdentity(external_id=external_id, auth_source="legacy_header")


def _identity_from_token(token: str) -> CallerIdentity:
    try:
        claims = _get_verifier().verify(token)
    except AuthTokenValidationError as exc:
        raise HTTPException(status_code=401, detail=str(exc)) from exc

    subject = str(claims.get("sub") or "").strip()
    if not subject:
        logger.warning("jwt_identity_subject_missing claim_keys=%s", sorted(str(k) for k in claims))
        raise HTTPException(status_code=401, detail="Token has no subject.")
    email = str(claims.get("email") or "").strip().lower() or None
    return CallerIdentity(
        external_id=subject,
        email=email,
        auth_source="jwt",
        claims=claims,
    )


def get_caller_identity(request: Request) -> CallerIdentity:
    """
    Resolve the caller for this request. An absent identity is returned as an
    anonymous CallerIdentity; services decide whether that is allowed.
    """
    token = _extract_bearer_token(request)
    mode = _normalized_auth_mode()
    if mode == "legacy_header":
        return _identity_from_header(request)

    if mode == "jwt_only":
        if not token:
            return CallerIdentity()
        return _identity_from_token(token)

    # dual mode: prefer JWT when present, otherwise fallback to the header.
    if token:
        return _identity_from_token(token)
    return _identity_from_header(request)

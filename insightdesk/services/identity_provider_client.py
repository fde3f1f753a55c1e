from __future__ import annotations

import logging
from urllib.parse import quote

import requests
from pydantic import ValidationError

from insightdesk.core.config import settings
from insightdesk.core.errors import ConfigurationError, UpstreamError
from insightdesk.schemas.identity_provider import ExternalProfile

logger = logging.getLogger(__name__)


def _user_url(external_id: str, api_url: str | None) -> str:
    base_url = (api_url or settings.IDENTITY_PROVIDER_API_URL).rstrip("/")
    return f"{base_url}/users/{quote(external_id, safe='')}"


def get_external_user(
    external_id: str,
    *,
    timeout_seconds: float | None = None,
    api_url: str | None = None,
    secret_key: str | None = None,
) -> requests.Response:
    secret = (secret_key or settings.IDENTITY_PROVIDER_SECRET_KEY or "").strip()
    if not secret:
        raise ConfigurationError("Identity provider secret key is not configured.")

    headers = {
        "Authorization": f"Bearer {secret}",
        "Content-Type": "application/json",
        # Profile lookups must never be served from an intermediate cache.
        "Cache-Control": "no-store",
    }
    try:
        response = requests.get(
            _user_url(external_id, api_url),
            headers=headers,
            timeout=timeout_seconds or settings.IDENTITY_PROVIDER_TIMEOUT_SECONDS,
        )
    except requests.RequestException as exc:
        raise UpstreamError(f"Identity provider request failed: {exc}") from exc

    if not response.ok:
        logger.warning(
            "identity_provider_lookup_failed external_id=%s status=%s",
            external_id,
            response.status_code,
        )
        raise UpstreamError(
            f"Identity provider lookup failed with HTTP {response.status_code}"
        )
    return response


def fetch_external_profile(
    external_id: str,
    *,
    timeout_seconds: float | None = None,
    api_url: str | None = None,
    secret_key: str | None = None,
) -> ExternalProfile:
    response = get_external_user(
        external_id,
        timeout_seconds=timeout_seconds,
        api_url=api_url,
        secret_key=secret_key,
    )
    try:
        body = response.json()
    except ValueError as exc:
        raise UpstreamError("Identity provider returned invalid JSON.") from exc
    if not isinstance(body, dict):
        raise UpstreamError("Identity provider returned a non-object JSON payload.")
    try:
        return ExternalProfile.model_validate(body)
    except ValidationError as exc:
        raise UpstreamError("Identity provider returned an unexpected profile shape.") from exc

from __future__ import annotations

from typing import Any

import requests

from insightdesk.core.config import settings
from insightdesk.core.errors import ConfigurationError, UpstreamError
from insightdesk.schemas.industry_insight import InsightPayload


def post_generate(
    industry: str,
    *,
    timeout_seconds: float | None = None,
    generator_url: str | None = None,
) -> requests.Response:
    base_url = (generator_url or settings.INSIGHT_GENERATOR_URL or "").rstrip("/")
    if not base_url:
        raise ConfigurationError("Insight generator URL is not configured.")

    headers: dict[str, str] = {}
    if settings.INSIGHT_GENERATOR_API_KEY:
        headers["Authorization"] = f"Bearer {settings.INSIGHT_GENERATOR_API_KEY}"

    try:
        response = requests.post(
            f"{base_url}/insights",
            json={"industry": industry},
            headers=headers or None,
            timeout=(
                timeout_seconds
                if timeout_seconds is not None
                else settings.INSIGHT_GENERATOR_TIMEOUT_SECONDS
            ),
        )
        response.raise_for_status()
    except requests.RequestException as exc:
        raise UpstreamError(f"Insight generation failed for industry={industry!r}: {exc}") from exc
    return response


def generate_insights(
    industry: str,
    *,
    timeout_seconds: float | None = None,
    generator_url: str | None = None,
) -> InsightPayload:
    """Ask the generator service for a fresh insight payload. Slow; no caching here."""
    response = post_generate(
        industry,
        timeout_seconds=timeout_seconds,
        generator_url=generator_url,
    )
    try:
        body: Any = response.json()
    except ValueError as exc:
        raise UpstreamError("Insight generator returned invalid JSON.") from exc
    if not isinstance(body, dict):
        raise UpstreamError("Insight generator returned a non-object JSON payload.")
    return InsightPayload.model_validate(body)

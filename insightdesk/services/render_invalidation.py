from __future__ import annotations

import logging

import requests

from insightdesk.core.config import settings

logger = logging.getLogger(__name__)


def signal_path_stale(path: str = "/") -> bool:
    """
    Tell the rendering layer that cached output for `path` is stale.

    Fire-and-forget: failures are logged and reported as False, never raised.
    """
    url = (settings.RENDER_REVALIDATE_URL or "").strip()
    if not url:
        return False

    headers: dict[str, str] = {}
    if settings.RENDER_REVALIDATE_SECRET:
        headers["X-Revalidate-Secret"] = settings.RENDER_REVALIDATE_SECRET

    try:
        response = requests.post(
            url,
            json={"path": path},
            headers=headers or None,
            timeout=settings.RENDER_REVALIDATE_TIMEOUT_SECONDS,
        )
    except requests.RequestException as exc:
        logger.warning("render_revalidate_failed path=%s error=%s", path, exc)
        return False

    if response.status_code >= 400:
        logger.warning(
            "render_revalidate_failed path=%s status=%s", path, response.status_code
        )
        return False
    return True

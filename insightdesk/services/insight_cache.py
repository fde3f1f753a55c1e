from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from datetime import datetime, timedelta, timezone
from typing import Any, Union

from insightdesk.core.config import settings
from insightdesk.core.flow_logging import flow_info
from insightdesk.crud import industry_insight as crud_insight
from insightdesk.db.transaction import TransactionHandle
from insightdesk.models.industry_insight import IndustryInsight
from insightdesk.schemas.industry_insight import InsightPayload

logger = logging.getLogger(__name__)

InsightComputeFn = Callable[[str], Union[InsightPayload, Mapping[str, Any]]]


def refresh_interval() -> timedelta:
    return timedelta(days=max(1, int(settings.INSIGHT_REFRESH_INTERVAL_DAYS)))


def get_or_compute(
    tx: TransactionHandle,
    industry: str,
    compute_fn: InsightComputeFn,
    *,
    now: datetime | None = None,
) -> IndustryInsight:
    """
    Return the cached insight for `industry`, computing and inserting it inside
    `tx` on a miss. Hits are returned as-is; `next_update` is not consulted.
    """
    db = tx.session
    existing = crud_insight.get_insight_by_industry(db, industry)
    if existing is not None:
        flow_info(logger, "insight_cache_hit industry=%s", industry, category="insight")
        return existing

    flow_info(logger, "insight_cache_miss industry=%s; computing", industry, category="insight")
    raw = tx.call_within_budget(compute_fn, industry)
    payload = raw if isinstance(raw, InsightPayload) else InsightPayload.model_validate(raw)

    tx.check_deadline()

    created_at = now or datetime.now(timezone.utc)
    return crud_insight.stage_insight(
        db,
        industry=industry,
        payload=payload,
        last_updated=created_at,
        next_update=created_at + refresh_interval(),
    )

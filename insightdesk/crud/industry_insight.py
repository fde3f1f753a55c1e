from __future__ import annotations

from datetime import datetime

from sqlalchemy import select
from sqlalchemy.orm import Session

from insightdesk.models.industry_insight import IndustryInsight
from insightdesk.schemas.industry_insight import InsightPayload


def get_insight_by_industry(db: Session, industry: str) -> IndustryInsight | None:
    stmt = select(IndustryInsight).where(IndustryInsight.industry == industry)
    return db.execute(stmt).scalar_one_or_none()


def stage_insight(
    db: Session,
    *,
    industry: str,
    payload: InsightPayload,
    last_updated: datetime,
    next_update: datetime,
) -> IndustryInsight:
    """Insert a new insight row and flush it; the caller owns the commit."""
    data = payload.model_dump()
    obj = IndustryInsight(
        industry=industry,
        salary_ranges=data["salary_ranges"],
        growth_rate=data["growth_rate"],
        demand_level=data["demand_level"],
        top_skills=data["top_skills"],
        market_outlook=data["market_outlook"],
        key_trends=data["key_trends"],
        recommended_skills=data["recommended_skills"],
        last_updated=last_updated,
        next_update=next_update,
    )
    db.add(obj)
    db.flush()
    return obj

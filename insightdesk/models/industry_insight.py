from __future__ import annotations

from datetime import datetime

from sqlalchemy import JSON, DateTime, Float, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from insightdesk.db.base import Base


class IndustryInsight(Base):
    __tablename__ = "industry_insights"

    __table_args__ = (
        UniqueConstraint("industry", name="uq_industry_insights_industry"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    industry: Mapped[str] = mapped_column(String(255), nullable=False)

    salary_ranges: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    growth_rate: Mapped[float] = mapped_column(Float, nullable=False)
    demand_level: Mapped[str] = mapped_column(String(32), nullable=False)
    top_skills: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    market_outlook: Mapped[str] = mapped_column(String(32), nullable=False)
    key_trends: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    recommended_skills: Mapped[list] = mapped_column(JSON, nullable=False, default=list)

    last_updated: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    next_update: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, index=True
    )

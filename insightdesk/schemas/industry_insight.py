from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class SalaryRange(BaseModel):
    role: str
    min: float
    max: float
    median: float
    location: Optional[str] = None


class InsightPayload(BaseModel):
    """Structured result of the external insight generator for one industry."""

    model_config = ConfigDict(extra="ignore")

    salary_ranges: list[SalaryRange] = Field(default_factory=list)
    growth_rate: float
    demand_level: Literal["High", "Medium", "Low"]
    top_skills: list[str] = Field(default_factory=list)
    market_outlook: Literal["Positive", "Neutral", "Negative"]
    key_trends: list[str] = Field(default_factory=list)
    recommended_skills: list[str] = Field(default_factory=list)

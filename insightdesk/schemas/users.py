from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ProfileUpdate(BaseModel):
    industry: str = Field(min_length=1, max_length=255)
    experience: Optional[int] = Field(default=None, ge=0, le=80)
    bio: Optional[str] = Field(default=None, max_length=5000)
    skills: list[str] = Field(default_factory=list)

    @field_validator("industry")
    @classmethod
    def _strip_industry(cls, value: str) -> str:
        stripped = value.strip()
        if not stripped:
            raise ValueError("industry must not be blank")
        return stripped

    @field_validator("skills")
    @classmethod
    def _clean_skills(cls, value: list[str]) -> list[str]:
        # keep caller order, drop blanks
        return [s.strip() for s in value if s and s.strip()]


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    external_user_id: Optional[str] = None
    email: str
    name: Optional[str] = None
    image_url: Optional[str] = None
    industry: Optional[str] = None
    experience: Optional[int] = None
    bio: Optional[str] = None
    skills: list[str] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class OnboardingStatus(BaseModel):
    is_onboarded: bool

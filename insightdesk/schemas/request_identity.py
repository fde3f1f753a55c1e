from __future__ import annotations

from pydantic import BaseModel, Field


class CallerIdentity(BaseModel):
    external_id: str | None = None
    email: str | None = None
    auth_source: str = "anonymous"
    claims: dict = Field(default_factory=dict)

    @property
    def is_authenticated(self) -> bool:
        return bool((self.external_id or "").strip())

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class ExternalEmailAddress(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str | None = None
    email_address: str | None = None


class ExternalProfile(BaseModel):
    """User profile as returned by the identity provider user API."""

    model_config = ConfigDict(extra="ignore")

    id: str | None = None
    email_addresses: list[ExternalEmailAddress] = Field(default_factory=list)
    primary_email_address_id: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    image_url: str | None = None

    def preferred_email(self) -> str | None:
        """Primary address if designated and present, else the first address."""
        addresses = [a for a in self.email_addresses if (a.email_address or "").strip()]
        if self.primary_email_address_id:
            for address in addresses:
                if address.id == self.primary_email_address_id:
                    return address.email_address
        if addresses:
            return addresses[0].email_address
        return None

    def display_name(self) -> str | None:
        parts = [(self.first_name or "").strip(), (self.last_name or "").strip()]
        name = " ".join(p for p in parts if p)
        return name or None

"""Authentication schemas."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class UserProfile(BaseModel):
    """Safe subset of the identity-provider user record."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    email: str
    email_confirmed_at: datetime | None = None
    created_at: datetime | None = None
    phone_number: str | None = None


class MeResponse(BaseModel):
    user: UserProfile

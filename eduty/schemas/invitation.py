"""Invitation schemas."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, EmailStr

from eduty.schemas.common import CamelModel


class InviteCreate(BaseModel):
    """Schema for inviting a user by email."""

    email: EmailStr


class InvitationRead(CamelModel):
    id: UUID
    workspace_id: UUID
    inviter_id: UUID
    invitee_email: str
    status: str
    created_at: datetime
    updated_at: datetime


class MyInvitationItem(CamelModel):
    """A pending invitation addressed to the caller."""

    id: UUID
    workspace_id: UUID
    workspace_name: str
    inviter_email: str
    status: str
    created_at: datetime

"""Leave request schemas."""

from __future__ import annotations

from datetime import date, datetime
from uuid import UUID

from eduty.schemas.common import CamelModel


class LeaveRequestCreate(CamelModel):
    workspace_id: UUID
    start_date: date
    end_date: date
    reason: str | None = None


class LeaveRequestRead(CamelModel):
    id: UUID
    workspace_id: UUID
    user_id: UUID
    start_date: date
    end_date: date
    reason: str | None = None
    status: str
    created_at: datetime
    updated_at: datetime


class MyLeaveRequestItem(CamelModel):
    id: UUID
    workspace_id: UUID
    workspace_name: str
    start_date: date
    end_date: date
    reason: str | None = None
    status: str
    created_at: datetime
    updated_at: datetime


class WorkspaceLeaveRequestItem(CamelModel):
    """Leave request as seen by the owner, with requester email."""

    id: UUID
    user_id: UUID
    email: str
    start_date: date
    end_date: date
    reason: str | None = None
    status: str
    created_at: datetime
    updated_at: datetime

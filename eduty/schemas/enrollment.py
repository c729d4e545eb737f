"""Enrollment and enrollment-request schemas."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from eduty.schemas.common import CamelModel


class EnrollRequest(CamelModel):
    """Body of POST /workspaces/enroll."""

    workspace_id: UUID


class EnrollmentRead(CamelModel):
    id: UUID
    workspace_id: UUID
    user_id: UUID
    role: str | None = None
    enrolled_at: datetime


class EnrollmentRequestRead(CamelModel):
    id: UUID
    workspace_id: UUID
    user_id: UUID
    status: str
    created_at: datetime
    updated_at: datetime


class PendingRequestItem(CamelModel):
    """A pending request as seen by the workspace owner."""

    id: UUID
    user_id: UUID
    email: str
    requested_at: datetime


class MyPendingRequestItem(CamelModel):
    """A pending request as seen by the requester."""

    id: UUID
    workspace_id: UUID
    workspace_name: str
    requested_at: datetime
    status: str


class RequestStatusRead(CamelModel):
    status: str
    requested_at: datetime

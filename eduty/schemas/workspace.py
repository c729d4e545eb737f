"""Workspace schemas for request/response validation."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from eduty.schemas.common import CamelModel


class WorkspaceCreate(BaseModel):
    """Schema for creating a workspace."""

    name: str = Field(..., min_length=1, max_length=255)


class WorkspaceUpdate(BaseModel):
    """Schema for updating a workspace. All fields optional."""

    name: str | None = Field(None, min_length=1, max_length=255)


class WorkspaceRead(CamelModel):
    id: UUID
    name: str
    owner_id: UUID
    created_at: datetime
    updated_at: datetime


class WorkspaceSearchResult(WorkspaceRead):
    """Search hit annotated with the caller's enrollment state."""

    is_enrolled: bool = False
    enrollment_status: str | None = None


class WorkspaceDetails(CamelModel):
    workspace: WorkspaceRead
    is_enrolled: bool
    is_owner: bool
    request_status: str | None = None


class EnrolledUser(CamelModel):
    id: UUID
    email: str
    enrolled_at: datetime
    is_owner: bool


class FavoriteRead(CamelModel):
    id: UUID
    workspace_id: UUID
    workspace_name: str
    created_at: datetime
    updated_at: datetime

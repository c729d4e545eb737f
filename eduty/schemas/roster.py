"""Roster schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import Field

from eduty.schemas.common import CamelModel

ShiftPeriod = Literal["M", "E", "N"]
DutyType = Literal["M", "E", "N", "DO", "SD", "VL", ""]


class RosterAssignmentIn(CamelModel):
    """One cell of the roster grid. dutyType "" clears the cell."""

    user_id: UUID
    day: int = Field(..., ge=1, le=31)
    shift_period: ShiftPeriod
    duty_type: DutyType
    is_overtime: bool = False


class RosterSave(CamelModel):
    workspace_id: UUID
    month: int = Field(..., ge=1, le=12)
    year: int = Field(..., ge=2000, le=2100)
    assignments: list[RosterAssignmentIn] = Field(default_factory=list)


class RosterRead(CamelModel):
    id: UUID
    workspace_id: UUID
    month: int
    year: int
    status: str
    published_at: datetime | None = None
    published_by: UUID | None = None
    created_at: datetime
    updated_at: datetime


class AssignmentRead(CamelModel):
    id: UUID
    user_id: UUID
    day: int
    shift_period: str
    duty_type: str
    is_overtime: bool


class RosterView(CamelModel):
    """Roster for a period; roster is None when none exists yet."""

    roster: RosterRead | None = None
    assignments: list[AssignmentRead] = Field(default_factory=list)


class PersonalAssignment(CamelModel):
    day: int
    shift_period: str
    duty_type: str
    is_overtime: bool


class PersonalRoster(CamelModel):
    """The caller's own assignments within one published roster."""

    roster_id: UUID
    workspace_id: UUID
    workspace_name: str
    month: int
    year: int
    published_at: datetime | None = None
    assignments: list[PersonalAssignment] = Field(default_factory=list)

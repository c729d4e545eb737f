"""Roster model: the shift schedule for one workspace/month/year."""

from __future__ import annotations

import uuid
from datetime import UTC, datetime
from enum import Enum
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, Integer, String, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from eduty.db.session import Base
from eduty.models.workspace import Workspace

if TYPE_CHECKING:
    from eduty.models.roster_assignment import RosterAssignment


class RosterStatus(str, Enum):
    DRAFT = "draft"
    PUBLISHED = "published"


class Roster(Base):
    """One roster per workspace per calendar month."""

    __tablename__ = "rosters"
    __table_args__ = (
        UniqueConstraint("workspace_id", "month", "year", name="uq_roster_workspace_period"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    workspace_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("workspaces.id", ondelete="CASCADE"),
        nullable=False,
    )
    month: Mapped[int] = mapped_column(Integer, nullable=False)  # 1-12
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[str] = mapped_column(
        String(20), default=RosterStatus.DRAFT.value, nullable=False
    )
    published_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    published_by: Mapped[uuid.UUID | None] = mapped_column(Uuid, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
        nullable=False,
    )

    workspace: Mapped[Workspace] = relationship("Workspace", lazy="joined")
    assignments: Mapped[list[RosterAssignment]] = relationship(
        "RosterAssignment",
        back_populates="roster",
        cascade="all, delete-orphan",
    )

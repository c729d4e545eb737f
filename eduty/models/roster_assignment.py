"""RosterAssignment model: one user's duty on one day/shift-period."""

from __future__ import annotations

import uuid
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from eduty.db.session import Base

if TYPE_CHECKING:
    from eduty.models.roster import Roster

SHIFT_PERIODS = ("M", "E", "N")
# M/E/N shifts, DO day off, SD sick day, VL vacation leave; "" clears a cell
DUTY_TYPES = ("M", "E", "N", "DO", "SD", "VL", "")


class RosterAssignment(Base):
    """A single cell of the roster grid. Only non-empty duty types are stored."""

    __tablename__ = "roster_assignments"
    __table_args__ = (
        UniqueConstraint(
            "roster_id", "user_id", "day", "shift_period", name="uq_roster_assignment_cell"
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    roster_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("rosters.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    day: Mapped[int] = mapped_column(Integer, nullable=False)  # 1-31
    shift_period: Mapped[str] = mapped_column(String(1), nullable=False)
    duty_type: Mapped[str] = mapped_column(String(2), nullable=False)
    is_overtime: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
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

    roster: Mapped[Roster] = relationship("Roster", back_populates="assignments")

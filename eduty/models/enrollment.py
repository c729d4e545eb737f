"""Enrollment model: active membership of a user in a workspace."""

from __future__ import annotations

import uuid
from datetime import UTC, datetime

from sqlalchemy import DateTime, ForeignKey, String, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from eduty.db.session import Base
from eduty.models.workspace import Workspace


class Enrollment(Base):
    """Membership row; unique per (workspace, user)."""

    __tablename__ = "workspace_enrollments"
    __table_args__ = (
        UniqueConstraint("workspace_id", "user_id", name="uq_enrollment_workspace_user"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    workspace_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("workspaces.id", ondelete="CASCADE"),
        nullable=False,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, index=True)
    role: Mapped[str | None] = mapped_column(String(50), default="member", nullable=True)
    enrolled_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
    )

    workspace: Mapped[Workspace] = relationship("Workspace", lazy="joined")

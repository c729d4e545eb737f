"""Shared builders for tests: rows created directly through the ORM."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from uuid import UUID

from sqlalchemy.orm import Session

from eduty.models import Enrollment, EnrollmentRequest, UserFavorite, Workspace

BASE_TIME = datetime(2024, 1, 1, 8, 0, tzinfo=UTC)


def auth(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def make_workspace(db: Session, owner_id: UUID, name: str = "Ward A", minutes: int = 0) -> Workspace:
    workspace = Workspace(
        name=name,
        owner_id=owner_id,
        created_at=BASE_TIME + timedelta(minutes=minutes),
    )
    db.add(workspace)
    db.commit()
    db.refresh(workspace)
    return workspace


def enroll(db: Session, workspace: Workspace, user_id: UUID, minutes: int = 0) -> Enrollment:
    """Enroll directly, with an explicit enrolled_at so ordering is deterministic."""
    enrollment = Enrollment(
        workspace_id=workspace.id,
        user_id=user_id,
        enrolled_at=BASE_TIME + timedelta(minutes=minutes),
    )
    db.add(enrollment)
    db.commit()
    db.refresh(enrollment)
    return enrollment


def favorite(db: Session, workspace: Workspace, user_id: UUID) -> UserFavorite:
    fav = UserFavorite(user_id=user_id, workspace_id=workspace.id)
    db.add(fav)
    db.commit()
    return fav


def count_requests(db: Session, workspace_id: UUID, user_id: UUID) -> int:
    return (
        db.query(EnrollmentRequest)
        .filter(
            EnrollmentRequest.workspace_id == workspace_id,
            EnrollmentRequest.user_id == user_id,
        )
        .count()
    )

"""Workspace access control.

Ownership and membership are two independent facts: the owner is not a
member until they enroll, and most listing endpoints compose both checks
explicitly (``is_owner(...) or is_member(...)``).
"""

from __future__ import annotations

import logging
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from eduty.models.enrollment import Enrollment
from eduty.models.workspace import Workspace
from eduty.services.errors import ConflictError, ForbiddenError, NotFoundError

logger = logging.getLogger(__name__)


def get_workspace_or_404(db: Session, workspace_id: UUID) -> Workspace:
    workspace = db.get(Workspace, workspace_id)
    if workspace is None:
        raise NotFoundError(f"Workspace with ID {workspace_id} not found")
    return workspace


def is_owner(workspace: Workspace, user_id: UUID) -> bool:
    return workspace.owner_id == user_id


def get_enrollment(db: Session, workspace_id: UUID, user_id: UUID) -> Enrollment | None:
    return (
        db.query(Enrollment)
        .filter(Enrollment.workspace_id == workspace_id, Enrollment.user_id == user_id)
        .first()
    )


def is_member(db: Session, workspace_id: UUID, user_id: UUID) -> bool:
    return get_enrollment(db, workspace_id, user_id) is not None


def require_owner(workspace: Workspace, user_id: UUID, message: str) -> None:
    if not is_owner(workspace, user_id):
        raise ForbiddenError(message)


def get_owned_workspace(
    db: Session,
    workspace_id: UUID,
    user_id: UUID,
    message: str = "You do not have permission to access this workspace",
) -> Workspace:
    """Return the workspace if ``user_id`` owns it (NotFound / Forbidden otherwise)."""
    workspace = get_workspace_or_404(db, workspace_id)
    require_owner(workspace, user_id, message)
    return workspace


def require_owner_or_member(db: Session, workspace: Workspace, user_id: UUID, message: str) -> None:
    if is_owner(workspace, user_id):
        return
    if not is_member(db, workspace.id, user_id):
        raise ForbiddenError(message)


def verify_ownership(db: Session, workspace_id: UUID, user_id: UUID) -> bool:
    """Return True if the workspace exists and ``user_id`` owns it. Never raises."""
    workspace = db.get(Workspace, workspace_id)
    if workspace is None:
        return False
    return is_owner(workspace, user_id)


def commit_or_conflict(db: Session, message: str) -> None:
    """Commit, translating a storage uniqueness violation into ConflictError."""
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        logger.warning("Constraint violation on commit: %s", exc.orig)
        raise ConflictError(message) from exc


def flush_or_conflict(db: Session, message: str) -> None:
    """Flush pending inserts, translating a uniqueness violation into ConflictError."""
    try:
        db.flush()
    except IntegrityError as exc:
        db.rollback()
        logger.warning("Constraint violation on flush: %s", exc.orig)
        raise ConflictError(message) from exc

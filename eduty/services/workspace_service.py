"""Workspace service: CRUD, search, details and member listing."""

from __future__ import annotations

import logging
import re
from uuid import UUID

from sqlalchemy.orm import Session

from eduty.models.enrollment import Enrollment
from eduty.models.enrollment_request import EnrollmentRequest
from eduty.models.workspace import Workspace
from eduty.schemas.workspace import (
    EnrolledUser,
    WorkspaceDetails,
    WorkspaceRead,
    WorkspaceSearchResult,
)
from eduty.services.enrollment_service import check_pending_request
from eduty.services.favorite_service import shift_favorite_to_next
from eduty.services.identity import IdentityVerifier
from eduty.services.workspace_access import (
    get_enrollment,
    get_owned_workspace,
    get_workspace_or_404,
    is_owner,
    require_owner_or_member,
)

logger = logging.getLogger(__name__)

UUID_RE = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$", re.IGNORECASE
)
SEARCH_LIMIT = 20


def create_workspace(db: Session, name: str, owner_id: UUID) -> Workspace:
    """Create a workspace owned by ``owner_id``. Names need not be unique."""
    workspace = Workspace(name=name, owner_id=owner_id)
    db.add(workspace)
    db.commit()
    db.refresh(workspace)
    logger.info("Workspace created: %s by user %s", workspace.id, owner_id)
    return workspace


def list_owned_workspaces(db: Session, owner_id: UUID) -> list[Workspace]:
    return (
        db.query(Workspace)
        .filter(Workspace.owner_id == owner_id)
        .order_by(Workspace.created_at.desc())
        .all()
    )


def get_workspace(db: Session, workspace_id: UUID, owner_id: UUID) -> Workspace:
    """Owner-only fetch. Enrolled non-owners use get_workspace_details instead."""
    return get_owned_workspace(db, workspace_id, owner_id)


def update_workspace(
    db: Session, workspace_id: UUID, owner_id: UUID, name: str | None = None
) -> Workspace:
    workspace = get_owned_workspace(db, workspace_id, owner_id)
    if name is not None:
        workspace.name = name
    db.commit()
    db.refresh(workspace)
    logger.info("Workspace updated: %s by user %s", workspace_id, owner_id)
    return workspace


def delete_workspace(db: Session, workspace_id: UUID, owner_id: UUID) -> None:
    """Delete a workspace with its enrollment requests and enrollments.

    Each member's favorite is moved off this workspace before their
    enrollment is removed. Rosters, invitations and leave requests go with
    the workspace through the foreign-key cascade.
    """
    workspace = get_owned_workspace(db, workspace_id, owner_id)

    requests_removed = (
        db.query(EnrollmentRequest)
        .filter(EnrollmentRequest.workspace_id == workspace_id)
        .delete(synchronize_session="fetch")
    )

    enrollments = db.query(Enrollment).filter(Enrollment.workspace_id == workspace_id).all()
    for enrollment in enrollments:
        shift_favorite_to_next(db, enrollment.user_id, workspace_id)
    for enrollment in enrollments:
        db.delete(enrollment)

    db.delete(workspace)
    db.commit()
    logger.info(
        "Workspace deleted: %s by user %s (removed %d enrollments and %d requests)",
        workspace_id,
        owner_id,
        len(enrollments),
        requests_removed,
    )


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def search_workspaces(db: Session, query: str) -> list[Workspace]:
    """Exact id lookup for UUID-shaped queries, else case-insensitive name match.

    Name matches are newest first and capped at SEARCH_LIMIT rows.
    """
    query = query.strip()
    if UUID_RE.match(query):
        workspace = db.get(Workspace, UUID(query))
        return [workspace] if workspace else []

    pattern = f"%{_escape_like(query)}%"
    return (
        db.query(Workspace)
        .filter(Workspace.name.ilike(pattern, escape="\\"))
        .order_by(Workspace.created_at.desc())
        .limit(SEARCH_LIMIT)
        .all()
    )


def search_workspaces_for_user(
    db: Session, query: str, user_id: UUID
) -> list[WorkspaceSearchResult]:
    """Search results annotated with the caller's enrollment and pending-request state."""
    results = []
    for workspace in search_workspaces(db, query):
        pending = check_pending_request(db, workspace.id, user_id)
        results.append(
            WorkspaceSearchResult(
                **WorkspaceRead.model_validate(workspace).model_dump(),
                is_enrolled=get_enrollment(db, workspace.id, user_id) is not None,
                enrollment_status=pending.status if pending else None,
            )
        )
    return results


def get_workspace_details(db: Session, workspace_id: UUID, user_id: UUID) -> WorkspaceDetails:
    """Workspace plus the caller's isOwner / isEnrolled / latest request status."""
    workspace = get_workspace_or_404(db, workspace_id)
    latest = (
        db.query(EnrollmentRequest)
        .filter(
            EnrollmentRequest.workspace_id == workspace_id,
            EnrollmentRequest.user_id == user_id,
        )
        .order_by(EnrollmentRequest.created_at.desc())
        .first()
    )
    return WorkspaceDetails(
        workspace=WorkspaceRead.model_validate(workspace),
        is_enrolled=get_enrollment(db, workspace_id, user_id) is not None,
        is_owner=is_owner(workspace, user_id),
        request_status=latest.status if latest else None,
    )


def get_enrolled_users(
    db: Session, workspace_id: UUID, user_id: UUID, verifier: IdentityVerifier
) -> list[EnrolledUser]:
    """Members of a workspace, oldest first. Visible to the owner and to members.

    The owner only appears here once they have enrolled.
    """
    workspace = get_workspace_or_404(db, workspace_id)
    require_owner_or_member(
        db, workspace, user_id, "You do not have permission to view users in this workspace"
    )
    enrollments = (
        db.query(Enrollment)
        .filter(Enrollment.workspace_id == workspace_id)
        .order_by(Enrollment.enrolled_at.asc())
        .all()
    )
    return [
        EnrolledUser(
            id=e.user_id,
            email=verifier.email_for(e.user_id),
            enrolled_at=e.enrolled_at,
            is_owner=e.user_id == workspace.owner_id,
        )
        for e in enrollments
    ]

"""Enrollment service: join requests, approval, unenroll and member removal.

State per (workspace, user): none -> pending -> approved | rejected.
The owner's own request skips the pending state.
"""

from __future__ import annotations

import logging
from uuid import UUID

from sqlalchemy.orm import Session

from eduty.models.enrollment import Enrollment
from eduty.models.enrollment_request import EnrollmentRequest, EnrollmentRequestStatus
from eduty.models.workspace import Workspace
from eduty.schemas.enrollment import MyPendingRequestItem, PendingRequestItem, RequestStatusRead
from eduty.services.errors import BadRequestError, ConflictError, ForbiddenError, NotFoundError
from eduty.services.favorite_service import auto_set_first_favorite, shift_favorite_to_next
from eduty.services.identity import IdentityVerifier
from eduty.services.workspace_access import (
    commit_or_conflict,
    flush_or_conflict,
    get_enrollment,
    get_owned_workspace,
    get_workspace_or_404,
    is_owner,
)

logger = logging.getLogger(__name__)

PENDING = EnrollmentRequestStatus.PENDING.value
APPROVED = EnrollmentRequestStatus.APPROVED.value
REJECTED = EnrollmentRequestStatus.REJECTED.value


def check_enrollment(db: Session, workspace_id: UUID, user_id: UUID) -> Enrollment | None:
    return get_enrollment(db, workspace_id, user_id)


def check_pending_request(
    db: Session, workspace_id: UUID, user_id: UUID
) -> EnrollmentRequest | None:
    return (
        db.query(EnrollmentRequest)
        .filter(
            EnrollmentRequest.workspace_id == workspace_id,
            EnrollmentRequest.user_id == user_id,
            EnrollmentRequest.status == PENDING,
        )
        .first()
    )


def _latest_request(db: Session, workspace_id: UUID, user_id: UUID) -> EnrollmentRequest | None:
    return (
        db.query(EnrollmentRequest)
        .filter(
            EnrollmentRequest.workspace_id == workspace_id,
            EnrollmentRequest.user_id == user_id,
        )
        .order_by(EnrollmentRequest.created_at.desc())
        .first()
    )


def request_enrollment(
    db: Session, workspace_id: UUID, user_id: UUID
) -> Enrollment | EnrollmentRequest:
    """Ask to join a workspace.

    Non-owners get a pending EnrollmentRequest. The owner is enrolled at once
    (with an already-approved request record) and the Enrollment is returned.
    """
    workspace = get_workspace_or_404(db, workspace_id)

    if get_enrollment(db, workspace_id, user_id) is not None:
        raise ConflictError("You are already enrolled in this workspace")

    if check_pending_request(db, workspace_id, user_id) is not None:
        raise ConflictError("You already have a pending enrollment request for this workspace")

    if is_owner(workspace, user_id):
        enrollment = Enrollment(workspace_id=workspace_id, user_id=user_id)
        db.add(enrollment)
        db.add(EnrollmentRequest(workspace_id=workspace_id, user_id=user_id, status=APPROVED))
        flush_or_conflict(db, "You are already enrolled in this workspace")
        auto_set_first_favorite(db, user_id)
        commit_or_conflict(db, "You are already enrolled in this workspace")
        db.refresh(enrollment)
        logger.info("Owner %s auto-enrolled in their own workspace %s", user_id, workspace_id)
        return enrollment

    request = EnrollmentRequest(workspace_id=workspace_id, user_id=user_id, status=PENDING)
    db.add(request)
    commit_or_conflict(
        db, "You already have a pending enrollment request for this workspace"
    )
    db.refresh(request)
    logger.info("User %s requested enrollment in workspace %s", user_id, workspace_id)
    return request


def _get_request_for_owner(
    db: Session, request_id: UUID, owner_id: UUID, action: str
) -> EnrollmentRequest:
    request = db.get(EnrollmentRequest, request_id)
    if request is None:
        raise NotFoundError("Enrollment request not found")
    if not is_owner(request.workspace, owner_id):
        raise ForbiddenError(f"Only the workspace owner can {action} enrollment requests")
    if request.status != PENDING:
        raise BadRequestError(f"Cannot {action} request with status: {request.status}")
    return request


def approve_enrollment_request(db: Session, request_id: UUID, owner_id: UUID) -> Enrollment:
    """Approve a pending request. Idempotent if the user is already enrolled."""
    request = _get_request_for_owner(db, request_id, owner_id, "approve")

    existing = get_enrollment(db, request.workspace_id, request.user_id)
    if existing is not None:
        request.status = APPROVED
        db.commit()
        logger.info(
            "Enrollment request %s approved; user %s was already enrolled", request_id, request.user_id
        )
        return existing

    enrollment = Enrollment(workspace_id=request.workspace_id, user_id=request.user_id)
    db.add(enrollment)
    request.status = APPROVED
    flush_or_conflict(db, "User is already enrolled in this workspace")
    auto_set_first_favorite(db, request.user_id)
    commit_or_conflict(db, "User is already enrolled in this workspace")
    db.refresh(enrollment)
    logger.info(
        "Enrollment request %s approved. User %s enrolled in workspace %s",
        request_id,
        request.user_id,
        request.workspace_id,
    )
    return enrollment


def reject_enrollment_request(db: Session, request_id: UUID, owner_id: UUID) -> None:
    request = _get_request_for_owner(db, request_id, owner_id, "reject")
    request.status = REJECTED
    db.commit()
    logger.info("Enrollment request %s rejected by owner %s", request_id, owner_id)


def get_pending_requests(
    db: Session, workspace_id: UUID, owner_id: UUID, verifier: IdentityVerifier
) -> list[PendingRequestItem]:
    """Owner view of pending requests, oldest first, with requester emails."""
    get_owned_workspace(
        db,
        workspace_id,
        owner_id,
        "Only the workspace owner can view pending enrollment requests",
    )
    requests = (
        db.query(EnrollmentRequest)
        .filter(EnrollmentRequest.workspace_id == workspace_id, EnrollmentRequest.status == PENDING)
        .order_by(EnrollmentRequest.created_at.asc())
        .all()
    )
    return [
        PendingRequestItem(
            id=r.id,
            user_id=r.user_id,
            email=verifier.email_for(r.user_id),
            requested_at=r.created_at,
        )
        for r in requests
    ]


def get_user_enrollment_request(
    db: Session, workspace_id: UUID, user_id: UUID
) -> RequestStatusRead | None:
    request = _latest_request(db, workspace_id, user_id)
    if request is None:
        return None
    return RequestStatusRead(status=request.status, requested_at=request.created_at)


def get_user_pending_requests(db: Session, user_id: UUID) -> list[MyPendingRequestItem]:
    requests = (
        db.query(EnrollmentRequest)
        .filter(EnrollmentRequest.user_id == user_id, EnrollmentRequest.status == PENDING)
        .order_by(EnrollmentRequest.created_at.desc())
        .all()
    )
    return [
        MyPendingRequestItem(
            id=r.id,
            workspace_id=r.workspace_id,
            workspace_name=r.workspace.name if r.workspace else "Unknown Workspace",
            requested_at=r.created_at,
            status=r.status,
        )
        for r in requests
    ]


def _drop_membership(db: Session, enrollment: Enrollment) -> int:
    """Delete an enrollment and every request row for the pair; returns requests removed."""
    workspace_id, user_id = enrollment.workspace_id, enrollment.user_id
    db.delete(enrollment)
    removed = (
        db.query(EnrollmentRequest)
        .filter(
            EnrollmentRequest.workspace_id == workspace_id,
            EnrollmentRequest.user_id == user_id,
        )
        .delete(synchronize_session="fetch")
    )
    db.flush()
    shift_favorite_to_next(db, user_id, workspace_id)
    return removed


def unenroll_from_workspace(db: Session, workspace_id: UUID, user_id: UUID) -> None:
    """Leave a workspace. Request history is cleared so a later request starts clean."""
    enrollment = get_enrollment(db, workspace_id, user_id)
    if enrollment is None:
        raise NotFoundError("You are not enrolled in this workspace")

    removed = _drop_membership(db, enrollment)
    db.commit()
    if removed:
        logger.info(
            "Removed %d enrollment request(s) for user %s and workspace %s",
            removed,
            user_id,
            workspace_id,
        )
    logger.info("User %s unenrolled from workspace %s", user_id, workspace_id)


def remove_user_from_workspace(
    db: Session, workspace_id: UUID, target_user_id: UUID, owner_id: UUID
) -> None:
    """Owner removes a member. The owner must use unenroll for themselves."""
    get_owned_workspace(db, workspace_id, owner_id, "Only the workspace owner can remove users")

    if target_user_id == owner_id:
        raise BadRequestError(
            "You cannot remove yourself from your own workspace. Use unenroll instead."
        )

    enrollment = get_enrollment(db, workspace_id, target_user_id)
    if enrollment is None:
        raise NotFoundError("User is not enrolled in this workspace")

    _drop_membership(db, enrollment)
    db.commit()
    logger.info(
        "Owner %s removed user %s from workspace %s", owner_id, target_user_id, workspace_id
    )


def get_enrolled_workspaces(db: Session, user_id: UUID) -> list[Workspace]:
    enrollments = (
        db.query(Enrollment)
        .filter(Enrollment.user_id == user_id)
        .order_by(Enrollment.enrolled_at.desc())
        .all()
    )
    return [e.workspace for e in enrollments]

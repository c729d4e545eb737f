"""Leave request service: members ask for time off, owners decide."""

from __future__ import annotations

import logging
from datetime import UTC, date, datetime
from uuid import UUID

from sqlalchemy.orm import Session

from eduty.models.leave_request import LeaveRequest, LeaveRequestStatus
from eduty.schemas.leave_request import MyLeaveRequestItem, WorkspaceLeaveRequestItem
from eduty.services.errors import BadRequestError, ConflictError, ForbiddenError, NotFoundError
from eduty.services.identity import IdentityVerifier
from eduty.services.workspace_access import (
    get_enrollment,
    get_owned_workspace,
    get_workspace_or_404,
    is_owner,
)

logger = logging.getLogger(__name__)

PENDING = LeaveRequestStatus.PENDING.value


def find_overlapping_request(
    db: Session, workspace_id: UUID, user_id: UUID, start_date: date, end_date: date
) -> LeaveRequest | None:
    """A pending request of the same user in the same workspace sharing at least one day."""
    return (
        db.query(LeaveRequest)
        .filter(
            LeaveRequest.workspace_id == workspace_id,
            LeaveRequest.user_id == user_id,
            LeaveRequest.status == PENDING,
            LeaveRequest.start_date <= end_date,
            LeaveRequest.end_date >= start_date,
        )
        .first()
    )


def request_leave(
    db: Session,
    workspace_id: UUID,
    user_id: UUID,
    start_date: date,
    end_date: date,
    reason: str | None = None,
) -> LeaveRequest:
    """File a pending leave request over an inclusive date range."""
    get_workspace_or_404(db, workspace_id)

    if get_enrollment(db, workspace_id, user_id) is None:
        raise ForbiddenError("You must be enrolled in this workspace to request leave")

    if end_date < start_date:
        raise BadRequestError("End date must be on or after start date")

    if find_overlapping_request(db, workspace_id, user_id, start_date, end_date) is not None:
        raise ConflictError("You already have a pending leave request for these dates")

    leave = LeaveRequest(
        workspace_id=workspace_id,
        user_id=user_id,
        start_date=start_date,
        end_date=end_date,
        reason=reason or None,
        status=PENDING,
    )
    db.add(leave)
    db.commit()
    db.refresh(leave)
    logger.info(
        "Leave requested by user %s in workspace %s (%s to %s)",
        user_id,
        workspace_id,
        start_date,
        end_date,
    )
    return leave


def get_my_leave_requests(db: Session, user_id: UUID) -> list[MyLeaveRequestItem]:
    requests = (
        db.query(LeaveRequest)
        .filter(LeaveRequest.user_id == user_id)
        .order_by(LeaveRequest.created_at.desc())
        .all()
    )
    return [
        MyLeaveRequestItem(
            id=r.id,
            workspace_id=r.workspace_id,
            workspace_name=r.workspace.name if r.workspace else "Unknown Workspace",
            start_date=r.start_date,
            end_date=r.end_date,
            reason=r.reason,
            status=r.status,
            created_at=r.created_at,
            updated_at=r.updated_at,
        )
        for r in requests
    ]


def get_workspace_leave_requests(
    db: Session, workspace_id: UUID, owner_id: UUID, verifier: IdentityVerifier
) -> list[WorkspaceLeaveRequestItem]:
    get_owned_workspace(
        db, workspace_id, owner_id, "Only the workspace owner can view leave requests"
    )
    requests = (
        db.query(LeaveRequest)
        .filter(LeaveRequest.workspace_id == workspace_id)
        .order_by(LeaveRequest.created_at.desc())
        .all()
    )
    return [
        WorkspaceLeaveRequestItem(
            id=r.id,
            user_id=r.user_id,
            email=verifier.email_for(r.user_id),
            start_date=r.start_date,
            end_date=r.end_date,
            reason=r.reason,
            status=r.status,
            created_at=r.created_at,
            updated_at=r.updated_at,
        )
        for r in requests
    ]


def _decide(
    db: Session, leave_request_id: UUID, owner_id: UUID, status: LeaveRequestStatus
) -> LeaveRequest:
    action = "approve" if status is LeaveRequestStatus.APPROVED else "reject"
    leave = db.get(LeaveRequest, leave_request_id)
    if leave is None:
        raise NotFoundError("Leave request not found")
    if leave.workspace is None or not is_owner(leave.workspace, owner_id):
        raise ForbiddenError(f"Only the workspace owner can {action} leave requests")
    if leave.status != PENDING:
        raise BadRequestError(f"Cannot {action} leave request with status: {leave.status}")

    leave.status = status.value
    leave.updated_at = datetime.now(UTC)
    db.commit()
    db.refresh(leave)
    logger.info("Leave request %s %s by owner %s", leave_request_id, status.value, owner_id)
    return leave


def approve_leave_request(db: Session, leave_request_id: UUID, owner_id: UUID) -> LeaveRequest:
    return _decide(db, leave_request_id, owner_id, LeaveRequestStatus.APPROVED)


def reject_leave_request(db: Session, leave_request_id: UUID, owner_id: UUID) -> LeaveRequest:
    return _decide(db, leave_request_id, owner_id, LeaveRequestStatus.REJECTED)


def cancel_leave_request(db: Session, leave_request_id: UUID, user_id: UUID) -> None:
    """Requester withdraws a pending request. The row is deleted outright."""
    leave = db.get(LeaveRequest, leave_request_id)
    if leave is None:
        raise NotFoundError("Leave request not found")
    if leave.user_id != user_id:
        raise ForbiddenError("You can only cancel your own leave requests")
    if leave.status != PENDING:
        raise BadRequestError(f"Cannot cancel leave request with status: {leave.status}")

    db.delete(leave)
    db.commit()
    logger.info("Leave request %s cancelled by user %s", leave_request_id, user_id)

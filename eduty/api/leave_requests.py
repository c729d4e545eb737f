"""Leave request API routes."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from eduty.api.deps import get_db, get_identity_verifier, require_auth
from eduty.schemas.common import MessageResponse
from eduty.schemas.leave_request import (
    LeaveRequestCreate,
    LeaveRequestRead,
    MyLeaveRequestItem,
    WorkspaceLeaveRequestItem,
)
from eduty.services import leave_service
from eduty.services.identity import Identity, IdentityVerifier

router = APIRouter()


@router.post("/leave-requests", response_model=LeaveRequestRead, status_code=201)
def api_request_leave(
    data: LeaveRequestCreate,
    db: Session = Depends(get_db),
    user: Identity = Depends(require_auth),
) -> LeaveRequestRead:
    leave = leave_service.request_leave(
        db, data.workspace_id, user.id, data.start_date, data.end_date, data.reason
    )
    return LeaveRequestRead.model_validate(leave)


@router.get("/leave-requests/my-requests", response_model=list[MyLeaveRequestItem])
def api_my_leave_requests(
    db: Session = Depends(get_db),
    user: Identity = Depends(require_auth),
) -> list[MyLeaveRequestItem]:
    return leave_service.get_my_leave_requests(db, user.id)


@router.get("/{workspace_id}/leave-requests", response_model=list[WorkspaceLeaveRequestItem])
def api_workspace_leave_requests(
    workspace_id: UUID,
    db: Session = Depends(get_db),
    user: Identity = Depends(require_auth),
    verifier: IdentityVerifier = Depends(get_identity_verifier),
) -> list[WorkspaceLeaveRequestItem]:
    """All leave requests of a workspace with requester emails (owner only)."""
    return leave_service.get_workspace_leave_requests(db, workspace_id, user.id, verifier)


@router.post("/leave-requests/{leave_request_id}/approve", response_model=MessageResponse)
def api_approve_leave(
    leave_request_id: UUID,
    db: Session = Depends(get_db),
    user: Identity = Depends(require_auth),
) -> MessageResponse:
    leave_service.approve_leave_request(db, leave_request_id, user.id)
    return MessageResponse(message="Leave request approved successfully")


@router.post("/leave-requests/{leave_request_id}/reject", response_model=MessageResponse)
def api_reject_leave(
    leave_request_id: UUID,
    db: Session = Depends(get_db),
    user: Identity = Depends(require_auth),
) -> MessageResponse:
    leave_service.reject_leave_request(db, leave_request_id, user.id)
    return MessageResponse(message="Leave request rejected successfully")


@router.delete("/leave-requests/{leave_request_id}", response_model=MessageResponse)
def api_cancel_leave(
    leave_request_id: UUID,
    db: Session = Depends(get_db),
    user: Identity = Depends(require_auth),
) -> MessageResponse:
    leave_service.cancel_leave_request(db, leave_request_id, user.id)
    return MessageResponse(message="Leave request cancelled successfully")

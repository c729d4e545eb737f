"""Invitation API routes."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from eduty.api.deps import get_db, get_identity_verifier, require_auth
from eduty.config import get_settings
from eduty.schemas.common import MessageResponse
from eduty.schemas.invitation import InvitationRead, InviteCreate, MyInvitationItem
from eduty.services import invitation_service
from eduty.services.identity import Identity, IdentityVerifier

router = APIRouter()


@router.post("/{workspace_id}/invite", response_model=InvitationRead, status_code=201)
def api_invite_user(
    workspace_id: UUID,
    data: InviteCreate,
    db: Session = Depends(get_db),
    user: Identity = Depends(require_auth),
    verifier: IdentityVerifier = Depends(get_identity_verifier),
) -> InvitationRead:
    """Invite an email address to the workspace (owner only)."""
    invitation = invitation_service.create_invitation(
        db,
        workspace_id,
        data.email,
        user.id,
        verifier,
        strict=get_settings().strict_identity_lookups,
    )
    return InvitationRead.model_validate(invitation)


@router.get("/{workspace_id}/invitations", response_model=list[InvitationRead])
def api_workspace_invitations(
    workspace_id: UUID,
    db: Session = Depends(get_db),
    user: Identity = Depends(require_auth),
) -> list[InvitationRead]:
    return [
        InvitationRead.model_validate(inv)
        for inv in invitation_service.get_workspace_invitations(db, workspace_id, user.id)
    ]


@router.get("/invitations/my-invitations", response_model=list[MyInvitationItem])
def api_my_invitations(
    db: Session = Depends(get_db),
    user: Identity = Depends(require_auth),
    verifier: IdentityVerifier = Depends(get_identity_verifier),
) -> list[MyInvitationItem]:
    """Pending invitations addressed to the caller's email."""
    return invitation_service.get_user_invitations(db, user.email, verifier)


@router.post("/invitations/{invitation_id}/accept", response_model=MessageResponse)
def api_accept_invitation(
    invitation_id: UUID,
    db: Session = Depends(get_db),
    user: Identity = Depends(require_auth),
) -> MessageResponse:
    invitation_service.accept_invitation(db, invitation_id, user.id, user.email)
    return MessageResponse(message="Invitation accepted successfully")


@router.post("/invitations/{invitation_id}/reject", response_model=MessageResponse)
def api_reject_invitation(
    invitation_id: UUID,
    db: Session = Depends(get_db),
    user: Identity = Depends(require_auth),
) -> MessageResponse:
    invitation_service.reject_invitation(db, invitation_id, user.id, user.email)
    return MessageResponse(message="Invitation rejected successfully")


@router.delete("/invitations/{invitation_id}", response_model=MessageResponse)
def api_cancel_invitation(
    invitation_id: UUID,
    db: Session = Depends(get_db),
    user: Identity = Depends(require_auth),
) -> MessageResponse:
    invitation_service.cancel_invitation(db, invitation_id, user.id)
    return MessageResponse(message="Invitation cancelled successfully")

"""Invitation service: owner-issued, email-targeted invitations."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from uuid import UUID

from sqlalchemy.orm import Session

from eduty.models.enrollment import Enrollment
from eduty.models.invitation import Invitation, InvitationStatus
from eduty.schemas.invitation import MyInvitationItem
from eduty.services.errors import BadRequestError, ConflictError, ForbiddenError, NotFoundError
from eduty.services.favorite_service import auto_set_first_favorite
from eduty.services.identity import IdentityVerifier, normalize_email
from eduty.services.workspace_access import (
    commit_or_conflict,
    flush_or_conflict,
    get_enrollment,
    get_owned_workspace,
    is_owner,
)

logger = logging.getLogger(__name__)

PENDING = InvitationStatus.PENDING.value


def _find_pending_invitation(db: Session, workspace_id: UUID, email: str) -> Invitation | None:
    return (
        db.query(Invitation)
        .filter(
            Invitation.workspace_id == workspace_id,
            Invitation.invitee_email == email,
            Invitation.status == PENDING,
        )
        .first()
    )


def create_invitation(
    db: Session,
    workspace_id: UUID,
    invitee_email: str,
    inviter_id: UUID,
    verifier: IdentityVerifier,
    strict: bool = False,
) -> Invitation:
    """Invite ``invitee_email`` to a workspace (owner only).

    Identity lookups are best effort: when the provider cannot answer, the
    self-invite and already-enrolled checks are skipped unless ``strict``.
    """
    get_owned_workspace(db, workspace_id, inviter_id, "Only the workspace owner can invite users")
    email = normalize_email(invitee_email)

    inviter = verifier.get_user_by_id(inviter_id)
    if inviter.found and normalize_email(inviter.email) == email:
        raise BadRequestError("You cannot invite yourself")
    if inviter.unknown:
        if strict:
            raise BadRequestError("Could not verify inviter email")
        logger.warning("Could not verify inviter email for user %s", inviter_id)

    invitee = verifier.get_user_by_email(email)
    if invitee.found:
        if get_enrollment(db, workspace_id, invitee.identity.id) is not None:
            raise ConflictError("User is already enrolled in this workspace")
    elif invitee.unknown:
        if strict:
            raise BadRequestError("Could not verify invitee email")
        logger.warning("Could not look up invitee %s; skipping enrollment check", email)
    else:
        logger.info("Inviting user who may not be registered yet: %s", email)

    if _find_pending_invitation(db, workspace_id, email) is not None:
        raise ConflictError("A pending invitation already exists for this user")

    invitation = Invitation(
        workspace_id=workspace_id,
        inviter_id=inviter_id,
        invitee_email=email,
        status=PENDING,
    )
    db.add(invitation)
    commit_or_conflict(db, "A pending invitation already exists for this user")
    db.refresh(invitation)
    logger.info(
        "Invitation created: %s for %s to workspace %s", invitation.id, email, workspace_id
    )
    return invitation


def get_workspace_invitations(db: Session, workspace_id: UUID, owner_id: UUID) -> list[Invitation]:
    get_owned_workspace(db, workspace_id, owner_id, "Only the workspace owner can view invitations")
    return (
        db.query(Invitation)
        .filter(Invitation.workspace_id == workspace_id)
        .order_by(Invitation.created_at.desc())
        .all()
    )


def get_user_invitations(
    db: Session, user_email: str, verifier: IdentityVerifier
) -> list[MyInvitationItem]:
    """Pending invitations addressed to ``user_email``, newest first."""
    invitations = (
        db.query(Invitation)
        .filter(
            Invitation.invitee_email == normalize_email(user_email),
            Invitation.status == PENDING,
        )
        .order_by(Invitation.created_at.desc())
        .all()
    )
    return [
        MyInvitationItem(
            id=inv.id,
            workspace_id=inv.workspace_id,
            workspace_name=inv.workspace.name,
            inviter_email=verifier.email_for(inv.inviter_id),
            status=inv.status,
            created_at=inv.created_at,
        )
        for inv in invitations
    ]


def _get_invitation_for_invitee(db: Session, invitation_id: UUID, user_email: str) -> Invitation:
    invitation = db.get(Invitation, invitation_id)
    if invitation is None:
        raise NotFoundError("Invitation not found")
    if invitation.status != PENDING:
        raise BadRequestError(f"Invitation has already been {invitation.status}")
    if invitation.invitee_email != normalize_email(user_email):
        raise ForbiddenError("This invitation is not for you")
    return invitation


def accept_invitation(db: Session, invitation_id: UUID, user_id: UUID, user_email: str) -> Enrollment:
    invitation = _get_invitation_for_invitee(db, invitation_id, user_email)

    if get_enrollment(db, invitation.workspace_id, user_id) is not None:
        raise ConflictError("You are already enrolled in this workspace")

    enrollment = Enrollment(workspace_id=invitation.workspace_id, user_id=user_id)
    db.add(enrollment)
    invitation.status = InvitationStatus.ACCEPTED.value
    invitation.updated_at = datetime.now(UTC)
    flush_or_conflict(db, "You are already enrolled in this workspace")
    auto_set_first_favorite(db, user_id)
    commit_or_conflict(db, "You are already enrolled in this workspace")
    db.refresh(enrollment)
    logger.info(
        "User %s accepted invitation %s and enrolled in workspace %s",
        user_id,
        invitation_id,
        invitation.workspace_id,
    )
    return enrollment


def reject_invitation(db: Session, invitation_id: UUID, user_id: UUID, user_email: str) -> None:
    invitation = _get_invitation_for_invitee(db, invitation_id, user_email)
    invitation.status = InvitationStatus.REJECTED.value
    invitation.updated_at = datetime.now(UTC)
    db.commit()
    logger.info(
        "User %s rejected invitation %s for workspace %s",
        user_id,
        invitation_id,
        invitation.workspace_id,
    )


def cancel_invitation(db: Session, invitation_id: UUID, owner_id: UUID) -> None:
    """Owner withdraws an invitation. The row is deleted outright."""
    invitation = db.get(Invitation, invitation_id)
    if invitation is None:
        raise NotFoundError("Invitation not found")
    if invitation.workspace is None or not is_owner(invitation.workspace, owner_id):
        raise ForbiddenError("Only the workspace owner can cancel invitations")

    db.delete(invitation)
    db.commit()
    logger.info("Invitation %s cancelled by owner %s", invitation_id, owner_id)

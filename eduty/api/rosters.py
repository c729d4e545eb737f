"""Roster API routes."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Path
from sqlalchemy.orm import Session

from eduty.api.deps import get_db, require_auth
from eduty.schemas.common import MessageResponse
from eduty.schemas.roster import PersonalRoster, RosterRead, RosterSave, RosterView
from eduty.services import roster_service
from eduty.services.identity import Identity

router = APIRouter()


@router.post("/rosters/save", response_model=RosterRead, status_code=201)
def api_save_roster(
    data: RosterSave,
    db: Session = Depends(get_db),
    user: Identity = Depends(require_auth),
) -> RosterRead:
    """Create or replace the roster for a workspace and month (owner only)."""
    roster = roster_service.save_roster(
        db, data.workspace_id, data.month, data.year, data.assignments, user.id
    )
    return RosterRead.model_validate(roster)


@router.post("/rosters/{roster_id}/publish", response_model=RosterRead)
def api_publish_roster(
    roster_id: UUID,
    db: Session = Depends(get_db),
    user: Identity = Depends(require_auth),
) -> RosterRead:
    return RosterRead.model_validate(roster_service.publish_roster(db, roster_id, user.id))


@router.post("/rosters/{roster_id}/unpublish", response_model=RosterRead)
def api_unpublish_roster(
    roster_id: UUID,
    db: Session = Depends(get_db),
    user: Identity = Depends(require_auth),
) -> RosterRead:
    return RosterRead.model_validate(roster_service.unpublish_roster(db, roster_id, user.id))


@router.get("/rosters/my-rosters/{month}/{year}", response_model=list[PersonalRoster])
def api_my_rosters(
    month: int = Path(..., ge=1, le=12),
    year: int = Path(..., ge=2000, le=2100),
    db: Session = Depends(get_db),
    user: Identity = Depends(require_auth),
) -> list[PersonalRoster]:
    """The caller's assignments across every published roster of the period."""
    return roster_service.get_user_published_rosters(db, user.id, month, year)


@router.get("/rosters/{workspace_id}/{month}/{year}", response_model=RosterView)
def api_get_roster(
    workspace_id: UUID,
    month: int = Path(..., ge=1, le=12),
    year: int = Path(..., ge=2000, le=2100),
    db: Session = Depends(get_db),
    user: Identity = Depends(require_auth),
) -> RosterView:
    return roster_service.get_roster(db, workspace_id, month, year, user.id)


@router.delete("/rosters/{roster_id}", response_model=MessageResponse)
def api_delete_roster(
    roster_id: UUID,
    db: Session = Depends(get_db),
    user: Identity = Depends(require_auth),
) -> MessageResponse:
    roster_service.delete_roster(db, roster_id, user.id)
    return MessageResponse(message="Roster deleted successfully")

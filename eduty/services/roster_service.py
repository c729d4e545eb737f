"""Roster service: save, publish and read monthly shift rosters."""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Iterable
from datetime import UTC, datetime
from uuid import UUID

from sqlalchemy.orm import Session

from eduty.models.enrollment import Enrollment
from eduty.models.roster import Roster, RosterStatus
from eduty.models.roster_assignment import RosterAssignment
from eduty.schemas.roster import (
    AssignmentRead,
    PersonalAssignment,
    PersonalRoster,
    RosterAssignmentIn,
    RosterRead,
    RosterView,
)
from eduty.services.errors import ForbiddenError, NotFoundError
from eduty.services.workspace_access import (
    commit_or_conflict,
    flush_or_conflict,
    get_workspace_or_404,
    is_owner,
    require_owner,
    require_owner_or_member,
)

logger = logging.getLogger(__name__)

# Duty type "" means "clear this cell"; such cells are never stored.
CLEAR_CELL = ""


def _find_roster(db: Session, workspace_id: UUID, month: int, year: int) -> Roster | None:
    return (
        db.query(Roster)
        .filter(Roster.workspace_id == workspace_id, Roster.month == month, Roster.year == year)
        .first()
    )


def save_roster(
    db: Session,
    workspace_id: UUID,
    month: int,
    year: int,
    assignments: Iterable[RosterAssignmentIn],
    user_id: UUID,
) -> Roster:
    """Upsert the roster for a period and replace its assignments wholesale.

    Owner only; enrollment is not enough. Saving the same set twice leaves
    the same rows.
    """
    workspace = get_workspace_or_404(db, workspace_id)
    require_owner(workspace, user_id, "Only workspace owner can create or modify rosters")

    roster = _find_roster(db, workspace_id, month, year)
    if roster is None:
        roster = Roster(
            workspace_id=workspace_id,
            month=month,
            year=year,
            status=RosterStatus.DRAFT.value,
        )
        db.add(roster)
        flush_or_conflict(db, "A roster for this period was created concurrently")
    else:
        roster.updated_at = datetime.now(UTC)

    db.query(RosterAssignment).filter(RosterAssignment.roster_id == roster.id).delete(
        synchronize_session="fetch"
    )
    db.expire(roster, ["assignments"])

    for assignment in assignments:
        if assignment.duty_type == CLEAR_CELL:
            continue
        db.add(
            RosterAssignment(
                roster_id=roster.id,
                user_id=assignment.user_id,
                day=assignment.day,
                shift_period=assignment.shift_period,
                duty_type=assignment.duty_type,
                is_overtime=assignment.is_overtime,
            )
        )

    commit_or_conflict(db, "Roster was modified concurrently or contains duplicate cells")
    db.refresh(roster)
    logger.info(
        "Roster saved for workspace %s (%s/%s) by user %s", workspace_id, month, year, user_id
    )
    return roster


def _get_roster_for_owner(db: Session, roster_id: UUID, owner_id: UUID, action: str) -> Roster:
    roster = db.get(Roster, roster_id)
    if roster is None:
        raise NotFoundError("Roster not found")
    if not is_owner(roster.workspace, owner_id):
        raise ForbiddenError(f"Only the workspace owner can {action} rosters")
    return roster


def publish_roster(db: Session, roster_id: UUID, owner_id: UUID) -> Roster:
    roster = _get_roster_for_owner(db, roster_id, owner_id, "publish")
    roster.status = RosterStatus.PUBLISHED.value
    roster.published_at = datetime.now(UTC)
    roster.published_by = owner_id
    db.commit()
    db.refresh(roster)
    logger.info("Roster %s published by owner %s", roster_id, owner_id)
    return roster


def unpublish_roster(db: Session, roster_id: UUID, owner_id: UUID) -> Roster:
    roster = _get_roster_for_owner(db, roster_id, owner_id, "unpublish")
    roster.status = RosterStatus.DRAFT.value
    roster.published_at = None
    roster.published_by = None
    db.commit()
    db.refresh(roster)
    logger.info("Roster %s unpublished by owner %s", roster_id, owner_id)
    return roster


def get_roster(db: Session, workspace_id: UUID, month: int, year: int, user_id: UUID) -> RosterView:
    """Roster and all assignments for a period; an empty view if none exists yet."""
    workspace = get_workspace_or_404(db, workspace_id)
    require_owner_or_member(db, workspace, user_id, "You do not have permission to view this roster")

    roster = _find_roster(db, workspace_id, month, year)
    if roster is None:
        return RosterView(roster=None, assignments=[])

    assignments = (
        db.query(RosterAssignment)
        .filter(RosterAssignment.roster_id == roster.id)
        .order_by(RosterAssignment.day, RosterAssignment.shift_period)
        .all()
    )
    return RosterView(
        roster=RosterRead.model_validate(roster),
        assignments=[AssignmentRead.model_validate(a) for a in assignments],
    )


def get_user_published_rosters(
    db: Session, user_id: UUID, month: int, year: int
) -> list[PersonalRoster]:
    """The user's own assignments in every published roster of their workspaces for a period."""
    workspace_ids = [
        row.workspace_id
        for row in db.query(Enrollment.workspace_id).filter(Enrollment.user_id == user_id).all()
    ]
    if not workspace_ids:
        return []

    rosters = (
        db.query(Roster)
        .filter(
            Roster.workspace_id.in_(workspace_ids),
            Roster.month == month,
            Roster.year == year,
            Roster.status == RosterStatus.PUBLISHED.value,
        )
        .all()
    )
    if not rosters:
        return []

    by_roster: dict[UUID, list[RosterAssignment]] = defaultdict(list)
    assignments = (
        db.query(RosterAssignment)
        .filter(
            RosterAssignment.roster_id.in_([r.id for r in rosters]),
            RosterAssignment.user_id == user_id,
        )
        .order_by(RosterAssignment.day, RosterAssignment.shift_period)
        .all()
    )
    for assignment in assignments:
        by_roster[assignment.roster_id].append(assignment)

    return [
        PersonalRoster(
            roster_id=roster.id,
            workspace_id=roster.workspace_id,
            workspace_name=roster.workspace.name if roster.workspace else "Unknown",
            month=roster.month,
            year=roster.year,
            published_at=roster.published_at,
            assignments=[PersonalAssignment.model_validate(a) for a in by_roster[roster.id]],
        )
        for roster in rosters
    ]


def delete_roster(db: Session, roster_id: UUID, owner_id: UUID) -> None:
    roster = _get_roster_for_owner(db, roster_id, owner_id, "delete")
    db.delete(roster)  # assignments cascade
    db.commit()
    logger.info("Roster %s deleted by owner %s", roster_id, owner_id)

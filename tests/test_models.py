"""Model constraint tests: storage-level uniqueness backs the service checks."""

import pytest
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from eduty.models import Enrollment, Roster, RosterAssignment, UserFavorite
from eduty.services.errors import ConflictError
from eduty.services.workspace_access import commit_or_conflict
from tests.helpers import enroll, make_workspace
from tests.test_constants import MEMBER_ID, OWNER_ID


def test_duplicate_enrollment_raises_integrity_error(db: Session) -> None:
    workspace = make_workspace(db, OWNER_ID)
    enroll(db, workspace, MEMBER_ID)

    db.add(Enrollment(workspace_id=workspace.id, user_id=MEMBER_ID))
    with pytest.raises(IntegrityError):
        db.commit()
    db.rollback()


def test_commit_or_conflict_translates_and_rolls_back(db: Session) -> None:
    workspace = make_workspace(db, OWNER_ID)
    enroll(db, workspace, MEMBER_ID)

    db.add(Enrollment(workspace_id=workspace.id, user_id=MEMBER_ID))
    with pytest.raises(ConflictError, match="already enrolled"):
        commit_or_conflict(db, "User is already enrolled in this workspace")
    assert db.query(Enrollment).count() == 1


def test_one_favorite_per_user(db: Session) -> None:
    ward_a = make_workspace(db, OWNER_ID, "Ward A")
    ward_b = make_workspace(db, OWNER_ID, "Ward B")
    db.add(UserFavorite(user_id=MEMBER_ID, workspace_id=ward_a.id))
    db.commit()

    db.add(UserFavorite(user_id=MEMBER_ID, workspace_id=ward_b.id))
    with pytest.raises(IntegrityError):
        db.commit()
    db.rollback()


def test_one_roster_per_period(db: Session) -> None:
    workspace = make_workspace(db, OWNER_ID)
    db.add(Roster(workspace_id=workspace.id, month=1, year=2024))
    db.commit()

    db.add(Roster(workspace_id=workspace.id, month=1, year=2024))
    with pytest.raises(IntegrityError):
        db.commit()
    db.rollback()


def test_one_assignment_per_cell(db: Session) -> None:
    workspace = make_workspace(db, OWNER_ID)
    roster = Roster(workspace_id=workspace.id, month=1, year=2024)
    db.add(roster)
    db.commit()

    cell = {"roster_id": roster.id, "user_id": MEMBER_ID, "day": 5, "shift_period": "M"}
    db.add(RosterAssignment(duty_type="M", **cell))
    db.commit()
    db.add(RosterAssignment(duty_type="E", **cell))
    with pytest.raises(IntegrityError):
        db.commit()
    db.rollback()


def test_roster_defaults_to_draft(db: Session) -> None:
    workspace = make_workspace(db, OWNER_ID)
    roster = Roster(workspace_id=workspace.id, month=1, year=2024)
    db.add(roster)
    db.commit()
    assert roster.status == "draft"
    assert roster.published_at is None

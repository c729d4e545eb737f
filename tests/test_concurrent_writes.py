"""Check-then-insert races surface as ConflictError, never as a raw IntegrityError.

Each test lands the competing row first, then blinds the service's own
existence check so the insert reaches the database constraint.
"""

from __future__ import annotations

from unittest.mock import patch

import pytest
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from eduty.models import Enrollment, EnrollmentRequest, Invitation, Roster
from eduty.schemas.roster import RosterAssignmentIn
from eduty.services import enrollment_service, invitation_service, roster_service
from eduty.services.errors import ConflictError
from tests.helpers import count_requests, enroll, make_workspace
from tests.test_constants import MEMBER_EMAIL, MEMBER_ID, OWNER_ID


def _enrollments(db: Session, workspace_id, user_id) -> int:
    return (
        db.query(Enrollment)
        .filter(Enrollment.workspace_id == workspace_id, Enrollment.user_id == user_id)
        .count()
    )


class TestEnrollmentRaces:
    def test_approve_after_concurrent_enrollment(self, db: Session) -> None:
        workspace = make_workspace(db, OWNER_ID)
        request = enrollment_service.request_enrollment(db, workspace.id, MEMBER_ID)
        request_id = request.id
        enroll(db, workspace, MEMBER_ID)

        with patch("eduty.services.enrollment_service.get_enrollment", return_value=None):
            with pytest.raises(ConflictError, match="already enrolled"):
                enrollment_service.approve_enrollment_request(db, request_id, OWNER_ID)

        assert _enrollments(db, workspace.id, MEMBER_ID) == 1
        assert db.get(EnrollmentRequest, request_id).status == "pending"

    def test_owner_self_enroll_after_concurrent_enrollment(self, db: Session) -> None:
        workspace = make_workspace(db, OWNER_ID)
        enroll(db, workspace, OWNER_ID)

        with patch("eduty.services.enrollment_service.get_enrollment", return_value=None):
            with pytest.raises(ConflictError, match="already enrolled"):
                enrollment_service.request_enrollment(db, workspace.id, OWNER_ID)

        assert _enrollments(db, workspace.id, OWNER_ID) == 1
        assert count_requests(db, workspace.id, OWNER_ID) == 0

    def test_duplicate_pending_request_conflicts(self, db: Session) -> None:
        workspace = make_workspace(db, OWNER_ID)
        enrollment_service.request_enrollment(db, workspace.id, MEMBER_ID)

        with patch(
            "eduty.services.enrollment_service.check_pending_request", return_value=None
        ):
            with pytest.raises(ConflictError, match="pending enrollment request"):
                enrollment_service.request_enrollment(db, workspace.id, MEMBER_ID)

        assert count_requests(db, workspace.id, MEMBER_ID) == 1

    def test_decided_requests_may_repeat(self, db: Session) -> None:
        workspace = make_workspace(db, OWNER_ID)
        for status in ("rejected", "rejected", "approved", "pending"):
            db.add(EnrollmentRequest(workspace_id=workspace.id, user_id=MEMBER_ID, status=status))
        db.commit()
        assert count_requests(db, workspace.id, MEMBER_ID) == 4

    def test_storage_rejects_second_pending_request(self, db: Session) -> None:
        workspace = make_workspace(db, OWNER_ID)
        db.add(EnrollmentRequest(workspace_id=workspace.id, user_id=MEMBER_ID))
        db.add(EnrollmentRequest(workspace_id=workspace.id, user_id=MEMBER_ID))
        with pytest.raises(IntegrityError):
            db.commit()
        db.rollback()


class TestInvitationRaces:
    def test_duplicate_pending_invitation_conflicts(self, db: Session, verifier) -> None:
        workspace = make_workspace(db, OWNER_ID)
        invitation_service.create_invitation(db, workspace.id, MEMBER_EMAIL, OWNER_ID, verifier)

        with patch(
            "eduty.services.invitation_service._find_pending_invitation", return_value=None
        ):
            with pytest.raises(ConflictError, match="pending invitation"):
                invitation_service.create_invitation(
                    db, workspace.id, MEMBER_EMAIL, OWNER_ID, verifier
                )

        assert db.query(Invitation).filter(Invitation.workspace_id == workspace.id).count() == 1

    def test_decided_invitations_may_repeat(self, db: Session) -> None:
        workspace = make_workspace(db, OWNER_ID)
        for status in ("rejected", "accepted", "pending"):
            db.add(
                Invitation(
                    workspace_id=workspace.id,
                    inviter_id=OWNER_ID,
                    invitee_email=MEMBER_EMAIL,
                    status=status,
                )
            )
        db.commit()
        assert db.query(Invitation).count() == 3

    def test_accept_after_concurrent_enrollment(self, db: Session, verifier) -> None:
        workspace = make_workspace(db, OWNER_ID)
        invitation = invitation_service.create_invitation(
            db, workspace.id, MEMBER_EMAIL, OWNER_ID, verifier
        )
        invitation_id = invitation.id
        enroll(db, workspace, MEMBER_ID)

        with patch("eduty.services.invitation_service.get_enrollment", return_value=None):
            with pytest.raises(ConflictError, match="already enrolled"):
                invitation_service.accept_invitation(db, invitation_id, MEMBER_ID, MEMBER_EMAIL)

        assert _enrollments(db, workspace.id, MEMBER_ID) == 1
        assert db.get(Invitation, invitation_id).status == "pending"


class TestRosterRaces:
    def test_first_save_after_concurrent_create(self, db: Session) -> None:
        workspace = make_workspace(db, OWNER_ID)
        db.add(Roster(workspace_id=workspace.id, month=3, year=2024, status="draft"))
        db.commit()
        cell = RosterAssignmentIn(
            user_id=MEMBER_ID, day=1, shift_period="M", duty_type="M", is_overtime=False
        )

        with patch("eduty.services.roster_service._find_roster", return_value=None):
            with pytest.raises(ConflictError):
                roster_service.save_roster(db, workspace.id, 3, 2024, [cell], OWNER_ID)

        assert db.query(Roster).filter(Roster.workspace_id == workspace.id).count() == 1

"""Enrollment request lifecycle tests."""

from __future__ import annotations

import uuid

import pytest
from sqlalchemy.orm import Session

from eduty.models import Enrollment, EnrollmentRequest, UserFavorite
from eduty.services import enrollment_service
from eduty.services.errors import BadRequestError, ConflictError, ForbiddenError, NotFoundError
from tests.helpers import count_requests, enroll, make_workspace
from tests.test_constants import MEMBER_EMAIL, MEMBER_ID, OUTSIDER_ID, OWNER_ID


def _enrollments(db: Session, workspace_id, user_id) -> int:
    return (
        db.query(Enrollment)
        .filter(Enrollment.workspace_id == workspace_id, Enrollment.user_id == user_id)
        .count()
    )


class TestRequestEnrollment:
    def test_non_owner_gets_pending_request(self, db: Session) -> None:
        workspace = make_workspace(db, OWNER_ID)
        request = enrollment_service.request_enrollment(db, workspace.id, MEMBER_ID)

        assert isinstance(request, EnrollmentRequest)
        assert request.status == "pending"
        assert enrollment_service.check_enrollment(db, workspace.id, MEMBER_ID) is None

    def test_second_request_conflicts(self, db: Session) -> None:
        workspace = make_workspace(db, OWNER_ID)
        enrollment_service.request_enrollment(db, workspace.id, MEMBER_ID)
        with pytest.raises(ConflictError):
            enrollment_service.request_enrollment(db, workspace.id, MEMBER_ID)
        assert count_requests(db, workspace.id, MEMBER_ID) == 1

    def test_missing_workspace_not_found(self, db: Session) -> None:
        with pytest.raises(NotFoundError):
            enrollment_service.request_enrollment(db, uuid.uuid4(), MEMBER_ID)

    def test_already_enrolled_conflicts(self, db: Session) -> None:
        workspace = make_workspace(db, OWNER_ID)
        enroll(db, workspace, MEMBER_ID)
        with pytest.raises(ConflictError, match="already enrolled"):
            enrollment_service.request_enrollment(db, workspace.id, MEMBER_ID)

    def test_owner_is_enrolled_immediately(self, db: Session) -> None:
        workspace = make_workspace(db, OWNER_ID)
        result = enrollment_service.request_enrollment(db, workspace.id, OWNER_ID)

        assert isinstance(result, Enrollment)
        requests = (
            db.query(EnrollmentRequest)
            .filter(EnrollmentRequest.workspace_id == workspace.id)
            .all()
        )
        assert [r.status for r in requests] == ["approved"]
        assert enrollment_service.check_pending_request(db, workspace.id, OWNER_ID) is None
        fav = db.query(UserFavorite).filter(UserFavorite.user_id == OWNER_ID).one()
        assert fav.workspace_id == workspace.id


class TestDecisions:
    def test_approve_enrolls_and_sets_favorite(self, db: Session) -> None:
        workspace = make_workspace(db, OWNER_ID)
        request = enrollment_service.request_enrollment(db, workspace.id, MEMBER_ID)

        enrollment = enrollment_service.approve_enrollment_request(db, request.id, OWNER_ID)

        assert enrollment.user_id == MEMBER_ID
        assert db.get(EnrollmentRequest, request.id).status == "approved"
        fav = db.query(UserFavorite).filter(UserFavorite.user_id == MEMBER_ID).one()
        assert fav.workspace_id == workspace.id

    def test_approve_keeps_existing_favorite(self, db: Session) -> None:
        ward_a = make_workspace(db, OWNER_ID, "Ward A")
        ward_b = make_workspace(db, OWNER_ID, "Ward B")
        first = enrollment_service.request_enrollment(db, ward_a.id, MEMBER_ID)
        enrollment_service.approve_enrollment_request(db, first.id, OWNER_ID)
        second = enrollment_service.request_enrollment(db, ward_b.id, MEMBER_ID)
        enrollment_service.approve_enrollment_request(db, second.id, OWNER_ID)

        fav = db.query(UserFavorite).filter(UserFavorite.user_id == MEMBER_ID).one()
        assert fav.workspace_id == ward_a.id

    def test_approve_is_idempotent_when_already_enrolled(self, db: Session) -> None:
        workspace = make_workspace(db, OWNER_ID)
        request = enrollment_service.request_enrollment(db, workspace.id, MEMBER_ID)
        existing = enroll(db, workspace, MEMBER_ID)

        enrollment = enrollment_service.approve_enrollment_request(db, request.id, OWNER_ID)

        assert enrollment.id == existing.id
        assert _enrollments(db, workspace.id, MEMBER_ID) == 1
        assert db.get(EnrollmentRequest, request.id).status == "approved"

    def test_approve_by_non_owner_forbidden(self, db: Session) -> None:
        workspace = make_workspace(db, OWNER_ID)
        request = enrollment_service.request_enrollment(db, workspace.id, MEMBER_ID)
        with pytest.raises(ForbiddenError):
            enrollment_service.approve_enrollment_request(db, request.id, OUTSIDER_ID)

    def test_approve_missing_request_not_found(self, db: Session) -> None:
        with pytest.raises(NotFoundError):
            enrollment_service.approve_enrollment_request(db, uuid.uuid4(), OWNER_ID)

    def test_reject_is_terminal(self, db: Session) -> None:
        workspace = make_workspace(db, OWNER_ID)
        request = enrollment_service.request_enrollment(db, workspace.id, MEMBER_ID)
        enrollment_service.reject_enrollment_request(db, request.id, OWNER_ID)

        assert db.get(EnrollmentRequest, request.id).status == "rejected"
        with pytest.raises(BadRequestError):
            enrollment_service.approve_enrollment_request(db, request.id, OWNER_ID)
        assert _enrollments(db, workspace.id, MEMBER_ID) == 0

    def test_rejected_user_may_request_again(self, db: Session) -> None:
        workspace = make_workspace(db, OWNER_ID)
        request = enrollment_service.request_enrollment(db, workspace.id, MEMBER_ID)
        enrollment_service.reject_enrollment_request(db, request.id, OWNER_ID)

        again = enrollment_service.request_enrollment(db, workspace.id, MEMBER_ID)
        assert again.status == "pending"


class TestListings:
    def test_pending_requests_oldest_first_with_email(self, db: Session, verifier) -> None:
        workspace = make_workspace(db, OWNER_ID)
        enrollment_service.request_enrollment(db, workspace.id, MEMBER_ID)
        enrollment_service.request_enrollment(db, workspace.id, OUTSIDER_ID)

        items = enrollment_service.get_pending_requests(db, workspace.id, OWNER_ID, verifier)
        assert [i.user_id for i in items] == [MEMBER_ID, OUTSIDER_ID]
        assert items[0].email == MEMBER_EMAIL

    def test_pending_requests_owner_only(self, db: Session, verifier) -> None:
        workspace = make_workspace(db, OWNER_ID)
        with pytest.raises(ForbiddenError):
            enrollment_service.get_pending_requests(db, workspace.id, MEMBER_ID, verifier)

    def test_user_request_status(self, db: Session) -> None:
        workspace = make_workspace(db, OWNER_ID)
        assert enrollment_service.get_user_enrollment_request(db, workspace.id, MEMBER_ID) is None
        enrollment_service.request_enrollment(db, workspace.id, MEMBER_ID)
        status = enrollment_service.get_user_enrollment_request(db, workspace.id, MEMBER_ID)
        assert status.status == "pending"

    def test_user_pending_requests_include_workspace_name(self, db: Session) -> None:
        workspace = make_workspace(db, OWNER_ID, "Ward A")
        enrollment_service.request_enrollment(db, workspace.id, MEMBER_ID)
        items = enrollment_service.get_user_pending_requests(db, MEMBER_ID)
        assert [(i.workspace_name, i.status) for i in items] == [("Ward A", "pending")]

    def test_enrolled_workspaces_newest_first(self, db: Session) -> None:
        ward_a = make_workspace(db, OWNER_ID, "Ward A")
        ward_b = make_workspace(db, OWNER_ID, "Ward B")
        enroll(db, ward_a, MEMBER_ID, minutes=0)
        enroll(db, ward_b, MEMBER_ID, minutes=10)
        names = [w.name for w in enrollment_service.get_enrolled_workspaces(db, MEMBER_ID)]
        assert names == ["Ward B", "Ward A"]


class TestLeaving:
    def test_unenroll_clears_history_for_clean_rerequest(self, db: Session) -> None:
        workspace = make_workspace(db, OWNER_ID)
        request = enrollment_service.request_enrollment(db, workspace.id, MEMBER_ID)
        enrollment_service.approve_enrollment_request(db, request.id, OWNER_ID)

        enrollment_service.unenroll_from_workspace(db, workspace.id, MEMBER_ID)

        assert _enrollments(db, workspace.id, MEMBER_ID) == 0
        assert count_requests(db, workspace.id, MEMBER_ID) == 0
        assert enrollment_service.get_user_enrollment_request(db, workspace.id, MEMBER_ID) is None
        again = enrollment_service.request_enrollment(db, workspace.id, MEMBER_ID)
        assert again.status == "pending"

    def test_unenroll_when_not_enrolled(self, db: Session) -> None:
        workspace = make_workspace(db, OWNER_ID)
        with pytest.raises(NotFoundError):
            enrollment_service.unenroll_from_workspace(db, workspace.id, MEMBER_ID)

    def test_owner_removes_member(self, db: Session) -> None:
        workspace = make_workspace(db, OWNER_ID)
        enroll(db, workspace, MEMBER_ID)
        db.add(EnrollmentRequest(workspace_id=workspace.id, user_id=MEMBER_ID, status="approved"))
        db.commit()

        enrollment_service.remove_user_from_workspace(db, workspace.id, MEMBER_ID, OWNER_ID)

        assert _enrollments(db, workspace.id, MEMBER_ID) == 0
        assert count_requests(db, workspace.id, MEMBER_ID) == 0

    def test_owner_cannot_remove_self(self, db: Session) -> None:
        workspace = make_workspace(db, OWNER_ID)
        enroll(db, workspace, OWNER_ID)
        with pytest.raises(BadRequestError, match="unenroll"):
            enrollment_service.remove_user_from_workspace(db, workspace.id, OWNER_ID, OWNER_ID)

    def test_non_owner_cannot_remove(self, db: Session) -> None:
        workspace = make_workspace(db, OWNER_ID)
        enroll(db, workspace, MEMBER_ID)
        with pytest.raises(ForbiddenError):
            enrollment_service.remove_user_from_workspace(db, workspace.id, MEMBER_ID, OUTSIDER_ID)

    def test_remove_non_member_not_found(self, db: Session) -> None:
        workspace = make_workspace(db, OWNER_ID)
        with pytest.raises(NotFoundError):
            enrollment_service.remove_user_from_workspace(db, workspace.id, MEMBER_ID, OWNER_ID)

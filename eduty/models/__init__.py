"""SQLAlchemy models."""

from eduty.models.enrollment import Enrollment
from eduty.models.enrollment_request import EnrollmentRequest, EnrollmentRequestStatus
from eduty.models.invitation import Invitation, InvitationStatus
from eduty.models.leave_request import LeaveRequest, LeaveRequestStatus
from eduty.models.roster import Roster, RosterStatus
from eduty.models.roster_assignment import RosterAssignment
from eduty.models.user_favorite import UserFavorite
from eduty.models.workspace import Workspace

__all__ = [
    "Enrollment",
    "EnrollmentRequest",
    "EnrollmentRequestStatus",
    "Invitation",
    "InvitationStatus",
    "LeaveRequest",
    "LeaveRequestStatus",
    "Roster",
    "RosterAssignment",
    "RosterStatus",
    "UserFavorite",
    "Workspace",
]

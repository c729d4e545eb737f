"""Workspace API routes: CRUD, search, favorites, enrollment and members.

Literal paths (``search``, ``enrolled``, ``favorite``...) are registered
before ``/{workspace_id}`` so they are not captured by it.
"""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from eduty.api.deps import get_db, get_identity_verifier, require_auth
from eduty.models.enrollment import Enrollment
from eduty.schemas.common import MessageResponse
from eduty.schemas.enrollment import (
    EnrollmentRead,
    EnrollmentRequestRead,
    EnrollRequest,
    MyPendingRequestItem,
    PendingRequestItem,
    RequestStatusRead,
)
from eduty.schemas.workspace import (
    EnrolledUser,
    FavoriteRead,
    WorkspaceCreate,
    WorkspaceDetails,
    WorkspaceRead,
    WorkspaceSearchResult,
    WorkspaceUpdate,
)
from eduty.services import enrollment_service, favorite_service, workspace_service
from eduty.services.identity import Identity, IdentityVerifier

router = APIRouter()


@router.post("", response_model=WorkspaceRead, status_code=201)
def api_create_workspace(
    data: WorkspaceCreate,
    db: Session = Depends(get_db),
    user: Identity = Depends(require_auth),
) -> WorkspaceRead:
    """Create a workspace owned by the caller."""
    workspace = workspace_service.create_workspace(db, data.name, user.id)
    return WorkspaceRead.model_validate(workspace)


@router.get("", response_model=list[WorkspaceRead])
def api_list_owned_workspaces(
    db: Session = Depends(get_db),
    user: Identity = Depends(require_auth),
) -> list[WorkspaceRead]:
    """Workspaces owned by the caller, newest first."""
    return [
        WorkspaceRead.model_validate(w)
        for w in workspace_service.list_owned_workspaces(db, user.id)
    ]


@router.get("/search", response_model=list[WorkspaceSearchResult])
def api_search_workspaces(
    query: str = Query(..., min_length=1),
    db: Session = Depends(get_db),
    user: Identity = Depends(require_auth),
) -> list[WorkspaceSearchResult]:
    """Search by workspace id or name substring."""
    return workspace_service.search_workspaces_for_user(db, query, user.id)


@router.get("/enrolled", response_model=list[WorkspaceRead])
def api_enrolled_workspaces(
    db: Session = Depends(get_db),
    user: Identity = Depends(require_auth),
) -> list[WorkspaceRead]:
    return [
        WorkspaceRead.model_validate(w)
        for w in enrollment_service.get_enrolled_workspaces(db, user.id)
    ]


@router.post("/favorite/{workspace_id}", response_model=FavoriteRead, status_code=201)
def api_set_favorite(
    workspace_id: UUID,
    db: Session = Depends(get_db),
    user: Identity = Depends(require_auth),
) -> FavoriteRead:
    favorite = favorite_service.set_favorite_workspace(db, workspace_id, user.id)
    return FavoriteRead(
        id=favorite.id,
        workspace_id=favorite.workspace_id,
        workspace_name=favorite.workspace.name,
        created_at=favorite.created_at,
        updated_at=favorite.updated_at,
    )


@router.get("/favorite", response_model=FavoriteRead | None)
def api_get_favorite(
    db: Session = Depends(get_db),
    user: Identity = Depends(require_auth),
) -> FavoriteRead | None:
    """The caller's favorite workspace, or null."""
    return favorite_service.get_favorite_workspace(db, user.id)


@router.delete("/favorite", response_model=MessageResponse)
def api_remove_favorite(
    db: Session = Depends(get_db),
    user: Identity = Depends(require_auth),
) -> MessageResponse:
    favorite_service.remove_favorite_workspace(db, user.id)
    return MessageResponse(message="Favorite removed successfully")


@router.get("/my-requests", response_model=list[MyPendingRequestItem])
def api_my_pending_requests(
    db: Session = Depends(get_db),
    user: Identity = Depends(require_auth),
) -> list[MyPendingRequestItem]:
    return enrollment_service.get_user_pending_requests(db, user.id)


@router.get("/details/{workspace_id}", response_model=WorkspaceDetails)
def api_workspace_details(
    workspace_id: UUID,
    db: Session = Depends(get_db),
    user: Identity = Depends(require_auth),
) -> WorkspaceDetails:
    """Workspace with the caller's owner/enrollment status. Any authenticated user."""
    return workspace_service.get_workspace_details(db, workspace_id, user.id)


@router.post(
    "/enroll",
    response_model=EnrollmentRead | EnrollmentRequestRead,
    status_code=201,
)
def api_request_enrollment(
    data: EnrollRequest,
    db: Session = Depends(get_db),
    user: Identity = Depends(require_auth),
) -> EnrollmentRead | EnrollmentRequestRead:
    """Request to join; the owner is enrolled immediately."""
    result = enrollment_service.request_enrollment(db, data.workspace_id, user.id)
    if isinstance(result, Enrollment):
        return EnrollmentRead.model_validate(result)
    return EnrollmentRequestRead.model_validate(result)


@router.delete("/enroll/{workspace_id}", response_model=MessageResponse)
def api_unenroll(
    workspace_id: UUID,
    db: Session = Depends(get_db),
    user: Identity = Depends(require_auth),
) -> MessageResponse:
    enrollment_service.unenroll_from_workspace(db, workspace_id, user.id)
    return MessageResponse(message="Successfully unenrolled from workspace")


@router.post("/requests/{request_id}/approve", response_model=EnrollmentRead)
def api_approve_request(
    request_id: UUID,
    db: Session = Depends(get_db),
    user: Identity = Depends(require_auth),
) -> EnrollmentRead:
    enrollment = enrollment_service.approve_enrollment_request(db, request_id, user.id)
    return EnrollmentRead.model_validate(enrollment)


@router.post("/requests/{request_id}/reject", response_model=MessageResponse)
def api_reject_request(
    request_id: UUID,
    db: Session = Depends(get_db),
    user: Identity = Depends(require_auth),
) -> MessageResponse:
    enrollment_service.reject_enrollment_request(db, request_id, user.id)
    return MessageResponse(message="Enrollment request rejected successfully")


@router.get("/{workspace_id}/request-status", response_model=RequestStatusRead | None)
def api_request_status(
    workspace_id: UUID,
    db: Session = Depends(get_db),
    user: Identity = Depends(require_auth),
) -> RequestStatusRead | None:
    """The caller's latest enrollment request for the workspace, or null."""
    return enrollment_service.get_user_enrollment_request(db, workspace_id, user.id)


@router.get("/{workspace_id}/requests", response_model=list[PendingRequestItem])
def api_pending_requests(
    workspace_id: UUID,
    db: Session = Depends(get_db),
    user: Identity = Depends(require_auth),
    verifier: IdentityVerifier = Depends(get_identity_verifier),
) -> list[PendingRequestItem]:
    return enrollment_service.get_pending_requests(db, workspace_id, user.id, verifier)


@router.get("/{workspace_id}/users", response_model=list[EnrolledUser])
def api_enrolled_users(
    workspace_id: UUID,
    db: Session = Depends(get_db),
    user: Identity = Depends(require_auth),
    verifier: IdentityVerifier = Depends(get_identity_verifier),
) -> list[EnrolledUser]:
    return workspace_service.get_enrolled_users(db, workspace_id, user.id, verifier)


@router.delete("/{workspace_id}/users/{user_id}", response_model=MessageResponse)
def api_remove_user(
    workspace_id: UUID,
    user_id: UUID,
    db: Session = Depends(get_db),
    user: Identity = Depends(require_auth),
) -> MessageResponse:
    enrollment_service.remove_user_from_workspace(db, workspace_id, user_id, user.id)
    return MessageResponse(message="User removed successfully")


@router.get("/{workspace_id}", response_model=WorkspaceRead)
def api_get_workspace(
    workspace_id: UUID,
    db: Session = Depends(get_db),
    user: Identity = Depends(require_auth),
) -> WorkspaceRead:
    """Owner-only fetch."""
    return WorkspaceRead.model_validate(workspace_service.get_workspace(db, workspace_id, user.id))


@router.patch("/{workspace_id}", response_model=WorkspaceRead)
def api_update_workspace(
    workspace_id: UUID,
    data: WorkspaceUpdate,
    db: Session = Depends(get_db),
    user: Identity = Depends(require_auth),
) -> WorkspaceRead:
    workspace = workspace_service.update_workspace(db, workspace_id, user.id, name=data.name)
    return WorkspaceRead.model_validate(workspace)


@router.delete("/{workspace_id}", response_model=MessageResponse)
def api_delete_workspace(
    workspace_id: UUID,
    db: Session = Depends(get_db),
    user: Identity = Depends(require_auth),
) -> MessageResponse:
    workspace_service.delete_workspace(db, workspace_id, user.id)
    return MessageResponse(message="Workspace deleted successfully")

"""Authentication API routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from eduty.api.deps import require_auth
from eduty.schemas.auth import MeResponse, UserProfile
from eduty.services.identity import Identity

router = APIRouter()


@router.get("/me", response_model=MeResponse)
def me(current_user: Identity = Depends(require_auth)) -> MeResponse:
    """Return the authenticated caller's identity profile."""
    return MeResponse(user=UserProfile.model_validate(current_user))

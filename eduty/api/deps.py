"""Shared FastAPI dependencies for API routes."""

from __future__ import annotations

import logging

from fastapi import Depends, Header, HTTPException, status

from eduty.db.session import get_db  # re-export
from eduty.services.identity import (
    MIN_TOKEN_LENGTH,
    Identity,
    IdentityVerifier,
    get_identity_verifier,
)

__all__ = [
    "get_db",
    "get_identity_verifier",
    "require_auth",
]

logger = logging.getLogger(__name__)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def require_auth(
    authorization: str | None = Header(None),
    verifier: IdentityVerifier = Depends(get_identity_verifier),
) -> Identity:
    """Dependency that resolves ``Authorization: Bearer <token>`` to an Identity.

    Missing, malformed or unverifiable tokens are rejected with 401.
    """
    if not authorization:
        raise _unauthorized("Authorization header is missing")

    scheme, _, token = authorization.partition(" ")
    if scheme != "Bearer":
        raise _unauthorized("Invalid authorization header format. Expected: Bearer <token>")

    token = token.strip()
    if len(token) < MIN_TOKEN_LENGTH:
        raise _unauthorized("Invalid token format")

    identity = verifier.verify_token(token)
    if identity is None:
        raise _unauthorized("Invalid or expired token")
    return identity

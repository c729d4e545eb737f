"""Favorite workspace management.

A user has at most one favorite. It is set automatically on the first
enrollment and moved to the next-oldest enrollment when the favorited
workspace is left. The ``auto_*``/``shift_*`` helpers only stage changes;
callers commit as part of their own unit of work.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from uuid import UUID

from sqlalchemy.orm import Session

from eduty.models.enrollment import Enrollment
from eduty.models.user_favorite import UserFavorite
from eduty.schemas.workspace import FavoriteRead
from eduty.services.errors import ForbiddenError
from eduty.services.workspace_access import commit_or_conflict, flush_or_conflict, get_enrollment

logger = logging.getLogger(__name__)


def _get_favorite(db: Session, user_id: UUID) -> UserFavorite | None:
    return db.query(UserFavorite).filter(UserFavorite.user_id == user_id).first()


def _oldest_enrollment(
    db: Session, user_id: UUID, exclude_workspace_id: UUID | None = None
) -> Enrollment | None:
    query = db.query(Enrollment).filter(Enrollment.user_id == user_id)
    if exclude_workspace_id is not None:
        query = query.filter(Enrollment.workspace_id != exclude_workspace_id)
    return query.order_by(Enrollment.enrolled_at.asc()).first()


def set_favorite_workspace(db: Session, workspace_id: UUID, user_id: UUID) -> UserFavorite:
    """Pin ``workspace_id`` as the user's favorite. The user must be enrolled in it."""
    if get_enrollment(db, workspace_id, user_id) is None:
        raise ForbiddenError("You must be enrolled in a workspace to favorite it")

    favorite = _get_favorite(db, user_id)
    if favorite:
        favorite.workspace_id = workspace_id
        favorite.updated_at = datetime.now(UTC)
    else:
        favorite = UserFavorite(user_id=user_id, workspace_id=workspace_id)
        db.add(favorite)
    commit_or_conflict(db, "Favorite workspace already set")
    db.refresh(favorite)
    logger.info("User %s set favorite workspace to %s", user_id, workspace_id)
    return favorite


def get_favorite_workspace(db: Session, user_id: UUID) -> FavoriteRead | None:
    """Return the favorite, dropping it if the user is no longer enrolled there."""
    favorite = _get_favorite(db, user_id)
    if favorite is None:
        return None

    if get_enrollment(db, favorite.workspace_id, user_id) is None:
        db.delete(favorite)
        db.commit()
        logger.info("Removed stale favorite for user %s", user_id)
        return None

    return FavoriteRead(
        id=favorite.id,
        workspace_id=favorite.workspace_id,
        workspace_name=favorite.workspace.name,
        created_at=favorite.created_at,
        updated_at=favorite.updated_at,
    )


def remove_favorite_workspace(db: Session, user_id: UUID) -> None:
    favorite = _get_favorite(db, user_id)
    if favorite:
        db.delete(favorite)
        db.commit()
        logger.info("User %s removed favorite workspace", user_id)


def auto_set_first_favorite(db: Session, user_id: UUID) -> None:
    """Favorite the user's oldest enrollment if they have no favorite yet."""
    if _get_favorite(db, user_id) is not None:
        return

    first = _oldest_enrollment(db, user_id)
    if first is not None:
        db.add(UserFavorite(user_id=user_id, workspace_id=first.workspace_id))
        flush_or_conflict(db, "Favorite workspace already set")
        logger.info(
            "Auto-set first favorite for user %s to workspace %s", user_id, first.workspace_id
        )


def shift_favorite_to_next(db: Session, user_id: UUID, removed_workspace_id: UUID) -> None:
    """Re-target a favorite pointing at ``removed_workspace_id``, or delete it if none remain."""
    favorite = _get_favorite(db, user_id)
    if favorite is None or favorite.workspace_id != removed_workspace_id:
        return

    next_enrollment = _oldest_enrollment(db, user_id, exclude_workspace_id=removed_workspace_id)
    if next_enrollment is not None:
        favorite.workspace_id = next_enrollment.workspace_id
        favorite.updated_at = datetime.now(UTC)
        db.expire(favorite, ["workspace"])
        logger.info(
            "Shifted favorite for user %s to workspace %s", user_id, next_enrollment.workspace_id
        )
    else:
        db.delete(favorite)
        logger.info("Removed favorite for user %s (no enrollments left)", user_id)
    db.flush()

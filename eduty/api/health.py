"""Health checks. Public; no authentication."""

from __future__ import annotations

import logging
from datetime import UTC, datetime

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from eduty import __version__
from eduty.db.session import check_db_connection

logger = logging.getLogger(__name__)

router = APIRouter()


def _database_check() -> dict | JSONResponse:
    try:
        check_db_connection()
    except Exception as exc:
        logger.error("Health check failed: database unreachable: %s", exc)
        return JSONResponse(
            status_code=503,
            content={
                "status": "unhealthy",
                "version": __version__,
                "database": "disconnected",
            },
        )
    return {
        "status": "ok",
        "version": __version__,
        "database": "connected",
    }


@router.get("")
def health() -> dict:
    """Confirms DB connectivity."""
    return _database_check()


@router.get("/liveness")
def liveness() -> dict:
    """Process is up; does not touch the database."""
    return {"status": "ok", "timestamp": datetime.now(UTC).isoformat()}


@router.get("/readiness")
def readiness() -> dict:
    """Ready to serve traffic once the database answers."""
    return _database_check()

"""
EDuty FastAPI application entry point.

Workspaces → enrollment / invitations → rosters → leave requests
"""

import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from eduty import __version__
from eduty.config import get_settings
from eduty.db.session import check_db_connection, engine

logging.basicConfig(
    level=logging.DEBUG if get_settings().debug else logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: startup and shutdown."""
    settings = get_settings()
    logger.info("EDuty starting (environment=%s)", settings.environment)
    try:
        try:
            check_db_connection()
            logger.info("Database connection verified")
        except Exception as e:
            logger.critical("Database unreachable: %s", e)
            raise
        yield
    finally:
        logger.info("EDuty shutting down")
        engine.dispose()
        logger.info("Database connection pool closed")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()
    app = FastAPI(
        title=settings.app_name,
        version=__version__,
        lifespan=lifespan,
        docs_url=f"{API_PREFIX}/docs" if not settings.is_production() else None,
        redoc_url=None,
    )

    if settings.is_production():
        origins = settings.allowed_origins
    else:
        origins = ["*"]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=origins != ["*"],
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "Accept"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        if request.url.path.startswith(f"{API_PREFIX}/health"):
            return await call_next(request)
        started = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception as exc:
            elapsed_ms = (time.perf_counter() - started) * 1000
            logger.error(
                "%s %s 500 - %.0fms - %s", request.method, request.url.path, elapsed_ms, exc
            )
            raise
        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info(
            "%s %s %s - %.0fms",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
        )
        return response

    from eduty.api.error_handlers import register_exception_handlers

    register_exception_handlers(app)

    # Mount API routes
    from eduty.api.auth import router as auth_router
    from eduty.api.health import router as health_router
    from eduty.api.invitations import router as invitations_router
    from eduty.api.leave_requests import router as leave_requests_router
    from eduty.api.rosters import router as rosters_router
    from eduty.api.workspaces import router as workspaces_router

    app.include_router(health_router, prefix=f"{API_PREFIX}/health", tags=["health"])
    app.include_router(auth_router, prefix=f"{API_PREFIX}/auth", tags=["auth"])
    # Nested routers first: workspaces ends with the catch-all /{workspace_id}
    app.include_router(invitations_router, prefix=f"{API_PREFIX}/workspaces", tags=["invitations"])
    app.include_router(rosters_router, prefix=f"{API_PREFIX}/workspaces", tags=["rosters"])
    app.include_router(
        leave_requests_router, prefix=f"{API_PREFIX}/workspaces", tags=["leave-requests"]
    )
    app.include_router(workspaces_router, prefix=f"{API_PREFIX}/workspaces", tags=["workspaces"])

    @app.get(API_PREFIX)
    def api_info() -> dict:
        """API info and entry points."""
        return {
            "name": settings.app_name,
            "version": __version__,
            "environment": settings.environment,
            "endpoints": {
                "health": f"{API_PREFIX}/health",
                "auth": f"{API_PREFIX}/auth",
                "workspaces": f"{API_PREFIX}/workspaces",
                "docs": app.docs_url,
            },
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("eduty.main:app", host="0.0.0.0", port=get_settings().port)

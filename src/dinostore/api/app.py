"""FastAPI application factory."""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from dinostore.api.routes import router as dinos_router
from dinostore.bootstrap import build_repository
from dinostore.config import Settings, get_settings
from dinostore.repository.exceptions import (
    DatabaseError,
    DatabaseUnavailableError,
    EntityAlreadyExistsError,
)

if TYPE_CHECKING:
    from dinostore.models import Dino
    from dinostore.repository import Repository

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Build the repository at startup unless one was injected, close it at shutdown.

    An injected repository belongs to the caller and is left open.
    """
    owned = getattr(app.state, "repository", None) is None
    if owned:
        app.state.repository = await build_repository(app.state.settings)
    logger.info("Dino service started with %s backend", type(app.state.repository).__name__)
    try:
        yield
    finally:
        if owned:
            await app.state.repository.close()
            app.state.repository = None
        logger.info("Dino service stopped")


async def conflict_handler(request: Request, exc: Exception) -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_409_CONFLICT, content={"detail": str(exc)})


async def unavailable_handler(request: Request, exc: Exception) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE, content={"detail": str(exc)}
    )


async def database_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("Database error on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content={"detail": str(exc)}
    )


def create_app(
    settings: Settings | None = None,
    repository: Repository[Dino, Any] | None = None,
) -> FastAPI:
    """Create the dino service application.

    Args:
        settings: Service settings; read from the environment when omitted.
        repository: A ready repository to serve. When omitted, the lifespan builds
            one from the settings at startup and closes it at shutdown.

    Returns:
        The configured FastAPI application.
    """
    settings = settings or get_settings()

    app = FastAPI(title="dinostore", version="0.1.0", lifespan=lifespan)
    app.state.settings = settings
    app.state.repository = repository

    app.add_exception_handler(EntityAlreadyExistsError, conflict_handler)
    app.add_exception_handler(DatabaseUnavailableError, unavailable_handler)
    app.add_exception_handler(DatabaseError, database_error_handler)

    app.include_router(dinos_router)

    @app.get("/health", tags=["health"], summary="Liveness check")
    async def health() -> dict[str, str]:
        return {"status": "healthy", "backend": settings.backend}

    return app

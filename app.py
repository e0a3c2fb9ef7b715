"""
app.py — FastAPI application factory and startup lifecycle.

This is the ASGI application object imported by uvicorn.
It wires the repository, token codec, authorization guard and services,
registers routers and error handlers, and runs startup initialization.

Usage (via launcher):
    python main.py

Usage (direct uvicorn):
    JWT_SECRET=... uvicorn app:app --reload
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from datetime import datetime
from typing import Callable, Optional

from fastapi import FastAPI

from spacebook.controllers.auth_controller import router as auth_router
from spacebook.controllers.booking_controller import router as booking_router
from spacebook.controllers.company_controller import router as directory_router
from spacebook.controllers.envelope import install_error_handlers
from spacebook.controllers.space_controller import router as space_router
from spacebook.repository.data_repository import DataRepository
from spacebook.services.auth_service import AuthService
from spacebook.services.authorization_service import AuthorizationGuard
from spacebook.services.booking_service import ReservationService
from spacebook.services.directory_service import DirectoryService
from spacebook.services.space_service import SpaceService
from spacebook.services.token_service import TokenCodec
from spacebook.services.usage_service import UsageReportService
from spacebook.utils.config import Settings, get_settings
from spacebook.utils.logger import get_logger


logger = get_logger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    clock: Optional[Callable[[], datetime]] = None,
) -> FastAPI:
    """
    Build and wire the FastAPI application.

    Every dependency is constructed here and exposed through app.state.
    Raises SigningSecretNotConfiguredError when JWT_SECRET is absent, so the
    process never starts without a signing secret.
    """
    settings = settings or get_settings()

    # --- Repository (SQLite connection factory) ---
    repository = DataRepository(settings)

    # --- Security primitives ---
    token_codec = TokenCodec(settings=settings, clock=clock)
    guard = AuthorizationGuard(repository=repository, settings=settings)

    # --- Services ---
    auth_service = AuthService(repository=repository, token_codec=token_codec, settings=settings)
    reservation_service = ReservationService(
        repository=repository,
        guard=guard,
        settings=settings,
        clock=clock,
    )
    directory_service = DirectoryService(
        repository=repository,
        guard=guard,
        auth_service=auth_service,
        settings=settings,
    )
    space_service = SpaceService(repository=repository, guard=guard, settings=settings)
    usage_service = UsageReportService(repository=repository, guard=guard, settings=settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Run startup initialization before accepting requests."""
        _startup(app)
        yield

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        lifespan=lifespan,
    )

    # --- Routers ---
    app.include_router(auth_router)
    app.include_router(booking_router)
    app.include_router(space_router)
    app.include_router(directory_router)
    install_error_handlers(app)

    # --- Inject services into app.state for dependency resolution ---
    app.state.repository = repository
    app.state.token_codec = token_codec
    app.state.auth_service = auth_service
    app.state.reservation_service = reservation_service
    app.state.directory_service = directory_service
    app.state.space_service = space_service
    app.state.usage_service = usage_service

    return app


def _startup(app: FastAPI) -> None:
    """
    Idempotent startup sequence. Safe to re-run on server restarts.

    The schema must exist before the administrator is seeded.
    """
    repository: DataRepository = app.state.repository
    auth_service: AuthService = app.state.auth_service

    logger.info("Startup: initializing database schema at %s", repository.database_path)
    repository.initialize_database()

    logger.info("Startup: bootstrapping administrator account")
    auth_service.bootstrap_admin()

    logger.info("Startup complete, accepting requests")


# Module-level app object for uvicorn
app = create_app()

"""Boat Rental Admin - FastAPI Application Factory."""

import asyncio
import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from boatrental.api import api_router, pages_router, public_router
from boatrental.api.health import router as health_router
from boatrental.core import async_session_maker, create_tables, settings, setup_logging
from boatrental.middleware import (
    SecurityHeadersMiddleware,
    SessionRejected,
    session_rejected_handler,
)
from boatrental.middleware.session_guard import revoked_sessions

logger = logging.getLogger(__name__)


def task_done_callback(task: asyncio.Task[None]) -> None:
    """Log unhandled exceptions from background tasks."""
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.error(f"Background task {task.get_name()} failed: {exc}")


async def _token_blacklist_cleanup_loop() -> None:
    """Periodically remove expired entries from the token blacklist."""
    from boatrental.api.auth import cleanup_expired_blacklist_entries

    while True:
        await asyncio.sleep(300)  # Every 5 minutes
        try:
            async with async_session_maker() as db:
                removed = await cleanup_expired_blacklist_entries(db)
                await db.commit()
            revoked_sessions.purge_expired()
            if removed > 0:
                logger.info(f"Cleaned up {removed} expired token blacklist entries")
        except Exception:
            logger.exception("Error cleaning up token blacklist")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown."""
    setup_logging(
        level=settings.log_level,
        format_type="structured" if not settings.debug else "dev",
    )
    logger.info(f"Starting {settings.app_name} v{settings.app_version}")

    for warning in settings.check_security_configuration():
        logger.warning(f"SECURITY: {warning}")

    if settings.auto_create_tables:
        await create_tables()
        logger.info("Database tables created")

    tasks: list[asyncio.Task] = []

    if settings.session_revocation_enabled:
        from boatrental.api.auth import load_blacklist

        async with async_session_maker() as db:
            loaded = await load_blacklist(db)
        logger.info(f"Loaded {loaded} revoked sessions")

        blacklist_task = asyncio.create_task(_token_blacklist_cleanup_loop())
        blacklist_task.add_done_callback(task_done_callback)
        tasks.append(blacklist_task)

    yield

    # Shutdown
    logger.info("Shutting down...")
    for task in tasks:
        task.cancel()
    await asyncio.gather(*tasks, return_exceptions=True)


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title=settings.app_name,
        description="Administration panel for a boat and jetski rental business",
        version=settings.app_version,
        lifespan=lifespan,
        # The schema would list every protected route; only expose it while developing
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        openapi_url="/openapi.json" if settings.debug else None,
    )

    # Session guards reject by raising; this turns that into a redirect or 401
    app.add_exception_handler(SessionRejected, session_rejected_handler)

    app.add_middleware(SecurityHeadersMiddleware)

    # CORS middleware - outermost (added last in Starlette LIFO order)
    if settings.cors_origins_list:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.cors_origins_list,
            allow_credentials=True,
            allow_methods=["GET", "POST", "OPTIONS"],
            allow_headers=["Authorization", "Content-Type", "Accept"],
        )

    # Include routers
    app.include_router(health_router)
    app.include_router(public_router)
    app.include_router(api_router)
    app.include_router(pages_router)

    return app


# Application instance
app = create_app()

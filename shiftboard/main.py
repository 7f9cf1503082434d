# shiftboard/main.py
"""
FastAPI application entry point.
"""

import os
import sys
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from shiftboard.core import config
from shiftboard.core.logging_config import get_logger, setup_logging
from shiftboard.core.repository import ShiftRepository, build_repository
from shiftboard.core.request_logging import RequestLoggingMiddleware
from shiftboard.core.sentry_config import init_sentry
from shiftboard.core.sessions import DashboardSessions
from shiftboard.core.time_utils import NowFn, utc_now
from shiftboard.database.database import create_tables
from shiftboard.routes.dashboard import router as dashboard_router
from shiftboard.routes.notifications import router as notifications_router

# Setup logging FIRST (before anything else logs)
setup_logging()
logger = get_logger(__name__)

sentry_enabled = init_sentry()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    logger.info(
        "Application starting up",
        extra={
            "extra_fields": {
                "production": config.IS_PRODUCTION,
                "shift_source": config.SHIFT_SOURCE,
                "timezone": config.TIMEZONE.key,
                "python_version": sys.version,
            }
        },
    )

    if config.SHIFT_SOURCE == "database":
        try:
            create_tables()
            logger.info("Shift table created/verified")
        except Exception as e:
            logger.error(f"Failed to prepare shift table: {e}", exc_info=True)
            raise

    yield

    logger.info("Application shutting down")


def cors_settings() -> dict:
    """CORS options: strict origin list in production, permissive in development."""
    origins = [origin.strip() for origin in os.getenv("CORS_ORIGINS", "").split(",") if origin.strip()]

    if config.IS_PRODUCTION:
        if not origins:
            logger.warning(
                "Production mode but no CORS_ORIGINS set. CORS will block all cross-origin requests."
            )
        logger.info(f"CORS configured for production with origins: {origins}")
        return {
            "allow_origins": origins,
            "allow_credentials": True,
            "allow_methods": ["GET", "POST", "DELETE"],
            "allow_headers": ["*"],
        }

    logger.info("CORS configured for development (permissive)")
    return {
        "allow_origins": ["*"],
        "allow_credentials": False,
        "allow_methods": ["*"],
        "allow_headers": ["*"],
    }


def create_app(repository: ShiftRepository | None = None, now_fn: NowFn = utc_now) -> FastAPI:
    """Build the application. Tests pass their own repository and clock."""
    app = FastAPI(
        title="Shiftboard",
        description="Employee shift dashboard: upcoming shifts, statistics and notification opt-in",
        version=config.VERSION,
        lifespan=lifespan,
    )

    app.state.now_fn = now_fn
    app.state.sessions = DashboardSessions(
        repository=repository or build_repository(now_fn=now_fn),
        now_fn=now_fn,
        tz=config.TIMEZONE,
        limit=config.UPCOMING_LIMIT,
        idle_timeout=config.SESSION_IDLE_TIMEOUT,
    )

    app.add_middleware(CORSMiddleware, expose_headers=["X-Request-ID"], **cors_settings())
    app.add_middleware(RequestLoggingMiddleware)

    app.include_router(dashboard_router)
    app.include_router(notifications_router)

    @app.get("/health", tags=["health"])
    async def health_check():
        """Health check endpoint for monitoring."""
        return {
            "status": "healthy",
            "service": "shiftboard",
            "version": config.VERSION,
            "shift_source": config.SHIFT_SOURCE,
        }

    return app


app = create_app()

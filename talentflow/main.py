"""
Main FastAPI application.

This is the entry point for the API server.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from talentflow.core.config import settings
from talentflow.core.logging import configure_logging
from talentflow.db.session import engine
from talentflow.errors import AppError, app_error_handler, service_error_handler
from talentflow.routers import analytics, candidates, careers, email_templates, health, jobs
from talentflow.services.exceptions import ServiceError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for the FastAPI app.

    Logging is configured on startup; the engine's pool is disposed on
    shutdown.
    """
    configure_logging(settings.LOG_LEVEL)
    logger.info("Starting %s...", settings.APP_NAME)
    if not settings.NOTIFICATIONS_ENABLED:
        logger.warning("Candidate notifications are disabled; emails will only be logged")

    yield

    await engine.dispose()
    logger.info("Shutting down %s...", settings.APP_NAME)


# Create the FastAPI application
app = FastAPI(
    title=settings.APP_NAME,
    description="Backend API for the TalentFlow applicant tracking pipeline",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_exception_handler(AppError, app_error_handler)
app.add_exception_handler(ServiceError, service_error_handler)

# Include routers (API endpoints)
app.include_router(health.router, tags=["Health"])
app.include_router(jobs.router)
app.include_router(careers.router)
app.include_router(candidates.router)
app.include_router(analytics.router)
app.include_router(email_templates.router)

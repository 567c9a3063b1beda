# backend/tutorbook/main.py
from __future__ import annotations

from contextlib import asynccontextmanager
import logging
from typing import AsyncGenerator

from fastapi import APIRouter, FastAPI

from .core.config import is_running_tests, settings
from .errors import register_error_handlers
from .routes import health, prometheus
from .routes.v1 import (
    contracts as contracts_v1,
    reschedule_requests as reschedule_requests_v1,
    sessions as sessions_v1,
)

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

logger = logging.getLogger(__name__)

API_TITLE = "Tutorbook Session Engine API"
API_VERSION = "1.0.0"
API_DESCRIPTION = "Session status, tutor reassignment and reschedule workflow for tutoring contracts."


@asynccontextmanager
async def app_lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Handle application startup/shutdown without deprecated events."""
    logger.info("Tutorbook session engine starting up...")
    logger.info(f"Environment: {settings.environment}")
    logger.info(f"Business timezone: {settings.business_timezone}")
    if is_running_tests():
        logger.info("Running under pytest (test mode active)")
    if not settings.contract_locks_enabled:
        logger.warning("Contract locks are disabled; relying on database row locks only")

    yield

    logger.info("Tutorbook session engine shutting down...")


def create_app() -> FastAPI:
    application = FastAPI(
        title=API_TITLE,
        description=API_DESCRIPTION,
        version=API_VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=app_lifespan,
    )
    register_error_handlers(application)

    # Create API v1 router
    api_v1 = APIRouter(prefix="/api/v1")
    api_v1.include_router(reschedule_requests_v1.router, prefix="/reschedule-requests")
    api_v1.include_router(sessions_v1.router, prefix="/sessions")
    api_v1.include_router(contracts_v1.router, prefix="/contracts")

    application.include_router(api_v1)
    application.include_router(health.router)
    application.include_router(prometheus.router)
    return application


app = create_app()

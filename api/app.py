"""FastAPI application for Vibe Notes."""

from contextlib import asynccontextmanager
from pathlib import Path

import structlog
from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor

from .database import Database
from .errors import register_error_handlers
from .middleware import RouteGuardMiddleware
from .observability import initialize_observability
from .routes import (
    auth_router,
    health_router,
    notes_router,
    tags_router,
    upload_router,
    views_router,
)
from .storage import MEDIA_BASE_URL, MEDIA_ROOT

# Initialize logger
logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Handle startup and shutdown events."""
    # Startup
    logger.info("api_starting")

    # Initialize OpenTelemetry
    initialize_observability()

    # Connect to database
    await Database.connect()
    logger.info("api_started")

    yield

    # Shutdown
    logger.info("api_shutting_down")
    await Database.disconnect()
    logger.info("api_shutdown_complete")


app = FastAPI(
    title="Vibe Notes API",
    description="Personal notes with tags, owned and visible only to their author",
    version="0.1.0",
    lifespan=lifespan,
)

# Instrument FastAPI with OpenTelemetry
FastAPIInstrumentor.instrument_app(app)

register_error_handlers(app)
app.add_middleware(RouteGuardMiddleware)

# Serve uploads ourselves unless they live behind an external URL
if MEDIA_BASE_URL.startswith("/"):
    Path(MEDIA_ROOT).mkdir(parents=True, exist_ok=True)
    app.mount(MEDIA_BASE_URL, StaticFiles(directory=MEDIA_ROOT), name="media")

# Include routers
app.include_router(health_router)
app.include_router(auth_router)
app.include_router(views_router)
app.include_router(notes_router)
app.include_router(tags_router)
app.include_router(upload_router)

"""Tunely API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map TunelyError -> structured JSON responses
    - CORS configured from settings (not hardcoded)
    - Database initialized on startup and disposed on shutdown via lifespan
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from tunely import __version__
from tunely.api.error_handlers import register_error_handlers
from tunely.api.routes import (
    artists, health, queue_items, session_lifecycle, viewer_polls,
)
from tunely.config import get_settings
from tunely.infrastructure.database import init_db
from tunely.infrastructure.observability import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    manager = init_db(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    logger.info("Tunely API started")
    yield
    await manager.dispose()
    logger.info("Tunely API shutting down")


app = FastAPI(title="Tunely API", version=__version__, lifespan=lifespan)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(artists.router)
app.include_router(session_lifecycle.router)
app.include_router(queue_items.router)
app.include_router(viewer_polls.router)

register_error_handlers(app)

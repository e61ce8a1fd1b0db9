"""PayRates API — FastAPI application entry point for the rate store service.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map PayRatesError → structured JSON responses
    - CORS configured from settings (not hardcoded)
    - Database initialized on startup via lifespan context manager
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from payrates import __version__
from payrates.api.error_handlers import register_error_handlers
from payrates.api.routes import health, rates, users
from payrates.config import get_settings
from payrates.infrastructure.database import init_db
from payrates.infrastructure.observability import setup_logging

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
    logger.info("PayRates API started")
    yield
    await manager.dispose()
    logger.info("PayRates API shutting down")


app = FastAPI(
    title="PayRates API", version=__version__, lifespan=lifespan,
)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(users.router)
app.include_router(rates.router)
app.include_router(rates.current_router)

register_error_handlers(app)

"""FastAPI application entry-point for the serverless collector.

Mounts the collection, forecast and health routes.
Run with:  uvicorn pizzint.api.main:app --host 0.0.0.0 --port 8000
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from pizzint import __version__
from pizzint.api.routes import collect, forecast, health
from pizzint.core.config import settings
from pizzint.core.utils.logging_config import configure_logging, get_logger

logger = get_logger("api")


# ---------------------------------------------------------------------------
# Lifespan -- run once at startup / shutdown
# ---------------------------------------------------------------------------
@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Configure logging on startup. Storage is opened per request, not here."""
    configure_logging(json_output=settings.log_json)
    logger.info("api_started", backend=settings.storage_backend.value)
    yield
    logger.info("api_stopped")


# ---------------------------------------------------------------------------
# Application factory
# ---------------------------------------------------------------------------
openapi_tags = [
    {"name": "Health", "description": "Health check endpoints"},
    {"name": "Collector", "description": "Scheduler-triggered collection ticks"},
    {"name": "Forecast", "description": "Hourly / weekday pattern forecasts"},
]

app = FastAPI(
    title="PIZZINT Tracker API",
    version=__version__,
    description="Serverless entry point for the pizza index collector.",
    lifespan=lifespan,
    openapi_tags=openapi_tags,
)

app.include_router(health.router)
app.include_router(collect.router)
app.include_router(forecast.router)

"""Pattern-based forecast for a DC hour / weekday slot (database backend)."""

from fastapi import APIRouter, Depends, HTTPException, Query

from pizzint.api.deps import get_clock, get_settings
from pizzint.collector.time_classifier import classify
from pizzint.core.config import Settings
from pizzint.core.enums import StorageBackend
from pizzint.core.exceptions import PersistenceFailure
from pizzint.core.utils.clock import Clock
from pizzint.storage.database import DatabaseSink

router = APIRouter(tags=["Forecast"])


@router.get("/api/forecast")
async def forecast(
    hour: int | None = Query(None, ge=0, le=23),
    weekday: int | None = Query(None, ge=0, le=6, description="0 = Sunday"),
    settings: Settings = Depends(get_settings),
    clock: Clock = Depends(get_clock),
) -> dict:
    """Blend hourly, weekday and global averages; defaults to the current DC slot."""
    if settings.storage_backend is not StorageBackend.DATABASE:
        raise HTTPException(
            status_code=409, detail="Forecasts require the database backend"
        )

    now = classify(clock.now())
    try:
        async with DatabaseSink.from_settings(settings) as sink:
            result = await sink.forecast(
                now.hour if hour is None else hour,
                now.weekday if weekday is None else weekday,
            )
    except PersistenceFailure as exc:
        raise HTTPException(status_code=503, detail=str(exc)) from exc
    return result.to_dict()

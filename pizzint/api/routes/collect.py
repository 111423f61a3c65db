"""Serverless collection endpoint, hit by the platform cron schedule."""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from pizzint.api.auth import verify_cron_secret
from pizzint.api.deps import get_clock, get_settings
from pizzint.core.config import Settings
from pizzint.core.enums import CollectionStatus
from pizzint.core.utils.clock import Clock
from pizzint.pipeline.runner import collect_once

router = APIRouter(tags=["Collector"])


@router.api_route(
    "/api/collect",
    methods=["GET", "POST"],
    dependencies=[Depends(verify_cron_secret)],
)
async def collect(
    settings: Settings = Depends(get_settings),
    clock: Clock = Depends(get_clock),
) -> JSONResponse:
    """Run one collection tick; 500 when the tick errored, 200 otherwise."""
    result = await collect_once(settings, clock=clock)
    status_code = 500 if result.status is CollectionStatus.ERROR else 200
    return JSONResponse(status_code=status_code, content=result.to_dict())

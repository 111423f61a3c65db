"""Health-check endpoint."""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from pizzint.api.deps import get_settings
from pizzint.core.config import Settings

router = APIRouter(tags=["Health"])


@router.get("/health")
async def health_check(settings: Settings = Depends(get_settings)) -> dict:
    """Basic liveness probe."""
    return {
        "status": "ok",
        "backend": settings.storage_backend.value,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }

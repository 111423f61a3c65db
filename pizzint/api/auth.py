"""Bearer-token guard for scheduler-triggered endpoints.

When ``CRON_SECRET`` is configured, callers must send
``Authorization: Bearer <secret>`` (this is what platform cron schedulers
send). With no secret configured the endpoints are open.
"""

import secrets

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from pizzint.api.deps import get_settings
from pizzint.core.config import Settings

security = HTTPBearer(auto_error=False)


async def verify_cron_secret(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    settings: Settings = Depends(get_settings),
) -> None:
    """Reject the request with 401 unless the bearer token matches CRON_SECRET."""
    expected = settings.cron_secret
    if not expected:
        return
    supplied = credentials.credentials if credentials is not None else ""
    if not secrets.compare_digest(supplied.encode(), expected.encode()):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
            headers={"WWW-Authenticate": "Bearer"},
        )

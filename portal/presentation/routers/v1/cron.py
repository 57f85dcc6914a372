from datetime import datetime, timezone
from typing import Annotated

from fastapi import APIRouter, Depends, Header, HTTPException, status

from portal.application.run_cleanup import run_cleanup
from portal.domain.ports.rate_limiter import RateLimiterPort
from portal.domain.ports.session_store import SessionStorePort
from portal.domain.ports.unit_of_work import UnitOfWorkPort
from portal.domain.services import secure_compare
from portal.presentation.dependencies import (
    get_cron_secret,
    get_rate_limiter,
    get_sessions,
    get_uow,
)
from portal.schemas.responses import CleanupOut

router = APIRouter(prefix="/cron", tags=["Cron"])


def require_cron_secret(
    secret: Annotated[str | None, Depends(get_cron_secret)],
    authorization: Annotated[str | None, Header()] = None,
) -> None:
    # No secret configured -> open endpoint (local/zero-config default).
    if not secret:
        return
    if not authorization or not secure_compare(authorization, f"Bearer {secret}"):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")


@router.get(
    "/cleanup",
    response_model=CleanupOut,
    dependencies=[Depends(require_cron_secret)],
)
async def get_cleanup(
    uow: Annotated[UnitOfWorkPort, Depends(get_uow)],
    sessions: Annotated[SessionStorePort, Depends(get_sessions)],
    rate_limiter: Annotated[RateLimiterPort, Depends(get_rate_limiter)],
):
    report = await run_cleanup(uow=uow, sessions=sessions, rate_limiter=rate_limiter)
    return CleanupOut(
        success=True,
        timestamp=datetime.now(timezone.utc),
        results=report.as_dict(),
    )

from fastapi import APIRouter, Request

router = APIRouter()


@router.get("/healthz")
async def healthz(request: Request) -> dict:
    limiter = getattr(request.app.state, "rate_limiter", None)
    return {
        "status": "ok",
        "rate_limit_entries": len(limiter) if limiter is not None else 0,
    }

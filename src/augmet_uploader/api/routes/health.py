"""Health check routes."""

from fastapi import APIRouter

from augmet_uploader import __version__

router = APIRouter(tags=["health"])


@router.get("/healthz")
async def healthz() -> dict[str, str]:
    """Liveness probe."""

    return {"status": "ok", "version": __version__}


__all__ = ["router"]

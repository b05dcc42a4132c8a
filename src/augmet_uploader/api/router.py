"""Top-level API router composition."""

from fastapi import APIRouter

from augmet_uploader.api.routes import health_router, records_router, uploads_router

api_router = APIRouter()
api_router.include_router(health_router)
api_router.include_router(uploads_router)
api_router.include_router(records_router)

__all__ = ["api_router"]

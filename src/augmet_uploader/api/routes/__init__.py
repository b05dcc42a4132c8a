"""Route modules public API."""

from augmet_uploader.api.routes.health import router as health_router
from augmet_uploader.api.routes.records import router as records_router
from augmet_uploader.api.routes.uploads import router as uploads_router

__all__ = ["health_router", "records_router", "uploads_router"]

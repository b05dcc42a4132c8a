"""HTTP API layer."""

from augmet_uploader.api.router import api_router

__all__ = ["api_router"]

"""API routes package."""

from registry.routes.metadata_routes import router as metadata_router

__all__ = ["metadata_router"]

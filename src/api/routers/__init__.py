"""API routers for learnrank."""

from src.api.routers import recommendations_router

__all__ = [
    "recommendations_router",
]

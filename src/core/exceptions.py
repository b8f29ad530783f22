"""Exceptions raised by the recommendation engine and its stores."""

from __future__ import annotations


class RecommendationError(Exception):
    """Base class for recommendation failures."""
    pass


class StoreUnavailableError(RecommendationError):
    """Raised when the catalog or progress store cannot be read."""
    pass


class LogWriteError(RecommendationError):
    """Raised when a recommendation log entry cannot be appended."""
    pass


class UserNotFoundError(RecommendationError):
    """Raised when a profile lookup finds no such user."""

    def __init__(self, user_id: str):
        super().__init__(f"User not found: {user_id}")
        self.user_id = user_id

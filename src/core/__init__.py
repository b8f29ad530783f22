"""
Core Module - Shared domain models and interfaces.

This module contains the canonical implementations of core concepts
that are used across the recommendation engine, the stores, the CLI
and the API.

Components:
- models: Immutable domain values (LearningItem, ProgressRecord, UserProfile, ...)
- mastery: Per-tag mastery estimation (MasteryEstimator, MasteryLevel)
- exceptions: Error taxonomy (StoreUnavailableError, LogWriteError, ...)

Design Principle:
All other packages (src/recommendation/, src/db/, src/cli/, src/api/)
should import from src/core/ rather than reimplementing shared concepts.
"""

from src.core.exceptions import (
    LogWriteError,
    RecommendationError,
    StoreUnavailableError,
    UserNotFoundError,
)
from src.core.mastery import MasteryEstimator, MasteryLevel
from src.core.models import (
    CompletedProgress,
    ContentSource,
    Difficulty,
    LearningItem,
    MasteryMap,
    ProgressRecord,
    ProgressStatus,
    RecommendationLogEntry,
    RecommendationResult,
    RecommendationTrigger,
    UserProfile,
    Visibility,
)

__all__ = [
    # Models
    "CompletedProgress",
    "ContentSource",
    "Difficulty",
    "LearningItem",
    "MasteryMap",
    "ProgressRecord",
    "ProgressStatus",
    "RecommendationLogEntry",
    "RecommendationResult",
    "RecommendationTrigger",
    "UserProfile",
    "Visibility",
    # Mastery
    "MasteryEstimator",
    "MasteryLevel",
    # Errors
    "RecommendationError",
    "StoreUnavailableError",
    "LogWriteError",
    "UserNotFoundError",
]

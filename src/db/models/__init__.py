# SQLAlchemy models
from .base import Base
from .catalog import LearningItemRow, UserRow
from .progress import ProgressRow
from .recommendation_log import RecommendationLogEntryRow, RecommendationLogRow

__all__ = [
    # Base
    "Base",
    # Catalog
    "LearningItemRow",
    "UserRow",
    # Progress
    "ProgressRow",
    # Recommendation log
    "RecommendationLogRow",
    "RecommendationLogEntryRow",
]

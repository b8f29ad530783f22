"""
Recommendation Engine.

Ranks learning items for a user by estimated learning value.

Components:
- CandidateAssembler: Gathers, deduplicates and filters catalog items
- CompositeRanker: Weighted scoring, boosts and reason selection
- RecommendationEngine: Main orchestration layer (recommend / refresh)
- RankingConfig: Injectable weights, thresholds and boosts
"""
from src.recommendation.candidates import (
    CandidateAssembler,
    CandidatePool,
    CatalogSnapshot,
    FilterStats,
)
from src.recommendation.engine import RecommendationEngine
from src.recommendation.ranker import CompositeRanker
from src.recommendation.stores import (
    CatalogStore,
    InMemoryCatalog,
    InMemoryProgress,
    InMemoryRecommendationLog,
    ProgressStore,
    RecommendationLogStore,
)
from src.recommendation.weights import PREREQUISITE_THRESHOLD, RankingConfig

__all__ = [
    # Main engine
    "RecommendationEngine",
    # Component classes
    "CandidateAssembler",
    "CompositeRanker",
    # Data models
    "CandidatePool",
    "CatalogSnapshot",
    "FilterStats",
    # Configuration
    "RankingConfig",
    "PREREQUISITE_THRESHOLD",
    # Stores
    "CatalogStore",
    "ProgressStore",
    "RecommendationLogStore",
    "InMemoryCatalog",
    "InMemoryProgress",
    "InMemoryRecommendationLog",
]

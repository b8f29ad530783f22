"""
Recommendation Engine.

Public entry point of the ranking core. Each call:

1. Snapshots the catalog (four source queries) and completed progress
2. Assembles the candidate pool
3. Ranks candidates and truncates to the requested limit
4. Appends one entry to the recommendation log

The log append never fails the call; store read failures always do.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime

from loguru import logger

from src.core.models import (
    MasteryMap,
    RecommendationLogEntry,
    RecommendationResult,
    RecommendationTrigger,
    UserProfile,
)
from src.recommendation.candidates import CandidateAssembler, CandidatePool, CatalogSnapshot
from src.recommendation.ranker import CompositeRanker
from src.recommendation.stores import CatalogStore, ProgressStore, RecommendationLogStore
from src.recommendation.weights import RankingConfig

DEFAULT_LIMIT = 10


def _utcnow() -> datetime:
    return datetime.now(UTC)


class RecommendationEngine:
    """
    Rank learning items for a user.

    Usage:
        engine = RecommendationEngine(catalog, progress, log)
        results = engine.recommend(profile, limit=5)
    """

    def __init__(
        self,
        catalog: CatalogStore,
        progress: ProgressStore,
        log: RecommendationLogStore | None = None,
        config: RankingConfig | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.catalog = catalog
        self.progress = progress
        self.log = log
        self.config = config or RankingConfig()
        self.clock = clock
        self.assembler = CandidateAssembler(self.config)
        self.ranker = CompositeRanker(self.config)

    def recommend(self, profile: UserProfile, limit: int = DEFAULT_LIMIT) -> list[RecommendationResult]:
        """Ranked recommendations, logged as an automatic run."""
        return self._run(profile, limit, RecommendationTrigger.AUTOMATIC)

    def refresh(self, profile: UserProfile, limit: int = DEFAULT_LIMIT) -> list[RecommendationResult]:
        """Same computation as recommend(), logged as a manual refresh."""
        return self._run(profile, limit, RecommendationTrigger.MANUAL)

    def build_pool(self, profile: UserProfile) -> CandidatePool:
        """Snapshot the stores and assemble the candidate pool."""
        user_id = profile.user_id
        snapshot = CatalogSnapshot(
            curated=tuple(self.catalog.curated_items()),
            personalized=tuple(self.catalog.personalized_items(user_id)),
            authored=tuple(self.catalog.authored_items(user_id)),
            community=tuple(self.catalog.community_items(user_id)),
        )
        completed = self.progress.completed_progress(user_id)
        return self.assembler.assemble(profile, snapshot, completed)

    def explain_mastery(self, profile: UserProfile) -> MasteryMap:
        """Mastery map over the user's catalog vocabulary, without ranking or logging."""
        return self.build_pool(profile).mastery

    def _run(
        self,
        profile: UserProfile,
        limit: int,
        trigger: RecommendationTrigger,
    ) -> list[RecommendationResult]:
        if limit < 1:
            raise ValueError(f"limit must be >= 1, got {limit}")

        pool = self.build_pool(profile)
        results = self.ranker.rank(profile, pool)[:limit]

        logger.info(
            f"Recommendations for {profile.user_id} ({trigger.value}): {len(results)} returned, "
            f"top={[(r.item_id, f'{r.score:.2f}', r.reason) for r in results[:3]]}"
        )

        self._append_log(profile, results, trigger)
        return results

    def _append_log(
        self,
        profile: UserProfile,
        results: list[RecommendationResult],
        trigger: RecommendationTrigger,
    ) -> None:
        if self.log is None:
            return
        entry = RecommendationLogEntry.from_results(profile.user_id, results, trigger, self.clock())
        try:
            self.log.append(entry)
        except Exception as e:  # any log failure is non-fatal
            logger.warning(f"Failed to write recommendation log for {profile.user_id}: {e}")

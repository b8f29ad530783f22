"""
Candidate Assembly.

Produces the deduplicated, eligible set of items the ranker scores:

1. Gather from curated, personalized, self-authored and community sources
2. Deduplicate by item id (first occurrence wins, insertion order kept)
3. Estimate mastery over the gathered vocabulary
4. Drop completed items
5. Drop intermediate/advanced items whose prerequisites are not met
6. Keep items matching a declared interest (all items when none declared)
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field

from loguru import logger

from src.core.mastery import MasteryEstimator
from src.core.models import CompletedProgress, LearningItem, MasteryMap, UserProfile
from src.recommendation.scoring import prerequisites_met
from src.recommendation.weights import RankingConfig

SOURCE_ORDER = ("curated", "personalized", "authored", "community")


@dataclass(frozen=True)
class CatalogSnapshot:
    """Items read from the catalog once, grouped by source query."""

    curated: tuple[LearningItem, ...] = ()
    personalized: tuple[LearningItem, ...] = ()
    authored: tuple[LearningItem, ...] = ()
    community: tuple[LearningItem, ...] = ()

    def by_source(self) -> list[tuple[str, tuple[LearningItem, ...]]]:
        return [(name, getattr(self, name)) for name in SOURCE_ORDER]


@dataclass
class FilterStats:
    """Counters describing how the pool was narrowed."""

    gathered: dict[str, int] = field(default_factory=dict)
    unique: int = 0
    by_completed: int = 0
    by_prerequisites: int = 0
    by_interests: int = 0

    def to_dict(self) -> dict[str, object]:
        return {
            "gathered": dict(self.gathered),
            "unique": self.unique,
            "by_completed": self.by_completed,
            "by_prerequisites": self.by_prerequisites,
            "by_interests": self.by_interests,
        }


@dataclass(frozen=True)
class CandidatePool:
    """Eligible items plus the mastery map they were filtered with."""

    items: tuple[LearningItem, ...]
    mastery: MasteryMap
    tags: tuple[str, ...]
    stats: FilterStats

    @property
    def max_visits(self) -> int:
        return max((item.visits for item in self.items), default=0)

    def __len__(self) -> int:
        return len(self.items)


def deduplicate(snapshot: CatalogSnapshot) -> list[LearningItem]:
    """Merge all sources, keeping the first occurrence of each item id."""
    unique: dict[str, LearningItem] = {}
    for _, items in snapshot.by_source():
        for item in items:
            unique.setdefault(item.item_id, item)
    return list(unique.values())


def tag_vocabulary(items: Sequence[LearningItem], include_prerequisites: bool = False) -> list[str]:
    """Distinct tags of the items, in first-seen order."""
    vocabulary: dict[str, None] = {}
    for item in items:
        for tag in item.tags:
            vocabulary.setdefault(tag, None)
        if include_prerequisites:
            for tag in item.prerequisites:
                vocabulary.setdefault(tag, None)
    return list(vocabulary)


def matches_interests(item: LearningItem, interests: list[str]) -> bool:
    """Loose bidirectional substring match between tags and interests."""
    if not interests:
        return True
    for tag in item.tags:
        tag = tag.lower()
        if any(interest in tag or tag in interest for interest in interests):
            return True
    return False


class CandidateAssembler:
    """
    Build the candidate pool for one user from a catalog snapshot.

    Usage:
        assembler = CandidateAssembler(config)
        pool = assembler.assemble(profile, snapshot, completed)
    """

    def __init__(
        self,
        config: RankingConfig | None = None,
        estimator: MasteryEstimator | None = None,
    ):
        self.config = config or RankingConfig()
        self.estimator = estimator or MasteryEstimator()

    def assemble(
        self,
        profile: UserProfile,
        snapshot: CatalogSnapshot,
        completed: list[CompletedProgress],
    ) -> CandidatePool:
        stats = FilterStats(
            gathered={name: len(items) for name, items in snapshot.by_source()},
        )
        logger.info(f"Items gathered for {profile.user_id}: {stats.gathered}")

        unique = deduplicate(snapshot)
        stats.unique = len(unique)

        mastery = self.estimator.estimate(
            completed, tag_vocabulary(unique, include_prerequisites=True)
        )

        completed_ids = {entry.record.item_id for entry in completed if entry.record.is_completed}
        interests = profile.normalized_interests()
        logger.debug(f"Normalized interests for {profile.user_id}: {interests}")

        candidates = []
        for item in unique:
            if item.item_id in completed_ids:
                stats.by_completed += 1
                continue
            if not prerequisites_met(item, mastery, self.config.prerequisite_threshold):
                stats.by_prerequisites += 1
                continue
            if not matches_interests(item, interests):
                stats.by_interests += 1
                continue
            candidates.append(item)

        logger.info(
            f"Candidate pool for {profile.user_id}: {len(candidates)} of {stats.unique} unique items "
            f"(filtered: completed={stats.by_completed}, prerequisites={stats.by_prerequisites}, "
            f"interests={stats.by_interests})"
        )

        return CandidatePool(
            items=tuple(candidates),
            mastery=mastery,
            tags=tuple(tag_vocabulary(candidates)),
            stats=stats,
        )

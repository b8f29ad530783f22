"""
Per-item scoring signals.

Stateless functions that turn raw catalog signals and a mastery map into
[0, 1] scores:

- gap_score: how much an item covers tags the learner has not mastered
- difficulty_match: how close item difficulty is to the estimated level
- prerequisites_met: eligibility gate for intermediate/advanced items
- popularity_score / rating_score: pool-relative normalizers
"""

from __future__ import annotations

from collections.abc import Sequence

from src.core.models import Difficulty, LearningItem, MasteryMap
from src.recommendation.weights import PREREQUISITE_THRESHOLD

MAX_RATING = 5.0


def gap_score(mastery: MasteryMap, tags: Sequence[str]) -> float:
    """
    Average unmastered share of an item's tags.

    Returns 0.0 for an untagged item (no information, no urgency) and
    1.0 when none of the tags has been practiced.
    """
    if not tags:
        return 0.0
    return sum(1 - mastery.get(tag, 0.0) for tag in tags) / len(tags)


def average_mastery(mastery: MasteryMap, tags: Sequence[str]) -> float:
    """Mean mastery across tags, 0.0 when there are none."""
    if not tags:
        return 0.0
    return sum(mastery.get(tag, 0.0) for tag in tags) / len(tags)


def estimated_level(mastery: MasteryMap, tags: Sequence[str]) -> float:
    """Continuous learner level in [1, 3] for the given tags."""
    return 1 + average_mastery(mastery, tags) * 2


def difficulty_match(difficulty: Difficulty, tags: Sequence[str], mastery: MasteryMap) -> float:
    """
    Closeness of item difficulty to the learner's estimated level.

    A perfect match scores 1.0, a two-level mismatch scores 0.0.
    """
    delta = abs(estimated_level(mastery, tags) - difficulty.ordinal)
    return max(0.0, 1 - delta / 2)


def prerequisites_met(
    item: LearningItem,
    mastery: MasteryMap,
    threshold: float = PREREQUISITE_THRESHOLD,
) -> bool:
    """
    Check whether a learner may be shown an item.

    Beginner items and items without prerequisites are always eligible.
    Otherwise every prerequisite tag needs mastery >= threshold.
    """
    if not item.requires_prerequisite_check:
        return True
    return all(mastery.get(tag, 0.0) >= threshold for tag in item.prerequisites)


def popularity_score(visits: int, max_visits: int) -> float:
    """Visits relative to the busiest item of the current pool."""
    return visits / max(1, max_visits)


def rating_score(rating: float) -> float:
    """Star rating (0-5) scaled to [0, 1]."""
    return rating / MAX_RATING

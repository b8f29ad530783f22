"""
Core Mastery Module.

Derives per-tag proficiency from a learner's completed-item history.

Design:
- MasteryLevel: Enum for categorizing mastery scores (CLI display)
- MasteryEstimator: Averages completed-item scores per tag
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable
from enum import Enum

from loguru import logger

from src.core.models import CompletedProgress, MasteryMap

# Score assumed for a completed record that carries no score (0-100 scale)
DEFAULT_COMPLETED_SCORE = 100.0


class MasteryLevel(str, Enum):
    """
    Mastery level categorization.

    Buckets a 0-1 tag mastery for display. Not used by ranking.
    """

    NOT_STARTED = "not_started"  # 0%
    NOVICE = "novice"  # 1-39%
    DEVELOPING = "developing"  # 40-69%
    PROFICIENT = "proficient"  # 70-89%
    MASTERED = "mastered"  # 90-100%

    @classmethod
    def from_score(cls, score: float) -> MasteryLevel:
        """
        Convert a 0-1 mastery score to a level.

        Args:
            score: Mastery score between 0 and 1

        Returns:
            Corresponding MasteryLevel
        """
        if score <= 0:
            return cls.NOT_STARTED
        elif score < 0.4:
            return cls.NOVICE
        elif score < 0.7:
            return cls.DEVELOPING
        elif score < 0.9:
            return cls.PROFICIENT
        else:
            return cls.MASTERED

    @property
    def display_name(self) -> str:
        """Human-readable name."""
        return self.value.replace("_", " ").title()

    @property
    def color(self) -> str:
        """Rich color for CLI display."""
        return {
            MasteryLevel.NOT_STARTED: "dim",
            MasteryLevel.NOVICE: "red",
            MasteryLevel.DEVELOPING: "yellow",
            MasteryLevel.PROFICIENT: "cyan",
            MasteryLevel.MASTERED: "green",
        }[self]


class MasteryEstimator:
    """
    Estimate tag mastery from completed progress.

    Formula: mastery[tag] = min(mean(score / 100 over completed items carrying tag), 1.0)

    Only the queried tags are computed, which bounds the cost to the
    candidate pool's vocabulary rather than the whole catalog. Every
    queried tag is present in the result (0.0 when never practiced).
    """

    def __init__(self, default_score: float = DEFAULT_COMPLETED_SCORE):
        self.default_score = default_score

    def estimate(
        self,
        completed: Iterable[CompletedProgress],
        tags: Iterable[str],
    ) -> MasteryMap:
        """
        Build a mastery map for the given tags.

        Args:
            completed: Completed progress records joined with their items
            tags: Tags to report on

        Returns:
            Mapping of every queried tag to a mastery value in [0, 1]
        """
        wanted = dict.fromkeys(tags)
        totals: dict[str, float] = defaultdict(float)
        counts: dict[str, int] = defaultdict(int)

        for entry in completed:
            if not entry.record.is_completed:
                continue
            if entry.item is None:
                # Item was deleted after the learner completed it
                logger.debug(
                    f"Skipping progress for missing item {entry.record.item_id} "
                    f"(user {entry.record.user_id})"
                )
                continue

            score = entry.record.score if entry.record.score is not None else self.default_score
            for tag in entry.item.tags:
                if tag in wanted:
                    totals[tag] += score / 100
                    counts[tag] += 1

        return {
            tag: min(totals[tag] / counts[tag], 1.0) if counts[tag] > 0 else 0.0
            for tag in wanted
        }

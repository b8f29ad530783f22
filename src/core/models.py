"""
Core Domain Models.

Immutable value objects shared by the recommendation engine, the SQL
stores, the CLI and the API. Everything here is built from a read snapshot
and never mutated while scoring.

Design:
- Difficulty / ContentSource / Visibility / ProgressStatus: catalog enums
- LearningItem: a lesson, video or article in the catalog
- ProgressRecord / CompletedProgress: a learner's history
- UserProfile: identity + declared interests
- RecommendationResult / RecommendationLogEntry: engine output
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

# tag -> proficiency in [0, 1]
MasteryMap = dict[str, float]


class Difficulty(str, Enum):
    """Difficulty label of a learning item."""

    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"

    @property
    def ordinal(self) -> int:
        """Ordinal score used by difficulty matching (1-3)."""
        return {
            Difficulty.BEGINNER: 1,
            Difficulty.INTERMEDIATE: 2,
            Difficulty.ADVANCED: 3,
        }[self]


class ContentSource(str, Enum):
    """Who produced a learning item."""

    SYSTEM = "system"
    USER = "user"
    GENERATED = "generated"


class Visibility(str, Enum):
    """Catalog visibility of a learning item."""

    PUBLIC = "public"
    PRIVATE = "private"
    CURATED = "curated"


class ProgressStatus(str, Enum):
    """Learner progress on a single item."""

    NOT_STARTED = "not-started"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"


class RecommendationTrigger(str, Enum):
    """What caused a recommendation run."""

    AUTOMATIC = "automatic"
    MANUAL = "manual"

    @property
    def description(self) -> str:
        """Text stored with the recommendation log entry."""
        return {
            RecommendationTrigger.AUTOMATIC: "Auto-generated based on user profile and progress",
            RecommendationTrigger.MANUAL: "Manual refresh requested by user",
        }[self]


@dataclass(frozen=True)
class LearningItem:
    """
    A recommendable learning item.

    Owned by the catalog store; immutable for the duration of one
    recommendation computation.
    """

    item_id: str
    title: str = ""
    tags: tuple[str, ...] = ()
    difficulty: Difficulty = Difficulty.BEGINNER
    visits: int = 0
    rating: float = 0.0
    prerequisites: tuple[str, ...] = ()
    source: ContentSource = ContentSource.SYSTEM
    visibility: Visibility = Visibility.PUBLIC
    personalized_for: frozenset[str] = field(default_factory=frozenset)
    owner_id: str | None = None

    def __post_init__(self):
        if self.visits < 0:
            raise ValueError(f"visits must be >= 0, got {self.visits} for item {self.item_id}")
        if not 0 <= self.rating <= 5:
            raise ValueError(f"rating must be within [0, 5], got {self.rating} for item {self.item_id}")

    @property
    def requires_prerequisite_check(self) -> bool:
        """Only intermediate and advanced items are gated."""
        return self.difficulty in (Difficulty.INTERMEDIATE, Difficulty.ADVANCED)

    def is_personalized_for(self, user_id: str) -> bool:
        """Generated specifically for this user."""
        return self.source == ContentSource.GENERATED and user_id in self.personalized_for

    def is_authored_by(self, user_id: str) -> bool:
        """Added to the catalog by this user."""
        return self.source == ContentSource.USER and self.owner_id == user_id

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> LearningItem:
        """Build an item from a plain mapping (JSON fixtures, API payloads)."""
        return cls(
            item_id=str(data["id"]),
            title=data.get("title", ""),
            tags=tuple(data.get("tags") or ()),
            difficulty=Difficulty(data.get("difficulty", Difficulty.BEGINNER.value)),
            visits=int(data.get("visits") or 0),
            rating=float(data.get("rating") or 0.0),
            prerequisites=tuple(data.get("prerequisites") or ()),
            source=ContentSource(data.get("source", ContentSource.SYSTEM.value)),
            visibility=Visibility(data.get("visibility", Visibility.PUBLIC.value)),
            personalized_for=frozenset(data.get("personalized_for") or ()),
            owner_id=data.get("owner_id"),
        )


@dataclass(frozen=True)
class ProgressRecord:
    """Progress of one user on one item. Unique per (user_id, item_id)."""

    user_id: str
    item_id: str
    status: ProgressStatus = ProgressStatus.NOT_STARTED
    score: float | None = None

    def __post_init__(self):
        if self.score is not None and not 0 <= self.score <= 100:
            raise ValueError(f"score must be within [0, 100], got {self.score}")

    @property
    def is_completed(self) -> bool:
        return self.status == ProgressStatus.COMPLETED


@dataclass(frozen=True)
class CompletedProgress:
    """A progress record joined with its item; item is None when it was deleted."""

    record: ProgressRecord
    item: LearningItem | None = None


@dataclass(frozen=True)
class UserProfile:
    """Identity and declared interests of the requesting user."""

    user_id: str
    interests: tuple[str, ...] = ()

    def normalized_interests(self) -> list[str]:
        """
        Split comma-joined interests, trim and lowercase them.

        Empty tokens are dropped so "python,,web" yields ["python", "web"].
        """
        tokens = []
        for interest in self.interests:
            for token in interest.split(","):
                token = token.strip().lower()
                if token:
                    tokens.append(token)
        return tokens


@dataclass(frozen=True)
class RecommendationResult:
    """One ranked recommendation."""

    item: LearningItem
    score: float
    reason: str

    # Component breakdown (0-1), informative only
    gap: float = 0.0
    difficulty_match: float = 0.0
    popularity: float = 0.0
    rating: float = 0.0
    boost: float = 0.0

    @property
    def item_id(self) -> str:
        return self.item.item_id

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "id": self.item.item_id,
            "title": self.item.title,
            "tags": list(self.item.tags),
            "difficulty": self.item.difficulty.value,
            "score": round(self.score, 4),
            "reason": self.reason,
            "components": {
                "gap": round(self.gap, 4),
                "difficulty_match": round(self.difficulty_match, 4),
                "popularity": round(self.popularity, 4),
                "rating": round(self.rating, 4),
                "boost": round(self.boost, 4),
            },
        }


@dataclass(frozen=True)
class LoggedRecommendation:
    """A single (item, score, reason) line of a log entry."""

    item_id: str
    score: float
    reason: str


@dataclass(frozen=True)
class RecommendationLogEntry:
    """Append-only record of one recommendation run."""

    user_id: str
    recommendations: tuple[LoggedRecommendation, ...]
    trigger: str
    timestamp: datetime

    @classmethod
    def from_results(
        cls,
        user_id: str,
        results: list[RecommendationResult],
        trigger: RecommendationTrigger,
        timestamp: datetime,
    ) -> RecommendationLogEntry:
        return cls(
            user_id=user_id,
            recommendations=tuple(
                LoggedRecommendation(item_id=r.item_id, score=r.score, reason=r.reason)
                for r in results
            ),
            trigger=trigger.description,
            timestamp=timestamp,
        )

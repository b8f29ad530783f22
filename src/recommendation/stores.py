"""
Store interfaces consumed by the recommendation engine.

The engine reads the catalog and progress stores once per call and appends a
single log entry at the end. SQL implementations live in src/db/stores.py;
the in-memory versions below back offline use and tests.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Protocol

from src.core.models import (
    CompletedProgress,
    ContentSource,
    LearningItem,
    ProgressRecord,
    RecommendationLogEntry,
    Visibility,
)


class CatalogStore(Protocol):
    """The four catalog query shapes used to gather candidates."""

    def curated_items(self) -> list[LearningItem]:
        """System-authored items that are not private."""
        ...

    def personalized_items(self, user_id: str) -> list[LearningItem]:
        """Generated items personalized for the user."""
        ...

    def authored_items(self, user_id: str) -> list[LearningItem]:
        """Items the user added themselves."""
        ...

    def community_items(self, user_id: str) -> list[LearningItem]:
        """Public items from non-system sources."""
        ...


class ProgressStore(Protocol):
    """Progress lookups with the item reference resolved."""

    def completed_progress(self, user_id: str) -> list[CompletedProgress]:
        ...


class RecommendationLogStore(Protocol):
    """Append-only sink for recommendation runs. Raises on failure."""

    def append(self, entry: RecommendationLogEntry) -> None:
        ...


# ============================================================================
# In-memory implementations
# ============================================================================


class InMemoryCatalog:
    """Catalog held in a list, queried in insertion order."""

    def __init__(self, items: Iterable[LearningItem] = ()):
        self._items = list(items)

    def add(self, item: LearningItem) -> None:
        self._items.append(item)

    def get(self, item_id: str) -> LearningItem | None:
        for item in self._items:
            if item.item_id == item_id:
                return item
        return None

    def curated_items(self) -> list[LearningItem]:
        return [
            item for item in self._items
            if item.source == ContentSource.SYSTEM and item.visibility != Visibility.PRIVATE
        ]

    def personalized_items(self, user_id: str) -> list[LearningItem]:
        return [item for item in self._items if item.is_personalized_for(user_id)]

    def authored_items(self, user_id: str) -> list[LearningItem]:
        return [item for item in self._items if item.is_authored_by(user_id)]

    def community_items(self, user_id: str) -> list[LearningItem]:
        return [
            item for item in self._items
            if item.visibility == Visibility.PUBLIC and item.source != ContentSource.SYSTEM
        ]


class InMemoryProgress:
    """Progress records keyed by (user_id, item_id), joined against a catalog."""

    def __init__(self, catalog: InMemoryCatalog, records: Iterable[ProgressRecord] = ()):
        self._catalog = catalog
        self._records: dict[tuple[str, str], ProgressRecord] = {}
        for record in records:
            self.upsert(record)

    def upsert(self, record: ProgressRecord) -> None:
        self._records[(record.user_id, record.item_id)] = record

    def completed_progress(self, user_id: str) -> list[CompletedProgress]:
        return [
            CompletedProgress(record=record, item=self._catalog.get(record.item_id))
            for (owner, _), record in self._records.items()
            if owner == user_id and record.is_completed
        ]


class InMemoryRecommendationLog:
    """Log kept in a list; useful for inspection in tests."""

    def __init__(self):
        self.entries: list[RecommendationLogEntry] = []

    def append(self, entry: RecommendationLogEntry) -> None:
        self.entries.append(entry)

    def for_user(self, user_id: str) -> list[RecommendationLogEntry]:
        return [entry for entry in self.entries if entry.user_id == user_id]

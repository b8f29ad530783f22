"""
SQL-backed stores for the recommendation engine.

Implements the catalog, progress, log and user lookups on top of the
SQLAlchemy models. Read failures surface as StoreUnavailableError and
write failures as LogWriteError.

Usage:
    from src.db.stores import build_engine_from_db

    engine = build_engine_from_db()
    results = engine.recommend(profile)
"""

from __future__ import annotations

from loguru import logger
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from src.core.exceptions import LogWriteError, StoreUnavailableError, UserNotFoundError
from src.core.models import (
    CompletedProgress,
    ContentSource,
    LearningItem,
    ProgressStatus,
    RecommendationLogEntry,
    UserProfile,
    Visibility,
)
from src.db.database import SessionFactory, session_scope
from src.db.models import LearningItemRow, ProgressRow, RecommendationLogRow, UserRow
from src.recommendation.engine import RecommendationEngine
from src.recommendation.weights import RankingConfig


class SqlCatalogStore:
    """Catalog queries over the learning_items table, in insertion order."""

    def __init__(self, session_factory: SessionFactory | None = None):
        self._session_factory = session_factory

    def _fetch(self, *criteria) -> list[LearningItem]:
        stmt = select(LearningItemRow).where(*criteria).order_by(LearningItemRow.pk)
        try:
            with session_scope(self._session_factory) as session:
                return [row.to_domain() for row in session.scalars(stmt)]
        except SQLAlchemyError as e:
            raise StoreUnavailableError(f"Catalog query failed: {e}") from e
        except ValueError as e:
            raise StoreUnavailableError(f"Catalog holds an invalid item: {e}") from e

    def curated_items(self) -> list[LearningItem]:
        return self._fetch(
            LearningItemRow.source == ContentSource.SYSTEM.value,
            LearningItemRow.visibility != Visibility.PRIVATE.value,
        )

    def personalized_items(self, user_id: str) -> list[LearningItem]:
        # JSON membership is not portable across dialects; filter after loading
        generated = self._fetch(LearningItemRow.source == ContentSource.GENERATED.value)
        return [item for item in generated if item.is_personalized_for(user_id)]

    def authored_items(self, user_id: str) -> list[LearningItem]:
        return self._fetch(
            LearningItemRow.source == ContentSource.USER.value,
            LearningItemRow.owner_id == user_id,
        )

    def community_items(self, user_id: str) -> list[LearningItem]:
        return self._fetch(
            LearningItemRow.visibility == Visibility.PUBLIC.value,
            LearningItemRow.source != ContentSource.SYSTEM.value,
        )


class SqlProgressStore:
    """Completed progress joined with the referenced items."""

    def __init__(self, session_factory: SessionFactory | None = None):
        self._session_factory = session_factory

    def completed_progress(self, user_id: str) -> list[CompletedProgress]:
        stmt = (
            select(ProgressRow, LearningItemRow)
            .outerjoin(LearningItemRow, LearningItemRow.item_id == ProgressRow.item_id)
            .where(
                ProgressRow.user_id == user_id,
                ProgressRow.status == ProgressStatus.COMPLETED.value,
            )
            .order_by(ProgressRow.id)
        )
        try:
            with session_scope(self._session_factory) as session:
                return [
                    CompletedProgress(
                        record=progress.to_domain(),
                        item=item.to_domain() if item is not None else None,
                    )
                    for progress, item in session.execute(stmt)
                ]
        except SQLAlchemyError as e:
            raise StoreUnavailableError(f"Progress query failed: {e}") from e
        except ValueError as e:
            raise StoreUnavailableError(f"Progress holds an invalid record: {e}") from e


class SqlRecommendationLog:
    """Append-only recommendation history."""

    def __init__(self, session_factory: SessionFactory | None = None):
        self._session_factory = session_factory

    def append(self, entry: RecommendationLogEntry) -> None:
        try:
            with session_scope(self._session_factory) as session:
                session.add(RecommendationLogRow.from_domain(entry))
        except SQLAlchemyError as e:
            raise LogWriteError(f"Recommendation log write failed: {e}") from e
        logger.debug(f"Logged {len(entry.recommendations)} recommendations for {entry.user_id}")

    def recent(self, user_id: str, limit: int = 5) -> list[RecommendationLogEntry]:
        """Most recent entries first."""
        stmt = (
            select(RecommendationLogRow)
            .where(RecommendationLogRow.user_id == user_id)
            .order_by(RecommendationLogRow.timestamp.desc(), RecommendationLogRow.id.desc())
            .limit(limit)
        )
        try:
            with session_scope(self._session_factory) as session:
                return [row.to_domain() for row in session.scalars(stmt)]
        except SQLAlchemyError as e:
            raise StoreUnavailableError(f"Recommendation log query failed: {e}") from e


class SqlUserStore:
    """Profile lookups for the CLI and API."""

    def __init__(self, session_factory: SessionFactory | None = None):
        self._session_factory = session_factory

    def get_profile(self, user_id: str) -> UserProfile:
        try:
            with session_scope(self._session_factory) as session:
                row = session.get(UserRow, user_id)
                if row is None:
                    raise UserNotFoundError(user_id)
                return row.to_profile()
        except SQLAlchemyError as e:
            raise StoreUnavailableError(f"User query failed: {e}") from e


def build_engine_from_db(
    session_factory: SessionFactory | None = None,
    config: RankingConfig | None = None,
) -> RecommendationEngine:
    """Wire a RecommendationEngine to the SQL stores."""
    return RecommendationEngine(
        catalog=SqlCatalogStore(session_factory),
        progress=SqlProgressStore(session_factory),
        log=SqlRecommendationLog(session_factory),
        config=config,
    )

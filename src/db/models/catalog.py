"""
Catalog models.

SQLAlchemy models for the content the engine recommends:
- Learning items (curated, user-authored and generated lessons)
- Users with their declared interests

Tags, prerequisites and the personalized-for set are stored as JSON
arrays so the same schema works on SQLite and PostgreSQL.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import JSON, Float, Index, Integer, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from src.core.models import (
    ContentSource,
    Difficulty,
    LearningItem,
    UserProfile,
    Visibility,
)

from .base import Base


class LearningItemRow(Base):
    """
    A lesson, video or article in the catalog.

    Attributes:
        pk: Surrogate key; catalog queries return rows in insertion order
        source: 'system', 'user' or 'generated'
        visibility: 'public', 'private' or 'curated'
        personalized_for: User ids a generated item was produced for
        owner_id: Author when source is 'user'
    """

    __tablename__ = "learning_items"

    pk: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    item_id: Mapped[str] = mapped_column(Text, unique=True, nullable=False)
    title: Mapped[str] = mapped_column(Text, default="")

    tags: Mapped[list[str]] = mapped_column(JSON, default=list)
    difficulty: Mapped[str] = mapped_column(Text, default=Difficulty.BEGINNER.value)
    prerequisites: Mapped[list[str]] = mapped_column(JSON, default=list)

    # Engagement
    visits: Mapped[int] = mapped_column(Integer, default=0)
    rating: Mapped[float] = mapped_column(Float, default=0.0)

    # Provenance
    source: Mapped[str] = mapped_column(Text, default=ContentSource.SYSTEM.value)
    visibility: Mapped[str] = mapped_column(Text, default=Visibility.PUBLIC.value)
    personalized_for: Mapped[list[str]] = mapped_column(JSON, default=list)
    owner_id: Mapped[str | None] = mapped_column(Text)

    created_at: Mapped[datetime] = mapped_column(default=func.now())

    __table_args__ = (
        Index("idx_learning_items_source", "source", "visibility"),
        Index("idx_learning_items_owner", "owner_id"),
    )

    def __repr__(self) -> str:
        return f"<LearningItemRow item_id={self.item_id} source={self.source} difficulty={self.difficulty}>"

    def to_domain(self) -> LearningItem:
        """Convert to an immutable domain value."""
        return LearningItem(
            item_id=self.item_id,
            title=self.title or "",
            tags=tuple(self.tags or ()),
            difficulty=Difficulty(self.difficulty),
            visits=self.visits or 0,
            rating=self.rating or 0.0,
            prerequisites=tuple(self.prerequisites or ()),
            source=ContentSource(self.source),
            visibility=Visibility(self.visibility),
            personalized_for=frozenset(self.personalized_for or ()),
            owner_id=self.owner_id,
        )


class UserRow(Base):
    """A learner and the interests they declared."""

    __tablename__ = "users"

    user_id: Mapped[str] = mapped_column(Text, primary_key=True)
    name: Mapped[str] = mapped_column(Text, default="")
    interests: Mapped[list[str]] = mapped_column(JSON, default=list)
    created_at: Mapped[datetime] = mapped_column(default=func.now())

    def __repr__(self) -> str:
        return f"<UserRow user_id={self.user_id}>"

    def to_profile(self) -> UserProfile:
        return UserProfile(user_id=self.user_id, interests=tuple(self.interests or ()))

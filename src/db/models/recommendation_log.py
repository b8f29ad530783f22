"""
Recommendation log models.

Append-only history of recommendation runs: one RecommendationLogRow per
call with its ranked entries in order.
"""

from __future__ import annotations

from datetime import UTC, datetime

from sqlalchemy import DateTime, Float, ForeignKey, Index, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.core.models import LoggedRecommendation, RecommendationLogEntry

from .base import Base


def _as_utc(ts: datetime) -> datetime:
    """SQLite drops the offset; stored timestamps are always UTC."""
    return ts.replace(tzinfo=UTC) if ts.tzinfo is None else ts.astimezone(UTC)


class RecommendationLogRow(Base):
    """One recommendation run for a user."""

    __tablename__ = "recommendation_logs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(Text, nullable=False)
    reason: Mapped[str] = mapped_column(Text, default="")  # trigger description
    timestamp: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    # Relationships
    entries: Mapped[list[RecommendationLogEntryRow]] = relationship(
        back_populates="log",
        cascade="all, delete-orphan",
        order_by="RecommendationLogEntryRow.rank",
    )

    __table_args__ = (Index("idx_recommendation_logs_user", "user_id", "timestamp"),)

    def __repr__(self) -> str:
        return f"<RecommendationLogRow user={self.user_id} entries={len(self.entries)}>"

    @classmethod
    def from_domain(cls, entry: RecommendationLogEntry) -> RecommendationLogRow:
        return cls(
            user_id=entry.user_id,
            reason=entry.trigger,
            timestamp=_as_utc(entry.timestamp),
            entries=[
                RecommendationLogEntryRow(rank=rank, item_id=r.item_id, score=r.score, reason=r.reason)
                for rank, r in enumerate(entry.recommendations)
            ],
        )

    def to_domain(self) -> RecommendationLogEntry:
        return RecommendationLogEntry(
            user_id=self.user_id,
            recommendations=tuple(
                LoggedRecommendation(item_id=e.item_id, score=e.score, reason=e.reason)
                for e in self.entries
            ),
            trigger=self.reason,
            timestamp=_as_utc(self.timestamp),
        )


class RecommendationLogEntryRow(Base):
    """A ranked item within a recommendation run."""

    __tablename__ = "recommendation_log_entries"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    log_id: Mapped[int] = mapped_column(
        ForeignKey("recommendation_logs.id", ondelete="CASCADE"), nullable=False
    )
    rank: Mapped[int] = mapped_column(Integer, nullable=False)
    item_id: Mapped[str] = mapped_column(Text, nullable=False)
    score: Mapped[float] = mapped_column(Float, nullable=False)
    reason: Mapped[str] = mapped_column(Text, default="")

    log: Mapped[RecommendationLogRow] = relationship(back_populates="entries")

"""
Progress models.

One row per (user, item). Items are referenced by id without a foreign key:
progress outlives deleted items, and the engine skips such references.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Float, Index, Integer, Text, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column

from src.core.models import ProgressRecord, ProgressStatus

from .base import Base


class ProgressRow(Base):
    """Learner progress on a single item."""

    __tablename__ = "progress"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(Text, nullable=False, index=True)
    item_id: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[str] = mapped_column(Text, default=ProgressStatus.NOT_STARTED.value)
    score: Mapped[float | None] = mapped_column(Float)  # 0-100

    updated_at: Mapped[datetime] = mapped_column(default=func.now(), onupdate=func.now())

    __table_args__ = (
        UniqueConstraint("user_id", "item_id", name="uq_progress_user_item"),
        Index("idx_progress_user_status", "user_id", "status"),
    )

    def __repr__(self) -> str:
        return f"<ProgressRow user={self.user_id} item={self.item_id} status={self.status}>"

    def to_domain(self) -> ProgressRecord:
        return ProgressRecord(
            user_id=self.user_id,
            item_id=self.item_id,
            status=ProgressStatus(self.status),
            score=self.score,
        )

"""
Fixture loading.

Loads users, learning items and progress from a JSON document into the
database, upserting by id. Expected shape:

    {
      "users": [{"id": "u1", "name": "Ada", "interests": ["python, web"]}],
      "items": [{"id": "l1", "title": "...", "tags": ["python"], "difficulty": "beginner",
                 "visits": 10, "rating": 4.5, "prerequisites": [], "source": "system",
                 "visibility": "curated", "personalized_for": [], "owner_id": null}],
      "progress": [{"user_id": "u1", "item_id": "l1", "status": "completed", "score": 80}]
    }
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from loguru import logger
from sqlalchemy import select
from sqlalchemy.orm import Session

from src.core.models import LearningItem, ProgressRecord, ProgressStatus
from src.db.database import SessionFactory, session_scope
from src.db.models import LearningItemRow, ProgressRow, UserRow


@dataclass
class SeedResult:
    users: int = 0
    items: int = 0
    progress: int = 0


def load_fixture(path: Path, session_factory: SessionFactory | None = None) -> SeedResult:
    """Read a JSON fixture file and upsert its contents."""
    if not path.exists():
        raise FileNotFoundError(f"Fixture file not found: {path}")
    data = json.loads(path.read_text(encoding="utf-8"))
    return seed_data(data, session_factory)


def seed_data(data: dict[str, Any], session_factory: SessionFactory | None = None) -> SeedResult:
    """
    Upsert users, items and progress from a mapping.

    Raises:
        ValueError: A record is missing a required key or fails validation
    """
    result = SeedResult()
    with session_scope(session_factory) as session:
        for user in data.get("users", []):
            _upsert_user(session, user)
            result.users += 1
        for raw in data.get("items", []):
            # Round-trip through the domain type to validate enums and ranges
            _upsert_item(session, _required(LearningItem.from_dict, raw, "item"))
            result.items += 1
        for raw in data.get("progress", []):
            _upsert_progress(session, _required(_progress_from_dict, raw, "progress record"))
            result.progress += 1

    logger.info(f"Seeded {result.users} users, {result.items} items, {result.progress} progress records")
    return result


def _required(build, raw: dict[str, Any], kind: str):
    try:
        return build(raw)
    except KeyError as e:
        raise ValueError(f"{kind} is missing required key {e}") from e


def _progress_from_dict(raw: dict[str, Any]) -> ProgressRecord:
    return ProgressRecord(
        user_id=str(raw["user_id"]),
        item_id=str(raw["item_id"]),
        status=ProgressStatus(raw.get("status", ProgressStatus.NOT_STARTED.value)),
        score=raw.get("score"),
    )


def _upsert_user(session: Session, raw: dict[str, Any]) -> None:
    user_id = str(_required(lambda r: r["id"], raw, "user"))
    row = session.get(UserRow, user_id) or UserRow(user_id=user_id)
    row.name = raw.get("name", row.name or "")
    row.interests = list(raw.get("interests") or [])
    session.add(row)
    session.flush()


def _upsert_item(session: Session, item: LearningItem) -> None:
    row = session.scalars(
        select(LearningItemRow).where(LearningItemRow.item_id == item.item_id)
    ).first() or LearningItemRow(item_id=item.item_id)
    row.title = item.title
    row.tags = list(item.tags)
    row.difficulty = item.difficulty.value
    row.prerequisites = list(item.prerequisites)
    row.visits = item.visits
    row.rating = item.rating
    row.source = item.source.value
    row.visibility = item.visibility.value
    row.personalized_for = sorted(item.personalized_for)
    row.owner_id = item.owner_id
    session.add(row)
    # Visible to later lookups in the same fixture
    session.flush()


def _upsert_progress(session: Session, record: ProgressRecord) -> None:
    row = session.scalars(
        select(ProgressRow).where(
            ProgressRow.user_id == record.user_id,
            ProgressRow.item_id == record.item_id,
        )
    ).first() or ProgressRow(user_id=record.user_id, item_id=record.item_id)
    row.status = record.status.value
    row.score = record.score
    session.add(row)
    session.flush()

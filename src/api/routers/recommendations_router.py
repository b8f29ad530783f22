"""
Recommendations router.

Endpoints for:
- Ranked recommendations for a user (automatic trigger)
- Manual refresh of recommendations
- Per-tag mastery of a user
- Recent recommendation history
"""
from __future__ import annotations

from datetime import datetime
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query
from loguru import logger
from pydantic import BaseModel, Field

from config import get_settings
from src.core.exceptions import StoreUnavailableError, UserNotFoundError
from src.core.models import UserProfile
from src.db.stores import SqlRecommendationLog, SqlUserStore, build_engine_from_db
from src.recommendation.engine import RecommendationEngine

router = APIRouter()


# ========================================
# Dependencies
# ========================================


def get_recommendation_engine() -> RecommendationEngine:
    """Engine wired to the SQL stores with the configured ranking weights."""
    return build_engine_from_db(config=get_settings().get_ranking_config())


def get_user_store() -> SqlUserStore:
    return SqlUserStore()


def get_recommendation_log() -> SqlRecommendationLog:
    return SqlRecommendationLog()


# ========================================
# Request/Response Models
# ========================================


class RefreshRequest(BaseModel):
    """Request model for a manual refresh."""

    limit: int | None = Field(None, description="Maximum number of recommendations")


class RecommendationsResponse(BaseModel):
    """Envelope shared by recommend and refresh."""

    success: bool = True
    data: list[dict[str, Any]]
    message: str


class MasteryResponse(BaseModel):
    user_id: str
    mastery: dict[str, float]


class HistoryEntry(BaseModel):
    trigger: str
    timestamp: datetime
    recommendations: list[dict[str, Any]]


# ========================================
# Helpers
# ========================================


def _load_profile(users: SqlUserStore, user_id: str) -> UserProfile:
    try:
        return users.get_profile(user_id)
    except UserNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    except StoreUnavailableError as exc:
        logger.error(f"User store unavailable: {exc}")
        raise HTTPException(status_code=503, detail="User store unavailable")


def _rank(
    engine: RecommendationEngine,
    profile: UserProfile,
    limit: int | None,
    manual: bool,
) -> list[dict[str, Any]]:
    limit = get_settings().clamp_limit(limit)
    run = engine.refresh if manual else engine.recommend
    try:
        results = run(profile, limit)
    except StoreUnavailableError as exc:
        logger.error(f"Recommendation stores unavailable for {profile.user_id}: {exc}")
        raise HTTPException(status_code=503, detail="Recommendation stores unavailable")
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return [r.to_dict() for r in results]


# ========================================
# Endpoints
# ========================================


@router.get(
    "/{user_id}",
    response_model=RecommendationsResponse,
    summary="Get recommendations",
)
def get_recommendations(
    user_id: str,
    limit: int | None = Query(None, description="Maximum number of recommendations"),
    engine: RecommendationEngine = Depends(get_recommendation_engine),
    users: SqlUserStore = Depends(get_user_store),
) -> RecommendationsResponse:
    """Ranked recommendations for a user, logged as an automatic run."""
    profile = _load_profile(users, user_id)
    return RecommendationsResponse(
        data=_rank(engine, profile, limit, manual=False),
        message="Recommendations generated successfully",
    )


@router.post(
    "/{user_id}/refresh",
    response_model=RecommendationsResponse,
    summary="Refresh recommendations",
)
def refresh_recommendations(
    user_id: str,
    request: RefreshRequest | None = None,
    engine: RecommendationEngine = Depends(get_recommendation_engine),
    users: SqlUserStore = Depends(get_user_store),
) -> RecommendationsResponse:
    """Recompute recommendations, logged as a manual refresh."""
    profile = _load_profile(users, user_id)
    limit = request.limit if request else None
    return RecommendationsResponse(
        data=_rank(engine, profile, limit, manual=True),
        message="Recommendations refreshed successfully",
    )


@router.get(
    "/{user_id}/mastery",
    response_model=MasteryResponse,
    summary="Get tag mastery",
)
def get_mastery(
    user_id: str,
    engine: RecommendationEngine = Depends(get_recommendation_engine),
    users: SqlUserStore = Depends(get_user_store),
) -> MasteryResponse:
    profile = _load_profile(users, user_id)
    try:
        mastery = engine.explain_mastery(profile)
    except StoreUnavailableError as exc:
        logger.error(f"Recommendation stores unavailable for {user_id}: {exc}")
        raise HTTPException(status_code=503, detail="Recommendation stores unavailable")
    return MasteryResponse(user_id=user_id, mastery=mastery)


@router.get(
    "/{user_id}/history",
    response_model=list[HistoryEntry],
    summary="Get recommendation history",
)
def get_history(
    user_id: str,
    last: int = Query(5, ge=1, le=100),
    log: SqlRecommendationLog = Depends(get_recommendation_log),
) -> list[HistoryEntry]:
    try:
        entries = log.recent(user_id, last)
    except StoreUnavailableError as exc:
        logger.error(f"Recommendation log unavailable: {exc}")
        raise HTTPException(status_code=503, detail="Recommendation log unavailable")

    return [
        HistoryEntry(
            trigger=entry.trigger,
            timestamp=entry.timestamp,
            recommendations=[
                {"item_id": r.item_id, "score": round(r.score, 4), "reason": r.reason}
                for r in entry.recommendations
            ],
        )
        for entry in entries
    ]

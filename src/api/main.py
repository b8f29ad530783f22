"""
FastAPI application for learnrank.

Provides REST API for:
- Ranked learning-item recommendations
- Manual recommendation refresh
- Per-tag mastery inspection
- Recommendation history
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from datetime import UTC, datetime
from typing import Any

from fastapi import FastAPI
from loguru import logger
from sqlalchemy.exc import SQLAlchemyError

from config import configure_logging, get_settings
from src.db.database import check_connection, init_db

settings = get_settings()


def _check_database_health() -> tuple[str, str | None]:
    """
    Check database connectivity.

    Returns:
        Tuple of (status, error_message). Status is "ok" or "error".
    """
    try:
        check_connection()
        return "ok", None
    except SQLAlchemyError as e:
        return "error", str(e)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown events."""
    # Startup
    configure_logging(settings)
    logger.info("Starting learnrank service...")
    init_db()
    logger.info(f"Service started on {settings.api_host}:{settings.api_port}")

    yield

    # Shutdown
    logger.info("Shutting down learnrank service...")


app = FastAPI(
    title="learnrank",
    description="""
    Recommendation engine for learning items.

    ## Ranking

    ```
    score = gap*0.5 + difficulty_match*0.2 + popularity*0.15 + rating*0.15
          + 0.20 (personalized for you) + 0.15 (added by you), capped at 1.0
    ```
    """,
    version="0.1.0",
    lifespan=lifespan,
)


# ========================================
# Health & Status Endpoints
# ========================================


@app.get("/", tags=["Health"])
def root() -> dict[str, str]:
    """Root endpoint returning service info."""
    return {
        "service": "learnrank",
        "version": "0.1.0",
        "status": "ok",
    }


@app.get("/health", tags=["Health"])
def health_check() -> dict[str, Any]:
    """Health check with an actual database round-trip."""
    db_status, db_error = _check_database_health()

    result = {
        "status": "healthy" if db_status == "ok" else "unhealthy",
        "timestamp": datetime.now(UTC).isoformat(),
        "components": {"database": db_status},
        "ranking": settings.get_ranking_config().weights(),
    }
    if db_error:
        result["errors"] = {"database": db_error}
    return result


# ========================================
# Import and mount routers
# ========================================

from src.api.routers import recommendations_router

app.include_router(
    recommendations_router.router, prefix="/recommendations", tags=["Recommendations"]
)

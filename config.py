"""
Configuration settings for the learnrank service.

Uses Pydantic Settings for environment variable management with .env file support.
"""
from __future__ import annotations

import sys
from functools import lru_cache
from typing import Literal

from loguru import logger
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.recommendation.weights import RankingConfig


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ========================================
    # Database
    # ========================================
    database_url: str = Field(
        default="sqlite:///data/learnrank.db",
        description="SQLAlchemy connection string (SQLite or PostgreSQL)",
    )

    # ========================================
    # Logging
    # ========================================
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Logging verbosity level",
    )
    log_file: str | None = Field(
        default=None,
        description="Log file path (None for stderr only)",
    )

    # ========================================
    # API Server
    # ========================================
    api_host: str = Field(
        default="127.0.0.1",
        description="API server host",
    )
    api_port: int = Field(
        default=8100,
        description="API server port",
    )

    # ========================================
    # Recommendation Limits
    # ========================================
    recommendation_default_limit: int = Field(
        default=10,
        ge=1,
        description="Number of recommendations returned when no limit is given",
    )
    recommendation_max_limit: int = Field(
        default=50,
        ge=1,
        description="Upper bound on the requested number of recommendations",
    )

    # ========================================
    # Ranking Weights (must sum to 1.0)
    # ========================================
    weight_gap: float = Field(
        default=0.5,
        description="Weight of the skill-gap signal",
    )
    weight_difficulty: float = Field(
        default=0.2,
        description="Weight of the difficulty-match signal",
    )
    weight_popularity: float = Field(
        default=0.15,
        description="Weight of pool-relative popularity",
    )
    weight_rating: float = Field(
        default=0.15,
        description="Weight of the normalized star rating",
    )

    # ========================================
    # Gating & Boosts
    # ========================================
    prerequisite_threshold: float = Field(
        default=0.5,
        description="Minimum mastery of each prerequisite tag for intermediate/advanced items",
    )
    personalized_boost: float = Field(
        default=0.20,
        description="Score boost for items generated for the requesting user",
    )
    authored_boost: float = Field(
        default=0.15,
        description="Score boost for items the requesting user added",
    )

    # ========================================
    # Reason Thresholds
    # ========================================
    reason_gap_threshold: float = Field(default=0.6)
    reason_difficulty_threshold: float = Field(default=0.7)
    reason_popularity_threshold: float = Field(default=0.7)
    reason_rating_threshold: float = Field(default=0.8)

    # ========================================
    # Helper Methods
    # ========================================
    def get_ranking_config(self) -> RankingConfig:
        """Build the validated ranking configuration."""
        return RankingConfig(
            weight_gap=self.weight_gap,
            weight_difficulty=self.weight_difficulty,
            weight_popularity=self.weight_popularity,
            weight_rating=self.weight_rating,
            prerequisite_threshold=self.prerequisite_threshold,
            personalized_boost=self.personalized_boost,
            authored_boost=self.authored_boost,
            reason_gap_threshold=self.reason_gap_threshold,
            reason_difficulty_threshold=self.reason_difficulty_threshold,
            reason_popularity_threshold=self.reason_popularity_threshold,
            reason_rating_threshold=self.reason_rating_threshold,
        )

    def clamp_limit(self, limit: int | None) -> int:
        """Apply the default and maximum recommendation limits."""
        if limit is None or limit < 1:
            return self.recommendation_default_limit
        return min(limit, self.recommendation_max_limit)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def configure_logging(settings: Settings | None = None, level: str | None = None) -> None:
    """Route loguru output to stderr (and the log file when configured)."""
    settings = settings or get_settings()
    level = level or settings.log_level

    logger.remove()
    logger.add(
        sys.stderr,
        level=level,
        format="<dim>{time:HH:mm:ss}</dim> | <level>{level: <8}</level> | {message}",
    )
    if settings.log_file:
        logger.add(
            settings.log_file,
            level=level,
            rotation="10 MB",
            retention=5,
            encoding="utf-8",
        )

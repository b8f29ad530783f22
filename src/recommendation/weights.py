"""
Ranking Configuration.

Weights, thresholds and boosts used by the composite ranker, as an
injectable, validated structure. Defaults reproduce the production tuning:

    score = gap*0.5 + difficulty*0.2 + popularity*0.15 + rating*0.15
            (+0.20 personalized, +0.15 self-authored), capped at 1.0
"""

from __future__ import annotations

import math

from pydantic import BaseModel, ConfigDict, Field, model_validator

# Minimum mastery of every prerequisite tag for gated items
PREREQUISITE_THRESHOLD = 0.5


class RankingConfig(BaseModel):
    """Tunable parameters of the recommendation engine."""

    model_config = ConfigDict(frozen=True)

    # Composite weights (must sum to 1.0)
    weight_gap: float = Field(default=0.5, ge=0, le=1)
    weight_difficulty: float = Field(default=0.2, ge=0, le=1)
    weight_popularity: float = Field(default=0.15, ge=0, le=1)
    weight_rating: float = Field(default=0.15, ge=0, le=1)

    # Gating
    prerequisite_threshold: float = Field(default=PREREQUISITE_THRESHOLD, ge=0, le=1)

    # Additive boosts
    personalized_boost: float = Field(default=0.20, ge=0, le=1)
    authored_boost: float = Field(default=0.15, ge=0, le=1)

    # Reason selection (strictly greater than)
    reason_gap_threshold: float = Field(default=0.6, ge=0, le=1)
    reason_difficulty_threshold: float = Field(default=0.7, ge=0, le=1)
    reason_popularity_threshold: float = Field(default=0.7, ge=0, le=1)
    reason_rating_threshold: float = Field(default=0.8, ge=0, le=1)

    @model_validator(mode="after")
    def _weights_sum_to_one(self) -> RankingConfig:
        total = self.weight_gap + self.weight_difficulty + self.weight_popularity + self.weight_rating
        if not math.isclose(total, 1.0, abs_tol=1e-6):
            raise ValueError(f"ranking weights must sum to 1.0, got {total:.4f}")
        return self

    def weights(self) -> dict[str, float]:
        """Composite weights keyed by component name."""
        return {
            "gap": self.weight_gap,
            "difficulty_match": self.weight_difficulty,
            "popularity": self.weight_popularity,
            "rating": self.weight_rating,
        }

"""
Composite Ranker.

Combines gap, difficulty match, popularity and rating into one weighted
score, applies the personalized/self-authored boosts, caps at 1.0 and
attaches a single human-readable reason.
"""

from __future__ import annotations

from loguru import logger

from src.core.models import LearningItem, MasteryMap, RecommendationResult, UserProfile
from src.recommendation.candidates import CandidatePool
from src.recommendation.scoring import difficulty_match, gap_score, popularity_score, rating_score
from src.recommendation.weights import RankingConfig

MAX_SCORE = 1.0

REASON_SKILL_GAP = "fills a skill gap in {tag}"
REASON_DIFFICULTY = "difficulty matches your level"
REASON_POPULAR = "popular among learners"
REASON_HIGHLY_RATED = "highly rated"
REASON_INTERESTS = "matches your interests"


class CompositeRanker:
    """
    Score and order a candidate pool.

    Formula:
        score = gap*w_gap + difficulty*w_difficulty + popularity*w_popularity + rating*w_rating
        score += personalized_boost (item generated for this user)
        score += authored_boost (item added by this user)
        score = min(score, 1.0)

    Ordering is descending by score. Python's sort is stable, so ties keep
    the pool's deduplication order.
    """

    def __init__(self, config: RankingConfig | None = None):
        self.config = config or RankingConfig()

    def score_item(
        self,
        profile: UserProfile,
        item: LearningItem,
        mastery: MasteryMap,
        max_visits: int,
    ) -> RecommendationResult:
        """
        Score a single item for a user.

        Args:
            profile: Requesting user
            item: Candidate item
            mastery: Tag mastery of the user
            max_visits: Highest visit count in the candidate pool

        Returns:
            RecommendationResult with the capped score and its reason
        """
        cfg = self.config
        gap = gap_score(mastery, item.tags)
        difficulty = difficulty_match(item.difficulty, item.tags, mastery)
        popularity = popularity_score(item.visits, max_visits)
        rating = rating_score(item.rating)

        score = (
            gap * cfg.weight_gap
            + difficulty * cfg.weight_difficulty
            + popularity * cfg.weight_popularity
            + rating * cfg.weight_rating
        )

        boost = 0.0
        if item.is_personalized_for(profile.user_id):
            boost += cfg.personalized_boost
        if item.is_authored_by(profile.user_id):
            boost += cfg.authored_boost

        return RecommendationResult(
            item=item,
            score=min(score + boost, MAX_SCORE),
            reason=self.select_reason(item, gap, difficulty, popularity, rating),
            gap=gap,
            difficulty_match=difficulty,
            popularity=popularity,
            rating=rating,
            boost=boost,
        )

    def select_reason(
        self,
        item: LearningItem,
        gap: float,
        difficulty: float,
        popularity: float,
        rating: float,
    ) -> str:
        """First matching rule wins: gap, difficulty, popularity, rating, interests."""
        cfg = self.config
        if gap > cfg.reason_gap_threshold:
            return REASON_SKILL_GAP.format(tag=item.tags[0] if item.tags else "this topic")
        if difficulty > cfg.reason_difficulty_threshold:
            return REASON_DIFFICULTY
        if popularity > cfg.reason_popularity_threshold:
            return REASON_POPULAR
        if rating > cfg.reason_rating_threshold:
            return REASON_HIGHLY_RATED
        return REASON_INTERESTS

    def rank(self, profile: UserProfile, pool: CandidatePool) -> list[RecommendationResult]:
        """Score every candidate and sort descending by score."""
        max_visits = pool.max_visits
        scored = [
            self.score_item(profile, item, pool.mastery, max_visits)
            for item in pool.items
        ]
        scored.sort(key=lambda r: r.score, reverse=True)
        logger.debug(f"Ranked {len(scored)} candidates for {profile.user_id}")
        return scored

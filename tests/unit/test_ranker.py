"""
Unit tests for the composite ranker.
"""

import pytest

from src.core.models import ContentSource, Difficulty, UserProfile
from src.recommendation.candidates import CandidatePool, FilterStats
from src.recommendation.ranker import (
    REASON_DIFFICULTY,
    REASON_HIGHLY_RATED,
    REASON_INTERESTS,
    REASON_POPULAR,
    CompositeRanker,
)
from src.recommendation.weights import RankingConfig


def _pool(items, mastery=None):
    return CandidatePool(items=tuple(items), mastery=mastery or {}, tags=(), stats=FilterStats())


class TestScoreItem:
    def test_weighted_sum(self, make_item, monkeypatch):
        # gap=0.55, difficulty=1.0, popularity=25/100, rating=4/5
        monkeypatch.setattr("src.recommendation.ranker.gap_score", lambda mastery, tags: 0.55)
        monkeypatch.setattr("src.recommendation.ranker.difficulty_match", lambda d, tags, mastery: 1.0)
        item = make_item("x", tags=("python", "web"), visits=25, rating=4.0)

        result = CompositeRanker().score_item(UserProfile("u1"), item, {}, max_visits=100)

        assert result.score == pytest.approx(0.6325)
        assert result.reason == REASON_DIFFICULTY
        assert result.popularity == 0.25
        assert result.boost == 0.0

    def test_real_components(self, make_item):
        item = make_item(
            "flask",
            tags=("python", "web"),
            difficulty=Difficulty.INTERMEDIATE,
            visits=25,
            rating=4.0,
        )

        result = CompositeRanker().score_item(
            UserProfile("u1"), item, {"python": 0.9, "web": 0.0}, max_visits=100
        )

        assert result.gap == pytest.approx(0.55)
        assert result.difficulty_match == pytest.approx(0.95)
        assert result.score == pytest.approx(0.55 * 0.5 + 0.95 * 0.2 + 0.25 * 0.15 + 0.8 * 0.15)

    def test_personalized_boost_capped(self, make_item):
        item = make_item(
            "gen",
            tags=("web",),
            visits=50,
            rating=4.0,
            source=ContentSource.GENERATED,
            personalized_for=frozenset({"u1"}),
        )

        result = CompositeRanker().score_item(UserProfile("u1"), item, {}, max_visits=100)

        # base 0.5 + 0.2 + 0.075 + 0.12 = 0.895, plus 0.20
        assert result.boost == pytest.approx(0.20)
        assert result.score == 1.0

    def test_authored_boost(self, make_item):
        item = make_item("mine", tags=("sql",), source=ContentSource.USER, owner_id="u1")

        mine = CompositeRanker().score_item(UserProfile("u1"), item, {"sql": 1.0}, max_visits=1)
        theirs = CompositeRanker().score_item(UserProfile("u2"), item, {"sql": 1.0}, max_visits=1)

        assert mine.boost == pytest.approx(0.15)
        assert mine.score == pytest.approx(theirs.score + 0.15)

    def test_boost_not_applied_to_other_users(self, make_item):
        item = make_item(
            "gen", source=ContentSource.GENERATED, personalized_for=frozenset({"u1"})
        )

        result = CompositeRanker().score_item(UserProfile("u2"), item, {}, max_visits=0)

        assert result.boost == 0.0

    def test_custom_weights(self, make_item):
        config = RankingConfig(
            weight_gap=1.0, weight_difficulty=0.0, weight_popularity=0.0, weight_rating=0.0
        )
        item = make_item("x", tags=("python",), visits=10, rating=5.0)

        result = CompositeRanker(config).score_item(
            UserProfile("u1"), item, {"python": 0.25}, max_visits=10
        )

        assert result.score == pytest.approx(0.75)


class TestSelectReason:
    @pytest.fixture
    def ranker(self):
        return CompositeRanker()

    def test_gap_reason_names_first_tag(self, ranker, make_item):
        item = make_item("x", tags=("web", "css"))
        assert ranker.select_reason(item, 0.61, 1.0, 1.0, 1.0) == "fills a skill gap in web"

    def test_gap_reason_without_tags(self, ranker, make_item):
        assert ranker.select_reason(make_item("x"), 0.9, 0, 0, 0) == "fills a skill gap in this topic"

    def test_difficulty_reason(self, ranker, make_item):
        assert ranker.select_reason(make_item("x", tags=("a",)), 0.55, 1.0, 0.25, 0.8) == REASON_DIFFICULTY

    def test_popularity_reason(self, ranker, make_item):
        assert ranker.select_reason(make_item("x"), 0.6, 0.7, 0.71, 1.0) == REASON_POPULAR

    def test_rating_reason(self, ranker, make_item):
        assert ranker.select_reason(make_item("x"), 0.0, 0.0, 0.0, 0.9) == REASON_HIGHLY_RATED

    def test_thresholds_are_strict(self, ranker, make_item):
        assert ranker.select_reason(make_item("x"), 0.6, 0.7, 0.7, 0.8) == REASON_INTERESTS


class TestRank:
    def test_sorted_descending(self, make_item):
        items = [
            make_item("low", tags=("python",), rating=1.0),
            make_item("high", tags=("sql",), visits=10, rating=5.0),
        ]

        results = CompositeRanker().rank(UserProfile("u1"), _pool(items, {"python": 1.0, "sql": 0.0}))

        assert [r.item_id for r in results] == ["high", "low"]

    def test_ties_keep_pool_order(self, make_item):
        a = make_item("a", tags=("python",), visits=5, rating=3.0)
        b = make_item("b", tags=("python",), visits=5, rating=3.0)
        ranker = CompositeRanker()

        forward = ranker.rank(UserProfile("u1"), _pool([a, b]))
        backward = ranker.rank(UserProfile("u1"), _pool([b, a]))

        assert forward[0].score == forward[1].score
        assert [r.item_id for r in forward] == ["a", "b"]
        assert [r.item_id for r in backward] == ["b", "a"]

    def test_popularity_uses_pool_max(self, make_item):
        items = [make_item("busy", visits=200), make_item("quiet", visits=50)]

        results = CompositeRanker().rank(UserProfile("u1"), _pool(items))

        assert {r.item_id: r.popularity for r in results} == {"busy": 1.0, "quiet": 0.25}

    def test_scores_within_unit_interval(self, catalog_items):
        results = CompositeRanker().rank(UserProfile("u1"), _pool(catalog_items))

        assert all(0.0 <= r.score <= 1.0 for r in results)

    def test_empty_pool(self):
        assert CompositeRanker().rank(UserProfile("u1"), _pool([])) == []

"""
Unit tests for tag mastery estimation.
"""

import pytest

from src.core.mastery import MasteryEstimator, MasteryLevel
from src.core.models import CompletedProgress, ProgressRecord, ProgressStatus


class TestMasteryEstimator:
    def test_average_of_completed_scores(self, make_item, completed):
        a = make_item("a", tags=("python",))
        b = make_item("b", tags=("python",))

        mastery = MasteryEstimator().estimate(
            [completed("u1", a, 80), completed("u1", b, 100)], ["python"]
        )

        assert mastery["python"] == pytest.approx(0.9)

    def test_missing_score_counts_as_full(self, make_item, completed):
        a = make_item("a", tags=("python",))

        mastery = MasteryEstimator().estimate([completed("u1", a, None)], ["python"])

        assert mastery["python"] == 1.0

    def test_zero_score_is_kept(self, make_item, completed):
        a = make_item("a", tags=("python",))

        mastery = MasteryEstimator().estimate([completed("u1", a, 0)], ["python"])

        assert mastery["python"] == 0.0

    def test_unpracticed_tag_is_zero(self, make_item, completed):
        a = make_item("a", tags=("python",))

        mastery = MasteryEstimator().estimate([completed("u1", a, 90)], ["python", "sql"])

        assert mastery == {"python": pytest.approx(0.9), "sql": 0.0}

    def test_only_queried_tags_reported(self, make_item, completed):
        a = make_item("a", tags=("python", "web"))

        mastery = MasteryEstimator().estimate([completed("u1", a, 50)], ["web"])

        assert list(mastery) == ["web"]

    def test_deleted_item_is_skipped(self, make_item, completed):
        a = make_item("a", tags=("python",))

        mastery = MasteryEstimator().estimate(
            [completed("u1", None, 10, item_id="gone"), completed("u1", a, 60)], ["python"]
        )

        assert mastery["python"] == pytest.approx(0.6)

    def test_non_completed_records_ignored(self, make_item):
        a = make_item("a", tags=("python",))
        in_progress = CompletedProgress(
            record=ProgressRecord("u1", "a", ProgressStatus.IN_PROGRESS, 20), item=a
        )

        mastery = MasteryEstimator().estimate([in_progress], ["python"])

        assert mastery["python"] == 0.0

    def test_values_stay_within_unit_interval(self, make_item, completed):
        items = [make_item(f"i{n}", tags=("t",)) for n in range(5)]
        history = [completed("u1", item, score) for item, score in zip(items, [0, 25, 50, 100, None])]

        mastery = MasteryEstimator().estimate(history, ["t"])

        assert 0.0 <= mastery["t"] <= 1.0


class TestMasteryLevel:
    @pytest.mark.parametrize(
        "score,level",
        [
            (0.0, MasteryLevel.NOT_STARTED),
            (0.2, MasteryLevel.NOVICE),
            (0.5, MasteryLevel.DEVELOPING),
            (0.75, MasteryLevel.PROFICIENT),
            (0.95, MasteryLevel.MASTERED),
        ],
    )
    def test_from_score(self, score, level):
        assert MasteryLevel.from_score(score) is level

    def test_display_name(self):
        assert MasteryLevel.NOT_STARTED.display_name == "Not Started"

"""Tests for the penalty scoring rules."""

import pytest

from analysis_ledger.domain import compliance_level, overall_score, penalty_score, risk_level


class TestPenaltyScore:
    @pytest.mark.parametrize("n", range(0, 25))
    def test_linear_decay_with_floor(self, n):
        assert penalty_score(n) == max(0, 100 - 10 * n)

    @pytest.mark.parametrize("n", [10, 11, 50, 10_000])
    def test_zero_from_ten_issues(self, n):
        assert penalty_score(n) == 0

    def test_negative_count_scores_full(self):
        assert penalty_score(-3) == 100

    def test_monotonic(self):
        scores = [penalty_score(n) for n in range(15)]
        assert scores == sorted(scores, reverse=True)


class TestOverallScore:
    def test_exact_mean_of_four(self):
        assert overall_score([80.0, 90.0, 70.0, 60.0]) == pytest.approx(75.0)

    def test_within_bounds(self):
        for scores in ([0, 0, 0, 0], [100, 100, 100, 100], [0, 100, 50, 25]):
            assert 0 <= overall_score(scores) <= 100

    def test_ignores_unset_scores(self):
        assert overall_score([80.0, None, 60.0, None]) == pytest.approx(70.0)

    def test_none_when_nothing_set(self):
        assert overall_score([None, None, None, None]) is None


class TestLevels:
    @pytest.mark.parametrize(
        "score,level",
        [(100, "EXCELLENT"), (95, "EXCELLENT"), (94.9, "GOOD"), (85, "GOOD"), (80, "FAIR"), (60, "POOR"), (59.9, "CRITICAL")],
    )
    def test_compliance_level(self, score, level):
        assert compliance_level(score) == level

    def test_compliance_level_unknown(self):
        assert compliance_level(None) == "UNKNOWN"

    @pytest.mark.parametrize("count,level", [(0, "LOW"), (1, "MEDIUM"), (2, "MEDIUM"), (5, "HIGH"), (6, "CRITICAL")])
    def test_risk_level(self, count, level):
        assert risk_level(count) == level

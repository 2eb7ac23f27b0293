"""Tests for scoring/risk.py -- additive risk score."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from template_scanner.models import RiskSignals
from template_scanner.scoring.risk import MAX_RISK, evaluate_risk, months_since

NOW = datetime(2026, 10, 19, tzinfo=UTC)


def _signals(**overrides: object) -> RiskSignals:
    """Signals for a healthy repository; each override introduces one red flag."""
    fields: dict[str, object] = {
        "stars": 500,
        "last_commit": NOW - timedelta(days=10),
        "has_env_example": True,
        "dependencies": ["a"] * 10,
        "contributors": 10,
        "open_issues": 5,
        "loc": 2000,
        "license": "MIT",
    }
    fields.update(overrides)
    return RiskSignals(**fields)  # type: ignore[arg-type]


class TestMonthsSince:
    def test_thirty_day_months(self) -> None:
        assert months_since(NOW - timedelta(days=90), now=NOW) == pytest.approx(3.0)

    def test_naive_datetime_treated_as_utc(self) -> None:
        naive = datetime(2026, 9, 19)
        assert months_since(naive, now=NOW) == pytest.approx(30 / 30)

    def test_unknown(self) -> None:
        assert months_since(None, now=NOW) is None


class TestEvaluateRisk:
    def test_healthy_repository_scores_zero(self) -> None:
        assessment = evaluate_risk(_signals(), now=NOW)
        assert assessment.score == 0.0
        assert assessment.factors == []

    def test_abandoned_unpopular_repository_is_capped(self) -> None:
        assessment = evaluate_risk(
            _signals(
                stars=50,
                contributors=1,
                last_commit=NOW - timedelta(days=14 * 30),
                open_issues=10,
                loc=500,
                dependencies=["a", "b", "c", "d", "e"],
                has_env_example=False,
                license=None,
            ),
            now=NOW,
        )
        assert assessment.score == 5.0
        assert assessment.factors == [
            "Low popularity (stars < 100)",
            "Too few contributors (< 3)",
            "No updates for over 12 months",
            "Missing environment variable example",
            "Missing license",
        ]

    @pytest.mark.parametrize(
        ("override", "weight", "factor"),
        [
            ({"stars": 99}, 1.5, "Low popularity (stars < 100)"),
            ({"contributors": 2}, 1.0, "Too few contributors (< 3)"),
            ({"last_commit": NOW - timedelta(days=200)}, 1.0, "No updates for over 6 months"),
            ({"last_commit": NOW - timedelta(days=400)}, 2.0, "No updates for over 12 months"),
            ({"open_issues": 51}, 1.0, "Too many open issues (> 50)"),
            ({"loc": 10001}, 1.0, "Large codebase (LOC > 10,000)"),
            ({"dependencies": ["d"] * 51}, 0.5, "Too many dependencies (> 50)"),
            ({"has_env_example": False}, 0.5, "Missing environment variable example"),
            ({"license": None}, 0.5, "Missing license"),
            ({"license": "None"}, 0.5, "Missing license"),
        ],
    )
    def test_each_factor(self, override: dict, weight: float, factor: str) -> None:
        assessment = evaluate_risk(_signals(**override), now=NOW)
        assert assessment.score == weight
        assert assessment.factors == [factor]

    @pytest.mark.parametrize(
        "override",
        [
            {"stars": 100},
            {"contributors": 3},
            {"open_issues": 50},
            {"loc": 10000},
            {"dependencies": ["d"] * 50},
            {"last_commit": NOW - timedelta(days=180)},
        ],
    )
    def test_thresholds_are_strict(self, override: dict) -> None:
        assert evaluate_risk(_signals(**override), now=NOW).score == 0.0

    def test_unknown_last_commit_adds_nothing(self) -> None:
        assessment = evaluate_risk(_signals(last_commit=None), now=NOW)
        assert assessment.score == 0.0

    def test_score_never_exceeds_cap(self) -> None:
        worst = _signals(
            stars=0,
            contributors=0,
            last_commit=NOW - timedelta(days=1000),
            open_issues=500,
            loc=50000,
            dependencies=["d"] * 100,
            has_env_example=False,
            license=None,
        )
        assessment = evaluate_risk(worst, now=NOW)
        assert assessment.score == MAX_RISK
        assert len(assessment.factors) == 8

    def test_adding_a_red_flag_never_lowers_the_score(self) -> None:
        base = evaluate_risk(_signals(stars=10), now=NOW).score
        worse = evaluate_risk(_signals(stars=10, open_issues=99), now=NOW).score
        assert worse >= base

"""Tests for scoring/composite.py -- normalized quality score."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from template_scanner.models import CompositeSignals
from template_scanner.scoring.composite import (
    WEIGHTS,
    composite_score,
    normalized_components,
    round_half_up,
)

NOW = datetime(2026, 10, 19, tzinfo=UTC)


def _signals(**overrides: object) -> CompositeSignals:
    fields: dict[str, object] = {
        "stars": 0,
        "contributors": 0,
        "core_features": [],
        "has_env_example": False,
        "last_commit": NOW,
        "risk_score": 0.0,
    }
    fields.update(overrides)
    return CompositeSignals(**fields)  # type: ignore[arg-type]


class TestNormalizedComponents:
    def test_weights_sum_to_one(self) -> None:
        assert sum(WEIGHTS.values()) == pytest.approx(1.0)

    def test_saturation(self) -> None:
        components = normalized_components(
            _signals(stars=90000, contributors=400, core_features=["f"] * 9), now=NOW
        )
        assert components["stars"] == 1.0
        assert components["contributors"] == 1.0
        assert components["features"] == 1.0

    @pytest.mark.parametrize(
        ("age_days", "expected"),
        [(0, 1.0), (90, 1.0), (91, 0.5), (180, 0.5), (181, 0.0), (720, 0.0)],
    )
    def test_recency_steps(self, age_days: int, expected: float) -> None:
        components = normalized_components(_signals(last_commit=NOW - timedelta(days=age_days)), now=NOW)
        assert components["recency"] == expected

    def test_unknown_last_commit_has_no_recency(self) -> None:
        assert normalized_components(_signals(last_commit=None), now=NOW)["recency"] == 0.0

    def test_risk_adjustment(self) -> None:
        assert normalized_components(_signals(risk_score=5.0), now=NOW)["risk_adjustment"] == 0.0
        assert normalized_components(_signals(risk_score=2.5), now=NOW)["risk_adjustment"] == 0.5


class TestCompositeScore:
    def test_fresh_but_empty_repository(self) -> None:
        assert composite_score(_signals(), now=NOW) == 1.5

    def test_perfect_repository(self) -> None:
        signals = _signals(
            stars=5000,
            contributors=50,
            core_features=["a", "b", "c", "d", "e"],
            has_env_example=True,
        )
        assert composite_score(signals, now=NOW) == 5.0

    def test_worst_repository(self) -> None:
        signals = _signals(last_commit=NOW - timedelta(days=1000), risk_score=5.0)
        assert composite_score(signals, now=NOW) == 0.0

    def test_one_decimal_place(self) -> None:
        score = composite_score(_signals(stars=1234, contributors=7, core_features=["a"]), now=NOW)
        assert score == round(score, 1)
        assert 0.0 <= score <= 5.0

    def test_more_stars_never_lower_the_score(self) -> None:
        low = composite_score(_signals(stars=100), now=NOW)
        high = composite_score(_signals(stars=4000), now=NOW)
        assert high >= low


class TestRoundHalfUp:
    @pytest.mark.parametrize(("value", "expected"), [(2.25, 2.3), (2.35, 2.4), (0.05, 0.1), (1.44, 1.4)])
    def test_rounds_half_away_from_zero(self, value: float, expected: float) -> None:
        assert round_half_up(value) == expected

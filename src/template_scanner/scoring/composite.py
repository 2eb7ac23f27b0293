"""Normalized 0-5 quality score combining popularity, completeness, recency and risk."""

from __future__ import annotations

from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal

from template_scanner.models import CompositeSignals
from template_scanner.scoring.risk import MAX_RISK, months_since

MAX_SCORE = 5.0

WEIGHTS: dict[str, float] = {
    "stars": 0.25,
    "contributors": 0.15,
    "features": 0.2,
    "env": 0.1,
    "recency": 0.2,
    "risk_adjustment": 0.1,
}


def _recency(last_commit: datetime | None, now: datetime | None) -> float:
    """1 within 3 months, 0.5 within 6 months, else (or unknown) 0."""
    months = months_since(last_commit, now=now)
    if months is None:
        return 0.0
    if months <= 3:
        return 1.0
    if months <= 6:
        return 0.5
    return 0.0


def normalized_components(
    signals: CompositeSignals, *, now: datetime | None = None
) -> dict[str, float]:
    """Each sub-signal scaled to [0, 1], keyed like ``WEIGHTS``."""
    return {
        "stars": min(max(signals.stars, 0) / 5000, 1.0),
        "contributors": min(max(signals.contributors, 0) / 50, 1.0),
        "features": min(len(signals.core_features) / 5, 1.0),
        "env": 1.0 if signals.has_env_example else 0.0,
        "recency": _recency(signals.last_commit, now),
        "risk_adjustment": 1.0 - min(max(signals.risk_score, 0.0), MAX_RISK) / MAX_RISK,
    }


def round_half_up(value: float, places: int = 1) -> float:
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def composite_score(signals: CompositeSignals, *, now: datetime | None = None) -> float:
    """Weighted sum of the normalized components, scaled to 0-5, one decimal."""
    components = normalized_components(signals, now=now)
    weighted = sum(WEIGHTS[name] * value for name, value in components.items())
    return round_half_up(min(max(weighted * MAX_SCORE, 0.0), MAX_SCORE))

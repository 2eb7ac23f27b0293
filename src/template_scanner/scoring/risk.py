"""Additive risk score from maintenance, community and complexity signals."""

from __future__ import annotations

from datetime import UTC, datetime

from template_scanner.models import RiskAssessment, RiskSignals

MAX_RISK = 5.0
_DAYS_PER_MONTH = 30


def months_since(moment: datetime | None, *, now: datetime | None = None) -> float | None:
    """Months (30-day units) elapsed since ``moment``. None if unknown.

    Naive datetimes are taken to be UTC.
    """
    if moment is None:
        return None
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=UTC)
    now = now or datetime.now(tz=UTC)
    return (now - moment).total_seconds() / (_DAYS_PER_MONTH * 86400)


def evaluate_risk(signals: RiskSignals, *, now: datetime | None = None) -> RiskAssessment:
    """Compute the capped risk score.

    Scoring components (factors are reported in this order):
    - stars < 100: +1.5
    - contributors < 3: +1.0
    - no commit for > 12 months: +2.0, else > 6 months: +1.0
    - open issues > 50: +1.0
    - LOC > 10,000: +1.0
    - more than 50 dependencies: +0.5
    - no env example file: +0.5
    - no license (absent or "None"): +0.5

    The sum is capped at 5.0.
    """
    score = 0.0
    factors: list[str] = []

    # Community
    if signals.stars < 100:
        score += 1.5
        factors.append("Low popularity (stars < 100)")
    if signals.contributors < 3:
        score += 1.0
        factors.append("Too few contributors (< 3)")

    # Maintenance
    months = months_since(signals.last_commit, now=now)
    if months is not None:
        if months > 12:
            score += 2.0
            factors.append("No updates for over 12 months")
        elif months > 6:
            score += 1.0
            factors.append("No updates for over 6 months")
    if signals.open_issues > 50:
        score += 1.0
        factors.append("Too many open issues (> 50)")

    # Complexity
    if signals.loc > 10000:
        score += 1.0
        factors.append("Large codebase (LOC > 10,000)")
    if len(signals.dependencies) > 50:
        score += 0.5
        factors.append("Too many dependencies (> 50)")

    # Configuration hygiene
    if not signals.has_env_example:
        score += 0.5
        factors.append("Missing environment variable example")
    if not signals.license or signals.license == "None":
        score += 0.5
        factors.append("Missing license")

    return RiskAssessment(score=min(score, MAX_RISK), factors=factors)

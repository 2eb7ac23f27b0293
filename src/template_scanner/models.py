"""Domain models for template-scanner. All frozen dataclasses -- no mutation after creation."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum

DEFAULT_THEME_COLORS: tuple[str, ...] = ("#3b82f6", "#1e293b")
NO_SERVICES = "None"
UNKNOWN_FEATURE = "Unknown"


# ─── Enumerations ─────────────────────────────────────────────


class ScanOutcome(StrEnum):
    SCANNED = "scanned"
    SKIPPED = "skipped"


# ─── Store Models ─────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class StaleTemplate:
    """A catalog row whose last scan is missing or older than the staleness window."""

    id: int
    repository_url: str

    def to_payload(self) -> dict[str, object]:
        """Queue/HTTP representation; keeps the store's column name for the URL."""
        return {"id": self.id, "visit_link": self.repository_url}

    @classmethod
    def from_payload(cls, payload: dict[str, object]) -> StaleTemplate:
        return cls(id=int(payload["id"]), repository_url=str(payload["visit_link"]))


# ─── Analysis Models ──────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class TechStack:
    """Technology facts inferred from a cloned repository."""

    framework: str = "Unknown"
    database: str = "None"
    required_services: list[str] = field(default_factory=lambda: [NO_SERVICES])
    dependencies: list[str] = field(default_factory=list)
    dev_dependencies: list[str] = field(default_factory=list)
    potentially_outdated: list[str] = field(default_factory=list)
    has_env_example: bool = False

    def to_dict(self) -> dict[str, object]:
        return {
            "framework": self.framework,
            "database": self.database,
            "required_services": list(self.required_services),
            "dependencies": list(self.dependencies),
            "dev_dependencies": list(self.dev_dependencies),
            "potentially_outdated": list(self.potentially_outdated),
        }


@dataclass(frozen=True, slots=True)
class RepoStats:
    """Repository metadata reported by the hosting provider."""

    stars: int = 0
    forks: int = 0
    last_commit: datetime | None = None
    license: str | None = None
    open_issues: int = 0


# ─── Scoring Models ───────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class RiskSignals:
    """Raw inputs to the additive risk score."""

    stars: int
    last_commit: datetime | None
    has_env_example: bool
    dependencies: list[str]
    contributors: int
    open_issues: int
    loc: int
    license: str | None


@dataclass(frozen=True, slots=True)
class RiskAssessment:
    """Capped risk score plus the factors that contributed to it, in evaluation order."""

    score: float
    factors: list[str] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class CompositeSignals:
    """Raw inputs to the normalized quality score."""

    stars: int
    contributors: int
    core_features: list[str]
    has_env_example: bool
    last_commit: datetime | None
    risk_score: float


# ─── Pipeline Models ──────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class TemplateScan:
    """Everything one scan computes for a template; written back as a whole row."""

    template_id: int
    tech_stack: TechStack
    stats: RepoStats
    risk: RiskAssessment
    core_features: list[str]
    required_services: list[str]
    custom_score: float
    theme_colors: list[str]
    loc: int
    contributors: int
    last_scanned: datetime

    def to_row(self) -> dict[str, object]:
        """Column mapping for the ``templates`` table."""
        return {
            "tech_stack": self.tech_stack.to_dict(),
            "stars": self.stats.stars,
            "forks": self.stats.forks,
            "last_commit": self.stats.last_commit.isoformat() if self.stats.last_commit else None,
            "risk_score": self.risk.score,
            "risk_factors": list(self.risk.factors),
            "has_env_example": self.tech_stack.has_env_example,
            "open_issues": self.stats.open_issues,
            "license": self.stats.license,
            "core_features": list(self.core_features),
            "required_services": list(self.required_services),
            "custom_score": self.custom_score,
            "theme_colors": list(self.theme_colors),
            "loc": self.loc,
            "contributors": self.contributors,
            "last_scanned": self.last_scanned.isoformat(),
        }


@dataclass(frozen=True, slots=True)
class EnqueueResult:
    """Outcome of one producer run."""

    enqueued_count: int
    enqueued_templates: list[StaleTemplate] = field(default_factory=list)

    def to_dict(self) -> dict[str, object]:
        return {
            "message": f"{self.enqueued_count} jobs added",
            "jobs": [t.to_payload() for t in self.enqueued_templates],
        }


# ─── Queue Models ─────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class JobOptions:
    """Retry policy attached to a job at enqueue time."""

    attempts: int = 3
    backoff_delay_ms: int = 5000


@dataclass(frozen=True, slots=True)
class Job:
    """A unit of work as delivered by the broker."""

    job_id: str
    data: dict[str, object]
    attempts_made: int = 0
    max_attempts: int = 3
    backoff_delay_ms: int = 5000

    @property
    def attempts_left(self) -> int:
        """Attempts remaining after the one currently in flight."""
        return max(0, self.max_attempts - self.attempts_made - 1)

"""Tests for models.py -- payload and row serialization."""

from __future__ import annotations

from datetime import UTC, datetime

from template_scanner.models import (
    EnqueueResult,
    Job,
    RepoStats,
    RiskAssessment,
    StaleTemplate,
    TechStack,
    TemplateScan,
)


def _scan(**overrides: object) -> TemplateScan:
    fields: dict[str, object] = {
        "template_id": 7,
        "tech_stack": TechStack(framework="Next.js", database="PostgreSQL", has_env_example=True),
        "stats": RepoStats(
            stars=120,
            forks=4,
            last_commit=datetime(2026, 9, 1, tzinfo=UTC),
            license="MIT",
            open_issues=3,
        ),
        "risk": RiskAssessment(score=1.0, factors=["Too few contributors (< 3)"]),
        "core_features": ["Auth"],
        "required_services": ["Redis"],
        "custom_score": 2.3,
        "theme_colors": ["#112233"],
        "loc": 900,
        "contributors": 2,
        "last_scanned": datetime(2026, 10, 1, 12, 0, tzinfo=UTC),
    }
    fields.update(overrides)
    return TemplateScan(**fields)  # type: ignore[arg-type]


class TestStaleTemplate:
    def test_payload_uses_visit_link_key(self) -> None:
        template = StaleTemplate(id=3, repository_url="https://github.com/a/b")
        assert template.to_payload() == {"id": 3, "visit_link": "https://github.com/a/b"}

    def test_from_payload(self) -> None:
        template = StaleTemplate.from_payload({"id": "3", "visit_link": "https://github.com/a/b"})
        assert template == StaleTemplate(id=3, repository_url="https://github.com/a/b")


class TestTechStack:
    def test_defaults(self) -> None:
        stack = TechStack()
        assert stack.framework == "Unknown"
        assert stack.database == "None"
        assert stack.required_services == ["None"]

    def test_to_dict_omits_env_flag(self) -> None:
        assert "has_env_example" not in TechStack(has_env_example=True).to_dict()


class TestTemplateScanRow:
    def test_columns(self) -> None:
        row = _scan().to_row()
        assert row["stars"] == 120
        assert row["forks"] == 4
        assert row["last_commit"] == "2026-09-01T00:00:00+00:00"
        assert row["risk_score"] == 1.0
        assert row["risk_factors"] == ["Too few contributors (< 3)"]
        assert row["has_env_example"] is True
        assert row["license"] == "MIT"
        assert row["required_services"] == ["Redis"]
        assert row["custom_score"] == 2.3
        assert row["loc"] == 900
        assert row["contributors"] == 2
        assert row["last_scanned"] == "2026-10-01T12:00:00+00:00"
        assert row["tech_stack"]["framework"] == "Next.js"  # type: ignore[index]

    def test_unknown_last_commit_and_license_are_null(self) -> None:
        row = _scan(stats=RepoStats()).to_row()
        assert row["last_commit"] is None
        assert row["license"] is None


class TestEnqueueResult:
    def test_message_and_jobs(self) -> None:
        result = EnqueueResult(
            enqueued_count=2,
            enqueued_templates=[
                StaleTemplate(id=1, repository_url="https://github.com/a/one"),
                StaleTemplate(id=2, repository_url="https://github.com/a/two"),
            ],
        )
        assert result.to_dict() == {
            "message": "2 jobs added",
            "jobs": [
                {"id": 1, "visit_link": "https://github.com/a/one"},
                {"id": 2, "visit_link": "https://github.com/a/two"},
            ],
        }

    def test_empty(self) -> None:
        assert EnqueueResult(enqueued_count=0).to_dict() == {"message": "0 jobs added", "jobs": []}


class TestJob:
    def test_attempts_left(self) -> None:
        assert Job(job_id="1", data={}, attempts_made=0, max_attempts=3).attempts_left == 2
        assert Job(job_id="1", data={}, attempts_made=2, max_attempts=3).attempts_left == 0

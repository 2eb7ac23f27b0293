"""Per-job scan: clone, analyze, score, persist."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path

from template_scanner.analysis.loc import count_loc
from template_scanner.analysis.readme import extract_core_features
from template_scanner.analysis.stack import analyze_tech_stack
from template_scanner.analysis.theme import extract_theme_colors
from template_scanner.host.base import RepositoryHostPort
from template_scanner.models import (
    CompositeSignals,
    Job,
    RepoStats,
    RiskSignals,
    ScanOutcome,
    StaleTemplate,
    TechStack,
    TemplateScan,
)
from template_scanner.pipeline.workspace import clone_workspace
from template_scanner.scoring.composite import composite_score
from template_scanner.scoring.risk import evaluate_risk
from template_scanner.store.base import TemplateStorePort

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class ScanProcessor:
    """Turns one queued job into one updated ``templates`` row.

    Templates on hosts the configured provider does not support complete
    as ``ScanOutcome.SKIPPED`` without touching the store. Any other
    failure is logged and re-raised so the broker can apply its retry
    policy. The clone directory never outlives ``process``.
    """

    store: TemplateStorePort
    host: RepositoryHostPort
    workspace_root: str | Path
    clone_timeout: float = 30.0
    clock: Callable[[], datetime] = field(default=_utcnow)

    async def process(self, job: Job) -> ScanOutcome:
        return await self.scan(StaleTemplate.from_payload(job.data))

    async def scan(self, template: StaleTemplate) -> ScanOutcome:
        url = template.repository_url
        if not self.host.supports(url):
            logger.info("Template %d: %s is not a supported repository URL, skipping", template.id, url)
            return ScanOutcome.SKIPPED

        logger.info("Scanning template %d (%s)", template.id, url)
        try:
            async with clone_workspace(
                self.host, url, root=self.workspace_root, timeout=self.clone_timeout
            ) as path:
                result = await self._analyze(template, path)
                await self.store.update_template(result)
        except Exception as exc:
            logger.error("Template %d scan failed: %s", template.id, exc)
            raise

        logger.info(
            "Template %d updated: risk=%.1f score=%.1f",
            template.id,
            result.risk.score,
            result.custom_score,
        )
        return ScanOutcome.SCANNED

    async def _analyze(self, template: StaleTemplate, path: Path) -> TemplateScan:
        url = template.repository_url
        stack, stats = await self._stack_and_stats(url, path)

        loc = await asyncio.to_thread(count_loc, path)
        core_features = await asyncio.to_thread(extract_core_features, path)
        contributors = await self.host.fetch_contributors_count(url)
        now = self.clock()

        risk = evaluate_risk(
            RiskSignals(
                stars=stats.stars,
                last_commit=stats.last_commit,
                has_env_example=stack.has_env_example,
                dependencies=stack.dependencies,
                contributors=contributors,
                open_issues=stats.open_issues,
                loc=loc,
                license=stats.license,
            ),
            now=now,
        )
        score = composite_score(
            CompositeSignals(
                stars=stats.stars,
                contributors=contributors,
                core_features=core_features,
                has_env_example=stack.has_env_example,
                last_commit=stats.last_commit,
                risk_score=risk.score,
            ),
            now=now,
        )
        theme_colors = await asyncio.to_thread(extract_theme_colors, path)

        return TemplateScan(
            template_id=template.id,
            tech_stack=stack,
            stats=stats,
            risk=risk,
            core_features=core_features,
            required_services=list(stack.required_services),
            custom_score=score,
            theme_colors=theme_colors,
            loc=loc,
            contributors=contributors,
            last_scanned=now,
        )

    async def _stack_and_stats(self, url: str, path: Path) -> tuple[TechStack, RepoStats]:
        """Tech-stack analysis and the metadata fetch are independent; run them together."""
        try:
            async with asyncio.TaskGroup() as tg:
                stack_task = tg.create_task(analyze_tech_stack(path))
                stats_task = tg.create_task(self.host.fetch_repo_stats(url))
        except ExceptionGroup as group:
            raise group.exceptions[0] from None
        return stack_task.result(), stats_task.result()

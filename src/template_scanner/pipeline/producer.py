"""Find stale templates and enqueue one scan job per template."""

from __future__ import annotations

import asyncio
import logging
from datetime import UTC, datetime, timedelta

from template_scanner.jobs.base import JobQueuePort
from template_scanner.models import EnqueueResult, JobOptions, StaleTemplate
from template_scanner.store.base import TemplateStorePort

logger = logging.getLogger(__name__)

SCAN_JOB_NAME = "scan-template"
STALE_AFTER = timedelta(days=7)
MAX_BATCH_LIMIT = 100
DEFAULT_JOB_OPTIONS = JobOptions(attempts=3, backoff_delay_ms=5000)


async def enqueue_stale(
    store: TemplateStorePort,
    queue: JobQueuePort,
    *,
    max_batch: int = 10,
    stale_after: timedelta = STALE_AFTER,
    options: JobOptions = DEFAULT_JOB_OPTIONS,
    now: datetime | None = None,
) -> EnqueueResult:
    """Enqueue a scan job for every stale template, up to ``max_batch``.

    Each submission is independent: a failed enqueue is logged and the
    remaining templates are still submitted. Only successfully enqueued
    templates are counted and returned.

    Raises:
        ValueError: If ``max_batch`` is outside 1..100.
        StoreError: If the store cannot be queried (nothing is enqueued).
    """
    if not 1 <= max_batch <= MAX_BATCH_LIMIT:
        raise ValueError(f"max_batch must be between 1 and {MAX_BATCH_LIMIT}, got {max_batch}")

    now = now or datetime.now(tz=UTC)
    templates = await store.fetch_stale(scanned_before=now - stale_after, limit=max_batch)
    logger.info("Found %d stale template(s)", len(templates))

    results = await asyncio.gather(
        *(queue.enqueue(SCAN_JOB_NAME, t.to_payload(), options) for t in templates),
        return_exceptions=True,
    )

    enqueued: list[StaleTemplate] = []
    for template, result in zip(templates, results, strict=True):
        if isinstance(result, BaseException):
            logger.warning("Could not enqueue template %d: %s", template.id, result)
            continue
        enqueued.append(template)

    logger.info("Added %d template scan job(s)", len(enqueued))
    return EnqueueResult(enqueued_count=len(enqueued), enqueued_templates=enqueued)

"""BullMQ-backed job queue.

BullMQ owns the Redis layout, delivery locks, retries with backoff and
stalled-job recovery. This module only translates between its job objects
and the domain ``Job``/``JobOptions`` models.
"""

from __future__ import annotations

import logging
from typing import Any

from bullmq import Queue
from redis.exceptions import RedisError

from template_scanner.errors import QueueError
from template_scanner.models import Job, JobOptions

logger = logging.getLogger(__name__)


def to_job_options(options: JobOptions) -> dict[str, Any]:
    """BullMQ ``add`` options for ``options``. Completed jobs are dropped, failed ones kept."""
    return {
        "attempts": options.attempts,
        "backoff": {"type": "exponential", "delay": options.backoff_delay_ms},
        "removeOnComplete": True,
        "removeOnFail": False,
    }


def from_bullmq_job(bull_job: Any) -> Job:
    """Domain view of a delivered BullMQ job."""
    opts = bull_job.opts or {}
    backoff = opts.get("backoff") or 0
    delay = backoff.get("delay", 0) if isinstance(backoff, dict) else backoff
    return Job(
        job_id=str(bull_job.id),
        data=dict(bull_job.data or {}),
        attempts_made=int(bull_job.attemptsMade or 0),
        max_attempts=int(opts.get("attempts", 1)),
        backoff_delay_ms=int(delay),
    )


class BullJobQueue:
    """Adapter for JobQueuePort over a ``bullmq.Queue``."""

    def __init__(self, queue: Queue) -> None:
        self._queue = queue

    @property
    def name(self) -> str:
        return self._queue.name

    async def enqueue(self, name: str, data: dict[str, object], options: JobOptions) -> str:
        try:
            bull_job = await self._queue.add(name, data, to_job_options(options))
        except RedisError as exc:
            raise QueueError(f"Redis error while trying to enqueue a job: {exc}") from exc
        logger.debug("Enqueued %s job %s", name, bull_job.id)
        return str(bull_job.id)

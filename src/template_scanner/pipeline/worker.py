"""Long-running consumer: hands delivered jobs to the scan handler."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import Any

import bullmq

from template_scanner.jobs.base import JobHandlerPort
from template_scanner.jobs.bullmq_queue import from_bullmq_job
from template_scanner.models import Job

logger = logging.getLogger(__name__)


class Worker:
    """Consumes ``queue_name`` with up to ``concurrency`` jobs in flight.

    The broker delivers jobs, acknowledges them from the handler's result,
    applies the retry policy when the handler raises and requeues jobs
    whose consumer died. Broker errors are logged and never end ``run``;
    only ``stop`` does, after in-flight jobs finish.
    """

    def __init__(
        self,
        queue_name: str,
        handler: JobHandlerPort,
        *,
        connection: str,
        concurrency: int = 3,
        consumer_factory: Callable[..., Any] = bullmq.Worker,
    ) -> None:
        if concurrency < 1:
            raise ValueError(f"concurrency must be at least 1, got {concurrency}")
        self._queue_name = queue_name
        self._handler = handler
        self._connection = connection
        self._concurrency = concurrency
        self._consumer_factory = consumer_factory
        self._stopping = asyncio.Event()

    @property
    def concurrency(self) -> int:
        return self._concurrency

    def stop(self) -> None:
        if not self._stopping.is_set():
            logger.info("Worker stopping after in-flight jobs finish")
        self._stopping.set()

    async def run(self) -> None:
        consumer = self._consumer_factory(
            self._queue_name,
            self._process,
            {"connection": self._connection, "concurrency": self._concurrency},
        )
        consumer.on("error", self._on_error)
        logger.info("Worker started on %s with %d slot(s)", self._queue_name, self._concurrency)
        try:
            await self._stopping.wait()
        finally:
            await consumer.close()
        logger.info("Worker stopped")

    async def _process(self, bull_job: Any, token: str) -> str:
        return await self.handle(from_bullmq_job(bull_job))

    async def handle(self, job: Job) -> str:
        """Run the handler for one delivery; re-raise failures to the broker."""
        try:
            outcome = await self._handler.process(job)
        except Exception as exc:
            attempt = job.attempts_made + 1
            if job.attempts_left:
                logger.warning(
                    "Job %s failed (attempt %d/%d, %d left), will retry: %s",
                    job.job_id,
                    attempt,
                    job.max_attempts,
                    job.attempts_left,
                    exc,
                )
            else:
                logger.error(
                    "Job %s failed permanently after %d attempt(s): %s",
                    job.job_id,
                    attempt,
                    exc,
                )
            raise

        logger.info("Job %s %s", job.job_id, outcome)
        return str(outcome)

    def _on_error(self, error: BaseException, *args: Any) -> None:
        logger.warning("Queue broker error on %s: %s", self._queue_name, error)

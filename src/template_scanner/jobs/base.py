"""Port: Durable job broker."""

from __future__ import annotations

from typing import Protocol

from template_scanner.models import Job, JobOptions, ScanOutcome


class JobQueuePort(Protocol):
    """Producer side of a FIFO, at-least-once job queue with retry/backoff.

    Delivery, acknowledgement, retries and stalled-job recovery belong to
    the broker; consumers only supply a handler.
    """

    async def enqueue(self, name: str, data: dict[str, object], options: JobOptions) -> str:
        """Add a job and return its id."""
        ...


class JobHandlerPort(Protocol):
    """Port for whatever turns a delivered job into an outcome."""

    async def process(self, job: Job) -> ScanOutcome:
        """Handle ``job``. Raising marks the attempt as failed."""
        ...

"""Composition root: wires settings into concrete adapters."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass

import bullmq
import httpx

from template_scanner.config import Settings
from template_scanner.errors import ConfigError
from template_scanner.host.base import RepositoryHostPort
from template_scanner.host.github import GitHubHost
from template_scanner.jobs.base import JobQueuePort
from template_scanner.jobs.bullmq_queue import BullJobQueue
from template_scanner.pipeline.processor import ScanProcessor
from template_scanner.store.base import TemplateStorePort
from template_scanner.store.postgrest import PostgrestTemplateStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ScannerServices:
    """Shared adapters for one process. Stateful I/O boundaries live here."""

    settings: Settings
    http_client: httpx.AsyncClient
    store: TemplateStorePort
    queue: JobQueuePort
    host: RepositoryHostPort

    def processor(self) -> ScanProcessor:
        return ScanProcessor(
            store=self.store,
            host=self.host,
            workspace_root=self.settings.temp_dir,
            clone_timeout=self.settings.clone_timeout,
        )


@asynccontextmanager
async def open_services(settings: Settings) -> AsyncIterator[ScannerServices]:
    """Open the HTTP client and queue connection, yield the wired adapters, close both.

    Raises:
        ConfigError: If the store credentials are missing.
    """
    if not settings.supabase_url or not settings.supabase_key:
        raise ConfigError("SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY must be set in environment variables")

    if not settings.github_token:
        logger.warning("GITHUB_TOKEN is not set; GitHub API calls are unauthenticated and heavily rate limited")

    bull_queue = bullmq.Queue(settings.queue_name, {"connection": settings.redis_url})
    try:
        async with httpx.AsyncClient(
            timeout=httpx.Timeout(30.0, connect=10.0),
            follow_redirects=True,
            limits=httpx.Limits(max_connections=10, max_keepalive_connections=5),
            transport=httpx.AsyncHTTPTransport(retries=3),
        ) as http_client:
            yield ScannerServices(
                settings=settings,
                http_client=http_client,
                store=PostgrestTemplateStore(
                    http=http_client,
                    base_url=settings.supabase_url,
                    api_key=settings.supabase_key,
                ),
                queue=BullJobQueue(bull_queue),
                host=GitHubHost(http_client, token=settings.github_token),
            )
    finally:
        await bull_queue.close()

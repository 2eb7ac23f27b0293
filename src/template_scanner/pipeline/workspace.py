"""Scoped clone workspaces."""

from __future__ import annotations

import asyncio
import tempfile
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

from template_scanner.host.base import RepositoryHostPort


@asynccontextmanager
async def clone_workspace(
    host: RepositoryHostPort,
    repository_url: str,
    *,
    root: str | Path,
    timeout: float,
) -> AsyncIterator[Path]:
    """Shallow-clone into a fresh directory under ``root`` and yield its path.

    The directory is unique to this call and is removed when the block
    exits, whether it returns, raises, the clone itself fails, or the task
    is cancelled.
    """
    Path(root).mkdir(parents=True, exist_ok=True)
    path = Path(tempfile.mkdtemp(prefix="template-scan-", dir=root))
    try:
        await host.clone(repository_url, path, timeout=timeout)
        yield path
    finally:
        cleanup = asyncio.ensure_future(host.cleanup(path))
        try:
            await asyncio.shield(cleanup)
        except asyncio.CancelledError:
            # the directory must be gone before the caller sees the cancellation
            await cleanup
            raise

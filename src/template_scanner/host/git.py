"""Shallow git clones through an async subprocess."""

from __future__ import annotations

import asyncio
import logging
import os
import shutil
import signal
from pathlib import Path

from template_scanner.errors import CloneError

logger = logging.getLogger(__name__)

_STDERR_LIMIT = 2000


async def shallow_clone(repository_url: str, destination: Path, *, timeout: float) -> None:
    """Run ``git clone --depth 1`` into ``destination``.

    Uses asyncio.create_subprocess_exec -- never shell=True -- and starts the
    child in its own session so a timed-out clone can be killed as a group.

    Raises:
        CloneError: If git is missing, exits non-zero, or exceeds ``timeout`` seconds.
    """
    env = {**os.environ, "GIT_TERMINAL_PROMPT": "0"}
    try:
        proc = await asyncio.create_subprocess_exec(
            "git",
            "clone",
            "--depth",
            "1",
            "--single-branch",
            repository_url,
            str(destination),
            stdout=asyncio.subprocess.DEVNULL,
            stderr=asyncio.subprocess.PIPE,
            env=env,
            start_new_session=True,
        )
    except OSError as exc:
        raise CloneError(f"Could not start git to clone {repository_url}: {exc}") from exc

    try:
        _, stderr_bytes = await asyncio.wait_for(proc.communicate(), timeout=timeout)
    except TimeoutError:
        try:
            os.killpg(os.getpgid(proc.pid), signal.SIGKILL)
        except (ProcessLookupError, OSError):
            proc.kill()
        await proc.wait()
        raise CloneError(f"Cloning {repository_url} timed out after {timeout:g}s") from None

    if proc.returncode:
        stderr = stderr_bytes.decode(errors="replace").strip()[:_STDERR_LIMIT]
        raise CloneError(f"git clone {repository_url} exited with {proc.returncode}: {stderr}")

    logger.debug("Cloned %s into %s", repository_url, destination)


async def remove_tree(path: Path) -> None:
    """Delete a clone directory off the event loop."""
    await asyncio.to_thread(shutil.rmtree, path, ignore_errors=True)

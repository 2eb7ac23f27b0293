"""Port: Source-hosting provider access."""

from __future__ import annotations

from pathlib import Path
from typing import Protocol

from template_scanner.models import RepoStats


class RepositoryHostPort(Protocol):
    """Port for one source-hosting provider (metadata API + git clone)."""

    def supports(self, repository_url: str) -> bool:
        """Return True if this provider can scan ``repository_url``."""
        ...

    async def fetch_repo_stats(self, repository_url: str) -> RepoStats:
        """Fetch stars, forks, last push, license and open-issue count."""
        ...

    async def fetch_contributors_count(self, repository_url: str) -> int:
        """Return the number of contributors to the repository."""
        ...

    async def clone(self, repository_url: str, destination: Path, *, timeout: float) -> None:
        """Shallow-clone ``repository_url`` into the empty ``destination`` directory."""
        ...

    async def cleanup(self, path: Path) -> None:
        """Remove a clone directory; missing paths are ignored."""
        ...

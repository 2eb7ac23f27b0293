"""GitHub adapter: REST metadata via httpx, shallow clones via git."""

from __future__ import annotations

import logging
import re
from datetime import datetime
from pathlib import Path

import httpx

from template_scanner.errors import HostError, HostRateLimitError
from template_scanner.host.git import remove_tree, shallow_clone
from template_scanner.models import RepoStats

logger = logging.getLogger(__name__)

_API_URL = "https://api.github.com"

_GITHUB_URL = re.compile(
    r"^(?:https?://)?(?:www\.)?github\.com/([^/\s]+)/([^/\s#?]+?)(?:\.git)?(?:[/#?].*)?$",
    re.IGNORECASE,
)


# ─── URL parsing ───────────────────────────────────────────


def parse_github_url(repository_url: str) -> tuple[str, str] | None:
    """Extract (owner, repo) from a GitHub URL.

    Returns None if the URL is not a GitHub repo.
    """
    m = _GITHUB_URL.match(repository_url.strip())
    if m:
        return m.group(1), m.group(2)
    return None


def _parse_timestamp(value: object) -> datetime | None:
    if not isinstance(value, str) or not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


# ─── Adapter ───────────────────────────────────────────────


class GitHubHost:
    """Adapter for RepositoryHostPort; holds the shared httpx client."""

    def __init__(self, http_client: httpx.AsyncClient, *, token: str | None = None) -> None:
        self._http = http_client
        self._token = token

    def supports(self, repository_url: str) -> bool:
        return parse_github_url(repository_url) is not None

    async def fetch_repo_stats(self, repository_url: str) -> RepoStats:
        """Fetch repository metadata from ``GET /repos/{owner}/{repo}``.

        Raises:
            HostError: If the URL is not a GitHub repo or the API call fails.
        """
        owner, repo = self._require(repository_url)
        resp = await self._get(f"/repos/{owner}/{repo}")
        data = resp.json()
        return RepoStats(
            stars=int(data.get("stargazers_count") or 0),
            forks=int(data.get("forks_count") or 0),
            last_commit=_parse_timestamp(data.get("pushed_at")),
            license=(data.get("license") or {}).get("spdx_id"),
            open_issues=int(data.get("open_issues_count") or 0),
        )

    async def fetch_contributors_count(self, repository_url: str) -> int:
        """Count contributors with a single one-per-page request.

        GitHub paginates contributors, so the ``last`` page number of a
        ``per_page=1`` listing equals the contributor count. Repositories
        with a single contributor return no Link header; empty ones return 204.
        """
        owner, repo = self._require(repository_url)
        resp = await self._get(f"/repos/{owner}/{repo}/contributors", params={"per_page": "1"})
        if resp.status_code == 204 or not resp.content:
            return 0

        last = resp.links.get("last", {}).get("url")
        if last:
            page = httpx.URL(last).params.get("page")
            if page and page.isdigit():
                return int(page)

        data = resp.json()
        return len(data) if isinstance(data, list) else 0

    async def clone(self, repository_url: str, destination: Path, *, timeout: float) -> None:
        owner, repo = self._require(repository_url)
        await shallow_clone(f"https://github.com/{owner}/{repo}.git", destination, timeout=timeout)

    async def cleanup(self, path: Path) -> None:
        await remove_tree(path)

    # ── HTTP plumbing ─────────────────────────────────────────

    @property
    def headers(self) -> dict[str, str]:
        h = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }
        if self._token:
            h["Authorization"] = f"Bearer {self._token}"
        return h

    def _require(self, repository_url: str) -> tuple[str, str]:
        parsed = parse_github_url(repository_url)
        if parsed is None:
            raise HostError(f"Not a GitHub repository URL: '{repository_url}'")
        return parsed

    async def _get(self, path: str, **kwargs) -> httpx.Response:  # type: ignore[no-untyped-def]
        """GET with rate-limit detection; any other failure becomes HostError."""
        try:
            resp = await self._http.get(f"{_API_URL}{path}", headers=self.headers, **kwargs)
        except httpx.HTTPError as exc:
            raise HostError(f"GitHub request {path} failed: {exc}") from exc

        if resp.status_code in (403, 429) and _is_rate_limited(resp):
            reset = resp.headers.get("X-RateLimit-Reset", "")
            logger.warning("GitHub API rate limit exhausted (reset epoch %s)", reset or "unknown")
            raise HostRateLimitError(
                f"GitHub API rate limit exceeded for {path}"
                + (f" (resets at epoch {reset})" if reset else "")
            )

        try:
            resp.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise HostError(f"GitHub request {path} returned {resp.status_code}") from exc
        return resp


def _is_rate_limited(resp: httpx.Response) -> bool:
    if resp.headers.get("X-RateLimit-Remaining") == "0":
        return True
    return resp.status_code == 429 or "rate limit" in resp.text.lower()

"""GitHub repository-search client for the developer stream."""

from __future__ import annotations

import logging
import time
from datetime import UTC, datetime, timedelta
from typing import Any

import requests
from pydantic import ValidationError

from narrativescope.cluster import cluster_repos
from narrativescope.dedupe import dedupe_repos, filter_repo_noise
from narrativescope.models import RepoScan, RepoSignal
from narrativescope.rank import rank_repos
from narrativescope.taxonomy import Taxonomy

logger = logging.getLogger(__name__)

_SEARCH_URL = "https://api.github.com/search/repositories"
_USER_AGENT = "NarrativeScope/1.0"

# Unauthenticated search allows ~10 requests/minute.
_DELAY_AUTHENTICATED = 0.2
_DELAY_ANONYMOUS = 6.5


class GitHubClientError(Exception):
    """Raised when the GitHub API returns an unexpected response."""


class GitHubRateLimitError(GitHubClientError):
    """Raised on 403/429; the caller stops querying for this run."""


class GitHubClient:
    """Search newly created repositories, most-starred first."""

    def __init__(
        self,
        token: str | None = None,
        since_days: int = 30,
        per_page: int = 30,
        delay: float | None = None,
    ) -> None:
        self._since_days = since_days
        self._per_page = min(max(per_page, 1), 100)
        self._delay = delay if delay is not None else (
            _DELAY_AUTHENTICATED if token else _DELAY_ANONYMOUS
        )
        self._session = requests.Session()
        self._session.headers.update(
            {"Accept": "application/vnd.github.v3+json", "User-Agent": _USER_AGENT}
        )
        if token:
            self._session.headers["Authorization"] = f"token {token}"
        else:
            logger.warning("GITHUB_TOKEN not set — using unauthenticated search (slower pacing).")

    # ── public ──────────────────────────────────────────────────────────
    def search_created_since(self, query: str, since: str) -> list[RepoSignal]:
        """Repos matching *query* created after *since* (``YYYY-MM-DD``)."""
        params: dict[str, Any] = {
            "q": f"{query} created:>{since}",
            "sort": "stars",
            "order": "desc",
            "per_page": self._per_page,
        }
        data = self._get(params)

        items: list[RepoSignal] = []
        for repo in data.get("items", []):
            try:
                item = RepoSignal(
                    name=repo["name"],
                    full_name=repo["full_name"],
                    description=repo.get("description") or "",
                    stars=repo.get("stargazers_count") or 0,
                    forks=repo.get("forks_count") or 0,
                    created_at=repo.get("created_at") or "",
                    updated_at=repo.get("updated_at") or "",
                    language=repo.get("language") or "unknown",
                    url=repo.get("html_url") or "",
                    query=query,
                )
            except (KeyError, ValidationError) as exc:
                logger.warning("Skipping malformed repo for query %r: %s", query, exc)
                continue
            items.append(item)
        logger.info("Fetched %d repos for query: %s", len(items), query)
        return items

    def fetch_all(self, queries: list[str]) -> list[RepoSignal]:
        """Run *queries* in order; a rate-limit response ends the scan early."""
        since = (datetime.now(UTC) - timedelta(days=self._since_days)).date().isoformat()
        collected: list[RepoSignal] = []
        for query in queries:
            try:
                collected.extend(self.search_created_since(query, since))
            except GitHubRateLimitError:
                logger.warning("Rate-limited on query %r; stopping GitHub scan", query)
                break
            except (GitHubClientError, requests.RequestException) as exc:
                logger.warning("GitHub query %r failed: %s", query, exc)
            time.sleep(self._delay)
        return collected

    def scan(self, queries: list[str], taxonomy: Taxonomy) -> RepoScan:
        """Fetch, dedupe, filter, rank and cluster the developer stream."""
        repos = rank_repos(filter_repo_noise(dedupe_repos(self.fetch_all(queries))))
        return RepoScan(
            scanned_at=datetime.now(UTC).isoformat(),
            queries=list(queries),
            repos=repos,
            clusters=cluster_repos(repos, taxonomy),
        )

    # ── private ─────────────────────────────────────────────────────────
    def _get(self, params: dict[str, Any]) -> dict[str, Any]:
        resp = self._session.get(_SEARCH_URL, params=params, timeout=30)
        if resp.status_code in (403, 429):
            raise GitHubRateLimitError(
                f"GitHub API returned {resp.status_code}: {resp.text[:200]}"
            )
        if resp.status_code != 200:
            raise GitHubClientError(
                f"GitHub API returned {resp.status_code}: {resp.text[:500]}"
            )
        return resp.json()  # type: ignore[no-any-return]

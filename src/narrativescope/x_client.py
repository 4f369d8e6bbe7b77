"""Minimal X API v2 Recent Search client (read-only) for the social stream."""

from __future__ import annotations

import logging
import time
from datetime import UTC, datetime
from typing import Any

import requests
from pydantic import ValidationError

from narrativescope.cluster import cluster_signals
from narrativescope.dedupe import dedupe_signals
from narrativescope.models import SocialScan, SocialSignal
from narrativescope.rank import rank_signals
from narrativescope.taxonomy import Taxonomy

logger = logging.getLogger(__name__)

_RECENT_SEARCH_URL = "https://api.twitter.com/2/tweets/search/recent"

# Fields we always request.
_TWEET_FIELDS = "created_at,public_metrics,author_id"
_EXPANSIONS = "author_id"
_USER_FIELDS = "username"


class XClientError(Exception):
    """Raised when the X API returns an unexpected response."""


class XRateLimitError(XClientError):
    """Raised on HTTP 429; the caller stops querying for this run."""


class XClient:
    """Thin wrapper around ``GET /2/tweets/search/recent``."""

    def __init__(
        self,
        bearer_token: str,
        max_results: int = 25,
        min_engagement: float = 20,
        delay: float = 0.2,
    ) -> None:
        if not bearer_token:
            raise ValueError("X_BEARER_TOKEN is required but was empty.")
        self._bearer = bearer_token
        self._max_results = min(max(max_results, 10), 100)
        self._min_engagement = min_engagement
        self._delay = delay
        self._session = requests.Session()
        self._session.headers.update({"Authorization": f"Bearer {self._bearer}"})

    # ── public ──────────────────────────────────────────────────────────
    def search_recent(self, query: str) -> list[SocialSignal]:
        """Execute a single Recent Search query and return posts above the engagement floor."""
        params: dict[str, Any] = {
            "query": query,
            "max_results": self._max_results,
            "sort_order": "relevancy",
            "tweet.fields": _TWEET_FIELDS,
            "expansions": _EXPANSIONS,
            "user.fields": _USER_FIELDS,
        }

        data = self._get(params)
        tweets_raw: list[dict[str, Any]] = data.get("data", [])
        if not tweets_raw:
            logger.info("No results for query: %s", query)
            return []

        # Build author-id → username map from expansions
        includes = data.get("includes", {})
        users: list[dict[str, Any]] = includes.get("users", [])
        author_map: dict[str, str] = {u["id"]: u.get("username", "") for u in users}

        items: list[SocialSignal] = []
        for raw in tweets_raw:
            pm = raw.get("public_metrics")
            if not pm:
                continue
            author_id = str(raw.get("author_id") or "")
            try:
                item = SocialSignal(
                    tweet_id=str(raw["id"]),
                    text=raw.get("text") or "",
                    author=f"@{author_map.get(author_id) or 'unknown'}",
                    author_id=author_id,
                    likes=pm.get("like_count") or 0,
                    retweets=pm.get("retweet_count") or 0,
                    replies=pm.get("reply_count") or 0,
                    created_at=raw.get("created_at") or "",
                    query=query,
                )
            except (KeyError, ValidationError) as exc:
                logger.warning("Skipping malformed post for query %r: %s", query, exc)
                continue
            if item.engagement_score < self._min_engagement:
                continue
            items.append(item)

        logger.info("Fetched %d posts for query: %s", len(items), query)
        return items

    def fetch_all(self, queries: list[str]) -> list[SocialSignal]:
        """Run *queries* in order; one failing query does not stop the rest.

        A rate-limit response stops further queries but keeps what was
        already collected.
        """
        collected: list[SocialSignal] = []
        for query in queries:
            try:
                collected.extend(self.search_recent(query))
            except XRateLimitError:
                logger.warning("Rate-limited on query %r; stopping X scan", query)
                break
            except (XClientError, requests.RequestException) as exc:
                logger.warning("X query %r failed: %s", query, exc)
            # Polite back-off between queries (X rate limits)
            time.sleep(self._delay)
        return collected

    def scan(self, queries: list[str], taxonomy: Taxonomy) -> SocialScan:
        """Fetch, dedupe, rank and cluster the social stream."""
        signals = rank_signals(dedupe_signals(self.fetch_all(queries)))
        return SocialScan(
            scanned_at=datetime.now(UTC).isoformat(),
            queries=list(queries),
            signals=signals,
            clusters=cluster_signals(signals, taxonomy),
        )

    # ── private ─────────────────────────────────────────────────────────
    def _get(self, params: dict[str, Any]) -> dict[str, Any]:
        resp = self._session.get(_RECENT_SEARCH_URL, params=params, timeout=30)
        if resp.status_code == 429:
            raise XRateLimitError(f"X API rate limit: {resp.text[:200]}")
        if resp.status_code != 200:
            raise XClientError(
                f"X API returned {resp.status_code}: {resp.text[:500]}"
            )
        return resp.json()  # type: ignore[no-any-return]

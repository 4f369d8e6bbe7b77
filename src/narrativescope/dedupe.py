"""In-run deduplication and noise filtering for fetched items."""

from __future__ import annotations

import logging
import re

from narrativescope.models import RepoSignal, SocialSignal

logger = logging.getLogger(__name__)

_SPAM_RE = re.compile(r"airdrop|free.token|claim.now", re.IGNORECASE)
_MIN_DESCRIPTION = 10


def dedupe_signals(items: list[SocialSignal]) -> list[SocialSignal]:
    """Keep the first occurrence of each tweet ID."""
    seen: set[str] = set()
    unique: list[SocialSignal] = []
    for item in items:
        if item.tweet_id in seen:
            continue
        seen.add(item.tweet_id)
        unique.append(item)
    logger.info("Dedupe: %d posts → %d unique", len(items), len(unique))
    return unique


def dedupe_repos(items: list[RepoSignal]) -> list[RepoSignal]:
    """Keep the first occurrence of each ``owner/name``."""
    seen: set[str] = set()
    unique: list[RepoSignal] = []
    for item in items:
        if item.full_name in seen:
            continue
        seen.add(item.full_name)
        unique.append(item)
    logger.info("Dedupe: %d repos → %d unique", len(items), len(unique))
    return unique


def filter_repo_noise(items: list[RepoSignal]) -> list[RepoSignal]:
    """Drop repos with no real description and obvious airdrop/claim spam."""
    kept = [
        r
        for r in items
        if len(r.description) >= _MIN_DESCRIPTION and not _SPAM_RE.search(r.description)
    ]
    logger.info("Noise filter: %d repos → %d kept", len(items), len(kept))
    return kept

"""Frequency-ranked key terms for a cluster of posts or repositories."""

from __future__ import annotations

import re
from collections import Counter
from collections.abc import Iterable

from narrativescope.models import RepoSignal, SocialSignal

_URL_RE = re.compile(r"https?://\S+")
_SOCIAL_JUNK_RE = re.compile(r"[^a-z0-9\s]")
_REPO_JUNK_RE = re.compile(r"[^a-z0-9\s-]")
_REPO_SPLIT_RE = re.compile(r"[\s-]+")

MAX_TERMS = 10
MIN_COUNT = 2
MIN_LENGTH = 4


def extract_key_terms(
    texts: Iterable[str],
    stop_words: frozenset[str],
    *,
    strip_urls: bool = False,
    split_hyphens: bool = False,
) -> list[str]:
    """Return up to ten tokens seen at least twice, most frequent first.

    Ties keep first-seen order (``Counter`` preserves insertion order and
    ``most_common`` sorts stably).
    """
    counts: Counter[str] = Counter()
    junk_re = _REPO_JUNK_RE if split_hyphens else _SOCIAL_JUNK_RE

    for text in texts:
        lowered = text.lower()
        if strip_urls:
            lowered = _URL_RE.sub("", lowered)
        lowered = junk_re.sub(" ", lowered)
        tokens = _REPO_SPLIT_RE.split(lowered) if split_hyphens else lowered.split()
        counts.update(t for t in tokens if len(t) >= MIN_LENGTH and t not in stop_words)

    return [term for term, n in counts.most_common(MAX_TERMS) if n >= MIN_COUNT]


def social_key_terms(signals: list[SocialSignal], stop_words: frozenset[str]) -> list[str]:
    return extract_key_terms((s.text for s in signals), stop_words, strip_urls=True)


def repo_key_terms(repos: list[RepoSignal], stop_words: frozenset[str]) -> list[str]:
    return extract_key_terms(
        (f"{r.name} {r.description}" for r in repos), stop_words, split_hyphens=True
    )

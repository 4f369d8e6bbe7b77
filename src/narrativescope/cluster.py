"""Group posts and repositories into topic clusters by regex pattern tables."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from typing import TypeVar

from narrativescope.models import RepoCluster, RepoSignal, SocialCluster, SocialSignal
from narrativescope.rank import round_half_up, round_int
from narrativescope.taxonomy import Taxonomy, TopicRule
from narrativescope.terms import repo_key_terms, social_key_terms

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Max items kept as a cluster preview
_MAX_PER_CLUSTER = 5

# Strength = count * weight + total. Social volume counts for more.
_SOCIAL_WEIGHT = 10
_REPO_WEIGHT = 5


def _match(
    items: list[T], rules: tuple[TopicRule, ...], text_of: Callable[[T], str]
) -> Iterator[tuple[str, list[T]]]:
    """Yield ``(label, matches)`` per rule, skipping rules with no matches.

    An item may match several rules. Matches keep the input order.
    """
    texts = [text_of(item) for item in items]
    for rule in rules:
        matches = [item for item, text in zip(items, texts) if rule.matches(text)]
        if matches:
            yield rule.label, matches


def _social_text(signal: SocialSignal) -> str:
    return signal.text


def _repo_text(repo: RepoSignal) -> str:
    return f"{repo.name} {repo.description} {repo.query}"


def cluster_signals(signals: list[SocialSignal], taxonomy: Taxonomy) -> list[SocialCluster]:
    """Cluster engagement-sorted posts into social topic clusters."""
    clusters: list[SocialCluster] = []
    for label, matches in _match(signals, taxonomy.social_topics, _social_text):
        total = sum(s.engagement_score for s in matches)
        clusters.append(
            SocialCluster(
                topic=label,
                tweet_count=len(matches),
                avg_engagement=round_int(total / len(matches)),
                total_engagement=round_int(total),
                top_tweets=matches[:_MAX_PER_CLUSTER],
                key_terms=social_key_terms(matches, taxonomy.social_stop_words),
                unique_authors=len({s.author_id or s.author for s in matches}),
            )
        )

    clusters.sort(key=lambda c: c.tweet_count * _SOCIAL_WEIGHT + c.total_engagement, reverse=True)
    logger.info("Clustered %d posts into %d topics", len(signals), len(clusters))
    return clusters


def cluster_repos(repos: list[RepoSignal], taxonomy: Taxonomy) -> list[RepoCluster]:
    """Cluster star-sorted repositories into developer topic clusters."""
    clusters: list[RepoCluster] = []
    for label, matches in _match(repos, taxonomy.repo_topics, _repo_text):
        total = sum(r.stars for r in matches)
        clusters.append(
            RepoCluster(
                topic=label,
                repo_count=len(matches),
                total_stars=total,
                avg_stars=round_half_up(total / len(matches), 1),
                top_repos=matches[:_MAX_PER_CLUSTER],
                key_terms=repo_key_terms(matches, taxonomy.repo_stop_words),
            )
        )

    clusters.sort(key=lambda c: c.repo_count * _REPO_WEIGHT + c.total_stars, reverse=True)
    logger.info("Clustered %d repos into %d topics", len(repos), len(clusters))
    return clusters

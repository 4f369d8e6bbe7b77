"""Cross-correlate social and developer clusters into scored narratives.

Emerging narratives show up in both discussion and build activity, so a
narrative found in both streams earns a cross-source bonus on top of its
per-stream sub-scores. Each aligned pair of clusters becomes one
:class:`Narrative` with a 0–100 score, a lifecycle stage and a confidence.
"""

from __future__ import annotations

import logging
import math
from datetime import UTC, datetime, timedelta

from narrativescope.models import (
    DeveloperSnapshot,
    Narrative,
    NarrativeReport,
    RepoCluster,
    RepoPreview,
    SignalSnapshot,
    SocialCluster,
    SocialSnapshot,
    Stage,
    TweetPreview,
)
from narrativescope.rank import round_int
from narrativescope.synthesis import RuleBasedSynthesizer, Synthesizer
from narrativescope.taxonomy import Alignment

logger = logging.getLogger(__name__)

MIN_SIGNAL_SCORE = 15
PREVIEW_ITEMS = 3
PREVIEW_CHARS = 200
REPORT_PERIOD_DAYS = 14

# ── Score caps ─────────────────────────────────────────────────────────────
_SOCIAL_VOLUME_CAP = 15
_SOCIAL_ENGAGEMENT_CAP = 20
_DIVERSITY_CAP = 5
_DEV_VOLUME_CAP = 15
_DEV_QUALITY_CAP = 20
_DEV_DIVERSITY_CAP = 5
_STRENGTH_NORM = 30
_CROSS_BASE = 10
_CROSS_SCALED = 10

_CONFIDENCE_FLOOR = 25  # hundredths
_CONFIDENCE_CEILING = 0.95

METHODOLOGY = """\
NarrativeScope detects emerging narratives in the Solana ecosystem by combining two signal sources.

1. **Social signals (X):** a dozen recent-search queries on Solana ecosystem topics. Posts are \
weighted by engagement (likes, retweets x2, replies x1.5) and clustered by topic with keyword \
patterns.

2. **Developer signals (GitHub):** newly created repositories matching Solana-related queries, \
clustered by development category and measured by repo count and stars.

3. **Cross-source correlation:** a narrative present in both discussion and development earns a \
10-point bonus, growing to 20 as both streams strengthen. This separates hype with nobody \
building from stealth building with no buzz yet.

4. **Stage classification:** pre-narrative (building before buzz), emergence (growing discussion \
and/or activity), acceleration (high engagement plus active development) and peak (widespread \
awareness, diminishing novelty).

5. **Signal score:** a 0-100 composite of social volume, engagement and author diversity, \
developer volume, stars and spread, plus the cross-source bonus. Narratives under 15 are dropped.

6. **Build ideas:** concrete product ideas with difficulty ratings for every detected narrative.

Data sources: X API v2 (7-day search window), GitHub Search API (30-day creation window)."""


# ── Snapshots ──────────────────────────────────────────────────────────────


def _finite(value: float | None) -> float:
    if value is None or not math.isfinite(value):
        return 0
    return value


def social_snapshot(cluster: SocialCluster | None) -> SocialSnapshot:
    if cluster is None:
        return SocialSnapshot()
    return SocialSnapshot(
        tweet_count=int(_finite(cluster.tweet_count)),
        avg_engagement=int(_finite(cluster.avg_engagement)),
        total_engagement=int(_finite(cluster.total_engagement)),
        unique_authors=int(_finite(cluster.unique_authors)),
        top_tweets=[
            TweetPreview(
                text=t.text[:PREVIEW_CHARS],
                author=t.author,
                likes=t.likes,
                url=f"https://x.com/i/status/{t.tweet_id}",
            )
            for t in cluster.top_tweets[:PREVIEW_ITEMS]
        ],
        key_terms=list(cluster.key_terms),
    )


def developer_snapshot(cluster: RepoCluster | None) -> DeveloperSnapshot:
    if cluster is None:
        return DeveloperSnapshot()
    return DeveloperSnapshot(
        repo_count=int(_finite(cluster.repo_count)),
        total_stars=int(_finite(cluster.total_stars)),
        avg_stars=_finite(cluster.avg_stars),
        top_repos=[
            RepoPreview(
                name=r.full_name,
                description=r.description[:PREVIEW_CHARS],
                stars=r.stars,
                url=r.url,
            )
            for r in cluster.top_repos[:PREVIEW_ITEMS]
        ],
        key_terms=list(cluster.key_terms),
    )


# ── Scoring ────────────────────────────────────────────────────────────────


def social_score(social: SocialSnapshot) -> float:
    volume = min(social.tweet_count * 2.5, _SOCIAL_VOLUME_CAP)
    engagement = min(social.avg_engagement / 60, _SOCIAL_ENGAGEMENT_CAP)
    # Many distinct authors means organic discussion rather than one account shilling.
    ratio = social.unique_authors / social.tweet_count if social.tweet_count > 0 else 0
    diversity = min(ratio * social.unique_authors, _DIVERSITY_CAP)
    return volume + engagement + diversity


def developer_score(developer: DeveloperSnapshot) -> float:
    volume = min(developer.repo_count * 2, _DEV_VOLUME_CAP)
    quality = min(developer.total_stars / 10, _DEV_QUALITY_CAP)
    diversity = 0.0
    if developer.repo_count > 0 and developer.avg_stars > 0:
        diversity = min(developer.repo_count * math.log2(developer.avg_stars + 1), _DEV_DIVERSITY_CAP)
    return volume + quality + diversity


def cross_source_bonus(social: SocialSnapshot, developer: DeveloperSnapshot) -> int:
    """0 unless both streams contribute; then a flat 10 plus up to 10 more by strength."""
    if social.tweet_count <= 0 or developer.repo_count <= 0:
        return 0
    social_strength = min(social_score(social) / _STRENGTH_NORM, 1)
    dev_strength = min(developer_score(developer) / _STRENGTH_NORM, 1)
    return _CROSS_BASE + round_int(social_strength * dev_strength * _CROSS_SCALED)


def signal_score(social: SocialSnapshot, developer: DeveloperSnapshot) -> int:
    """Composite 0–100 score."""
    total = social_score(social) + developer_score(developer) + cross_source_bonus(social, developer)
    return max(0, round_int(min(total, 100)))


def classify_stage(social: SocialSnapshot, developer: DeveloperSnapshot) -> Stage:
    """First matching rule wins; the order is significant."""
    strong_social = social.tweet_count >= 5 and social.avg_engagement >= 100
    strong_dev = developer.repo_count >= 5 and developer.total_stars >= 20

    if strong_social and strong_dev and social.avg_engagement >= 500 and social.unique_authors >= 8:
        return "peak"
    if strong_social and strong_dev and social.avg_engagement >= 200:
        return "acceleration"
    if strong_social or strong_dev:
        return "emergence"
    # Building with no buzz yet.
    if developer.repo_count > 0 and social.tweet_count == 0:
        return "pre-narrative"
    # Weak social-only signal still counts as emergence.
    if social.tweet_count > 0:
        return "emergence"
    return "pre-narrative"


def compute_confidence(social: SocialSnapshot, developer: DeveloperSnapshot) -> float:
    """Additive bonuses on a 0.25 base, rounded to 2 places, capped at 0.95."""
    # Accumulate in hundredths so the result is exact.
    points = _CONFIDENCE_FLOOR
    if social.tweet_count >= 3:
        points += 8
    if social.tweet_count >= 10:
        points += 7
    if social.avg_engagement >= 100:
        points += 8
    if social.avg_engagement >= 300:
        points += 5
    if social.unique_authors >= 3:
        points += 8
    if social.unique_authors >= 8:
        points += 7
    if developer.repo_count >= 3:
        points += 8
    if developer.repo_count >= 10:
        points += 7
    if developer.total_stars >= 50:
        points += 5
    if social.tweet_count > 0 and developer.repo_count > 0:
        points += 12
    return min(points / 100, _CONFIDENCE_CEILING)


# ── Aggregation ────────────────────────────────────────────────────────────


def _find(clusters: list, topic: str):
    if not topic:
        return None
    return next((c for c in clusters if c.topic == topic), None)


def aggregate(
    social_clusters: list[SocialCluster],
    repo_clusters: list[RepoCluster],
    alignment: tuple[Alignment, ...],
    synthesizer: Synthesizer | None = None,
) -> list[Narrative]:
    """Turn two cluster sets into narratives, strongest first.

    Narratives with neither cluster present, or scoring under
    :data:`MIN_SIGNAL_SCORE`, are dropped. Ties keep alignment-table order.
    """
    synthesizer = synthesizer or RuleBasedSynthesizer()
    narratives: list[Narrative] = []

    for entry in alignment:
        social_cluster = _find(social_clusters, entry.social_topic)
        repo_cluster = _find(repo_clusters, entry.repo_topic)
        if social_cluster is None and repo_cluster is None:
            logger.debug("No signal for %s", entry.name)
            continue

        social = social_snapshot(social_cluster)
        developer = developer_snapshot(repo_cluster)
        score = signal_score(social, developer)
        if score < MIN_SIGNAL_SCORE:
            logger.info("Dropping %s: score %d below %d", entry.name, score, MIN_SIGNAL_SCORE)
            continue

        narrative = Narrative(
            name=entry.name,
            confidence=compute_confidence(social, developer),
            stage=classify_stage(social, developer),
            signal_score=score,
            signals=SignalSnapshot(social=social, developer=developer),
        )
        synthesis = synthesizer.synthesize(narrative)
        narratives.append(
            narrative.model_copy(
                update={"explanation": synthesis.explanation, "build_ideas": synthesis.build_ideas}
            )
        )

    narratives.sort(key=lambda n: n.signal_score, reverse=True)
    logger.info("Detected %d narratives from %d alignments", len(narratives), len(alignment))
    return narratives


def build_report(
    narratives: list[Narrative],
    now: datetime | None = None,
    period_days: int = REPORT_PERIOD_DAYS,
) -> NarrativeReport:
    """Wrap *narratives* in the report envelope for renderers and the JSON API."""
    now = now or datetime.now(UTC)
    start = now - timedelta(days=period_days)
    return NarrativeReport(
        generated_at=now.isoformat(),
        period=f"{start.date().isoformat()} to {now.date().isoformat()}",
        narratives=narratives,
        methodology=METHODOLOGY,
    )

"""Pipeline orchestration: scan X, scan GitHub, aggregate, synthesise, render."""

from __future__ import annotations

import logging
import sys
from datetime import UTC, datetime

from narrativescope import config
from narrativescope.aggregate import aggregate, build_report
from narrativescope.github_client import GitHubClient
from narrativescope.models import NarrativeReport, RepoScan, SocialScan
from narrativescope.report import write_report
from narrativescope.store import ScanStore
from narrativescope.synthesis import build_synthesizer
from narrativescope.taxonomy import Taxonomy, default_taxonomy
from narrativescope.universe import ScanQueries, load_queries
from narrativescope.x_client import XClient

logger = logging.getLogger(__name__)


def setup_logging(level: int = logging.INFO) -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        stream=sys.stderr,
    )


def scan_social(queries: ScanQueries, taxonomy: Taxonomy) -> SocialScan:
    """Run the X scan, or return an empty scan when no token is configured."""
    if not config.X_BEARER_TOKEN:
        logger.warning("X_BEARER_TOKEN not set — continuing without social signals.")
        return SocialScan(scanned_at=datetime.now(UTC).isoformat(), queries=queries.x)
    client = XClient(
        bearer_token=config.X_BEARER_TOKEN,
        max_results=config.X_MAX_RESULTS,
        min_engagement=config.X_MIN_ENGAGEMENT,
        delay=config.X_QUERY_DELAY,
    )
    return client.scan(queries.x, taxonomy)


def scan_developer(queries: ScanQueries, taxonomy: Taxonomy) -> RepoScan:
    client = GitHubClient(
        token=config.GITHUB_TOKEN or None,
        since_days=config.GITHUB_SINCE_DAYS,
        per_page=config.GITHUB_PER_PAGE,
    )
    return client.scan(queries.github, taxonomy)


def run_pipeline(
    profile: str = config.DEFAULT_PROFILE,
    cached: bool = False,
    dry_run: bool = False,
) -> NarrativeReport | None:
    """Execute the full scan → report pipeline for the given *profile*.

    With *cached*, re-aggregates the last saved scans instead of calling the
    APIs (raises :class:`~narrativescope.store.ScanCacheError` if absent).
    """
    setup_logging()
    logger.info("=== narrativescope pipeline start [profile=%s] ===", profile)

    # ── 0. Resolve profile paths and configuration ────────────────────
    paths = config.profile_paths(profile)
    store = ScanStore(paths["data_dir"])
    taxonomy = default_taxonomy()

    # ── 1–2. Social and developer scans ───────────────────────────────
    if cached:
        social = store.load_social()
        developer = store.load_repos()
        logger.info(
            "Loaded cached scans: %d posts, %d repos", len(social.signals), len(developer.repos)
        )
    else:
        queries = load_queries(paths["queries"])
        if not (queries.x or queries.github):
            logger.error("No queries loaded from %s — nothing to do.", paths["queries"])
            return None
        logger.info("Loaded %d X queries, %d GitHub queries", len(queries.x), len(queries.github))

        social = scan_social(queries, taxonomy)
        store.save_social(social)
        logger.info("X: %d posts, %d clusters", len(social.signals), len(social.clusters))

        developer = scan_developer(queries, taxonomy)
        store.save_repos(developer)
        logger.info("GitHub: %d repos, %d clusters", len(developer.repos), len(developer.clusters))

    # ── 3. Aggregate + synthesise ─────────────────────────────────────
    if dry_run:
        narratives = aggregate(social.clusters, developer.clusters, taxonomy.alignment)
        logger.info("Dry-run mode — skipping LLM synthesis and report write.")
        for n in narratives:
            logger.info(
                "  [%d] %s (%s, confidence %.2f)", n.signal_score, n.name, n.stage, n.confidence
            )
        return build_report(narratives)

    synthesizer = build_synthesizer(config.LLM_PROVIDER, config.LLM_API_KEY, config.LLM_MODEL)
    narratives = aggregate(social.clusters, developer.clusters, taxonomy.alignment, synthesizer)
    report = build_report(narratives)
    store.save_report(report)

    for n in narratives:
        logger.info(
            "  %s (%s, score %d, confidence %d%%)",
            n.name,
            n.stage,
            n.signal_score,
            round(n.confidence * 100),
        )
        logger.info("     Ideas: %s", " | ".join(i.title for i in n.build_ideas))

    # ── 4. Render ─────────────────────────────────────────────────────
    out_paths = write_report(report, paths["output_dir"])

    logger.info(
        "=== narrativescope pipeline done [profile=%s] — %s ===", profile, out_paths["html"]
    )
    return report

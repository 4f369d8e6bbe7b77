"""Ordering and rounding helpers shared by both signal streams."""

from __future__ import annotations

import logging
import math

from narrativescope.models import RepoSignal, SocialSignal

logger = logging.getLogger(__name__)


def round_half_up(value: float, ndigits: int = 0) -> float:
    """Round with .5 going up (``round(58.5) == 59``), unlike built-in ``round``."""
    factor = 10**ndigits
    return math.floor(value * factor + 0.5) / factor


def round_int(value: float) -> int:
    return int(round_half_up(value))


def rank_signals(signals: list[SocialSignal]) -> list[SocialSignal]:
    """Sort posts by engagement, highest first (stable)."""
    ranked = sorted(signals, key=lambda s: s.engagement_score, reverse=True)
    logger.info(
        "Ranked %d posts; top engagement=%.1f",
        len(ranked),
        ranked[0].engagement_score if ranked else 0,
    )
    return ranked


def rank_repos(repos: list[RepoSignal]) -> list[RepoSignal]:
    """Sort repositories by stars, highest first (stable)."""
    ranked = sorted(repos, key=lambda r: r.stars, reverse=True)
    logger.info("Ranked %d repos; top stars=%d", len(ranked), ranked[0].stars if ranked else 0)
    return ranked

"""Centralised configuration loaded from environment variables and dotenv."""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

# ── Paths ──────────────────────────────────────────────────────────────────
PROJECT_ROOT = Path(__file__).resolve().parents[2]

# ── X API ──────────────────────────────────────────────────────────────────
X_BEARER_TOKEN: str = os.getenv("X_BEARER_TOKEN", "")
X_MAX_RESULTS: int = int(os.getenv("X_MAX_RESULTS", "25"))
X_MIN_ENGAGEMENT: float = float(os.getenv("X_MIN_ENGAGEMENT", "20"))
X_QUERY_DELAY: float = float(os.getenv("X_QUERY_DELAY", "0.2"))

# ── GitHub API ─────────────────────────────────────────────────────────────
GITHUB_TOKEN: str = os.getenv("GITHUB_TOKEN", "")
GITHUB_SINCE_DAYS: int = int(os.getenv("GITHUB_SINCE_DAYS", "30"))
GITHUB_PER_PAGE: int = int(os.getenv("GITHUB_PER_PAGE", "30"))

# ── LLM synthesis ──────────────────────────────────────────────────────────
# "openai" uses the chat model when LLM_API_KEY is set; "none" forces rule-based.
LLM_PROVIDER: str = os.getenv("LLM_PROVIDER", "openai")
LLM_API_KEY: str = os.getenv("LLM_API_KEY", "")
LLM_MODEL: str = os.getenv("LLM_MODEL", "gpt-4o-mini")

# ── Profile defaults (overridden at runtime by CLI) ───────────────────────
DEFAULT_PROFILE: str = os.getenv("NARRATIVESCOPE_PROFILE", "solana")
PROFILES_DIR: Path = PROJECT_ROOT / "config" / "profiles"
OUTPUT_BASE: Path = Path(os.getenv("NARRATIVESCOPE_OUTPUT_DIR", str(PROJECT_ROOT / "public")))
DATA_BASE: Path = Path(os.getenv("NARRATIVESCOPE_DATA_DIR", str(PROJECT_ROOT / "data")))


def available_profiles() -> list[str]:
    """Profile names with a ``queries.yml`` under :data:`PROFILES_DIR`."""
    if not PROFILES_DIR.exists():
        return [DEFAULT_PROFILE]
    names = sorted(p.parent.name for p in PROFILES_DIR.glob("*/queries.yml"))
    return names or [DEFAULT_PROFILE]


def profile_paths(profile: str) -> dict[str, Path]:
    """Return resolved paths for a given profile name.

    Keys: ``profile_dir``, ``queries``, ``data_dir``, ``output_dir``.
    """
    profile_dir = PROFILES_DIR / profile
    return {
        "profile_dir": profile_dir,
        "queries": profile_dir / "queries.yml",
        "data_dir": DATA_BASE / profile,
        "output_dir": OUTPUT_BASE / profile,
    }

"""Domain models used across the pipeline."""

from __future__ import annotations

import math
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator

Stage = Literal["pre-narrative", "emergence", "acceleration", "peak"]
Difficulty = Literal["easy", "medium", "hard"]

# Engagement weights: retweets amplify, replies signal discussion.
_W_LIKE = 1.0
_W_RT = 2.0
_W_REPLY = 1.5


def _zero_if_missing(value: Any) -> Any:
    """Map null / NaN / inf counters to 0 before validation."""
    if value is None:
        return 0
    if isinstance(value, float) and not math.isfinite(value):
        return 0
    return value


# ── Raw stream items ───────────────────────────────────────────────────────


class SocialSignal(BaseModel):
    model_config = ConfigDict(frozen=True)

    tweet_id: str
    text: str
    author: str = ""
    author_id: str = ""
    likes: int = 0
    retweets: int = 0
    replies: int = 0
    created_at: str = ""
    query: str = ""

    @computed_field  # type: ignore[prop-decorator]
    @property
    def engagement_score(self) -> float:
        return self.likes * _W_LIKE + self.retweets * _W_RT + self.replies * _W_REPLY


class RepoSignal(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    full_name: str
    description: str = ""
    stars: int = 0
    forks: int = 0
    created_at: str = ""
    updated_at: str = ""
    language: str = "unknown"
    url: str = ""
    query: str = ""


# ── Clusters ───────────────────────────────────────────────────────────────


class SocialCluster(BaseModel):
    topic: str
    tweet_count: int = 0
    avg_engagement: int = 0
    total_engagement: int = 0
    top_tweets: list[SocialSignal] = Field(default_factory=list)
    key_terms: list[str] = Field(default_factory=list)
    unique_authors: int = 0

    @field_validator(
        "tweet_count", "avg_engagement", "total_engagement", "unique_authors", mode="before"
    )
    @classmethod
    def coerce_missing(cls, value: Any) -> Any:
        return _zero_if_missing(value)


class RepoCluster(BaseModel):
    topic: str
    repo_count: int = 0
    total_stars: int = 0
    avg_stars: float = 0.0
    top_repos: list[RepoSignal] = Field(default_factory=list)
    key_terms: list[str] = Field(default_factory=list)

    @field_validator("repo_count", "total_stars", "avg_stars", mode="before")
    @classmethod
    def coerce_missing(cls, value: Any) -> Any:
        return _zero_if_missing(value)


class SocialScan(BaseModel):
    scanned_at: str
    queries: list[str] = Field(default_factory=list)
    signals: list[SocialSignal] = Field(default_factory=list)
    clusters: list[SocialCluster] = Field(default_factory=list)


class RepoScan(BaseModel):
    scanned_at: str
    queries: list[str] = Field(default_factory=list)
    repos: list[RepoSignal] = Field(default_factory=list)
    clusters: list[RepoCluster] = Field(default_factory=list)


# ── Narratives ─────────────────────────────────────────────────────────────


class TweetPreview(BaseModel):
    text: str
    author: str
    likes: int
    url: str


class RepoPreview(BaseModel):
    name: str
    description: str
    stars: int
    url: str


class SocialSnapshot(BaseModel):
    tweet_count: int = 0
    avg_engagement: int = 0
    total_engagement: int = 0
    unique_authors: int = 0
    top_tweets: list[TweetPreview] = Field(default_factory=list)
    key_terms: list[str] = Field(default_factory=list)


class DeveloperSnapshot(BaseModel):
    repo_count: int = 0
    total_stars: int = 0
    avg_stars: float = 0.0
    top_repos: list[RepoPreview] = Field(default_factory=list)
    key_terms: list[str] = Field(default_factory=list)


class SignalSnapshot(BaseModel):
    social: SocialSnapshot = Field(default_factory=SocialSnapshot)
    developer: DeveloperSnapshot = Field(default_factory=DeveloperSnapshot)


class BuildIdea(BaseModel):
    title: str
    description: str
    difficulty: Difficulty = "medium"
    category: str = "Infrastructure"


class Narrative(BaseModel):
    name: str
    confidence: float
    stage: Stage
    explanation: str = ""
    signal_score: int
    signals: SignalSnapshot
    build_ideas: list[BuildIdea] = Field(default_factory=list)


class NarrativeReport(BaseModel):
    generated_at: str
    period: str
    narratives: list[Narrative] = Field(default_factory=list)
    methodology: str = ""

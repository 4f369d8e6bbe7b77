"""Topic pattern tables, stop-words and the narrative alignment table.

Everything here is built once at start-up (see :func:`default_taxonomy`) and
handed to the clusterer and aggregator as a read-only :class:`Taxonomy`.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass


@dataclass(frozen=True)
class TopicRule:
    label: str
    patterns: tuple[re.Pattern[str], ...]

    def matches(self, text: str) -> bool:
        return any(p.search(text) for p in self.patterns)


@dataclass(frozen=True)
class Alignment:
    """Narrative name → (social topic, repo topic). ``""`` means no counterpart."""

    name: str
    social_topic: str
    repo_topic: str


@dataclass(frozen=True)
class Taxonomy:
    social_topics: tuple[TopicRule, ...]
    repo_topics: tuple[TopicRule, ...]
    social_stop_words: frozenset[str]
    repo_stop_words: frozenset[str]
    alignment: tuple[Alignment, ...]


def topic_table(rules: Iterable[tuple[str, list[str]]]) -> tuple[TopicRule, ...]:
    """Compile ``(label, [regex, …])`` pairs into case-insensitive rules."""
    return tuple(
        TopicRule(label, tuple(re.compile(p, re.IGNORECASE) for p in patterns))
        for label, patterns in rules
    )


def alignment_table(entries: Iterable[tuple[str, str, str]]) -> tuple[Alignment, ...]:
    """Build the alignment table, rejecting duplicated narrative names."""
    table: list[Alignment] = []
    seen: set[str] = set()
    for name, social_topic, repo_topic in entries:
        if name in seen:
            raise ValueError(f"Duplicate narrative name in alignment table: {name!r}")
        seen.add(name)
        table.append(Alignment(name, social_topic, repo_topic))
    return tuple(table)


# ── Solana ecosystem tables ────────────────────────────────────────────────

_SOCIAL_TOPICS: list[tuple[str, list[str]]] = [
    (
        "Privacy & Confidential Computing",
        [
            r"privac", r"confidential", r"shielded?", r"hush", r"arcium",
            r"ghost", r"zero.knowledge", r"zk", r"encrypt",
        ],
    ),
    (
        "AI Agent Infrastructure",
        [
            r"\bagent", r"autonomous", r"ai.infra", r"agent.to.agent",
            r"openclaw", r"sendai", r"skills?\smarket",
        ],
    ),
    (
        "Agent Commerce & Payments",
        [
            r"x402", r"agent.pay", r"machine.to.machine", r"icpay",
            r"usdc.*agent", r"agent.*usdc", r"payment.*agent", r"agent.*payment",
            r"gusto", r"payroll.*solana",
        ],
    ),
    (
        "DePIN & Physical Infrastructure",
        [
            r"depin", r"helium", r"dabba", r"physical.infra",
            r"iot.*solana", r"solana.*iot",
        ],
    ),
    (
        "Dev Tooling & AI-Assisted Building",
        [
            r"claude.*solana", r"solana.*claude", r"anchor.*ai",
            r"dev.tool", r"code.gen", r"ai.*build",
        ],
    ),
    (
        "Restaking & Liquid Staking",
        [
            r"restaking", r"fragmetric", r"solayer", r"liquid.stak",
            r"jito.*sol", r"lst",
        ],
    ),
    (
        "Cross-chain & Interoperability",
        [
            r"cross.chain", r"bridge", r"interop", r"wormhole",
            r"multichain", r"omnichain",
        ],
    ),
]

_REPO_TOPICS: list[tuple[str, list[str]]] = [
    (
        "AI Agent Infrastructure",
        [
            r"\bagent", r"autonomous", r"ai.agent", r"llm",
            r"chatbot", r"assistant", r"skills?\s",
        ],
    ),
    (
        "Privacy & Confidential Computing",
        [
            r"privac", r"confidential", r"shielded?", r"encrypt",
            r"zero.knowledge", r"zk", r"noir", r"arcium", r"hush",
        ],
    ),
    (
        "Payments & Commerce",
        [
            r"payment", r"x402", r"commerce", r"usdc", r"pay",
            r"invoic", r"checkout", r"merchant",
        ],
    ),
    (
        "DePIN",
        [r"depin", r"iot", r"sensor", r"physical", r"hardware"],
    ),
    (
        "Dev Tooling",
        [
            r"tool", r"sdk", r"config", r"template", r"scaffold",
            r"boilerplate", r"starter", r"claude",
        ],
    ),
    (
        "DeFi & Financial",
        [
            r"defi", r"swap", r"lend", r"borrow", r"yield", r"staking",
            r"restaking", r"liqui", r"amm", r"dex",
        ],
    ),
]

SOCIAL_STOP_WORDS: frozenset[str] = frozenset({
    "the", "a", "an", "is", "are", "was", "were", "be", "been", "being",
    "have", "has", "had", "do", "does", "did", "will", "would", "could",
    "should", "may", "might", "can", "shall", "to", "of", "in", "for",
    "on", "with", "at", "by", "from", "as", "into", "through", "during",
    "before", "after", "above", "below", "and", "but", "or", "nor", "not",
    "so", "yet", "both", "either", "neither", "each", "every", "all",
    "this", "that", "these", "those", "it", "its", "they", "them", "their",
    "we", "us", "our", "you", "your", "he", "him", "his", "she", "her",
    "i", "me", "my", "what", "which", "who", "whom", "how", "when", "where",
    "why", "if", "than", "just", "more", "most", "very", "too", "also",
    "about", "up", "out", "no", "https", "co", "rt", "amp",
})

# Repo descriptions all mention the ecosystem itself; drop it.
REPO_STOP_WORDS: frozenset[str] = frozenset({
    "the", "a", "an", "for", "and", "with", "that", "this", "from",
    "solana", "sol", "built", "using", "based",
})

_ALIGNMENT: list[tuple[str, str, str]] = [
    ("Privacy Infrastructure", "Privacy & Confidential Computing", "Privacy & Confidential Computing"),
    ("AI Agent Economy", "AI Agent Infrastructure", "AI Agent Infrastructure"),
    ("Agent Commerce", "Agent Commerce & Payments", "Payments & Commerce"),
    ("DePIN Growth", "DePIN & Physical Infrastructure", "DePIN"),
    ("Dev Tooling for Solana", "Dev Tooling & AI-Assisted Building", "Dev Tooling"),
    ("Restaking & LSTs", "Restaking & Liquid Staking", "DeFi & Financial"),
    ("Cross-chain", "Cross-chain & Interoperability", ""),
]


def default_taxonomy() -> Taxonomy:
    """Return the Solana ecosystem taxonomy."""
    return Taxonomy(
        social_topics=topic_table(_SOCIAL_TOPICS),
        repo_topics=topic_table(_REPO_TOPICS),
        social_stop_words=SOCIAL_STOP_WORDS,
        repo_stop_words=REPO_STOP_WORDS,
        alignment=alignment_table(_ALIGNMENT),
    )

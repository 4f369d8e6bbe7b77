"""Narrative explanations and build ideas.

Two interchangeable synthesizers share one method, ``synthesize(narrative)``:

* :class:`RuleBasedSynthesizer`: deterministic templates and a canned idea
  catalog. Always available.
* :class:`LLMSynthesizer`: asks a chat model for a sharper explanation and
  fresh ideas, and falls back to the rule-based result per narrative on any
  failure.

:func:`build_synthesizer` picks one from configuration.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Protocol

from openai import OpenAI
from pydantic import BaseModel, Field

from narrativescope.models import BuildIdea, Narrative, Stage

logger = logging.getLogger(__name__)


class Synthesis(BaseModel):
    explanation: str
    build_ideas: list[BuildIdea] = Field(default_factory=list)


class Synthesizer(Protocol):
    def synthesize(self, narrative: Narrative) -> Synthesis: ...


# ── Rule-based ─────────────────────────────────────────────────────────────

_STAGE_DESCRIPTIONS: dict[Stage, str] = {
    "pre-narrative": "Early stage — dev activity detected before social buzz",
    "emergence": "Emerging — growing social discussion and/or dev activity",
    "acceleration": "Accelerating — high engagement and active development",
    "peak": "Peaking — widespread awareness, may be late for new builds",
}


def _idea(title: str, description: str, difficulty: str, category: str) -> BuildIdea:
    return BuildIdea(title=title, description=description, difficulty=difficulty, category=category)


IDEA_CATALOG: dict[str, list[BuildIdea]] = {
    "Privacy Infrastructure": [
        _idea(
            "Private DeFi Aggregator",
            "DEX aggregator that shields transaction details using Solana's confidential "
            "transfer extensions. Users swap tokens without revealing amounts or "
            "counterparties on-chain.",
            "hard",
            "DeFi",
        ),
        _idea(
            "Confidential DAO Voting",
            "On-chain governance where votes stay encrypted until the voting period ends, "
            "preventing bandwagon effects and last-minute vote manipulation.",
            "medium",
            "Governance",
        ),
        _idea(
            "Privacy-Preserving Analytics Dashboard",
            "Lets protocols analyze user behavior patterns without exposing individual "
            "wallet addresses, using ZK proofs to produce aggregate stats.",
            "hard",
            "Analytics",
        ),
        _idea(
            "Shielded Token Launchpad",
            "Fair launch platform where participation amounts are hidden during the sale, "
            "so whales cannot intimidate smaller participants.",
            "medium",
            "Launchpad",
        ),
    ],
    "AI Agent Economy": [
        _idea(
            "Agent Reputation System",
            "On-chain reputation scores for AI agents built from transaction history, "
            "success rates and peer reviews. Credit scores for agents.",
            "medium",
            "Infrastructure",
        ),
        _idea(
            "Agent Skill Marketplace",
            "Agents discover, buy and integrate new capabilities. Skills are NFTs with "
            "usage licenses and version tracking.",
            "medium",
            "Marketplace",
        ),
        _idea(
            "Multi-Agent Orchestration Framework",
            "Coordination layer for agents collaborating on complex tasks, with "
            "escrow-based payment splitting and dispute resolution.",
            "hard",
            "Infrastructure",
        ),
        _idea(
            "Agent Activity Monitor",
            "Real-time dashboard of what AI agents are doing on Solana: transactions, "
            "interactions and resource usage. An explorer for agents.",
            "easy",
            "Analytics",
        ),
    ],
    "Agent Commerce": [
        _idea(
            "x402 Payment Gateway",
            "Middleware adding pay-per-use billing to any API via the x402 protocol, so "
            "developers can monetize their services for agents with one line of code.",
            "medium",
            "Payments",
        ),
        _idea(
            "Agent-to-Agent Invoice System",
            "Contracts that let agents create, send and settle invoices automatically, "
            "including payment terms and dispute resolution.",
            "medium",
            "Commerce",
        ),
        _idea(
            "Autonomous Service Directory",
            "Registry where agents list services with pricing, SLAs and reviews, and other "
            "agents discover and contract them programmatically.",
            "easy",
            "Discovery",
        ),
    ],
    "DePIN Growth": [
        _idea(
            "DePIN Network Aggregator",
            "Dashboard comparing DePIN projects on Solana by device count, revenue, "
            "coverage and token performance.",
            "easy",
            "Analytics",
        ),
        _idea(
            "DePIN Device Staking Platform",
            "Stake tokens on specific DePIN devices or locations; better-performing "
            "devices earn more yield, creating a market for network quality.",
            "hard",
            "DeFi",
        ),
        _idea(
            "Cross-DePIN Data Marketplace",
            "DePIN networks sell their data to each other and to traditional businesses: "
            "weather data next to WiFi coverage next to delivery routes.",
            "medium",
            "Data",
        ),
    ],
    "Dev Tooling for Solana": [
        _idea(
            "AI Audit Copilot for Anchor",
            "Reviews Anchor programs for common vulnerabilities, suggests fixes and "
            "generates test cases, trained on known Solana exploits.",
            "hard",
            "Security",
        ),
        _idea(
            "Solana Program Template Generator",
            "CLI that turns a natural language description into a production-ready Anchor "
            "program with tests, deployment scripts and docs.",
            "medium",
            "Developer Experience",
        ),
        _idea(
            "On-chain Error Decoder",
            "Translates cryptic Solana transaction errors into readable explanations with "
            "suggested fixes across the major protocols.",
            "easy",
            "Developer Experience",
        ),
    ],
    "Restaking & LSTs": [
        _idea(
            "LST Yield Optimizer",
            "Rotates between Solana liquid staking tokens by yield, risk and liquidity. "
            "A robo-advisor for SOL staking.",
            "medium",
            "DeFi",
        ),
        _idea(
            "Restaking Risk Dashboard",
            "Monitors restaking positions for slashing risk, operator performance and "
            "reward rates, with early warnings for participants.",
            "easy",
            "Analytics",
        ),
    ],
    "Cross-chain": [
        _idea(
            "Cross-chain Agent Router",
            "Unified routing layer so agents on different chains can transact: a Solana "
            "agent pays an Ethereum agent through automatic bridging.",
            "hard",
            "Infrastructure",
        ),
    ],
}


def build_ideas(name: str, social_terms: list[str], dev_terms: list[str]) -> list[BuildIdea]:
    """Canned ideas for *name*, or one generic tracker idea for unknown names.

    The key terms are accepted for interface parity with generative backends;
    the catalog does not use them.
    """
    ideas = IDEA_CATALOG.get(name)
    if ideas:
        return [idea.model_copy() for idea in ideas]
    return [
        BuildIdea(
            title="Narrative Tracker",
            description=(
                f"Build a focused tracking tool for the {name} space — monitoring key "
                "metrics, projects, and developments specific to this narrative."
            ),
            difficulty="easy",
            category="Analytics",
        )
    ]


def explain(narrative: Narrative) -> str:
    social = narrative.signals.social
    developer = narrative.signals.developer
    parts: list[str] = []
    if social.tweet_count > 0:
        parts.append(
            f"{social.tweet_count} tweets detected with {social.avg_engagement} avg engagement"
        )
    if developer.repo_count > 0:
        parts.append(f"{developer.repo_count} new repos ({developer.total_stars} total stars)")
    return f"{_STAGE_DESCRIPTIONS[narrative.stage]}. {'. '.join(parts)}."


class RuleBasedSynthesizer:
    """Deterministic explanation + canned build ideas."""

    def synthesize(self, narrative: Narrative) -> Synthesis:
        return Synthesis(
            explanation=explain(narrative),
            build_ideas=build_ideas(
                narrative.name,
                narrative.signals.social.key_terms,
                narrative.signals.developer.key_terms,
            ),
        )


# ── LLM-backed ─────────────────────────────────────────────────────────────

_SYSTEM_PROMPT = (
    "You analyze emerging narratives in the Solana blockchain ecosystem for builders. "
    "You answer with raw JSON only: no markdown, no backticks."
)

_RESPONSE_FORMAT = """\
Respond in this exact JSON format:
{
  "explanation": "2-3 sentences on what this narrative is and why it matters for Solana \
builders right now. Reference actual projects, numbers or events from the signal data.",
  "build_ideas": [
    {
      "title": "Short product name",
      "description": "1-2 sentences on what to build and why it would work.",
      "difficulty": "easy|medium|hard",
      "category": "DeFi|Infrastructure|Analytics|Commerce|Security|Developer Experience|\
Governance|Data|Marketplace|Payments"
    }
  ]
}

Generate 3-5 build ideas, concrete and specific to Solana, each realistic for a solo \
developer or small team. Prioritize gaps visible in the signal data."""

_JSON_BLOCK_RE = re.compile(r"\{.*\}", re.DOTALL)
_DIFFICULTIES = {"easy", "medium", "hard"}


class SynthesisError(Exception):
    """Raised when a model reply cannot be turned into a :class:`Synthesis`."""


def build_prompt(narrative: Narrative) -> str:
    social = narrative.signals.social
    developer = narrative.signals.developer
    top_tweets = "\n".join(
        f'- {t.author} ({t.likes} likes): "{t.text}"' for t in social.top_tweets
    )
    top_repos = "\n".join(
        f"- {r.name} ({r.stars} stars): {r.description}" for r in developer.top_repos
    )
    return (
        f"NARRATIVE: {narrative.name}\n"
        f"STAGE: {narrative.stage}\n"
        f"SIGNAL SCORE: {narrative.signal_score}/100\n"
        f"CONFIDENCE: {round(narrative.confidence * 100)}%\n\n"
        "SOCIAL SIGNALS (X, last 7 days):\n"
        f"- {social.tweet_count} tweets, {social.avg_engagement} avg engagement\n"
        f"- {social.unique_authors} unique authors\n"
        f"- Key terms: {', '.join(social.key_terms)}\n"
        f"Top tweets:\n{top_tweets or '(none)'}\n\n"
        "DEVELOPER SIGNALS (GitHub, last 30 days):\n"
        f"- {developer.repo_count} new repos, {developer.total_stars} total stars\n"
        f"- Key terms: {', '.join(developer.key_terms)}\n"
        f"Top repos:\n{top_repos or '(none)'}\n\n"
        f"{_RESPONSE_FORMAT}"
    )


def parse_reply(raw: str) -> Synthesis:
    """Parse a model reply that is JSON, or prose with one JSON object inside."""
    try:
        data: Any = json.loads(raw.strip())
    except json.JSONDecodeError:
        match = _JSON_BLOCK_RE.search(raw)
        if not match:
            raise SynthesisError("Could not find JSON in model reply") from None
        try:
            data = json.loads(match.group(0))
        except json.JSONDecodeError as exc:
            raise SynthesisError(f"Malformed JSON in model reply: {exc}") from exc

    if not isinstance(data, dict):
        raise SynthesisError("Model reply is not a JSON object")

    ideas: list[BuildIdea] = []
    for item in data.get("build_ideas") or []:
        if not isinstance(item, dict) or not item.get("title"):
            continue
        difficulty = item.get("difficulty")
        ideas.append(
            BuildIdea(
                title=str(item["title"]),
                description=str(item.get("description", "")),
                difficulty=difficulty if difficulty in _DIFFICULTIES else "medium",
                category=str(item.get("category") or "Infrastructure"),
            )
        )

    return Synthesis(explanation=str(data.get("explanation") or ""), build_ideas=ideas[:5])


class LLMSynthesizer:
    """Chat-model synthesizer. Ships with OpenAI; per-narrative fallback on failure."""

    def __init__(
        self,
        client: Any,
        model: str,
        fallback: Synthesizer | None = None,
    ) -> None:
        self._client = client
        self._model = model
        self._fallback = fallback or RuleBasedSynthesizer()

    def synthesize(self, narrative: Narrative) -> Synthesis:
        try:
            raw = self._chat(build_prompt(narrative))
            result = parse_reply(raw)
        except Exception:
            logger.exception("Synthesis failed for %s; using rule-based fallback", narrative.name)
            return self._fallback.synthesize(narrative)

        if not result.explanation or not result.build_ideas:
            logger.warning("Incomplete synthesis for %s; using rule-based fallback", narrative.name)
            return self._fallback.synthesize(narrative)

        logger.info("Synthesized %s (%d ideas)", narrative.name, len(result.build_ideas))
        return result

    def _chat(self, user: str) -> str:
        resp = self._client.chat.completions.create(
            model=self._model,
            messages=[
                {"role": "system", "content": _SYSTEM_PROMPT},
                {"role": "user", "content": user},
            ],
            temperature=0.4,
            max_tokens=1024,
        )
        return resp.choices[0].message.content or ""


def build_synthesizer(provider: str, api_key: str, model: str) -> Synthesizer:
    """Return the synthesizer selected by configuration."""
    provider = provider.lower()
    if provider == "none" or not api_key:
        if provider != "none":
            logger.warning("LLM_API_KEY not set — using rule-based explanations and ideas.")
        return RuleBasedSynthesizer()
    if provider == "openai":
        return LLMSynthesizer(OpenAI(api_key=api_key), model)
    logger.warning("Unknown LLM_PROVIDER '%s'; using rule-based synthesis.", provider)
    return RuleBasedSynthesizer()

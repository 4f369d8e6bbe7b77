"""Unit tests for narrative explanations and build ideas."""

import json
from types import SimpleNamespace

import pytest

from narrativescope.models import Narrative, SignalSnapshot, SocialSnapshot
from narrativescope.synthesis import (
    IDEA_CATALOG,
    LLMSynthesizer,
    RuleBasedSynthesizer,
    SynthesisError,
    build_ideas,
    build_prompt,
    build_synthesizer,
    explain,
    parse_reply,
)

GOOD_REPLY = json.dumps(
    {
        "explanation": "Agents are paying each other on Solana.",
        "build_ideas": [
            {"title": "Agent Wallet", "description": "d", "difficulty": "easy", "category": "Payments"},
            {"title": "Agent Escrow", "description": "d", "difficulty": "impossible"},
        ],
    }
)


def _narrative(name: str = "Agent Commerce", stage: str = "emergence") -> Narrative:
    return Narrative(
        name=name,
        confidence=0.5,
        stage=stage,
        signal_score=40,
        signals=SignalSnapshot(social=SocialSnapshot(tweet_count=6, avg_engagement=140)),
    )


class _FakeCompletions:
    def __init__(self, reply: str | Exception) -> None:
        self.reply = reply
        self.calls: list[dict] = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        if isinstance(self.reply, Exception):
            raise self.reply
        message = SimpleNamespace(content=self.reply)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def _client(reply: str | Exception) -> SimpleNamespace:
    return SimpleNamespace(chat=SimpleNamespace(completions=_FakeCompletions(reply)))


class TestRuleBased:
    def test_catalog_ideas(self) -> None:
        ideas = build_ideas("Agent Commerce", [], [])
        assert [i.title for i in ideas] == [i.title for i in IDEA_CATALOG["Agent Commerce"]]

    def test_unknown_name_gets_tracker(self) -> None:
        [idea] = build_ideas("Memecoins", ["bonk"], [])
        assert idea.title == "Narrative Tracker"
        assert "Memecoins" in idea.description
        assert idea.difficulty == "easy"

    def test_explanation_mentions_counts(self) -> None:
        text = explain(_narrative())
        assert text.startswith("Emerging")
        assert "6 tweets detected with 140 avg engagement" in text
        assert "repos" not in text

    def test_synthesize(self) -> None:
        result = RuleBasedSynthesizer().synthesize(_narrative(stage="peak"))
        assert result.explanation.startswith("Peaking")
        assert len(result.build_ideas) == 3


class TestParseReply:
    def test_plain_json(self) -> None:
        result = parse_reply(GOOD_REPLY)
        assert result.explanation.startswith("Agents")
        assert [i.difficulty for i in result.build_ideas] == ["easy", "medium"]
        assert result.build_ideas[1].category == "Infrastructure"

    def test_json_inside_prose(self) -> None:
        result = parse_reply(f"Sure! Here it is:\n```json\n{GOOD_REPLY}\n```")
        assert len(result.build_ideas) == 2

    def test_no_json(self) -> None:
        with pytest.raises(SynthesisError):
            parse_reply("I cannot help with that.")

    def test_not_an_object(self) -> None:
        with pytest.raises(SynthesisError):
            parse_reply("[1, 2, 3]")

    def test_at_most_five_ideas(self) -> None:
        ideas = [{"title": f"Idea {i}", "description": "d"} for i in range(8)]
        result = parse_reply(json.dumps({"explanation": "e", "build_ideas": ideas}))
        assert len(result.build_ideas) == 5

    def test_untitled_ideas_skipped(self) -> None:
        reply = json.dumps({"explanation": "e", "build_ideas": [{"description": "d"}, "x"]})
        assert parse_reply(reply).build_ideas == []


class TestLLMSynthesizer:
    def test_uses_model_reply(self) -> None:
        client = _client(GOOD_REPLY)
        result = LLMSynthesizer(client, "gpt-test").synthesize(_narrative())
        assert result.explanation == "Agents are paying each other on Solana."
        [call] = client.chat.completions.calls
        assert call["model"] == "gpt-test"
        assert "NARRATIVE: Agent Commerce" in call["messages"][1]["content"]

    def test_falls_back_on_error(self) -> None:
        client = _client(RuntimeError("boom"))
        result = LLMSynthesizer(client, "gpt-test").synthesize(_narrative())
        assert result == RuleBasedSynthesizer().synthesize(_narrative())

    def test_falls_back_on_garbage(self) -> None:
        result = LLMSynthesizer(_client("no json here"), "m").synthesize(_narrative())
        assert result.build_ideas[0].title == IDEA_CATALOG["Agent Commerce"][0].title

    def test_falls_back_on_incomplete_reply(self) -> None:
        reply = json.dumps({"explanation": "", "build_ideas": []})
        result = LLMSynthesizer(_client(reply), "m").synthesize(_narrative())
        assert result.explanation.startswith("Emerging")

    def test_prompt_lists_signals(self) -> None:
        prompt = build_prompt(_narrative())
        assert "SIGNAL SCORE: 40/100" in prompt
        assert "CONFIDENCE: 50%" in prompt
        assert "6 tweets, 140 avg engagement" in prompt
        assert "(none)" in prompt


class TestBuildSynthesizer:
    def test_none_provider(self) -> None:
        assert isinstance(build_synthesizer("none", "key", "m"), RuleBasedSynthesizer)

    def test_missing_key(self) -> None:
        assert isinstance(build_synthesizer("openai", "", "m"), RuleBasedSynthesizer)

    def test_unknown_provider(self) -> None:
        assert isinstance(build_synthesizer("carrier-pigeon", "key", "m"), RuleBasedSynthesizer)

    def test_openai(self) -> None:
        assert isinstance(build_synthesizer("OpenAI", "sk-test", "m"), LLMSynthesizer)

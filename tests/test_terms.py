"""Unit tests for key-term extraction."""

from narrativescope.models import RepoSignal, SocialSignal
from narrativescope.taxonomy import REPO_STOP_WORDS, SOCIAL_STOP_WORDS
from narrativescope.terms import extract_key_terms, repo_key_terms, social_key_terms


def _signal(text: str, tweet_id: str = "1") -> SocialSignal:
    return SocialSignal(tweet_id=tweet_id, text=text)


def _repo(name: str, description: str) -> RepoSignal:
    return RepoSignal(name=name, full_name=f"dev/{name}", description=description)


class TestSocialKeyTerms:
    def test_frequency_order(self) -> None:
        signals = [
            _signal("Solana agents are building payments https://t.co/abc"),
            _signal("agents love payments on solana"),
            _signal("agents"),
        ]
        assert social_key_terms(signals, SOCIAL_STOP_WORDS) == ["agents", "solana", "payments"]

    def test_urls_stripped(self) -> None:
        signals = [
            _signal("see https://t.co/zzzzword now"),
            _signal("again https://t.co/zzzzword"),
        ]
        assert "zzzzword" not in social_key_terms(signals, SOCIAL_STOP_WORDS)

    def test_stop_words_and_short_tokens_dropped(self) -> None:
        signals = [_signal("they were about zk dao"), _signal("they were about zk dao")]
        assert social_key_terms(signals, SOCIAL_STOP_WORDS) == []

    def test_singletons_dropped(self) -> None:
        assert social_key_terms([_signal("privacy matters everywhere")], SOCIAL_STOP_WORDS) == []

    def test_punctuation_splits_tokens(self) -> None:
        signals = [_signal("#depin!!! rocks"), _signal("depin, again: rocks")]
        assert social_key_terms(signals, SOCIAL_STOP_WORDS) == ["depin", "rocks"]

    def test_ties_keep_first_seen_order(self) -> None:
        signals = [_signal("beta alpha"), _signal("alpha beta")]
        assert social_key_terms(signals, SOCIAL_STOP_WORDS) == ["beta", "alpha"]

    def test_at_most_ten(self) -> None:
        words = [f"word{c}" for c in "abcdefghijkl"]
        text = " ".join(words)
        terms = social_key_terms([_signal(text), _signal(text)], SOCIAL_STOP_WORDS)
        assert terms == words[:10]

    def test_repeatable(self) -> None:
        signals = [_signal("restaking yields restaking risk"), _signal("risk of restaking")]
        first = social_key_terms(signals, SOCIAL_STOP_WORDS)
        assert first == social_key_terms(signals, SOCIAL_STOP_WORDS)
        assert first == ["restaking", "risk"]

    def test_properties(self) -> None:
        signals = [
            _signal("The agent economy on Solana is growing; agent payments via x402 are live"),
            _signal("Agent payments and agent skills: the x402 standard for payments"),
            _signal("payments payments payments from agents"),
        ]
        terms = social_key_terms(signals, SOCIAL_STOP_WORDS)
        assert len(terms) <= 10
        assert all(len(t) > 3 and t not in SOCIAL_STOP_WORDS for t in terms)
        assert terms[0] == "payments"


class TestRepoKeyTerms:
    def test_hyphens_split_and_ecosystem_name_dropped(self) -> None:
        repos = [
            _repo("agent-kit", "Agent kit for solana payments-sdk"),
            _repo("pay-agent", "Another agent toolkit with payments-sdk"),
        ]
        assert repo_key_terms(repos, REPO_STOP_WORDS) == ["agent", "payments"]

    def test_query_not_used(self) -> None:
        repos = [
            RepoSignal(name="one", full_name="a/one", description="first thing", query="solana depin"),
            RepoSignal(name="two", full_name="a/two", description="second item", query="solana depin"),
        ]
        assert repo_key_terms(repos, REPO_STOP_WORDS) == []


class TestExtractKeyTerms:
    def test_empty(self) -> None:
        assert extract_key_terms([], frozenset()) == []

    def test_hyphens_become_separators(self) -> None:
        texts = ["cross-chain bridge", "cross-chain bridge"]
        assert extract_key_terms(texts, frozenset()) == ["cross", "chain", "bridge"]

"""Unit tests for deduplication and repo noise filtering."""

from narrativescope.dedupe import dedupe_repos, dedupe_signals, filter_repo_noise
from narrativescope.models import RepoSignal, SocialSignal


def _repo(full_name: str, description: str = "A real project description", stars: int = 0) -> RepoSignal:
    return RepoSignal(name=full_name.split("/")[-1], full_name=full_name, description=description, stars=stars)


class TestDedupe:
    def test_first_signal_wins(self) -> None:
        items = [
            SocialSignal(tweet_id="1", text="first", query="a"),
            SocialSignal(tweet_id="2", text="other"),
            SocialSignal(tweet_id="1", text="first", query="b"),
        ]
        result = dedupe_signals(items)
        assert [s.tweet_id for s in result] == ["1", "2"]
        assert result[0].query == "a"

    def test_repos_by_full_name(self) -> None:
        items = [_repo("a/x", stars=1), _repo("b/x", stars=2), _repo("a/x", stars=3)]
        assert [r.full_name for r in dedupe_repos(items)] == ["a/x", "b/x"]


class TestNoiseFilter:
    def test_short_description_dropped(self) -> None:
        assert filter_repo_noise([_repo("a/x", description="wip")]) == []

    def test_spam_dropped(self) -> None:
        items = [
            _repo("a/x", description="Solana AIRDROP checker bot"),
            _repo("a/y", description="Claim now your free tokens"),
            _repo("a/z", description="Get a free-token today, limited"),
        ]
        assert filter_repo_noise(items) == []

    def test_real_repo_kept(self) -> None:
        items = [_repo("a/x", description="Anchor program for confidential transfers")]
        assert filter_repo_noise(items) == items

"""Unit tests for query profile loading."""

from pathlib import Path

from narrativescope.universe import build_group_queries, load_queries

PROFILE = Path(__file__).resolve().parents[1] / "config" / "profiles" / "solana" / "queries.yml"


class TestBuildGroupQueries:
    def test_keywords_with_anchor(self, tmp_path: Path) -> None:
        group = {"anchor": "solana", "keywords": ["privacy", "x402"]}
        assert build_group_queries(group, "-is:retweet", tmp_path) == [
            '"solana" "privacy" -is:retweet',
            '"solana" "x402" -is:retweet',
        ]

    def test_keywords_without_anchor(self, tmp_path: Path) -> None:
        group = {"keywords": ["built on solana"], "filters": ""}
        assert build_group_queries(group, "lang:en", tmp_path) == ['"built on solana"']

    def test_phrases_ignore_anchor(self, tmp_path: Path) -> None:
        group = {"anchor": "solana", "phrases": ["built on solana"]}
        assert build_group_queries(group, "lang:en", tmp_path) == ['"built on solana" lang:en']

    def test_accounts_and_file(self, tmp_path: Path) -> None:
        (tmp_path / "accounts.txt").write_text("# curated\n@alice\n\n  bob  \n")
        group = {"anchor": "solana", "accounts": ["@carol"], "accounts_file": "accounts.txt"}
        assert build_group_queries(group, "", tmp_path) == [
            "from:carol solana",
            "from:alice solana",
            "from:bob solana",
        ]

    def test_missing_accounts_file(self, tmp_path: Path) -> None:
        assert build_group_queries({"accounts_file": "nope.txt"}, "", tmp_path) == []


class TestLoadQueries:
    def test_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "queries.yml"
        path.write_text(
            "x:\n"
            "  filters: '-is:retweet'\n"
            "  groups:\n"
            "    core:\n"
            "      anchor: solana\n"
            "      keywords: [depin]\n"
            "    empty: {}\n"
            "github:\n"
            "  queries: ['solana agent', '  ', 'solana depin']\n"
        )
        queries = load_queries(path)
        assert queries.x == ['"solana" "depin" -is:retweet']
        assert queries.github == ["solana agent", "solana depin"]

    def test_overlong_query_skipped(self, tmp_path: Path) -> None:
        path = tmp_path / "queries.yml"
        path.write_text(f"x:\n  groups:\n    g:\n      keywords: ['{'a' * 600}', ok]\n")
        assert load_queries(path).x == ['"ok"']

    def test_empty_file(self, tmp_path: Path) -> None:
        path = tmp_path / "queries.yml"
        path.write_text("")
        queries = load_queries(path)
        assert queries.x == []
        assert queries.github == []

    def test_bundled_profile(self) -> None:
        queries = load_queries(PROFILE)
        assert len(queries.github) == 10
        assert '"solana" "x402" -is:retweet lang:en' in queries.x
        assert "from:rajgokal -is:retweet" in queries.x
        assert '"solana hackathon" -is:retweet lang:en' in queries.x
        assert all(len(q) <= 512 for q in queries.x)

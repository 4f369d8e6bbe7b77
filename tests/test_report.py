"""Unit tests for report rendering."""

import json
from pathlib import Path

from narrativescope.aggregate import build_report
from narrativescope.models import (
    BuildIdea,
    DeveloperSnapshot,
    Narrative,
    RepoPreview,
    SignalSnapshot,
    SocialSnapshot,
    TweetPreview,
)
from narrativescope.report import md_to_html, render_markdown, write_report


def _narrative() -> Narrative:
    return Narrative(
        name="DePIN Growth",
        confidence=0.76,
        stage="acceleration",
        explanation="Hotspots are <b>everywhere</b>.",
        signal_score=59,
        signals=SignalSnapshot(
            social=SocialSnapshot(
                tweet_count=10,
                avg_engagement=250,
                unique_authors=8,
                top_tweets=[
                    TweetPreview(text="new\nhotspot map", author="@a", likes=90, url="https://x.com/i/status/1")
                ],
                key_terms=["helium", "hotspots"],
            ),
            developer=DeveloperSnapshot(
                repo_count=6,
                total_stars=30,
                top_repos=[RepoPreview(name="dev/iot", description="IoT gateway", stars=9, url="u")],
            ),
        ),
        build_ideas=[BuildIdea(title="Coverage Map", description="Map it.", difficulty="easy")],
    )


class TestMarkdown:
    def test_sections(self) -> None:
        md = render_markdown(build_report([_narrative()]))
        assert "## 1. 🟡 DePIN Growth" in md
        assert "**Score:** 59/100" in md
        assert "**Confidence:** 76%" in md
        assert "| 1 | 10 | 6 | 76% |" in md
        assert "[new hotspot map](https://x.com/i/status/1)" in md
        assert "_Key terms: helium, hotspots_" in md
        assert "**Coverage Map** (easy, Infrastructure)" in md
        assert "## Methodology" in md

    def test_text_is_escaped(self) -> None:
        md = render_markdown(build_report([_narrative()]))
        assert "<b>" not in md
        assert "&lt;b&gt;everywhere&lt;/b&gt;" in md

    def test_markdown_in_descriptions_stays_text(self) -> None:
        narrative = _narrative()
        repo = narrative.signals.developer.top_repos[0].model_copy(
            update={"description": "[click me](javascript:alert(1)) great agent tool"}
        )
        narrative.signals.developer.top_repos = [repo]
        page = md_to_html(render_markdown(build_report([narrative])))
        assert "javascript:alert" in page
        assert 'href="javascript:' not in page

    def test_bracket_in_post_keeps_link(self) -> None:
        narrative = _narrative()
        tweet = narrative.signals.social.top_tweets[0].model_copy(update={"text": "gm ] ser *bold*"})
        narrative.signals.social.top_tweets = [tweet]
        page = md_to_html(render_markdown(build_report([narrative])))
        assert 'href="https://x.com/i/status/1"' in page
        assert "gm ] ser *bold*</a>" in page

    def test_empty_report(self) -> None:
        md = render_markdown(build_report([]))
        assert "No narratives cleared the signal threshold" in md
        assert "| 0 | 0 | 0 | 0% |" in md


class TestHtml:
    def test_inline_styles(self) -> None:
        page = md_to_html("# Title\n\nbody")
        assert page.startswith("<!DOCTYPE html>")
        assert '<h1 style="' in page
        assert "<p style=" in page

    def test_each_tag_styled_once(self) -> None:
        page = md_to_html("### Heading\n\nsee [docs](https://example.com)")
        assert page.count("<h3 style=") == 1
        assert '" style="' not in page
        assert '<a style="color:#22d3ee; text-decoration:none;" href="https://example.com">' in page


class TestWriteReport:
    def test_writes_three_files(self, tmp_path: Path) -> None:
        report = build_report([_narrative()])
        paths = write_report(report, tmp_path / "public")
        assert sorted(paths) == ["html", "json", "markdown"]
        assert all(p.exists() for p in paths.values())
        data = json.loads(paths["json"].read_text())
        assert data["narratives"][0]["signal_score"] == 59
        assert data["narratives"][0]["signals"]["developer"]["repo_count"] == 6

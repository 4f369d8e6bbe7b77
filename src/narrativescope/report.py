"""Render a :class:`NarrativeReport` as Markdown, styled HTML and JSON."""

from __future__ import annotations

import html
import logging
import re
from pathlib import Path

import markdown

from narrativescope.models import Narrative, NarrativeReport

logger = logging.getLogger(__name__)

_STAGE_BADGES = {
    "pre-narrative": "🔵",
    "emergence": "🟢",
    "acceleration": "🟡",
    "peak": "🟠",
}

_HTML_TEMPLATE = """\
<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<meta name="viewport" content="width=device-width, initial-scale=1.0">
<title>NarrativeScope — Solana Emerging Narratives</title>
</head>
<body style="margin:0; padding:0; background-color:#08080d;">
<div style="max-width:880px; margin:0 auto; padding:40px 24px;
            font-family:-apple-system,BlinkMacSystemFont,'Segoe UI',Roboto,Helvetica,Arial,sans-serif;
            font-size:15px; line-height:1.6; color:#e0e0e8;">
{body}
</div>
</body>
</html>
"""

# Characters Markdown treats as syntax; escaped in untrusted text.
_MD_SPECIAL_RE = re.compile(r"([\\`*_\[\]()#|!])")

# Inline styles injected after the markdown→HTML conversion
_STYLE_OVERRIDES = {
    "h1": (
        "font-size:28px; font-weight:700; margin:0 0 8px 0; "
        "color:#fff; border-bottom:2px solid #6366f1; padding-bottom:8px;"
    ),
    "h2": "font-size:20px; font-weight:600; margin:32px 0 8px 0; color:#fff;",
    "h3": "font-size:16px; font-weight:600; margin:20px 0 6px 0; color:#c8c8d8;",
    "hr": "border:none; border-top:1px solid #1e1e2e; margin:24px 0;",
    "a": "color:#22d3ee; text-decoration:none;",
    "ul": "padding-left:20px; margin:8px 0;",
    "li": "margin-bottom:6px;",
    "p": "margin:8px 0;",
    "em": "color:#7878a0;",
    "strong": "color:#fff;",
    "table": "border-collapse:collapse; width:100%; margin:12px 0;",
    "th": "text-align:left; padding:6px 8px; border-bottom:1px solid #2a2a3e;",
    "td": "padding:6px 8px; border-bottom:1px solid #1e1e2e;",
}


def _esc(text: str) -> str:
    """Escape post/repo text so it cannot inject markup or links into the page."""
    flat = _MD_SPECIAL_RE.sub(r"\\\1", " ".join(text.split()))
    return html.escape(flat, quote=False)


def _render_narrative(index: int, n: Narrative) -> list[str]:
    social = n.signals.social
    developer = n.signals.developer
    lines = [
        f"## {index}. {_STAGE_BADGES[n.stage]} {n.name}",
        "",
        f"**Stage:** {n.stage} · **Score:** {n.signal_score}/100 · "
        f"**Confidence:** {round(n.confidence * 100)}%",
        "",
        _esc(n.explanation),
        "",
    ]

    if social.tweet_count:
        lines += [
            f"### Social — {social.tweet_count} posts, {social.avg_engagement} avg engagement, "
            f"{social.unique_authors} authors",
            "",
        ]
        lines += [f"- {_esc(t.author)} ({t.likes} likes): [{_esc(t.text)}]({t.url})" for t in social.top_tweets]
        if social.key_terms:
            lines += ["", f"_Key terms: {', '.join(social.key_terms)}_"]
        lines.append("")

    if developer.repo_count:
        lines += [
            f"### Developer — {developer.repo_count} repos, {developer.total_stars} stars",
            "",
        ]
        lines += [
            f"- [{_esc(r.name)}]({r.url}) ★{r.stars}: {_esc(r.description)}"
            for r in developer.top_repos
        ]
        if developer.key_terms:
            lines += ["", f"_Key terms: {', '.join(developer.key_terms)}_"]
        lines.append("")

    if n.build_ideas:
        lines += ["### Build ideas", ""]
        lines += [
            f"- **{_esc(idea.title)}** ({idea.difficulty}, {_esc(idea.category)}): "
            f"{_esc(idea.description)}"
            for idea in n.build_ideas
        ]
        lines.append("")

    lines += ["---", ""]
    return lines


def render_markdown(report: NarrativeReport) -> str:
    """Full Markdown report: summary stats, one section per narrative, methodology."""
    narratives = report.narratives
    total_posts = sum(n.signals.social.tweet_count for n in narratives)
    total_repos = sum(n.signals.developer.repo_count for n in narratives)
    avg_confidence = (
        round(sum(n.confidence for n in narratives) / len(narratives) * 100) if narratives else 0
    )

    lines = [
        "# NarrativeScope — Solana Emerging Narratives",
        "",
        f"_Period: {report.period} · Generated {report.generated_at}_",
        "",
        "| Narratives | Posts | Repos | Avg confidence |",
        "|---|---|---|---|",
        f"| {len(narratives)} | {total_posts} | {total_repos} | {avg_confidence}% |",
        "",
    ]

    if not narratives:
        lines += ["_No narratives cleared the signal threshold this period._", ""]
    for i, n in enumerate(narratives, start=1):
        lines += _render_narrative(i, n)

    lines += ["## Methodology", "", report.methodology, ""]
    return "\n".join(lines)


def md_to_html(md_text: str) -> str:
    """Convert Markdown to a standalone HTML page with inline styles."""
    body = markdown.markdown(
        md_text,
        extensions=["tables", "fenced_code"],
        output_format="html",
    )
    # Inject inline styles for each tag, once per opening tag
    for tag, style in _STYLE_OVERRIDES.items():
        body = re.sub(rf"<{tag}(?=[\s>])", f'<{tag} style="{style}"', body)
    return _HTML_TEMPLATE.format(body=body)


def write_report(report: NarrativeReport, output_dir: Path) -> dict[str, Path]:
    """Write ``report.md``, ``index.html`` and ``api.json`` into *output_dir*."""
    output_dir.mkdir(parents=True, exist_ok=True)
    md_text = render_markdown(report)

    paths = {
        "markdown": output_dir / "report.md",
        "html": output_dir / "index.html",
        "json": output_dir / "api.json",
    }
    paths["markdown"].write_text(md_text, encoding="utf-8")
    paths["html"].write_text(md_to_html(md_text), encoding="utf-8")
    paths["json"].write_text(report.model_dump_json(indent=2), encoding="utf-8")

    logger.info("Report written to %s (%d narratives)", output_dir, len(report.narratives))
    return paths

"""Load a profile's ``queries.yml`` and build X and GitHub query strings."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

# X Recent Search rejects longer queries on the Basic tier.
_X_QUERY_LIMIT = 512


class ScanQueries(BaseModel):
    x: list[str] = Field(default_factory=list)
    github: list[str] = Field(default_factory=list)


def _load_lines(path: str | Path) -> list[str]:
    """Read a text file and return non-empty, non-comment lines."""
    p = Path(path)
    if not p.exists():
        logger.warning("File not found, skipping: %s", p)
        return []
    lines: list[str] = []
    for raw in p.read_text().splitlines():
        stripped = raw.strip()
        if stripped and not stripped.startswith("#"):
            lines.append(stripped)
    return lines


def _handle(account: str) -> str:
    # Allow @handles; X query uses from:handle without @.
    return account.strip().lstrip("@")


def _join(*parts: str) -> str:
    return " ".join(p for p in parts if p)


def build_group_queries(group: dict[str, Any], default_filters: str, base_dir: Path) -> list[str]:
    """Expand one query group into X search strings.

    - each ``keywords`` entry → ``"<anchor>" "<keyword>" <filters>``
      (just ``"<keyword>" <filters>`` without an anchor)
    - each ``phrases`` entry → ``"<phrase>" <filters>``, never anchored
    - each account from ``accounts`` / ``accounts_file`` →
      ``from:<handle> <anchor> <filters>``
    """
    anchor: str = group.get("anchor", "") or ""
    filters: str = group.get("filters", default_filters) or ""
    quoted_anchor = f'"{anchor}"' if anchor else ""

    queries: list[str] = []
    for kw in group.get("keywords", []) or []:
        queries.append(_join(quoted_anchor, f'"{kw}"', filters))
    for phrase in group.get("phrases", []) or []:
        queries.append(_join(f'"{phrase}"', filters))

    accounts: list[str] = list(group.get("accounts", []) or [])
    accounts_file: str | None = group.get("accounts_file")
    if accounts_file:
        accounts.extend(_load_lines(base_dir / accounts_file))
    for account in accounts:
        queries.append(_join(f"from:{_handle(account)}", anchor, filters))

    return queries


def load_queries(queries_path: Path) -> ScanQueries:
    """Parse ``queries.yml`` into X and GitHub query lists.

    Layout::

        x:
          filters: "-is:retweet lang:en"   # default for every group
          groups:
            <name>: {anchor, keywords, accounts, accounts_file, filters}
        github:
          queries: ["solana agent", ...]
    """
    with open(queries_path) as fh:
        cfg: dict[str, Any] = yaml.safe_load(fh) or {}

    # File references inside queries.yml are relative to its own directory
    base_dir = queries_path.resolve().parent

    x_cfg: dict[str, Any] = cfg.get("x", {}) or {}
    default_filters: str = x_cfg.get("filters", "") or ""
    x_queries: list[str] = []
    for name, group in (x_cfg.get("groups", {}) or {}).items():
        built = build_group_queries(group or {}, default_filters, base_dir)
        if not built:
            logger.warning("Skipping empty query group: %s", name)
            continue
        for query in built:
            if len(query) > _X_QUERY_LIMIT:
                logger.warning(
                    "Query in '%s' is %d chars (limit %d); skipping.",
                    name,
                    len(query),
                    _X_QUERY_LIMIT,
                )
                continue
            x_queries.append(query)
            logger.debug("Query [%s]: %s", name, query)

    gh_cfg: dict[str, Any] = cfg.get("github", {}) or {}
    github_queries = [str(q).strip() for q in gh_cfg.get("queries", []) or [] if str(q).strip()]

    return ScanQueries(x=x_queries, github=github_queries)

"""JSON file cache of scan results and the latest narrative report."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TypeVar

from pydantic import BaseModel, ValidationError

from narrativescope.models import NarrativeReport, RepoScan, SocialScan

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)

_X_SCAN = "x-scan.json"
_GITHUB_SCAN = "github-scan.json"
_NARRATIVES = "narratives.json"


class ScanCacheError(Exception):
    """Raised when a cached file is missing or unreadable."""


class ScanStore:
    """Reads and writes one profile's cached scans under *data_dir*."""

    def __init__(self, data_dir: Path) -> None:
        data_dir.mkdir(parents=True, exist_ok=True)
        self._data_dir = data_dir

    # ── public ──────────────────────────────────────────────────────────

    def save_social(self, scan: SocialScan) -> Path:
        return self._write(_X_SCAN, scan)

    def save_repos(self, scan: RepoScan) -> Path:
        return self._write(_GITHUB_SCAN, scan)

    def save_report(self, report: NarrativeReport) -> Path:
        return self._write(_NARRATIVES, report)

    def load_social(self) -> SocialScan:
        return self._read(_X_SCAN, SocialScan)

    def load_repos(self) -> RepoScan:
        return self._read(_GITHUB_SCAN, RepoScan)

    def load_report(self) -> NarrativeReport:
        return self._read(_NARRATIVES, NarrativeReport)

    # ── private ─────────────────────────────────────────────────────────

    def _write(self, name: str, model: BaseModel) -> Path:
        path = self._data_dir / name
        path.write_text(model.model_dump_json(indent=2), encoding="utf-8")
        logger.info("Saved %s", path)
        return path

    def _read(self, name: str, model_cls: type[M]) -> M:
        path = self._data_dir / name
        if not path.exists():
            raise ScanCacheError(f"No cached data at {path}")
        try:
            return model_cls.model_validate_json(path.read_text(encoding="utf-8"))
        except ValidationError as exc:
            raise ScanCacheError(f"Cached data at {path} is invalid: {exc}") from exc

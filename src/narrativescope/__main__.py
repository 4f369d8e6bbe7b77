"""CLI entry-point: ``python -m narrativescope run`` / ``python -m narrativescope show``."""

from __future__ import annotations

import argparse
import logging
import sys

from narrativescope import config
from narrativescope.pipeline import run_pipeline, setup_logging
from narrativescope.store import ScanCacheError, ScanStore

logger = logging.getLogger(__name__)


def _show_latest(profile: str) -> None:
    """Print the most recent narrative ranking for *profile*."""
    setup_logging()
    store = ScanStore(config.profile_paths(profile)["data_dir"])
    try:
        report = store.load_report()
    except ScanCacheError as exc:
        logger.error("%s — run `narrativescope run --profile %s` first.", exc, profile)
        sys.exit(1)

    print(f"NarrativeScope [{profile}] {report.period} (generated {report.generated_at})")
    for n in report.narratives:
        print(f"  {n.signal_score:>3}  {n.name} ({n.stage}, confidence {round(n.confidence * 100)}%)")
        print(f"       {n.explanation}")


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="narrativescope",
        description="Detect emerging ecosystem narratives from X and GitHub signals.",
    )
    sub = parser.add_subparsers(dest="command")
    profiles = config.available_profiles()

    # ── run ────────────────────────────────────────────────────────────
    run_parser = sub.add_parser("run", help="Scan, aggregate and render the report.")
    run_parser.add_argument(
        "--profile",
        choices=profiles,
        default=config.DEFAULT_PROFILE,
        help=f"Which config profile to run (default: {config.DEFAULT_PROFILE}).",
    )
    run_parser.add_argument(
        "--cached",
        action="store_true",
        help="Re-aggregate the last saved scans instead of calling the APIs.",
    )
    run_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Scan and aggregate but skip LLM synthesis and report write.",
    )

    # ── show ───────────────────────────────────────────────────────────
    show_parser = sub.add_parser("show", help="Print the latest narrative ranking.")
    show_parser.add_argument(
        "--profile",
        choices=profiles,
        default=config.DEFAULT_PROFILE,
        help=f"Which profile's latest report to show (default: {config.DEFAULT_PROFILE}).",
    )

    args = parser.parse_args(argv)

    if args.command == "run":
        try:
            run_pipeline(profile=args.profile, cached=args.cached, dry_run=args.dry_run)
        except ScanCacheError as exc:
            logger.error("%s — run without --cached first.", exc)
            sys.exit(1)
    elif args.command == "show":
        _show_latest(profile=args.profile)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()

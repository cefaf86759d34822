"""Cron entry point for sweeping abandoned renderer asset directories."""

from __future__ import annotations

import argparse
import sys
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from clipstitch.config import load_config
from clipstitch.media.stale_assets import StaleAssetSweeper


@dataclass(slots=True)
class SweepSummary:
    removed: int
    dry_run: bool


def perform_sweep(
    *,
    dry_run: bool,
    max_age_seconds: float | None = None,
    reference_time: datetime | None = None,
) -> SweepSummary:
    """Execute the sweep and return summary counters."""
    config = load_config()
    age = max_age_seconds if max_age_seconds is not None else config.stale_asset_max_age_seconds
    sweeper = StaleAssetSweeper(
        scratch_dir=config.scratch_dir,
        patterns=config.stale_asset_patterns,
        max_age=timedelta(seconds=age),
    )
    now = reference_time or datetime.now(timezone.utc)

    if dry_run:
        return SweepSummary(removed=len(sweeper.find_stale(now)), dry_run=True)
    return SweepSummary(removed=len(sweeper.sweep(now)), dry_run=False)


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Remove stale renderer asset directories.")
    parser.add_argument("--dry-run", action="store_true", help="Only report counts without deleting.")
    parser.add_argument(
        "--max-age-seconds",
        type=float,
        default=None,
        help="Override the configured age gate.",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv or [])
    try:
        summary = perform_sweep(dry_run=args.dry_run, max_age_seconds=args.max_age_seconds)
    except Exception as exc:
        print(f"sweep failed: {exc}", file=sys.stderr)
        return 2

    if summary.dry_run:
        print(f"sweep dry-run, stale={summary.removed}", file=sys.stdout)
    else:
        print(f"sweep done, removed={summary.removed}", file=sys.stdout)
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))

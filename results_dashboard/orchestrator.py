#!/usr/bin/env python3
"""
Pilkada Results Dashboard - Orchestrator

Main entry point that drives the dashboard for one election tier:
1. Loads the national overview (gubernur tier)
2. Applies the province/district selection, if any
3. Renders region charts + summary dashboard
4. Writes the card model JSON and a CSV summary table

With --watch it keeps re-fetching every interval and re-renders only when the
fetched documents changed.

Usage:
    python orchestrator.py [--tier gubernur] [--province 32] [--district 3201]
                           [--fixtures-dir PATH] [--watch --interval 300]

Press Ctrl+C to stop watching.
"""

import argparse
import sys
import time
from datetime import datetime, timedelta
from pathlib import Path
from typing import Optional

from results_dashboard.fetch_snapshots import (
    DEFAULT_BASE_URL,
    MAX_RETRIES,
    REQUEST_TIMEOUT,
    FixtureRepository,
    RemoteRepository,
    compute_content_hash,
)
from results_dashboard.generate_charts import generate_all_charts
from results_dashboard.summary_table import save_summary_csv
from results_dashboard.view_state import TIER_CONFIG, DashboardView

DEFAULT_INTERVAL = 300  # 5 minutes
DEFAULT_OUTPUT_DIR = "analysis/dashboard"


def build_repository(args):
    """Local fixture directory when given, otherwise the remote host."""
    if args.fixtures_dir:
        fixtures = Path(args.fixtures_dir)
        if not fixtures.is_dir():
            print(f"ERROR: Fixtures directory not found: {fixtures}")
            sys.exit(1)
        return FixtureRepository(fixtures)
    return RemoteRepository(base_url=args.base_url, timeout=args.timeout, retries=args.retries)


def refresh_view(view: DashboardView, province: str, district: str) -> None:
    """Re-fetch everything the current selection needs."""
    view.load_overview()
    if province:
        future = view.select_province(province)
        if future is not None:
            future.result()
        if district:
            view.select_district(district)


def render_snapshot(view: DashboardView, output_root: Path, timestamp: datetime) -> Optional[Path]:
    """
    Render the current view into a timestamped directory.

    Returns the output directory, or None when there was nothing to render.
    """
    snapshot = view.snapshot()
    if not snapshot['cards']:
        print("  [INFO] No data to render (all sources failed or nothing selected)")
        return None

    output_dir = output_root / timestamp.strftime('%Y-%m-%d_%H-%M-%S')
    generate_all_charts(snapshot, str(output_dir))
    csv_path = save_summary_csv(snapshot['cards'], output_dir / 'summary.csv')
    print(f"  Summary table: {csv_path}")

    headline = snapshot.get('headline')
    if headline:
        print(f"  {headline['name']}: {headline['text']} | Last Updated: {headline['updated']}")
    return output_dir


def content_hash(view: DashboardView) -> str:
    return compute_content_hash(
        view.overview_data, view.overview_candidates, view.data, view.candidates
    )


def main():
    parser = argparse.ArgumentParser(
        description="Render the Pilkada 2024 results dashboard"
    )
    parser.add_argument(
        "--tier",
        choices=sorted(TIER_CONFIG),
        default="gubernur",
        help="Election tier: gubernur (province head) or bupati (regional head) (default: gubernur)"
    )
    parser.add_argument(
        "--province",
        default="",
        help="Province code, e.g. 32 (default: national overview)"
    )
    parser.add_argument(
        "--district",
        default="",
        help="Kabupaten/kota code within the province (default: all)"
    )
    parser.add_argument(
        "--output-dir",
        default=DEFAULT_OUTPUT_DIR,
        help=f"Output directory (default: {DEFAULT_OUTPUT_DIR})"
    )
    parser.add_argument(
        "--fixtures-dir",
        default=None,
        help="Read snapshots from a local directory instead of the remote host"
    )
    parser.add_argument(
        "--base-url",
        default=DEFAULT_BASE_URL,
        help=f"Snapshot host (default: {DEFAULT_BASE_URL})"
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=REQUEST_TIMEOUT,
        help=f"Request timeout in seconds (default: {REQUEST_TIMEOUT})"
    )
    parser.add_argument(
        "--retries",
        type=int,
        default=MAX_RETRIES,
        help=f"Attempts per document (default: {MAX_RETRIES})"
    )
    parser.add_argument(
        "--watch",
        action="store_true",
        help="Keep re-fetching and re-render when the data changes"
    )
    parser.add_argument(
        "--interval",
        type=int,
        default=DEFAULT_INTERVAL,
        help=f"Seconds between fetches in watch mode (default: {DEFAULT_INTERVAL})"
    )

    args = parser.parse_args()

    if args.district and not args.province:
        print("ERROR: --district requires --province")
        sys.exit(1)

    repository = build_repository(args)
    view = DashboardView(repository, tier=args.tier)
    output_root = Path(args.output_dir)

    print(f"Starting Pilkada dashboard ({TIER_CONFIG[args.tier]['title']})")
    print(f"  Source: {args.fixtures_dir or args.base_url}")
    print(f"  Selection: {args.province or 'overview'}" + (f" / {args.district}" if args.district else ""))
    print(f"  Output: {output_root}")
    print("-" * 60)

    if not args.watch:
        refresh_view(view, args.province, args.district)
        output_dir = render_snapshot(view, output_root, datetime.now())
        if output_dir is None:
            sys.exit(1)
        return

    last_hash = None
    fetch_count = 0
    render_count = 0

    try:
        while True:
            fetch_count += 1
            timestamp = datetime.now()
            next_check = timestamp + timedelta(seconds=args.interval)
            print(f"\n[{timestamp.strftime('%H:%M:%S')}] Fetch #{fetch_count}...")

            refresh_view(view, args.province, args.district)
            current_hash = content_hash(view)

            if current_hash == last_hash:
                print("  [INFO] No changes detected")
            elif render_snapshot(view, output_root, timestamp) is not None:
                render_count += 1
                last_hash = current_hash
                print(f"  [NEW] Rendered update #{render_count}")

            print(f"  [WAIT] Next fetch at {next_check.strftime('%H:%M:%S')} (Press Ctrl+C to stop)")
            time.sleep(args.interval)

    except KeyboardInterrupt:
        print("\n\nStopped by user")
        print(f"  Total fetches: {fetch_count}")
        print(f"  Renders: {render_count}")


if __name__ == "__main__":
    main()

#!/usr/bin/env python3
"""
Generate Results Charts

Renders the dashboard cards built by DashboardView:
1. One chart per region card (pie chart, progress bar, vote legend)
2. Summary dashboard with every card in a grid

Usage:
    python generate_charts.py \
        --fixtures-dir tests/fixtures \
        --tier gubernur --province 32 \
        --output-dir analysis/dashboard/
"""

import argparse
import json
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional

import matplotlib
matplotlib.use('Agg')  # Non-interactive backend
import matplotlib.pyplot as plt
import matplotlib.patches as mpatches
from matplotlib.colors import is_color_like
from matplotlib.gridspec import GridSpec

from pilkada_utils import safe_filename
from result_aggregator import DEFAULT_COLOR
from results_dashboard.fetch_snapshots import FixtureRepository
from results_dashboard.view_state import DashboardView, TIER_CONFIG

# Color scheme
COLOR_PROGRESS = '#2563EB'  # Progress bar fill
COLOR_TRACK = '#E5E7EB'     # Progress bar track
COLOR_EMPTY = '#95A5A6'     # Gray for regions with no votes counted
COLOR_TEXT_MUTED = '#4B5563'


def render_color(color) -> str:
    """Candidate color if matplotlib understands it, otherwise the default."""
    return color if is_color_like(color) else DEFAULT_COLOR


def draw_progress_bar(ax, percent: float, text: str) -> None:
    """Draw a horizontal progress bar filling `percent` of the axis."""
    pct = max(0.0, min(100.0, percent))
    ax.barh([0], [100], color=COLOR_TRACK, height=0.6)
    ax.barh([0], [pct], color=COLOR_PROGRESS, height=0.6)
    ax.set_xlim(0, 100)
    ax.set_ylim(-0.5, 0.5)
    ax.axis('off')
    ax.text(0, 0.55, f'Progress: {text}', transform=ax.transData,
            fontsize=9, ha='left', va='bottom', color=COLOR_TEXT_MUTED)


def draw_pie(ax, card: Dict, show_labels: bool = True) -> None:
    """Draw the vote-share pie for a card, or a placeholder when nothing is counted."""
    series = card['series']
    total = card['total']

    if not series or not total:
        ax.pie([1], colors=[COLOR_EMPTY], startangle=90, counterclock=False)
        ax.text(0, 0, 'No votes\ncounted', ha='center', va='center', fontsize=9, color='white')
        ax.set_aspect('equal')
        return

    values = [entry['value'] for entry in series]
    colors = [render_color(entry['color']) for entry in series]
    percentages = card['percentages']
    labels = [f"{percentages[entry['id']]:.2f}%" for entry in series] if show_labels else None

    ax.pie(
        values,
        colors=colors,
        startangle=90,
        counterclock=False,
        wedgeprops={'edgecolor': 'white', 'linewidth': 1},
        labels=labels,
        labeldistance=0.7,
        textprops={'fontsize': 8, 'color': 'white', 'fontweight': 'bold'},
    )
    ax.set_aspect('equal')


def create_region_chart(card: Dict, output_path: Path, updated: Optional[str] = None) -> None:
    """
    Create the chart for a single region card.

    Layout: title, progress bar, pie chart, then a legend with each
    candidate's label and vote count.
    """
    series = card['series']
    n_entries = max(1, len(series))

    fig = plt.figure(figsize=(6, 7 + 0.3 * n_entries))
    gs = GridSpec(3, 1, figure=fig, height_ratios=[0.5, 5, 0.6 + 0.35 * n_entries])

    # Progress
    progress_ax = fig.add_subplot(gs[0, 0])
    draw_progress_bar(progress_ax, card['progress_pct'], card['progress_text'])
    progress_ax.set_title(card['name'], fontsize=14, fontweight='bold', pad=24)

    # Pie
    pie_ax = fig.add_subplot(gs[1, 0])
    draw_pie(pie_ax, card)

    # Legend with vote counts
    legend_ax = fig.add_subplot(gs[2, 0])
    legend_ax.axis('off')
    if series:
        handles = [
            mpatches.Patch(color=render_color(entry['color']), label=f"{entry['label'] or entry['id']}  {entry['value']:,}")
            for entry in series
        ]
        legend_ax.legend(handles=handles, loc='upper center', fontsize=9, frameon=False)

    footer = f"Total votes: {card['total']:,}"
    if updated:
        footer += f"  |  Last Updated: {updated}"
    legend_ax.text(0.5, 0.0, footer, transform=legend_ax.transAxes,
                   fontsize=8, ha='center', va='bottom', color=COLOR_TEXT_MUTED)

    plt.tight_layout()
    plt.savefig(output_path, dpi=150, bbox_inches='tight')
    plt.close(fig)


def create_dashboard(
    snapshot: Dict,
    output_path: Path,
    timestamp: datetime,
    n_cols: int = 4
) -> None:
    """
    Create summary dashboard with all cards.

    Header shows the tier title, the headline progress and when the data was
    last updated; below it one mini pie per region.
    """
    cards = snapshot['cards']
    headline = snapshot.get('headline')

    n_cards = max(1, len(cards))
    n_cols = min(n_cols, n_cards)
    n_rows = (n_cards + n_cols - 1) // n_cols

    fig = plt.figure(figsize=(4 * n_cols, 3.5 * n_rows + 2))
    gs = GridSpec(n_rows + 1, n_cols, figure=fig, height_ratios=[0.5] + [1] * n_rows)

    # Header
    header_ax = fig.add_subplot(gs[0, :])
    header_ax.axis('off')

    header_lines = [snapshot.get('title', 'Hasil Pilkada 2024')]
    if headline:
        header_lines.append(f"{headline['name']}: {headline['text']}")
        header_lines.append(f"Last Updated: {headline['updated']}")
    else:
        header_lines.append("No data available")
    header_lines.append(f"Rendered: {timestamp.strftime('%Y-%m-%d %H:%M:%S')}")

    header_ax.text(0.5, 0.5, '\n'.join(header_lines), transform=header_ax.transAxes,
                   fontsize=12, fontfamily='monospace', ha='center', va='center')

    # Draw each region cell
    for idx, card in enumerate(cards):
        row = idx // n_cols + 1
        col = idx % n_cols
        ax = fig.add_subplot(gs[row, col])
        draw_pie(ax, card, show_labels=len(card['series']) <= 4)

        title = card['name']
        if card.get('leader'):
            title += f"\n{card['leader']}"
        ax.set_title(title, fontsize=9, fontweight='bold')
        ax.text(0.5, -0.08, f"{card['progress_pct']:.2f}% TPS", transform=ax.transAxes,
                fontsize=8, ha='center', va='top', color=COLOR_TEXT_MUTED)

    plt.tight_layout()
    plt.savefig(output_path, dpi=150, bbox_inches='tight')
    plt.close(fig)


def generate_all_charts(snapshot: Dict, output_dir: str) -> List[str]:
    """
    Generate all charts for a view snapshot.

    Args:
        snapshot: DashboardView.snapshot() output
        output_dir: Directory to save charts

    Returns:
        Paths of the written files
    """
    output_path = Path(output_dir)
    output_path.mkdir(parents=True, exist_ok=True)

    timestamp = datetime.now()
    cards = snapshot['cards']
    headline = snapshot.get('headline')
    updated = headline['updated'] if headline else None
    written = []

    if not cards:
        print("  [INFO] Nothing to render")
        return written

    print(f"Generating {len(cards)} region charts...")
    for card in cards:
        chart_path = output_path / f"{card['code']}_{safe_filename(card['name'])}.png"
        create_region_chart(card, chart_path, updated=updated)
        written.append(str(chart_path))

    print("Generating summary dashboard...")
    dashboard_path = output_path / 'dashboard.png'
    create_dashboard(snapshot, dashboard_path, timestamp)
    written.append(str(dashboard_path))

    # Save card model JSON
    cards_json_path = output_path / 'cards.json'
    with open(cards_json_path, 'w', encoding='utf-8') as f:
        json.dump({
            'timestamp': timestamp.isoformat(),
            **snapshot
        }, f, indent=2, ensure_ascii=False)
    written.append(str(cards_json_path))

    print(f"Charts saved to {output_path}")
    return written


def main():
    parser = argparse.ArgumentParser(
        description="Render dashboard charts from a local snapshot directory"
    )
    parser.add_argument(
        "--fixtures-dir",
        required=True,
        help="Directory laid out like the snapshot host"
    )
    parser.add_argument(
        "--tier",
        choices=sorted(TIER_CONFIG),
        default="gubernur",
        help="Election tier (default: gubernur)"
    )
    parser.add_argument(
        "--province",
        default="",
        help="Province code (default: overview)"
    )
    parser.add_argument(
        "--output-dir",
        required=True,
        help="Output directory for charts"
    )

    args = parser.parse_args()

    view = DashboardView(FixtureRepository(args.fixtures_dir), tier=args.tier)
    view.load_overview()
    if args.province:
        view.select_province(args.province)

    generate_all_charts(view.snapshot(), args.output_dir)


if __name__ == "__main__":
    main()

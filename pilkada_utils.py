#!/usr/bin/env python3
"""
Shared utilities for the Pilkada results dashboard.

Functions for loading the static province list, resolving region names,
and formatting progress figures and snapshot timestamps.
"""

import json
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional

PROVINCES_PATH = Path(__file__).parent / "results_dashboard" / "data" / "provinces.json"
_provinces_cache = None


def load_provinces(path: Optional[Path] = None) -> List[Dict]:
    """Load the static province reference list (cached for the default path)."""
    global _provinces_cache
    if path is not None:
        with open(path, 'r', encoding='utf-8') as f:
            return json.load(f)
    if _provinces_cache is None:
        with open(PROVINCES_PATH, 'r', encoding='utf-8') as f:
            _provinces_cache = json.load(f)
    return _provinces_cache


def normalize_region_code(code) -> str:
    """Normalize a region code for matching ("  32 " -> "32", 32 -> "32")."""
    if code is None:
        return ""
    return str(code).strip()


def find_region(regions: List[Dict], code: str) -> Optional[Dict]:
    """Find a region reference record by its `kode`."""
    target = normalize_region_code(code)
    if not target:
        return None
    for region in regions:
        if normalize_region_code(region.get('kode')) == target:
            return region
    return None


def region_display_name(regions: List[Dict], code: str, fallback_prefix: str) -> str:
    """
    Get the display name for a region card.

    Falls back to "<fallback_prefix> <code>" when the reference list has no
    entry, e.g. "District 3201" while the district list is still loading.
    """
    region = find_region(regions, code)
    if region and region.get('nama'):
        return region['nama']
    return f"{fallback_prefix} {code}"


def province_prefix(region_code: str) -> str:
    """Province part of a region code (first two digits)."""
    return normalize_region_code(region_code)[:2]


def is_number(val) -> bool:
    """True for int/float tallies. Booleans are flags, not numbers."""
    return isinstance(val, (int, float)) and not isinstance(val, bool)


def progress_percent(progress: Optional[Dict], prefer_reported: bool = False) -> float:
    """
    Counting-station completion percentage for a progress summary.

    Args:
        progress: {'total', 'progres', 'persen'} summary
        prefer_reported: Use the published `persen` when present
            (district rows), instead of recomputing progres/total

    Returns:
        Percentage in 0-100, 0.0 when nothing usable is present
    """
    if not progress:
        return 0.0
    persen = progress.get('persen')
    if prefer_reported and is_number(persen):
        return float(persen)
    total = progress.get('total')
    done = progress.get('progres')
    if is_number(total) and is_number(done) and total > 0:
        return done / total * 100
    if is_number(persen):
        return float(persen)
    return 0.0


def format_progress(progress: Optional[Dict], prefer_reported: bool = False) -> str:
    """Format a progress summary as '1,234 / 5,678 TPS (21.73%)'."""
    if not progress:
        return "N/A"
    done = progress.get('progres') if is_number(progress.get('progres')) else 0
    total = progress.get('total') if is_number(progress.get('total')) else 0
    pct = progress_percent(progress, prefer_reported=prefer_reported)
    return f"{done:,} / {total:,} TPS ({pct:.2f}%)"


def format_timestamp(ts) -> str:
    """Format a snapshot timestamp for 'Last Updated' lines."""
    if not ts:
        return "--"
    try:
        return datetime.fromisoformat(str(ts)).strftime('%Y-%m-%d %H:%M:%S')
    except ValueError:
        return str(ts)


def safe_filename(name: str) -> str:
    """Create a safe filename from a region name."""
    return name.replace('/', '_').replace(' ', '_')

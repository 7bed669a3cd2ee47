#!/usr/bin/env python3
"""
Result Aggregator

Turns a raw per-region result record into chart-ready series:

    {"psu": "...", "progres": {...}, "status_progress": True,
     "100015": 12034, "100016": 9876}
        -> [{"id": "100015", "value": 12034, "label": "...", "color": "#..."}, ...]

The two election tiers publish their tables with different conventions for
telling candidate tallies apart from reserved fields, so the selection rule
is a parameter:

- ExcludeNamed: every key except a fixed set of reserved names (bupati/walikota)
- PrefixMatch: only keys starting with a fixed prefix (gubernur)

Missing candidate metadata and non-numeric tallies are expected in partial
snapshots and never raise.
"""

from dataclasses import dataclass
from typing import Dict, FrozenSet, List, Optional

from pilkada_utils import is_number

DEFAULT_LABEL = ""
DEFAULT_COLOR = "#000000"

RESERVED_FIELDS = frozenset({"psu", "progres", "status_progress"})
GUBERNUR_TALLY_PREFIX = "1000"


@dataclass(frozen=True)
class ExcludeNamed:
    """Select every field whose name is not reserved."""
    names: FrozenSet[str] = RESERVED_FIELDS

    def matches(self, key: str) -> bool:
        return key not in self.names


@dataclass(frozen=True)
class PrefixMatch:
    """Select only fields whose key starts with `prefix`."""
    prefix: str = GUBERNUR_TALLY_PREFIX

    def matches(self, key: str) -> bool:
        return str(key).startswith(self.prefix)


def coerce_tally_value(val):
    """Return numeric tallies unchanged; anything else counts as 0."""
    return val if is_number(val) else 0


def select_tally_fields(region_result: Dict, policy) -> List[str]:
    """Keys of `region_result` that hold candidate tallies, in input order."""
    return [key for key in region_result if policy.matches(key)]


def aggregate_region(
    region_result: Optional[Dict],
    candidates: Optional[Dict[str, Dict]],
    policy
) -> List[Dict]:
    """
    Build the chart series for one region.

    Args:
        region_result: Raw result record for the region (may be None)
        candidates: Candidate metadata for the region, keyed by tally field
        policy: ExcludeNamed or PrefixMatch

    Returns:
        List of {'id', 'value', 'label', 'color'} dicts in input key order
    """
    if not region_result:
        return []
    if not isinstance(candidates, dict):
        candidates = {}

    series = []
    for key in select_tally_fields(region_result, policy):
        info = candidates.get(key)
        if not isinstance(info, dict):
            info = {}
        series.append({
            'id': key,
            'value': coerce_tally_value(region_result[key]),
            'label': info.get('nama') or DEFAULT_LABEL,
            'color': info.get('warna') or DEFAULT_COLOR,
        })
    return series


def series_total(series: List[Dict]):
    """Sum of series values; the denominator for percentage labels."""
    return sum(entry['value'] for entry in series)


def vote_percentages(series: List[Dict]) -> Dict[str, float]:
    """Each entry's share of the total, rounded to 2 decimals (0.0 when nothing counted)."""
    total = series_total(series)
    if not total:
        return {entry['id']: 0.0 for entry in series}
    return {entry['id']: round(entry['value'] / total * 100, 2) for entry in series}


def leading_entry(series: List[Dict]) -> Optional[Dict]:
    """Entry with the most votes, first in ballot order on ties."""
    leader = None
    for entry in series:
        if leader is None or entry['value'] > leader['value']:
            leader = entry
    return leader

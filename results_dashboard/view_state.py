#!/usr/bin/env python3
"""
Dashboard View State

Holds what the dashboard is currently showing for one election tier:

1. Overview (national, one card per province) when nothing is selected
2. Province view (one card per kabupaten/kota) once a province is chosen
3. Optional narrowing to a single district

Selecting a province starts a fetch of the district list and the
(result table, candidate map) pair. Each selection bumps a request
generation; responses that come back for an older generation are dropped
so a slow earlier request can never overwrite a newer selection.

Fetch failures are logged and leave the affected section empty.
"""

import threading
from concurrent.futures import Future
from typing import Dict, List, Optional

from pilkada_utils import (
    format_progress,
    format_timestamp,
    load_provinces,
    normalize_region_code,
    progress_percent,
    province_prefix,
    region_display_name,
)
from result_aggregator import (
    ExcludeNamed,
    PrefixMatch,
    aggregate_region,
    leading_entry,
    series_total,
    vote_percentages,
)
from results_dashboard.data_validator import (
    format_validation_summary,
    validate_candidate_map,
    validate_overview,
    validate_result_document,
)
from results_dashboard.fetch_snapshots import OVERVIEW_CODE, fetch_snapshot_pair

TIER_CONFIG = {
    "bupati": {
        'title': "Hasil Pilkada 2024 - Pemilihan Bupati/Walikota",
        'policy': ExcludeNamed(),
        'candidate_scope': 'region',
        'has_overview': False,
    },
    "gubernur": {
        'title': "Hasil Pilkada 2024 - Pemilihan Gubernur/Wakil Gubernur",
        'policy': PrefixMatch(),
        'candidate_scope': 'province',
        'has_overview': True,
    },
}


def get_tier_config(tier: str) -> Dict:
    """Look up the configuration for an election tier."""
    if tier not in TIER_CONFIG:
        raise ValueError(f"Unknown tier: {tier!r} (expected one of {sorted(TIER_CONFIG)})")
    return TIER_CONFIG[tier]


class DashboardView:
    """Selection state and card model for one election tier."""

    def __init__(
        self,
        repository,
        tier: str = "gubernur",
        provinces: Optional[List[Dict]] = None,
        executor=None
    ):
        self.repository = repository
        self.tier = tier
        self.config = get_tier_config(tier)
        self.provinces = provinces if provinces is not None else load_provinces()
        self.executor = executor

        self.selected_province = ""
        self.selected_district = ""
        self.districts: List[Dict] = []
        self.data: Optional[Dict] = None
        self.candidates: Optional[Dict] = None
        self.overview_data: Optional[Dict] = None
        self.overview_candidates: Optional[Dict] = None

        self._generation = 0
        self._lock = threading.Lock()

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def mode(self) -> str:
        return 'province' if self.selected_province else 'overview'

    def _submit(self, fn, *args) -> Future:
        """Run on the executor when one is set, otherwise inline."""
        if self.executor is not None:
            return self.executor.submit(fn, *args)
        future = Future()
        try:
            future.set_result(fn(*args))
        except Exception as e:
            future.set_exception(e)
        return future

    def load_overview(self) -> bool:
        """
        Fetch the national overview once.

        Returns:
            True if a valid overview was loaded
        """
        if not self.config['has_overview']:
            print(f"  [INFO] No overview published for tier {self.tier}")
            return False

        data, candidates, error = fetch_snapshot_pair(self.repository, self.tier, OVERVIEW_CODE)
        if error:
            print(f"  [ERROR] Error fetching overall data: {error}")
            return False

        is_valid, issues = validate_overview(data)
        if not is_valid:
            print("  [ERROR] Invalid data format received")
            print(format_validation_summary("overview", issues))
            return False

        with self._lock:
            self.overview_data = data
            self.overview_candidates = candidates
        return True

    def select_province(self, code) -> Optional[Future]:
        """
        Switch to a province and start loading its districts and results.

        An empty code clears the selection instead.

        Returns:
            Future resolving to True when this selection's data was applied
        """
        code = normalize_region_code(code)
        if not code:
            self.clear_selection()
            return None

        with self._lock:
            self._generation += 1
            token = self._generation
            self.selected_province = code
            self.selected_district = ""
            self.districts = []
            self.data = None
            self.candidates = None

        return self._submit(self._load_province, token, code)

    def _load_province(self, token: int, code: str) -> bool:
        districts, districts_error = self.repository.fetch_districts(code)
        data, candidates, error = fetch_snapshot_pair(self.repository, self.tier, code)

        if not error:
            issues = []
            for name, (is_valid, doc_issues) in (
                ("result table", validate_result_document(data)),
                ("candidate map", validate_candidate_map(candidates)),
            ):
                if not is_valid:
                    issues.append(format_validation_summary(name, doc_issues))
            if issues:
                error = "\n".join(issues)

        with self._lock:
            if token != self._generation:
                print(f"  [STALE] Discarding response for province {code} "
                      f"(request {token}, current {self._generation})")
                return False

            if districts_error:
                print(f"  [ERROR] Error fetching districts: {districts_error}")
                self.districts = []
            elif isinstance(districts, list):
                self.districts = districts
            else:
                print(f"  [ERROR] District list for {code} is not a list")
                self.districts = []

            if error:
                print(f"  [ERROR] Error fetching data: {error}")
                return False

            self.data = data
            self.candidates = candidates
        return True

    def select_district(self, code) -> None:
        """Narrow the province view to one district (empty code shows all)."""
        with self._lock:
            self.selected_district = normalize_region_code(code)

    def clear_selection(self) -> None:
        """Return to the overview, dropping any in-flight province request."""
        with self._lock:
            self._generation += 1
            self.selected_province = ""
            self.selected_district = ""
            self.districts = []
            self.data = None
            self.candidates = None

    def _candidates_for(self, region_code: str, candidate_map: Optional[Dict]) -> Optional[Dict]:
        if not candidate_map:
            return None
        if self.mode == 'province' and self.config['candidate_scope'] == 'province':
            return candidate_map.get(province_prefix(self.selected_province))
        return candidate_map.get(region_code)

    def headline(self) -> Optional[Dict]:
        """Top-level progress for the province (when selected) or the overview."""
        with self._lock:
            province = self.selected_province
            doc = self.data if province else self.overview_data
        if not doc:
            return None

        progress = doc.get('progres') or {}
        if province:
            name = region_display_name(self.provinces, province, "Province")
        else:
            name = "National Progress"
        return {
            'name': name,
            'progress': progress,
            'percent': round(progress_percent(progress), 2),
            'text': format_progress(progress),
            'updated': format_timestamp(doc.get('ts')),
        }

    def build_cards(self) -> List[Dict]:
        """
        Build one card per region row of the current document.

        Returns:
            List of card dicts: code, name, progress, series, total,
            percentages and leader
        """
        with self._lock:
            province = self.selected_province
            if province:
                data, candidate_map = self.data, self.candidates
                regions, fallback = self.districts, "District"
                selected = self.selected_district
            else:
                data, candidate_map = self.overview_data, self.overview_candidates
                regions, fallback = self.provinces, "Province"
                selected = ""

        if not data or candidate_map is None:
            return []

        prefer_reported = bool(province)
        cards = []
        for code, row in data.get('tungsura', {}).get('table', {}).items():
            if selected and code != selected:
                continue
            if not isinstance(row, dict):
                continue

            series = aggregate_region(row, self._candidates_for(code, candidate_map), self.config['policy'])
            progress = row.get('progres') or {}
            leader = leading_entry(series)
            cards.append({
                'code': code,
                'name': region_display_name(regions, code, fallback),
                'progress': progress,
                'progress_pct': round(progress_percent(progress, prefer_reported=prefer_reported), 2),
                'progress_text': format_progress(progress, prefer_reported=prefer_reported),
                'series': series,
                'total': series_total(series),
                'percentages': vote_percentages(series),
                'leader': leader['label'] if leader and leader['value'] > 0 else None,
            })
        return cards

    def snapshot(self) -> Dict:
        """Serializable view of what is currently rendered."""
        return {
            'tier': self.tier,
            'title': self.config['title'],
            'mode': self.mode,
            'selected_province': self.selected_province,
            'selected_district': self.selected_district,
            'headline': self.headline(),
            'cards': self.build_cards(),
        }

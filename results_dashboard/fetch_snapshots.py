#!/usr/bin/env python3
"""
Snapshot Fetcher - pilkada-scrap static JSON host

Reads the pre-scraped Pilkada 2024 snapshots published as static files:

- Result tables:   {tier_path}/{code}/{code}.json  (overview: {tier_path}/0.json)
- Candidate maps:  paslon/{tier_path}.json
- District lists:  district/{province}/{province}.json

Two repository implementations share the same operations so the dashboard
can run against the live host or a local fixture directory:

- RemoteRepository: HTTP via requests, optional retries
- FixtureRepository: same relative paths under a local directory

Every fetch returns (data, error_message) and never raises for network or
parse failures.

Usage:
    python fetch_snapshots.py --tier gubernur --region 0 [--base-url URL]
"""

import argparse
import hashlib
import json
import sys
import time
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import requests

# Configuration
DEFAULT_BASE_URL = "https://raw.githubusercontent.com/razanfawwaz/pilkada-scrap/refs/heads/main"
REQUEST_TIMEOUT = 30
MAX_RETRIES = 1  # No retries by default; a failed view just stays empty
RETRY_DELAYS = [5, 15, 30]
OVERVIEW_CODE = "0"

TIER_PATHS = {
    "bupati": "pkwkk",    # Pemilihan Bupati/Walikota
    "gubernur": "pkwkp",  # Pemilihan Gubernur/Wakil Gubernur
}


def tier_path(tier: str) -> str:
    """Remote directory name for an election tier."""
    try:
        return TIER_PATHS[tier]
    except KeyError:
        raise ValueError(f"Unknown tier: {tier!r} (expected one of {sorted(TIER_PATHS)})")


def result_table_path(tier: str, region_code: str) -> str:
    """Relative path of a result table document."""
    path = tier_path(tier)
    if region_code == OVERVIEW_CODE:
        return f"{path}/{OVERVIEW_CODE}.json"
    return f"{path}/{region_code}/{region_code}.json"


def candidate_map_path(tier: str) -> str:
    """Relative path of a tier's candidate metadata document."""
    return f"paslon/{tier_path(tier)}.json"


def districts_path(province_code: str) -> str:
    """Relative path of a province's district list."""
    return f"district/{province_code}/{province_code}.json"


def compute_content_hash(*documents: Any) -> str:
    """
    Compute MD5 hash of fetched documents for change detection.

    Args:
        documents: JSON-serializable documents

    Returns:
        MD5 hex digest string
    """
    content = json.dumps(documents, sort_keys=True, ensure_ascii=False)
    return hashlib.md5(content.encode("utf-8")).hexdigest()


def fetch_json(
    url: str,
    session=None,
    timeout: float = REQUEST_TIMEOUT,
    retries: int = MAX_RETRIES
) -> Tuple[Optional[Any], Optional[str]]:
    """
    Fetch and decode a JSON document with retry logic.

    Args:
        url: URL to fetch
        session: Optional requests.Session (or compatible object with .get)
        timeout: Per-request timeout in seconds
        retries: Total attempts

    Returns:
        Tuple of (document, error_message)
        - On success: (document, None)
        - On failure: (None, error_message)
    """
    getter = session.get if session is not None else requests.get
    last_error = None

    for attempt in range(max(1, retries)):
        try:
            response = getter(url, timeout=timeout)
            response.raise_for_status()
            return response.json(), None

        except requests.exceptions.Timeout:
            last_error = f"Timeout after {timeout}s"
        except requests.exceptions.ConnectionError as e:
            last_error = f"Connection error: {e}"
        except requests.exceptions.HTTPError as e:
            last_error = f"HTTP error: {e}"
        except ValueError as e:
            # Body was not valid JSON (includes requests' JSONDecodeError)
            last_error = f"Parse error: {e}"
        except requests.exceptions.RequestException as e:
            last_error = f"Request error: {e}"

        # If not the last attempt, wait before retrying
        if attempt < retries - 1:
            delay = RETRY_DELAYS[min(attempt, len(RETRY_DELAYS) - 1)]
            print(f"  [RETRY] Attempt {attempt + 1} failed: {last_error}")
            print(f"  [RETRY] Waiting {delay}s before retry...")
            time.sleep(delay)

    return None, last_error


class RemoteRepository:
    """Read-only access to the snapshots on the static host."""

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = REQUEST_TIMEOUT,
        retries: int = MAX_RETRIES,
        session=None
    ):
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.retries = retries
        self.session = session if session is not None else requests.Session()

    def url_for(self, relative_path: str) -> str:
        return f"{self.base_url}/{relative_path}"

    def _fetch(self, relative_path: str) -> Tuple[Optional[Any], Optional[str]]:
        return fetch_json(
            self.url_for(relative_path),
            session=self.session,
            timeout=self.timeout,
            retries=self.retries
        )

    def fetch_result_table(self, tier: str, region_code: str) -> Tuple[Optional[Dict], Optional[str]]:
        return self._fetch(result_table_path(tier, region_code))

    def fetch_candidate_map(self, tier: str) -> Tuple[Optional[Dict], Optional[str]]:
        return self._fetch(candidate_map_path(tier))

    def fetch_districts(self, province_code: str) -> Tuple[Optional[List[Dict]], Optional[str]]:
        return self._fetch(districts_path(province_code))


class FixtureRepository:
    """Same operations as RemoteRepository, served from a local directory."""

    def __init__(self, root_dir):
        self.root_dir = Path(root_dir)

    def _load(self, relative_path: str) -> Tuple[Optional[Any], Optional[str]]:
        filepath = self.root_dir / relative_path
        if not filepath.exists():
            return None, f"File not found: {filepath}"
        try:
            with open(filepath, 'r', encoding='utf-8') as f:
                return json.load(f), None
        except (OSError, ValueError) as e:
            return None, f"Parse error: {e}"

    def fetch_result_table(self, tier: str, region_code: str) -> Tuple[Optional[Dict], Optional[str]]:
        return self._load(result_table_path(tier, region_code))

    def fetch_candidate_map(self, tier: str) -> Tuple[Optional[Dict], Optional[str]]:
        return self._load(candidate_map_path(tier))

    def fetch_districts(self, province_code: str) -> Tuple[Optional[List[Dict]], Optional[str]]:
        return self._load(districts_path(province_code))


def fetch_snapshot_pair(
    repository,
    tier: str,
    region_code: str
) -> Tuple[Optional[Dict], Optional[Dict], Optional[str]]:
    """
    Fetch a result table and its candidate map in parallel.

    Both documents must arrive before either is used.

    Returns:
        (result_document, candidate_map, error_message)
    """
    with ThreadPoolExecutor(max_workers=2) as executor:
        result_future = executor.submit(repository.fetch_result_table, tier, region_code)
        candidate_future = executor.submit(repository.fetch_candidate_map, tier)
        result_doc, result_error = result_future.result()
        candidate_map, candidate_error = candidate_future.result()

    errors = []
    if result_error:
        errors.append(f"Result table {tier}/{region_code}: {result_error}")
    if candidate_error:
        errors.append(f"Candidate map {tier}: {candidate_error}")
    if errors:
        return None, None, "; ".join(errors)

    return result_doc, candidate_map, None


def main():
    parser = argparse.ArgumentParser(
        description="Fetch one Pilkada result table and its candidate map"
    )
    parser.add_argument(
        "--tier",
        choices=sorted(TIER_PATHS),
        default="gubernur",
        help="Election tier (default: gubernur)"
    )
    parser.add_argument(
        "--region",
        default=OVERVIEW_CODE,
        help=f"Region code, {OVERVIEW_CODE} for the national overview (default: {OVERVIEW_CODE})"
    )
    parser.add_argument(
        "--base-url",
        default=DEFAULT_BASE_URL,
        help=f"Snapshot host (default: {DEFAULT_BASE_URL})"
    )

    args = parser.parse_args()

    repository = RemoteRepository(base_url=args.base_url)
    result_doc, candidate_map, error = fetch_snapshot_pair(repository, args.tier, args.region)

    if error:
        print(f"ERROR: {error}")
        sys.exit(1)

    table = result_doc.get('tungsura', {}).get('table', {})
    print(f"Fetched {len(table)} regions ({args.tier}/{args.region}), "
          f"candidates for {len(candidate_map)} regions")
    print(f"Content hash: {compute_content_hash(result_doc, candidate_map)}")


if __name__ == "__main__":
    main()

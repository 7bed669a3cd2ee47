"""Tests for the snapshot repositories and the parallel pair fetch."""

import json

import pytest
import requests

from conftest import GUBERNUR_CANDIDATES, GUBERNUR_OVERVIEW, InMemoryRepository
from results_dashboard import fetch_snapshots
from results_dashboard.fetch_snapshots import (
    FixtureRepository,
    RemoteRepository,
    candidate_map_path,
    compute_content_hash,
    districts_path,
    fetch_json,
    fetch_snapshot_pair,
    result_table_path,
)


class FakeResponse:
    def __init__(self, payload=None, status_code=200, text=None):
        self.payload = payload
        self.status_code = status_code
        self.text = text

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(f"{self.status_code} Client Error")

    def json(self):
        if self.text is not None:
            return json.loads(self.text)
        return self.payload


class FakeSession:
    """Returns queued responses (or raises queued exceptions) per URL."""

    def __init__(self, responses):
        self.responses = responses
        self.requested = []

    def get(self, url, timeout=None):
        self.requested.append((url, timeout))
        outcome = self.responses[url]
        if isinstance(outcome, list):
            outcome = outcome.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


BASE = "https://example.test/snap"


def test_paths():
    assert result_table_path("gubernur", "0") == "pkwkp/0.json"
    assert result_table_path("gubernur", "32") == "pkwkp/32/32.json"
    assert result_table_path("bupati", "32") == "pkwkk/32/32.json"
    assert candidate_map_path("bupati") == "paslon/pkwkk.json"
    assert districts_path("32") == "district/32/32.json"


def test_unknown_tier_raises():
    with pytest.raises(ValueError):
        result_table_path("walikota", "32")


def test_remote_repository_builds_urls_and_decodes():
    session = FakeSession({f"{BASE}/pkwkp/0.json": FakeResponse(GUBERNUR_OVERVIEW)})
    repository = RemoteRepository(base_url=BASE + "/", timeout=7, session=session)

    data, error = repository.fetch_result_table("gubernur", "0")

    assert error is None
    assert data == GUBERNUR_OVERVIEW
    assert session.requested == [(f"{BASE}/pkwkp/0.json", 7)]


@pytest.mark.parametrize("outcome, prefix", [
    (requests.exceptions.Timeout(), "Timeout"),
    (requests.exceptions.ConnectionError("refused"), "Connection error"),
    (FakeResponse(status_code=404), "HTTP error"),
    (FakeResponse(text="<html>not json</html>"), "Parse error"),
])
def test_fetch_json_reports_failures_without_raising(outcome, prefix):
    url = f"{BASE}/paslon/pkwkp.json"
    data, error = fetch_json(url, session=FakeSession({url: outcome}))

    assert data is None
    assert error.startswith(prefix)


def test_fetch_json_retries_then_succeeds(monkeypatch):
    monkeypatch.setattr(fetch_snapshots.time, "sleep", lambda _: None)
    url = f"{BASE}/paslon/pkwkp.json"
    session = FakeSession({url: [requests.exceptions.Timeout(), FakeResponse(GUBERNUR_CANDIDATES)]})

    data, error = fetch_json(url, session=session, retries=2)

    assert error is None
    assert data == GUBERNUR_CANDIDATES
    assert len(session.requested) == 2


def test_fetch_json_does_not_retry_by_default():
    url = f"{BASE}/paslon/pkwkp.json"
    session = FakeSession({url: [requests.exceptions.Timeout(), FakeResponse(GUBERNUR_CANDIDATES)]})

    data, error = fetch_json(url, session=session)

    assert data is None
    assert len(session.requested) == 1


def test_fixture_repository_reads_host_layout(fixture_repository):
    data, error = fixture_repository.fetch_result_table("gubernur", "0")
    assert error is None
    assert data["mode"] == "hhcw"

    districts, error = fixture_repository.fetch_districts("32")
    assert error is None
    assert [d["kode"] for d in districts] == ["3201", "3202"]


def test_fixture_repository_missing_and_corrupt_files(tmp_path):
    repository = FixtureRepository(tmp_path)
    data, error = repository.fetch_candidate_map("bupati")
    assert data is None
    assert "File not found" in error

    corrupt = tmp_path / "paslon" / "pkwkk.json"
    corrupt.parent.mkdir(parents=True)
    corrupt.write_text("{broken", encoding="utf-8")
    data, error = repository.fetch_candidate_map("bupati")
    assert data is None
    assert error.startswith("Parse error")


def test_fetch_snapshot_pair_success(fixture_repository):
    result_doc, candidate_map, error = fetch_snapshot_pair(fixture_repository, "gubernur", "32")

    assert error is None
    assert set(result_doc["tungsura"]["table"]) == {"3201", "3202"}
    assert "32" in candidate_map


def test_fetch_snapshot_pair_requires_both_documents():
    repository = InMemoryRepository(tables={("gubernur", "32"): GUBERNUR_OVERVIEW})

    result_doc, candidate_map, error = fetch_snapshot_pair(repository, "gubernur", "32")

    assert result_doc is None
    assert candidate_map is None
    assert "Candidate map gubernur" in error


def test_content_hash_changes_with_data():
    first = compute_content_hash({"a": 1}, None)
    assert first == compute_content_hash({"a": 1}, None)
    assert first != compute_content_hash({"a": 2}, None)

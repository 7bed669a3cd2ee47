"""Shared fixtures: sample snapshot documents and repositories over them."""

import copy
import json
import threading

import pytest

from results_dashboard.fetch_snapshots import (
    FixtureRepository,
    candidate_map_path,
    districts_path,
    result_table_path,
)

PROGRESS = {"total": 1000, "progres": 250, "persen": 25.0}

GUBERNUR_OVERVIEW = {
    "mode": "hhcw",
    "psu": "Reguler",
    "ts": "2024-12-02 10:00:00",
    "progres": {"total": 2000, "progres": 500, "persen": 25.0},
    "tungsura": {
        "chart": {"progres": {"total": 2000, "progres": 500, "persen": 25.0}},
        "table": {
            "32": {
                "psu": "Reguler",
                "progres": {"total": 1000, "progres": 250, "persen": 25.0},
                "status_progress": True,
                "1000101": 600,
                "1000102": 400,
            },
            "33": {
                "psu": "Reguler",
                "progres": {"total": 1000, "progres": 250, "persen": 25.0},
                "status_progress": False,
                "1000201": 0,
                "1000202": 0,
            },
        },
    },
}

GUBERNUR_PROVINCE_32 = {
    "mode": "hhcw",
    "psu": "Reguler",
    "ts": "2024-12-02 10:05:00",
    "progres": {"total": 1000, "progres": 250, "persen": 25.0},
    "tungsura": {
        "chart": {"progres": {"total": 1000, "progres": 250, "persen": 25.0}},
        "table": {
            "3201": {
                "psu": "Reguler",
                "progres": {"total": 600, "progres": 150, "persen": 25.0},
                "status_progress": True,
                "1000101": 350,
                "1000102": 250,
            },
            "3202": {
                "psu": "Reguler",
                "progres": {"total": 400, "progres": 100, "persen": 25.0},
                "status_progress": True,
                "1000101": 250,
                "1000102": 150,
            },
        },
    },
}

GUBERNUR_CANDIDATES = {
    "32": {
        "1000101": {"ts": "2024-11-01", "nama": "Paslon Satu", "warna": "#FF0000", "nomor_urut": 1},
        "1000102": {"ts": "2024-11-01", "nama": "Paslon Dua", "warna": "#0000FF", "nomor_urut": 2},
    },
}

BUPATI_PROVINCE_32 = {
    "mode": "hhcw",
    "psu": "Reguler",
    "ts": "2024-12-02 10:05:00",
    "progres": {"total": 1000, "progres": 250, "persen": 25.0},
    "tungsura": {
        "chart": {"progres": {"total": 1000, "progres": 250, "persen": 25.0}},
        "table": {
            "3201": {
                "psu": "Reguler",
                "progres": {"total": 600, "progres": 150, "persen": 25.0},
                "status_progress": True,
                "201": 120,
                "202": "belum",
            },
            "3202": {
                "psu": "Reguler",
                "progres": {"total": 400, "progres": 100, "persen": 25.0},
                "status_progress": True,
                "301": 80,
            },
        },
    },
}

BUPATI_CANDIDATES = {
    "3201": {
        "201": {"ts": "2024-11-01", "nama": "Calon A", "warna": "#00AA00", "nomor_urut": 1},
        "202": {"ts": "2024-11-01", "nama": "Calon B", "warna": "#AA00AA", "nomor_urut": 2},
    },
}

DISTRICTS_32 = [
    {"id": 1, "kode": "3201", "nama": "KABUPATEN BOGOR", "tingkat": 2},
    {"id": 2, "kode": "3202", "nama": "KABUPATEN SUKABUMI", "tingkat": 2},
]

PROVINCES = [
    {"id": 12, "kode": "32", "nama": "JAWA BARAT", "tingkat": 1},
    {"id": 13, "kode": "33", "nama": "JAWA TENGAH", "tingkat": 1},
]


def write_json(root, relative_path, data):
    filepath = root / relative_path
    filepath.parent.mkdir(parents=True, exist_ok=True)
    with open(filepath, 'w', encoding='utf-8') as f:
        json.dump(data, f)
    return filepath


@pytest.fixture
def provinces():
    return copy.deepcopy(PROVINCES)


@pytest.fixture
def snapshot_dir(tmp_path):
    """Directory laid out like the snapshot host."""
    root = tmp_path / "snapshots"
    write_json(root, result_table_path("gubernur", "0"), GUBERNUR_OVERVIEW)
    write_json(root, result_table_path("gubernur", "32"), GUBERNUR_PROVINCE_32)
    write_json(root, candidate_map_path("gubernur"), GUBERNUR_CANDIDATES)
    write_json(root, result_table_path("bupati", "32"), BUPATI_PROVINCE_32)
    write_json(root, candidate_map_path("bupati"), BUPATI_CANDIDATES)
    write_json(root, districts_path("32"), DISTRICTS_32)
    return root


@pytest.fixture
def fixture_repository(snapshot_dir):
    return FixtureRepository(snapshot_dir)


class InMemoryRepository:
    """Repository over dicts; result tables can be held back with an Event."""

    def __init__(self, tables=None, candidates=None, districts=None):
        self.tables = tables or {}
        self.candidates = candidates or {}
        self.districts = districts or {}
        self.gates = {}
        self.calls = []

    def hold(self, tier, region_code):
        gate = threading.Event()
        self.gates[(tier, region_code)] = gate
        return gate

    def fetch_result_table(self, tier, region_code):
        self.calls.append(("result", tier, region_code))
        gate = self.gates.get((tier, region_code))
        if gate is not None:
            gate.wait(timeout=5)
        if (tier, region_code) not in self.tables:
            return None, f"HTTP error: 404 for {tier}/{region_code}"
        return copy.deepcopy(self.tables[(tier, region_code)]), None

    def fetch_candidate_map(self, tier):
        self.calls.append(("candidates", tier))
        if tier not in self.candidates:
            return None, f"HTTP error: 404 for paslon/{tier}"
        return copy.deepcopy(self.candidates[tier]), None

    def fetch_districts(self, province_code):
        self.calls.append(("districts", province_code))
        if province_code not in self.districts:
            return None, f"HTTP error: 404 for district/{province_code}"
        return copy.deepcopy(self.districts[province_code]), None


@pytest.fixture
def memory_repository():
    province_33 = copy.deepcopy(GUBERNUR_PROVINCE_32)
    province_33["tungsura"]["table"] = {
        "3301": {
            "psu": "Reguler",
            "progres": {"total": 10, "progres": 10, "persen": 100.0},
            "status_progress": True,
            "1000201": 7,
            "1000202": 3,
        }
    }
    return InMemoryRepository(
        tables={
            ("gubernur", "0"): GUBERNUR_OVERVIEW,
            ("gubernur", "32"): GUBERNUR_PROVINCE_32,
            ("gubernur", "33"): province_33,
        },
        candidates={"gubernur": GUBERNUR_CANDIDATES},
        districts={
            "32": DISTRICTS_32,
            "33": [{"id": 3, "kode": "3301", "nama": "KABUPATEN CILACAP", "tingkat": 2}],
        },
    )

#!/usr/bin/env python3
"""
Data Validator - shape checks for fetched snapshots

The overview check mirrors what the dashboard has always accepted: a
document in "hhcw" mode carrying a chart progress summary. Anything else is
treated exactly like a failed fetch.
"""

from typing import Any, Dict, List, Tuple

OVERVIEW_MODE = "hhcw"


def validate_overview(data: Any) -> Tuple[bool, List[str]]:
    """
    Validate the national overview document.

    Checks:
    - Is a JSON object
    - mode == "hhcw"
    - tungsura.chart.progres is present (an empty object still counts)

    Args:
        data: Decoded overview document

    Returns:
        (is_valid, list_of_issues)
    """
    issues = []

    if not isinstance(data, dict):
        issues.append("Overview is not a JSON object")
        return False, issues

    if data.get('mode') != OVERVIEW_MODE:
        issues.append(f"Unexpected mode {data.get('mode')!r} (expected {OVERVIEW_MODE!r})")

    tungsura = data.get('tungsura')
    chart = tungsura.get('chart') if isinstance(tungsura, dict) else None
    progres = chart.get('progres') if isinstance(chart, dict) else None
    # Any object counts as present, even an empty one
    if progres is None or (not isinstance(progres, (dict, list)) and not progres):
        issues.append("Missing tungsura.chart.progres")

    return len(issues) == 0, issues


def validate_result_document(data: Any) -> Tuple[bool, List[str]]:
    """Check a result document has a region table the cards can be built from."""
    issues = []

    if not isinstance(data, dict):
        return False, ["Result document is not a JSON object"]

    table = data.get('tungsura', {}).get('table') if isinstance(data.get('tungsura'), dict) else None
    if not isinstance(table, dict):
        issues.append("Missing tungsura.table")
    else:
        bad_rows = [code for code, row in table.items() if not isinstance(row, dict)]
        if bad_rows:
            issues.append(f"{len(bad_rows)} table rows are not objects: {', '.join(bad_rows[:5])}")

    return len(issues) == 0, issues


def validate_candidate_map(data: Any) -> Tuple[bool, List[str]]:
    """Check a candidate map is keyed by region, then by tally field."""
    if not isinstance(data, dict):
        return False, ["Candidate map is not a JSON object"]

    bad_regions = [code for code, entries in data.items() if not isinstance(entries, dict)]
    if bad_regions:
        return False, [f"{len(bad_regions)} regions without candidate entries: {', '.join(bad_regions[:5])}"]
    return True, []


def format_validation_summary(name: str, issues: List[str]) -> str:
    """Format validation issues for console output."""
    if not issues:
        return f"  [OK] {name}"
    lines = [f"  [INVALID] {name}:"]
    for issue in issues:
        lines.append(f"    - {issue}")
    return "\n".join(lines)

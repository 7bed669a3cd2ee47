#!/usr/bin/env python3
"""
Summary table export for rendered dashboard cards.

One row per (region, candidate) so the numbers behind the pie charts can be
opened in a spreadsheet.
"""

from pathlib import Path
from typing import Dict, List

import pandas as pd

SUMMARY_COLUMNS = [
    "Region_Code", "Region", "Candidate_Id", "Candidate", "Color",
    "Votes", "Percent_Votes", "Region_Total", "TPS_Progress_Pct",
]


def create_summary_dataframe(cards: List[Dict]) -> pd.DataFrame:
    """
    Create a pandas DataFrame with one row per candidate per region card.

    Regions without any candidate entry still get a single row with empty
    candidate fields so they show up as "not reported".
    """
    rows = []
    for card in cards:
        base = {
            "Region_Code": card['code'],
            "Region": card['name'],
            "Region_Total": card['total'],
            "TPS_Progress_Pct": card['progress_pct'],
        }
        if not card['series']:
            rows.append({**base, "Candidate_Id": "", "Candidate": "", "Color": "",
                         "Votes": 0, "Percent_Votes": 0.0})
            continue
        for entry in card['series']:
            rows.append({
                **base,
                "Candidate_Id": entry['id'],
                "Candidate": entry['label'],
                "Color": entry['color'],
                "Votes": entry['value'],
                "Percent_Votes": card['percentages'].get(entry['id'], 0.0),
            })

    return pd.DataFrame(rows, columns=SUMMARY_COLUMNS)


def save_summary_csv(cards: List[Dict], output_path: Path) -> str:
    """Write the summary table as CSV and return its path."""
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    df = create_summary_dataframe(cards)
    df.to_csv(output_path, index=False, encoding='utf-8')
    return str(output_path)

"""Tabular exports of report results for the dashboard."""

from __future__ import annotations

import csv
from dataclasses import asdict
from datetime import datetime
from decimal import Decimal
import json
from pathlib import Path
from typing import Any

from olist_reports.reports.queries import ReportRow
from olist_reports.reports.runner import ReportResult, ReportRun


def row_to_dict(row: ReportRow) -> dict[str, Any]:
    """Convert a report row to a JSON-serializable dict in column order.

    Datetimes become ISO-8601 strings and Decimals become floats.
    """
    data = asdict(row)
    for key, value in data.items():
        if isinstance(value, datetime):
            data[key] = value.isoformat(sep=" ")
        elif isinstance(value, Decimal):
            data[key] = float(value)
    return data


def result_to_records(result: ReportResult) -> list[dict[str, Any]]:
    return [row_to_dict(row) for row in result.rows]


def write_csv(result: ReportResult, path: Path) -> Path:
    """Write one report as CSV with a header row in column order.

    Args:
        result: Report result to write
        path: Destination file; parent directories are created

    Returns:
        The path written
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=list(result.columns))
        writer.writeheader()
        for record in result_to_records(result):
            writer.writerow(record)
    return path


def run_to_json(run: ReportRun) -> dict[str, Any]:
    return {
        "reference_date": run.reference_date.isoformat(sep=" "),
        "reports": {
            result.name.value: result_to_records(result) for result in run.results
        },
    }


def write_json(run: ReportRun, path: Path) -> Path:
    """Write every report of a run into a single JSON document."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(run_to_json(run), indent=2), encoding="utf-8")
    return path

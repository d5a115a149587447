"""
JSON and CSV export of a finished run.
"""

import csv
import json
from typing import List

from .models import ProcessingResult
from .stats import summarize_signals


def build_report(result: ProcessingResult, metadata: dict = None) -> dict:
    return {
        "metadata": metadata or {},
        "status": result.status,
        "signals": [s.to_dict() for s in result.signals],
        "string_value_map": result.string_value_map,
        "signal_summary": summarize_signals(result.points, result.string_value_map),
        "point_count": len(result.points),
        "points": [p.to_dict() for p in result.points],
    }


def write_json_report(result: ProcessingResult, output_path: str,
                      metadata: dict = None):
    with open(output_path, "w", encoding="utf-8") as f:
        json.dump(build_report(result, metadata), f, indent=2, default=str)


def write_csv(result: ProcessingResult, output_path: str):
    """One row per DataPoint; blank cells for signals not seen yet."""
    names: List[str] = [s.name for s in result.signals]
    fieldnames = ["timestamp"] + names

    with open(output_path, "w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=fieldnames, extrasaction="ignore")
        writer.writeheader()
        for point in result.points:
            row = {"timestamp": point.timestamp.isoformat(timespec="milliseconds")}
            row.update(point.values)
            writer.writerow(row)

"""
Per-signal summary statistics over finalized points.

Numeric values are gathered per signal into a numpy array; categorical
signals report their distinct-value count instead.
"""

import math
from typing import Dict, List

import numpy as np

from .models import DataPoint, StringValueMap


def _numeric_summary(values: List[float]) -> dict:
    arr = np.asarray(values, dtype=np.float64)
    finite = arr[np.isfinite(arr)]
    count = int(finite.size)
    return {
        "kind": "numeric",
        "mean": round(float(np.mean(finite)), 6) if count else 0.0,
        "std": round(float(np.std(finite, ddof=1)), 6) if count > 1 else 0.0,
        "min": round(float(np.min(finite)), 6) if count else None,
        "max": round(float(np.max(finite)), 6) if count else None,
        "count": count,
        "non_finite": int(arr.size - count),
    }


def _as_float(value) -> float:
    try:
        return float(value)
    except OverflowError:
        # ints beyond float range
        return math.inf if value > 0 else -math.inf


def summarize_signals(points: List[DataPoint],
                      string_value_map: StringValueMap) -> Dict[str, dict]:
    """
    {signal: {"kind": "numeric", mean, std, min, max, count, non_finite}} or
    {signal: {"kind": "categorical", "distinct_values": N, "count": M}}

    Counts include forward-filled values, i.e. one per emitted point.
    Infinities are counted under non_finite and left out of mean/std/min/max.
    """
    numeric: Dict[str, List[float]] = {}
    categorical_counts: Dict[str, int] = {}

    for point in points:
        for name, value in point.values.items():
            if isinstance(value, str):
                categorical_counts[name] = categorical_counts.get(name, 0) + 1
            else:
                numeric.setdefault(name, []).append(_as_float(value))

    summary: Dict[str, dict] = {}
    for name, values in numeric.items():
        summary[name] = _numeric_summary(values)
    for name, count in categorical_counts.items():
        if name in summary:
            # Mixed signal: numeric stats plus categorical counts
            summary[name]["kind"] = "mixed"
            summary[name]["distinct_values"] = len(string_value_map.get(name, {}))
            continue
        summary[name] = {
            "kind": "categorical",
            "distinct_values": len(string_value_map.get(name, {})),
            "count": count,
        }
    return dict(sorted(summary.items()))

"""
Default "format for display" callback.

Turns finalized DataPoints into flat renderer-ready records:

    {"timestamp": 1704067201000, "temp": 21, "status": 1, "status_original": "ok"}

String values are replaced by their categorical code so they can sit on a
numeric axis; the raw string is kept under "<name>_original" for tooltips.
"""

import asyncio
from datetime import datetime, timezone
from typing import Any, Dict, List

from .constants import ORIGINAL_VALUE_SUFFIX
from .models import DataPoint, StringValueMap
from .observer import ProcessingObserver

FORMAT_BATCH_SIZE = 5000


def epoch_ms(ts: datetime) -> int:
    """Naive timestamps are read as UTC."""
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return int(round(ts.timestamp() * 1000))


def format_point(point: DataPoint, value_map: StringValueMap) -> Dict[str, Any]:
    record: Dict[str, Any] = {"timestamp": epoch_ms(point.timestamp)}
    for name, value in point.values.items():
        if isinstance(value, str):
            record[name] = value_map.get(name, {}).get(value)
            record[f"{name}{ORIGINAL_VALUE_SUFFIX}"] = value
        else:
            record[name] = value
    return record


def format_points(points: List[DataPoint],
                  value_map: StringValueMap) -> List[Dict[str, Any]]:
    return [format_point(p, value_map) for p in points]


class DisplayFormatter:
    """
    Formatting callback that publishes records through the observer.

    Pass the instance itself for a plain call, or `format_async` to format
    in batches with a yield between them (keeps the heartbeat alive on
    large datasets).
    """

    def __init__(self, observer: ProcessingObserver,
                 batch_size: int = FORMAT_BATCH_SIZE):
        self.observer = observer
        self.batch_size = batch_size

    def __call__(self, points: List[DataPoint], value_map: StringValueMap):
        self.observer.publish_formatted(format_points(points, value_map))

    async def format_async(self, points: List[DataPoint],
                           value_map: StringValueMap):
        records: List[Dict[str, Any]] = []
        for i in range(0, len(points), self.batch_size):
            records.extend(format_points(points[i:i + self.batch_size], value_map))
            await asyncio.sleep(0)
        self.observer.publish_formatted(records)

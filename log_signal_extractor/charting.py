"""
Chart-side helpers: chart kind, zoom window, brush selection.

The renderer itself lives outside this package. What it needs from us is
the brush contract: a user drags over an index range, we clamp it to the
data and report the timestamps at both ends.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional

from .constants import ORIGINAL_VALUE_SUFFIX
from .models import Signal


class ChartKind(str, Enum):
    LINE = "line"
    BAR = "bar"


@dataclass
class ZoomDomain:
    """Visible time window in epoch milliseconds. None = data bound."""
    start: Optional[int] = None
    end: Optional[int] = None

    def contains(self, timestamp: int) -> bool:
        if self.start is not None and timestamp < self.start:
            return False
        if self.end is not None and timestamp > self.end:
            return False
        return True


@dataclass
class BrushSelection:
    start_index: int
    end_index: int
    start_value: int
    end_value: int

    def to_domain(self) -> ZoomDomain:
        return ZoomDomain(start=self.start_value, end=self.end_value)


def resolve_brush(records: List[Dict[str, Any]],
                  start_index: Optional[int],
                  end_index: Optional[int]) -> Optional[BrushSelection]:
    """
    Clamp a brush gesture to the data and look up its timestamps.

    Returns None when there is nothing to zoom into: no data, a missing
    index, or records without timestamps at the clamped positions.
    """
    if start_index is None or end_index is None or not records:
        return None

    safe_start = max(0, start_index)
    safe_end = min(len(records) - 1, end_index)
    if safe_start >= len(records) or safe_end < 0:
        return None

    start_value = records[safe_start].get("timestamp")
    end_value = records[safe_end].get("timestamp")
    if start_value is None or end_value is None:
        return None

    return BrushSelection(safe_start, safe_end, start_value, end_value)


def _signal_of(key: str) -> str:
    if key.endswith(ORIGINAL_VALUE_SUFFIX):
        return key[:-len(ORIGINAL_VALUE_SUFFIX)]
    return key


def visible_records(records: List[Dict[str, Any]],
                    signals: List[Signal],
                    zoom: Optional[ZoomDomain] = None) -> List[Dict[str, Any]]:
    """Records inside the zoom window, reduced to visible signals."""
    hidden = {s.name for s in signals if not s.visible}
    out = []
    for rec in records:
        if zoom is not None and not zoom.contains(rec["timestamp"]):
            continue
        if hidden:
            rec = {k: v for k, v in rec.items() if _signal_of(k) not in hidden}
        out.append(rec)
    return out

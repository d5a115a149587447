"""
Forward-Fill Aggregator: carries each signal's last value across lines.

A signal keeps its most recent matched value for the rest of the run,
across chunk boundaries. A line only produces a DataPoint when at least
one signal matched freshly on it; carried values alone never emit.
"""

from datetime import datetime
from typing import Dict, List, Optional

from .models import DataPoint, RunState, SignalValue
from .parser import PatternOutcome


class ForwardFillAggregator:
    """Folds per-line pattern outcomes into a RunState."""

    def __init__(self, state: RunState, signal_names: List[str]):
        self.state = state
        self.signal_names = signal_names

    def add_line(self, timestamp: datetime,
                 outcomes: List[PatternOutcome]) -> Optional[DataPoint]:
        """
        Record one timestamped line. Returns the appended DataPoint, or
        None when nothing matched freshly on this line.
        """
        values: Dict[str, SignalValue] = {}
        fresh = False

        for outcome in outcomes:
            if not outcome.matched:
                continue
            value = outcome.value
            values[outcome.name] = value
            self.state.last_seen[outcome.name] = value
            fresh = True
            if isinstance(value, str):
                self.state.string_values.setdefault(outcome.name, set()).add(value)

        # Forward fill signals seen on an earlier line
        for name in self.signal_names:
            if name not in values and name in self.state.last_seen:
                values[name] = self.state.last_seen[name]

        if not fresh or not values:
            return None

        point = DataPoint(timestamp=timestamp, values=values)
        self.state.points.append(point)
        return point

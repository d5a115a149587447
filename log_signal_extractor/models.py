"""
Data models for the extractor.

All stages communicate via these dataclasses. Kept minimal: only fields
that are actually used downstream.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional, Set, Union

# A captured value after numeric coercion
SignalValue = Union[int, float, str]

# signal name -> distinct string value -> 1-based code
StringValueMap = Dict[str, Dict[str, int]]


# ---------------------------------------------------------------------------
# Inputs
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Pattern:
    """A named extraction target. `source` is regex text with one capture group."""
    name: str
    source: str


@dataclass
class Signal:
    """A chartable series bound to one Pattern for the duration of a run."""
    id: str                   # "signal-<run stamp>-<index>"
    name: str
    pattern: Pattern
    color: str                # from CHART_COLORS, cyclic
    visible: bool = True

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "pattern": self.pattern.source,
            "color": self.color,
            "visible": self.visible,
        }


@dataclass
class Panel:
    """A chart grouping holding signal ids."""
    id: str
    signals: List[str] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Extraction output
# ---------------------------------------------------------------------------

@dataclass
class DataPoint:
    """One timestamped record with the signal values effective at that line."""
    timestamp: datetime
    values: Dict[str, SignalValue]

    def to_dict(self) -> dict:
        return {
            "timestamp": self.timestamp.isoformat(timespec="milliseconds"),
            "values": dict(self.values),
        }


@dataclass
class RunState:
    """
    Mutable state shared across scheduler ticks.

    Owned by a single ChunkScheduler; the Finalizer consumes it at the end
    of the run and nothing else keeps a reference.
    """
    total_chunks: int
    current_chunk: int = 0
    points: List[DataPoint] = field(default_factory=list)   # line order
    last_seen: Dict[str, SignalValue] = field(default_factory=dict)
    string_values: Dict[str, Set[str]] = field(default_factory=dict)

    @property
    def done(self) -> bool:
        return self.current_chunk >= self.total_chunks


@dataclass
class ProcessingResult:
    """What a finished run leaves behind for collaborators."""
    status: str                              # "ok", "no_data", "error", "superseded"
    signals: List[Signal]
    points: List[DataPoint] = field(default_factory=list)
    string_value_map: StringValueMap = field(default_factory=dict)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status == "ok"

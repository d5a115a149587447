"""
Observer side channel between the extractor and whatever hosts it.

The scheduler and finalizer never talk to a UI directly. They call into a
ProcessingObserver: status line updates, user-facing notifications, and
publication of signals and finished data.
"""

from typing import Any, Dict, List, Protocol

from .models import DataPoint, Panel, Signal, StringValueMap

# Notification levels
INFO = "info"
SUCCESS = "success"
WARNING = "warning"
ERROR = "error"


class ProcessingObserver(Protocol):
    """Protocol for receiving progress and results from a run."""

    @property
    def status(self) -> str:
        """Current status line (read back by the formatting heartbeat)."""
        ...

    def reset_chart_data(self) -> None:
        """Drop raw and formatted chart data from any previous run."""
        ...

    def publish_signals(self, signals: List[Signal], panels: List[Panel]) -> None:
        ...

    def update_status(self, message: str) -> None:
        ...

    def notify(self, level: str, message: str) -> None:
        """User-facing notification (info / success / warning / error)."""
        ...

    def publish_results(self, points: List[DataPoint],
                        string_value_map: StringValueMap) -> None:
        ...

    def publish_formatted(self, records: List[Dict[str, Any]]) -> None:
        """Renderer-ready records produced by the formatting callback."""
        ...

    def set_processing(self, active: bool) -> None:
        ...


class ChartState:
    """
    In-memory chart-facing state. Implements ProcessingObserver.

    Keeps every status update and notification so a caller (or a test)
    can inspect how a run progressed. With verbose=True, notifications
    and status changes are also printed.
    """

    def __init__(self, verbose: bool = False):
        self.verbose = verbose
        self.signals: List[Signal] = []
        self.panels: List[Panel] = []
        self.chart_data: List[DataPoint] = []
        self.formatted_data: List[Dict[str, Any]] = []
        self.string_value_map: StringValueMap = {}
        self.is_processing = False
        self.status_history: List[str] = []
        self.notifications: List[tuple] = []   # (level, message)
        self._status = ""

    @property
    def status(self) -> str:
        return self._status

    def reset_chart_data(self) -> None:
        self.chart_data = []
        self.formatted_data = []

    def publish_signals(self, signals: List[Signal], panels: List[Panel]) -> None:
        self.signals = list(signals)
        self.panels = list(panels)

    def update_status(self, message: str) -> None:
        self._status = message
        self.status_history.append(message)
        if self.verbose and message:
            print(f"  {message}")

    def notify(self, level: str, message: str) -> None:
        self.notifications.append((level, message))
        if self.verbose:
            print(f"[{level.upper()}] {message}")

    def publish_results(self, points: List[DataPoint],
                        string_value_map: StringValueMap) -> None:
        self.chart_data = points
        self.string_value_map = string_value_map

    def publish_formatted(self, records: List[Dict[str, Any]]) -> None:
        self.formatted_data = records

    def set_processing(self, active: bool) -> None:
        self.is_processing = active

    def notifications_at(self, level: str) -> List[str]:
        return [msg for lvl, msg in self.notifications if lvl == level]

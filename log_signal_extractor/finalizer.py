"""
Finalizer: turns the accumulated RunState into published results.

sort -> encode -> publish -> hand off to the formatting callback

Large result sets get a short delay before formatting (so the status line
updates first) and a heartbeat status while the callback runs. The
heartbeat is always torn down when the callback settles.
"""

import asyncio
import contextlib
import inspect
from typing import Any, Awaitable, Callable, List, Optional, Union

import numpy as np

from .constants import (
    FORMAT_START_DELAY_SEC,
    HEARTBEAT_INTERVAL_SEC,
    HEARTBEAT_SUFFIX,
    LARGE_DATASET_THRESHOLD,
    MSG_FINALIZE_ERROR,
    MSG_FORMAT_ERROR,
    MSG_NO_DATA,
    PRE_FORMAT_DELAY_SEC,
    STATUS_FINALIZING,
    STATUS_FORMATTING,
    STATUS_HEARTBEAT,
    STATUS_STARTING_FORMAT,
)
from .encoding import build_string_value_map
from .models import DataPoint, ProcessingResult, RunState, Signal, StringValueMap
from .observer import ERROR, INFO, SUCCESS, WARNING, ProcessingObserver

# (points, value_map) -> None, or an awaitable resolving to None
FormatCallback = Callable[[List[DataPoint], StringValueMap],
                          Union[None, Awaitable[Any]]]


def sort_chronologically(points: List[DataPoint]) -> List[DataPoint]:
    """Stable sort by timestamp; equal timestamps keep line order."""
    if not points:
        return []
    stamps = np.array([p.timestamp for p in points], dtype="datetime64[us]")
    order = np.argsort(stamps, kind="stable")
    return [points[i] for i in order]


class Finalizer:
    """Runs once per run, after the last chunk."""

    def __init__(self, observer: ProcessingObserver,
                 format_callback: Optional[FormatCallback] = None,
                 *,
                 large_dataset_threshold: int = LARGE_DATASET_THRESHOLD,
                 heartbeat_interval: float = HEARTBEAT_INTERVAL_SEC,
                 pre_format_delay: float = PRE_FORMAT_DELAY_SEC,
                 format_start_delay: float = FORMAT_START_DELAY_SEC,
                 verbose: bool = False):
        self.observer = observer
        self.format_callback = format_callback
        self.large_dataset_threshold = large_dataset_threshold
        self.heartbeat_interval = heartbeat_interval
        self.pre_format_delay = pre_format_delay
        self.format_start_delay = format_start_delay
        self.verbose = verbose

    def _log(self, msg: str):
        if self.verbose:
            print(msg)

    async def finalize(self, state: RunState,
                       signals: List[Signal]) -> ProcessingResult:
        """
        Consume the RunState. Never raises: failures become an "error"
        result plus an error notification.
        """
        self.observer.update_status(STATUS_FINALIZING)
        self._log(f"Finalizing data processing, found {len(state.points)} data points")

        await asyncio.sleep(0)

        try:
            if not state.points:
                self.observer.notify(WARNING, MSG_NO_DATA)
                self._stop()
                return ProcessingResult(status="no_data", signals=signals)

            points = sort_chronologically(state.points)
            value_map = build_string_value_map(state.string_values)
            state.points = []
            self._log(f"String value mappings: {value_map}")

            self.observer.publish_results(points, value_map)
            self.observer.notify(
                SUCCESS,
                f"Found {len(points):,} data points with the selected patterns")
            self.observer.update_status(STATUS_FORMATTING)

            result = ProcessingResult(status="ok", signals=signals,
                                      points=points, string_value_map=value_map)

            if len(points) > self.large_dataset_threshold:
                error = await self._format_large(points, value_map)
                if error is not None:
                    result.status = "error"
                    result.error = error
                    return result
            else:
                self._log(f"Processing smaller dataset with {len(points)} points")
                await self._invoke(points, value_map)

            self._stop()
            return result

        except Exception as e:
            print(f"[ERROR] Error finalizing data: {e}")
            self.observer.notify(ERROR, MSG_FINALIZE_ERROR)
            self._stop()
            return ProcessingResult(status="error", signals=signals, error=str(e))

    # ------------------------------------------------------------------
    # Formatting hand-off
    # ------------------------------------------------------------------

    async def _invoke(self, points: List[DataPoint], value_map: StringValueMap):
        if self.format_callback is None:
            return
        outcome = self.format_callback(points, value_map)
        if inspect.isawaitable(outcome):
            await outcome

    async def _format_large(self, points: List[DataPoint],
                            value_map: StringValueMap) -> Optional[str]:
        """Returns an error message when the callback failed, else None."""
        self.observer.notify(
            INFO,
            f"Preparing to format {len(points):,} data points. "
            f"This may take a moment...")
        heartbeat = asyncio.ensure_future(self._heartbeat())
        try:
            await asyncio.sleep(self.pre_format_delay)
            self.observer.update_status(STATUS_STARTING_FORMAT)
            await asyncio.sleep(self.format_start_delay)

            self._log(f"Starting format data callback with {len(points)} points")
            await self._invoke(points, value_map)
            return None
        except Exception as e:
            print(f"[ERROR] Error in data formatting: {e}")
            self.observer.notify(ERROR, MSG_FORMAT_ERROR)
            self._stop()
            return str(e)
        finally:
            heartbeat.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await heartbeat

    async def _heartbeat(self):
        while True:
            await asyncio.sleep(self.heartbeat_interval)
            current = self.observer.status
            if "Formatting data" in current:
                self.observer.update_status(current + HEARTBEAT_SUFFIX)
            else:
                self.observer.update_status(STATUS_HEARTBEAT)

    def _stop(self):
        self.observer.set_processing(False)
        self.observer.update_status("")

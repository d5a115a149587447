"""
Chunk Scheduler: drives extraction over fixed-size line batches.

One chunk is processed per tick. Between ticks control goes back to the
event loop, so a host UI stays responsive on logs with hundreds of
thousands of lines. The chunk size only changes how often we yield and
report progress; the finalized data is the same for any size >= 1.

Usage:
    scheduler = ChunkScheduler(text, patterns, ChartState())
    result = asyncio.run(scheduler.run())

or, driven step by step by the host:
    for progress in scheduler.steps():
        ...
    result = asyncio.run(scheduler.finish())
"""

import asyncio
import math
from typing import Iterator, List, Optional

from .aggregator import ForwardFillAggregator
from .constants import DEFAULT_CHUNK_SIZE, PROGRESS_NOTIFY_STEP
from .finalizer import FormatCallback, Finalizer
from .models import Pattern, ProcessingResult, RunState
from .observer import ERROR, INFO, ProcessingObserver
from .parser import SignalExtractor, parse_timestamp
from .patterns import build_signals


# ---------------------------------------------------------------------------
# Run tokens
# ---------------------------------------------------------------------------

class RunRegistry:
    """
    Hands out generation tokens so a newer run can retire an older one.

    A scheduler holding a stale token stops at its next tick without
    publishing anything else.
    """

    def __init__(self):
        self._generation = 0

    def issue(self) -> int:
        self._generation += 1
        return self._generation

    def is_current(self, token: int) -> bool:
        return token == self._generation


# ---------------------------------------------------------------------------
# ChunkScheduler
# ---------------------------------------------------------------------------

class ChunkScheduler:
    """
    Owns one run: the lines, the RunState, and the per-run extractors.

    The RunState is only touched by advance() and handed to the Finalizer
    at the end; the scheduler drops its reference afterwards.
    """

    def __init__(self, text: str, patterns: List[Pattern],
                 observer: ProcessingObserver,
                 *,
                 chunk_size: int = DEFAULT_CHUNK_SIZE,
                 format_callback: Optional[FormatCallback] = None,
                 finalizer: Optional[Finalizer] = None,
                 registry: Optional[RunRegistry] = None,
                 run_stamp: Optional[int] = None,
                 verbose: bool = False):
        if chunk_size < 1:
            raise ValueError(f"chunk_size must be >= 1, got {chunk_size}")

        self.observer = observer
        self.chunk_size = chunk_size
        self.verbose = verbose

        self.lines = text.split("\n")
        self.total_chunks = math.ceil(len(self.lines) / chunk_size)
        self.state: Optional[RunState] = RunState(total_chunks=self.total_chunks)

        self.patterns = list(patterns)
        self.signals, self.panels = build_signals(self.patterns, run_stamp)
        self.extractor = SignalExtractor(self.patterns)
        self.aggregator = ForwardFillAggregator(
            self.state, [p.name for p in self.patterns])
        self.finalizer = finalizer or Finalizer(
            observer, format_callback, verbose=verbose)

        self.registry = registry
        self.token = registry.issue() if registry is not None else None

        self.skipped_lines = 0
        self._started = False
        self._last_decile = 0

    def _log(self, msg: str):
        if self.verbose:
            print(msg)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self):
        """Reset chart state and publish the signal list. Idempotent."""
        if self._started:
            return
        self._started = True

        self.observer.reset_chart_data()
        self.observer.publish_signals(self.signals, self.panels)
        self.observer.set_processing(True)

        for cp in self.extractor.invalid_patterns:
            self._log(f"[WARN] Pattern '{cp.name}' does not compile "
                      f"({cp.compile_error}); it will never match")

        self._log(f"Processing {len(self.lines)} lines in {self.total_chunks} "
                  f"chunks of {self.chunk_size}")

    @property
    def superseded(self) -> bool:
        return (self.registry is not None
                and not self.registry.is_current(self.token))

    def progress_after(self, chunks_done: int) -> int:
        """
        Percent complete once `chunks_done` chunks are processed.

        Non-decreasing, and 100 only for the final chunk.
        """
        if chunks_done >= self.total_chunks:
            return 100
        return min(99, chunks_done * 100 // self.total_chunks)

    def advance(self) -> bool:
        """
        Process exactly one chunk. Returns True while chunks remain.
        """
        state = self.state
        if state is None or state.done:
            return False
        self.start()

        index = state.current_chunk
        progress = self.progress_after(index + 1)
        self.observer.update_status(
            f"Processing chunk {index + 1} of {self.total_chunks} ({progress}%)")

        start = index * self.chunk_size
        for line in self.lines[start:start + self.chunk_size]:
            try:
                self._process_line(line)
            except Exception as e:
                self.skipped_lines += 1
                self._log(f"[WARN] Skipped line: {e}")

        decile = progress // PROGRESS_NOTIFY_STEP
        if decile > self._last_decile:
            self._last_decile = decile
            self.observer.notify(
                INFO,
                f"Processing: {progress}% - Found {len(state.points):,} "
                f"data points so far")

        state.current_chunk += 1
        return not state.done

    def _process_line(self, line: str):
        if not line.strip():
            return
        timestamp = parse_timestamp(line)
        if timestamp is None:
            return
        self.aggregator.add_line(timestamp, self.extractor.extract(line))

    def steps(self) -> Iterator[int]:
        """Generator form: one chunk per next(), yielding percent complete."""
        while self.state is not None and not self.state.done:
            self.advance()
            yield self.progress_after(self.state.current_chunk)

    # ------------------------------------------------------------------
    # Async driver
    # ------------------------------------------------------------------

    async def run(self) -> ProcessingResult:
        """
        Process every chunk, yielding to the loop between chunks, then
        finalize. Never raises.
        """
        try:
            self.start()
            while self.state is not None and not self.state.done:
                if self.superseded:
                    return self._superseded_result()
                self.advance()
                await asyncio.sleep(0)
            return await self.finish()
        except Exception as e:
            print(f"[ERROR] Processing failed: {e}")
            self.observer.notify(ERROR, f"Processing failed: {e}")
            self.observer.set_processing(False)
            self.observer.update_status("")
            return ProcessingResult(status="error", signals=self.signals,
                                    error=str(e))

    async def finish(self) -> ProcessingResult:
        """Hand the RunState to the Finalizer (after any remaining chunks)."""
        for _ in self.steps():
            pass
        if self.superseded:
            return self._superseded_result()

        state, self.state = self.state, None
        self.lines = []
        if state is None:
            return ProcessingResult(status="error", signals=self.signals,
                                    error="run already finalized")
        return await self.finalizer.finalize(state, self.signals)

    def _superseded_result(self) -> ProcessingResult:
        self._log("[WARN] Run superseded by a newer one; stopping")
        self.state = None
        return ProcessingResult(status="superseded", signals=self.signals)

"""
One-call orchestration: read log -> chunked extraction -> finalize -> export.
"""

import asyncio
import os
import time
from typing import List, Optional, Union

from .constants import DEFAULT_CHUNK_SIZE
from .export import write_csv, write_json_report
from .finalizer import FormatCallback
from .formatting import DisplayFormatter
from .models import Pattern, ProcessingResult
from .observer import ChartState, ProcessingObserver
from .patterns import load_patterns, parse_patterns
from .scheduler import ChunkScheduler, RunRegistry


async def process_text(text: str,
                       patterns: List[Pattern],
                       observer: Optional[ProcessingObserver] = None,
                       *,
                       chunk_size: int = DEFAULT_CHUNK_SIZE,
                       format_callback: Optional[FormatCallback] = None,
                       registry: Optional[RunRegistry] = None,
                       verbose: bool = False) -> ProcessingResult:
    """
    Run the extractor over in-memory log text on the current event loop.

    When no format_callback is given, records are formatted with
    DisplayFormatter and published to the observer.
    """
    if observer is None:
        observer = ChartState(verbose=verbose)
    if format_callback is None:
        format_callback = DisplayFormatter(observer).format_async

    scheduler = ChunkScheduler(
        text,
        patterns,
        observer,
        chunk_size=chunk_size,
        format_callback=format_callback,
        registry=registry,
        verbose=verbose,
    )
    return await scheduler.run()


def run_extraction(
    log_path: str,
    patterns: Union[str, List],
    *,
    output_dir: Optional[str] = None,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    write_csv_file: bool = False,
    observer: Optional[ProcessingObserver] = None,
    format_callback: Optional[FormatCallback] = None,
    verbose: bool = False,
) -> ProcessingResult:
    """
    Extract signals from a log file.

    Args:
        log_path: Path to the text log
        patterns: Pattern file path, or a list of Patterns / mappings
        output_dir: Where to write signals.json (and signals.csv); None = no files
        chunk_size: Lines per scheduling tick
        write_csv_file: Also write a CSV next to the JSON report
        observer: Receives status/notifications (default: ChartState)
        format_callback: Overrides the default display formatter
        verbose: Print progress details

    Returns:
        ProcessingResult with the sorted points and string value map
    """
    def log(msg: str):
        if verbose:
            print(msg)

    if isinstance(patterns, str):
        pattern_list = load_patterns(patterns)
    else:
        pattern_list = parse_patterns(patterns)

    t0 = time.time()
    with open(log_path, "r", encoding="utf-8", errors="replace") as f:
        text = f.read()
    log(f"Read {os.path.basename(log_path)} ({len(text):,} chars), "
        f"{len(pattern_list)} patterns")

    result = asyncio.run(process_text(
        text,
        pattern_list,
        observer,
        chunk_size=chunk_size,
        format_callback=format_callback,
        verbose=verbose,
    ))
    log(f"Run finished with status '{result.status}': "
        f"{len(result.points)} points in {time.time() - t0:.2f}s")

    if output_dir and result.ok:
        os.makedirs(output_dir, exist_ok=True)
        metadata = {
            "source_file": os.path.basename(log_path),
            "total_lines": text.count("\n") + 1,
            "chunk_size": chunk_size,
            "patterns": [{"name": p.name, "pattern": p.source} for p in pattern_list],
        }
        json_path = os.path.join(output_dir, "signals.json")
        write_json_report(result, json_path, metadata)
        log(f"  JSON report: {json_path}")
        if write_csv_file:
            csv_path = os.path.join(output_dir, "signals.csv")
            write_csv(result, csv_path)
            log(f"  CSV: {csv_path}")

    return result

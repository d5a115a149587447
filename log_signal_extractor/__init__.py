"""
Log Signal Extractor

Turns free-form text logs into chart-ready time series. Each user-defined
regex pattern becomes a signal; values are captured per timestamped line,
forward-filled across lines, and finalized into a chronological sequence.

Work is chunked so the host event loop stays responsive on large logs.
"""

__version__ = "0.1.0"

from .models import DataPoint, Panel, Pattern, ProcessingResult, Signal
from .observer import ChartState, ProcessingObserver
from .patterns import PatternError, load_patterns, parse_patterns
from .scheduler import ChunkScheduler, RunRegistry
from .pipeline import process_text, run_extraction

"""
Tunables for the extractor.

None of these affect correctness: chunk size only changes scheduling
granularity and how often progress is reported.
"""

import re
from typing import List

# ---------------------------------------------------------------------------
# Chunked processing
# ---------------------------------------------------------------------------

DEFAULT_CHUNK_SIZE = 10000

# Percent steps that also raise an info notification (besides 100%).
PROGRESS_NOTIFY_STEP = 10

# ---------------------------------------------------------------------------
# Finalize / formatting hand-off
# ---------------------------------------------------------------------------

# Above this many points the formatting callback gets a heartbeat.
LARGE_DATASET_THRESHOLD = 50000

HEARTBEAT_INTERVAL_SEC = 3.0

# Short delays before the formatting callback so the status update lands first.
PRE_FORMAT_DELAY_SEC = 0.05
FORMAT_START_DELAY_SEC = 0.1

# ---------------------------------------------------------------------------
# Timestamps
# ---------------------------------------------------------------------------

# "YYYY/MM/DD HH:MM:SS.ffffff" at the start of a line
TIMESTAMP_PREFIX_RE = re.compile(
    r"^(\d{4}/\d{2}/\d{2} \d{2}:\d{2}:\d{2}\.\d{6})",
    re.ASCII,
)

# Length of "YYYY-MM-DDTHH:MM:SS.mmm"
ISO_MILLIS_LEN = 23

ISO_MILLIS_FORMAT = "%Y-%m-%dT%H:%M:%S.%f"

# ---------------------------------------------------------------------------
# Signals / chart
# ---------------------------------------------------------------------------

CHART_COLORS: List[str] = [
    "#8884d8",
    "#82ca9d",
    "#ffc658",
    "#ff8042",
    "#0088fe",
    "#00c49f",
    "#ffbb28",
    "#8dd1e1",
    "#a4de6c",
    "#d0ed57",
]

DEFAULT_PANEL_ID = "panel-1"

# Suffix for the raw string kept next to a categorical code in display records
ORIGINAL_VALUE_SUFFIX = "_original"

# ---------------------------------------------------------------------------
# Status messages
# ---------------------------------------------------------------------------

STATUS_FINALIZING = "Finalizing data processing"
STATUS_FORMATTING = "Formatting data for display"
STATUS_STARTING_FORMAT = "Starting data formatting..."
STATUS_HEARTBEAT = "Still working on large dataset..."
HEARTBEAT_SUFFIX = " (still working...)"

MSG_NO_DATA = "No matching data found with the provided patterns"
MSG_FINALIZE_ERROR = "Error finalizing data"
MSG_FORMAT_ERROR = "Error formatting chart data"

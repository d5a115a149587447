"""
Pattern Registry: loads and validates the user's named regex patterns.

Each pattern becomes one Signal for the run. Names must be unique because
they key the values of every DataPoint.

Pattern files are YAML or JSON, either a bare list:

    - name: temp
      pattern: 'temp=(\\d+)'

or the same list under a top-level ``patterns:`` key.
"""

import json
import os
import time
from typing import Iterable, List, Optional, Tuple

import yaml

from .constants import CHART_COLORS, DEFAULT_PANEL_ID, ORIGINAL_VALUE_SUFFIX
from .models import Panel, Pattern, Signal


class PatternError(ValueError):
    """Raised for malformed pattern definitions (before any run starts)."""


def parse_patterns(entries: Iterable) -> List[Pattern]:
    """
    Build Pattern objects from mappings or (name, source) pairs.

    Only the shape of each entry is checked here. The regex itself is not
    compiled: a bad regex is a per-pattern failure at extraction time, not
    a configuration error.
    """
    patterns: List[Pattern] = []
    seen = set()

    for i, entry in enumerate(entries):
        if isinstance(entry, Pattern):
            name, source = entry.name, entry.source
        elif isinstance(entry, dict):
            name = entry.get("name")
            source = entry.get("pattern", entry.get("source"))
        elif isinstance(entry, (list, tuple)) and len(entry) == 2:
            name, source = entry
        else:
            raise PatternError(f"Pattern #{i + 1}: expected a mapping with "
                               f"'name' and 'pattern', got {entry!r}")

        if not isinstance(name, str) or not name.strip():
            raise PatternError(f"Pattern #{i + 1}: name must be a non-empty string")
        if not isinstance(source, str):
            raise PatternError(f"Pattern '{name}': pattern must be a string")
        # formatted records already use these keys
        if name == "timestamp" or name.endswith(ORIGINAL_VALUE_SUFFIX):
            raise PatternError(f"Pattern name '{name}' is reserved "
                               f"('timestamp' and names ending in '{ORIGINAL_VALUE_SUFFIX}')")
        if name in seen:
            raise PatternError(f"Duplicate pattern name: '{name}'")

        seen.add(name)
        patterns.append(Pattern(name=name, source=source))

    return patterns


def load_patterns(path: str) -> List[Pattern]:
    """Load a pattern list from a .yaml/.yml or .json file."""
    if not os.path.exists(path):
        raise PatternError(f"Pattern file not found: {path}")

    with open(path, "r", encoding="utf-8") as f:
        if path.lower().endswith(".json"):
            try:
                data = json.load(f)
            except json.JSONDecodeError as e:
                raise PatternError(f"Invalid JSON in {path}: {e}") from e
        else:
            try:
                data = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise PatternError(f"Invalid YAML in {path}: {e}") from e

    if isinstance(data, dict):
        data = data.get("patterns")
    if not isinstance(data, list):
        raise PatternError(f"{path}: expected a list of patterns "
                           f"(or a 'patterns' key holding one)")

    return parse_patterns(data)


def build_signals(patterns: List[Pattern],
                  run_stamp: Optional[int] = None) -> Tuple[List[Signal], List[Panel]]:
    """
    Derive one Signal per Pattern plus the single default panel.

    Colors cycle through CHART_COLORS. Ids embed a per-run stamp so signals
    from different runs never collide.
    """
    if run_stamp is None:
        run_stamp = int(time.time() * 1000)

    signals = [
        Signal(
            id=f"signal-{run_stamp}-{index}",
            name=pattern.name,
            pattern=pattern,
            color=CHART_COLORS[index % len(CHART_COLORS)],
        )
        for index, pattern in enumerate(patterns)
    ]
    panels = [Panel(id=DEFAULT_PANEL_ID, signals=[s.id for s in signals])]
    return signals, panels

"""
Timestamp and signal extraction for single log lines.

A line is only considered when it starts with a
``YYYY/MM/DD HH:MM:SS.ffffff`` timestamp. Each pattern is then applied on
its own; a broken pattern only ever costs its own value on that line.
"""

import re
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from .constants import ISO_MILLIS_FORMAT, ISO_MILLIS_LEN, TIMESTAMP_PREFIX_RE
from .models import Pattern, SignalValue


# ---------------------------------------------------------------------------
# Timestamp Extractor
# ---------------------------------------------------------------------------

def normalize_timestamp(raw: str) -> str:
    """
    "2024/01/01 00:00:01.123456" -> "2024-01-01T00:00:01.123"

    Slashes become dashes, the date/time space becomes "T", and the
    fraction is truncated to milliseconds.
    """
    return raw.replace("/", "-").replace(" ", "T", 1)[:ISO_MILLIS_LEN]


def parse_timestamp(line: str) -> Optional[datetime]:
    """
    Parse the leading timestamp of a line.

    Returns None when the prefix is missing or names an impossible date
    (month 13, Feb 30, hour 25, ...). Callers skip such lines.
    """
    match = TIMESTAMP_PREFIX_RE.match(line)
    if not match:
        return None
    try:
        return datetime.strptime(normalize_timestamp(match.group(1)),
                                 ISO_MILLIS_FORMAT)
    except ValueError:
        return None


# ---------------------------------------------------------------------------
# Numeric coercion
# ---------------------------------------------------------------------------

_INT_LITERAL = re.compile(r"[+-]?\d+", re.ASCII)
_FLOAT_LITERAL = re.compile(
    r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?", re.ASCII
)
_RADIX_LITERAL = re.compile(r"0(?:[xX][0-9a-fA-F]+|[oO][0-7]+|[bB][01]+)")
_INFINITY_LITERAL = re.compile(r"([+-]?)Infinity")


def coerce_value(text: str) -> SignalValue:
    """
    Turn captured text into a number when it is a numeric literal.

    Accepts decimal integers and floats (sign, exponent, surrounding
    whitespace), 0x/0o/0b integers and Infinity. Whitespace-only text
    counts as 0. Anything else is returned unchanged.

    >>> coerce_value("42")
    42
    >>> coerce_value("-1.5e3")
    -1500.0
    >>> coerce_value("42a")
    '42a'
    """
    stripped = text.strip()
    if not stripped:
        return 0
    if _INT_LITERAL.fullmatch(stripped):
        try:
            return int(stripped)
        except ValueError:
            # past the int digit limit; float() saturates to +-inf
            return float(stripped)
    if _FLOAT_LITERAL.fullmatch(stripped):
        return float(stripped)
    if _RADIX_LITERAL.fullmatch(stripped):
        return int(stripped, 0)
    inf = _INFINITY_LITERAL.fullmatch(stripped)
    if inf:
        return float("-inf") if inf.group(1) == "-" else float("inf")
    return text


# ---------------------------------------------------------------------------
# Signal Extractor
# ---------------------------------------------------------------------------

@dataclass
class PatternOutcome:
    """Result of applying one pattern to one line."""
    name: str
    matched: bool
    value: Optional[SignalValue] = None
    error: Optional[str] = None


@dataclass
class CompiledPattern:
    """A pattern compiled once per run. `regex` is None when compilation failed."""
    pattern: Pattern
    regex: Optional[re.Pattern]
    compile_error: Optional[str] = None

    @property
    def name(self) -> str:
        return self.pattern.name


def compile_pattern(pattern: Pattern) -> CompiledPattern:
    try:
        return CompiledPattern(pattern, re.compile(pattern.source))
    except re.error as e:
        return CompiledPattern(pattern, None, compile_error=str(e))


class SignalExtractor:
    """
    Applies every pattern of a run to a line, independently.

    Compilation happens once here instead of once per line; a pattern that
    fails to compile simply never matches.
    """

    def __init__(self, patterns: List[Pattern]):
        self.compiled: List[CompiledPattern] = [compile_pattern(p) for p in patterns]

    @property
    def invalid_patterns(self) -> List[CompiledPattern]:
        return [cp for cp in self.compiled if cp.regex is None]

    def match(self, compiled: CompiledPattern, line: str) -> PatternOutcome:
        """Apply one pattern. Never raises."""
        if compiled.regex is None:
            return PatternOutcome(compiled.name, False, error=compiled.compile_error)
        try:
            match = compiled.regex.search(line)
            if match is None:
                return PatternOutcome(compiled.name, False)
            captured = match.group(1)
            if captured is None:
                return PatternOutcome(compiled.name, False)
            return PatternOutcome(compiled.name, True, value=coerce_value(captured))
        except IndexError:
            return PatternOutcome(compiled.name, False,
                                  error="pattern has no capture group")
        except Exception as e:
            return PatternOutcome(compiled.name, False, error=str(e))

    def extract(self, line: str) -> List[PatternOutcome]:
        """One outcome per pattern, in pattern order."""
        return [self.match(cp, line) for cp in self.compiled]

"""
Categorical Encoder: integer codes for string-valued signals.

Codes follow ascending order of the distinct strings (1-based), so the
same set of observed strings always yields the same map, whatever order
they were seen in. DataPoint values keep their original strings.
"""

from typing import Dict, Iterable, Set

from .models import StringValueMap


def encode_values(values: Iterable[str]) -> Dict[str, int]:
    """{"b", "a", "c"} -> {"a": 1, "b": 2, "c": 3}"""
    return {value: code for code, value in enumerate(sorted(set(values)), start=1)}


def build_string_value_map(string_values: Dict[str, Set[str]]) -> StringValueMap:
    """Signals without any string values are left out."""
    return {
        name: encode_values(values)
        for name, values in string_values.items()
        if values
    }

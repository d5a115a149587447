import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from log_signal_extractor.models import Pattern
from log_signal_extractor.observer import ChartState


EXAMPLE_LOG = "\n".join([
    "2024/01/01 00:00:00.000000 temp=20",
    "2024/01/01 00:00:01.000000 temp=21 status=ok",
    "2024/01/01 00:00:02.000000 status=warn",
])


@pytest.fixture
def example_patterns():
    return [
        Pattern(name="temp", source=r"temp=(\d+)"),
        Pattern(name="status", source=r"status=(\w+)"),
    ]


@pytest.fixture
def example_log():
    return EXAMPLE_LOG


@pytest.fixture
def chart_state():
    return ChartState()

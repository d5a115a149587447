from datetime import datetime

from log_signal_extractor.aggregator import ForwardFillAggregator
from log_signal_extractor.encoding import build_string_value_map, encode_values
from log_signal_extractor.models import RunState
from log_signal_extractor.parser import PatternOutcome

T0 = datetime(2024, 1, 1)


def _hit(name, value):
    return PatternOutcome(name, True, value=value)


def _miss(name):
    return PatternOutcome(name, False)


def test_line_without_fresh_match_is_dropped_even_with_carried_values():
    state = RunState(total_chunks=1)
    agg = ForwardFillAggregator(state, ["a", "b"])

    assert agg.add_line(T0, [_hit("a", 1), _miss("b")]) is not None
    assert agg.add_line(T0, [_miss("a"), _miss("b")]) is None
    assert len(state.points) == 1


def test_forward_fill_only_for_previously_seen_signals():
    state = RunState(total_chunks=1)
    agg = ForwardFillAggregator(state, ["a", "b"])

    agg.add_line(T0, [_hit("a", 1), _miss("b")])
    point = agg.add_line(T0, [_miss("a"), _hit("b", "x")])

    assert point.values == {"a": 1, "b": "x"}
    assert state.points[0].values == {"a": 1}
    assert state.last_seen == {"a": 1, "b": "x"}


def test_string_values_are_collected_per_signal():
    state = RunState(total_chunks=1)
    agg = ForwardFillAggregator(state, ["s", "n"])

    agg.add_line(T0, [_hit("s", "ok"), _hit("n", 3)])
    agg.add_line(T0, [_hit("s", "warn"), _miss("n")])
    agg.add_line(T0, [_hit("s", "ok"), _miss("n")])

    assert state.string_values == {"s": {"ok", "warn"}}


def test_encoding_is_sorted_and_one_based():
    assert encode_values(["b", "a", "c"]) == {"a": 1, "b": 2, "c": 3}
    assert encode_values(["c", "b", "a", "b"]) == {"a": 1, "b": 2, "c": 3}


def test_string_value_map_skips_signals_without_strings():
    value_map = build_string_value_map({"status": {"warn", "ok"}, "empty": set()})
    assert value_map == {"status": {"ok": 1, "warn": 2}}

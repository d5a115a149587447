import asyncio

from log_signal_extractor.charting import (
    BrushSelection,
    ChartKind,
    ZoomDomain,
    resolve_brush,
    visible_records,
)
from log_signal_extractor.formatting import DisplayFormatter, format_points
from log_signal_extractor.observer import ChartState
from log_signal_extractor.scheduler import ChunkScheduler


def _example_result(example_log, example_patterns):
    scheduler = ChunkScheduler(example_log, example_patterns, ChartState())
    return asyncio.run(scheduler.run())


def test_format_points_encodes_strings(example_log, example_patterns):
    result = _example_result(example_log, example_patterns)
    records = format_points(result.points, result.string_value_map)

    assert records == [
        {"timestamp": 1704067200000, "temp": 20},
        {"timestamp": 1704067201000, "temp": 21, "status": 1, "status_original": "ok"},
        {"timestamp": 1704067202000, "temp": 21, "status": 2, "status_original": "warn"},
    ]


def test_display_formatter_publishes_through_observer(example_log, example_patterns):
    state = ChartState()
    formatter = DisplayFormatter(state, batch_size=2)
    scheduler = ChunkScheduler(example_log, example_patterns, state,
                               format_callback=formatter.format_async)

    asyncio.run(scheduler.run())

    assert len(state.formatted_data) == 3
    assert state.formatted_data[2]["status_original"] == "warn"


def _records():
    return [{"timestamp": 1000 * i, "a": i, "b": 1, "b_original": "x"} for i in range(5)]


def test_resolve_brush_clamps_indices():
    sel = resolve_brush(_records(), -3, 42)
    assert sel == BrushSelection(start_index=0, end_index=4, start_value=0, end_value=4000)
    assert sel.to_domain() == ZoomDomain(start=0, end=4000)


def test_resolve_brush_inside_bounds():
    sel = resolve_brush(_records(), 1, 3)
    assert (sel.start_value, sel.end_value) == (1000, 3000)


def test_resolve_brush_without_data_or_indices():
    assert resolve_brush([], 0, 1) is None
    assert resolve_brush(_records(), None, 2) is None


def test_visible_records_filters_window_and_hidden_signals(example_log, example_patterns):
    result = _example_result(example_log, example_patterns)
    signals = result.signals
    signals[1].visible = False

    out = visible_records(_records(), signals, ZoomDomain(start=1000, end=3000))
    assert [r["timestamp"] for r in out] == [1000, 2000, 3000]

    # "status" is hidden, but these records carry "a"/"b" only
    assert out[0] == {"timestamp": 1000, "a": 1, "b": 1, "b_original": "x"}

    records = format_points(result.points, result.string_value_map)
    out = visible_records(records, signals)
    assert all("status" not in r and "status_original" not in r for r in out)


def test_chart_kind_values():
    assert ChartKind("line") is ChartKind.LINE
    assert ChartKind.BAR.value == "bar"

import asyncio
import csv
import json
from datetime import datetime

import pytest

from log_signal_extractor.__main__ import main
from log_signal_extractor.export import build_report
from log_signal_extractor.models import DataPoint
from log_signal_extractor.observer import ChartState
from log_signal_extractor.pipeline import process_text, run_extraction
from log_signal_extractor.stats import summarize_signals

PATTERNS_YAML = (
    "- name: temp\n"
    "  pattern: 'temp=(\\d+)'\n"
    "- name: status\n"
    "  pattern: 'status=(\\w+)'\n"
)


@pytest.fixture
def log_file(tmp_path, example_log):
    path = tmp_path / "device.log"
    path.write_text(example_log + "\n")
    return path


@pytest.fixture
def patterns_file(tmp_path):
    path = tmp_path / "patterns.yaml"
    path.write_text(PATTERNS_YAML)
    return path


def test_run_extraction_writes_reports(tmp_path, log_file, patterns_file):
    out = tmp_path / "out"
    result = run_extraction(str(log_file), str(patterns_file),
                            output_dir=str(out), chunk_size=2, write_csv_file=True)

    assert result.ok
    report = json.loads((out / "signals.json").read_text())
    assert report["point_count"] == 3
    assert report["string_value_map"] == {"status": {"ok": 1, "warn": 2}}
    assert report["points"][2] == {
        "timestamp": "2024-01-01T00:00:02.000",
        "values": {"status": "warn", "temp": 21},
    }
    assert report["metadata"]["source_file"] == "device.log"
    assert report["signal_summary"]["temp"]["count"] == 3

    with open(out / "signals.csv", newline="") as f:
        rows = list(csv.DictReader(f))
    assert rows[0] == {"timestamp": "2024-01-01T00:00:00.000", "temp": "20", "status": ""}
    assert rows[2]["status"] == "warn"


def test_run_extraction_publishes_formatted_records(log_file, example_patterns):
    state = ChartState()
    result = run_extraction(str(log_file), example_patterns, observer=state)

    assert result.ok
    assert len(state.formatted_data) == 3
    assert state.formatted_data[1]["status"] == 1


def test_signal_summary(example_log, example_patterns):
    result = asyncio.run(process_text(example_log, example_patterns))
    summary = summarize_signals(result.points, result.string_value_map)

    assert summary["temp"]["kind"] == "numeric"
    assert summary["temp"]["min"] == 20 and summary["temp"]["max"] == 21
    assert summary["temp"]["mean"] == pytest.approx(20.666667)
    assert summary["status"] == {"kind": "categorical", "distinct_values": 2, "count": 2}
    assert build_report(result)["point_count"] == 3


def test_summary_excludes_non_finite_values():
    points = [
        DataPoint(datetime(2024, 1, 1, 0, 0, i), {"v": v})
        for i, v in enumerate([1, 2, float("inf"), 3])
    ]
    summary = summarize_signals(points, {})

    assert summary["v"]["count"] == 3
    assert summary["v"]["non_finite"] == 1
    assert summary["v"]["mean"] == pytest.approx(2.0)
    assert summary["v"]["std"] == pytest.approx(1.0)
    assert summary["v"]["min"] == 1 and summary["v"]["max"] == 3


def test_summary_counts_ints_beyond_float_range_as_non_finite():
    points = [DataPoint(datetime(2024, 1, 1), {"v": 10 ** 400}),
              DataPoint(datetime(2024, 1, 1, 0, 0, 1), {"v": 4})]
    summary = summarize_signals(points, {})

    assert summary["v"]["non_finite"] == 1
    assert summary["v"]["count"] == 1
    assert summary["v"]["max"] == 4


def test_cli_extract(tmp_path, log_file, patterns_file, capsys):
    out = tmp_path / "cli-out"
    main(["extract", str(log_file), "--patterns", str(patterns_file),
          "-o", str(out), "--csv", "--chunk-size", "1"])

    assert (out / "signals.json").exists()
    assert (out / "signals.csv").exists()
    assert "3 data points" in capsys.readouterr().out


def test_cli_missing_log_exits(tmp_path, patterns_file):
    with pytest.raises(SystemExit) as exc:
        main(["extract", str(tmp_path / "nope.log"), "--patterns", str(patterns_file)])
    assert exc.value.code == 1


def test_cli_bad_patterns_exits(tmp_path, log_file, capsys):
    bad = tmp_path / "bad.yaml"
    bad.write_text("- name: a\n  pattern: '(x)'\n- name: a\n  pattern: '(y)'\n")
    with pytest.raises(SystemExit) as exc:
        main(["extract", str(log_file), "--patterns", str(bad)])
    assert exc.value.code == 1
    assert "Duplicate pattern name" in capsys.readouterr().err


def test_cli_no_data_exits_nonzero(tmp_path, patterns_file):
    log = tmp_path / "empty.log"
    log.write_text("nothing to see\n")
    with pytest.raises(SystemExit) as exc:
        main(["extract", str(log), "--patterns", str(patterns_file),
              "-o", str(tmp_path / "o")])
    assert exc.value.code == 1


def test_cli_batch(tmp_path, log_file, patterns_file):
    out = tmp_path / "batch-out"
    main(["batch", str(log_file.parent), "--patterns", str(patterns_file), "-o", str(out)])
    assert (out / "device" / "signals.json").exists()

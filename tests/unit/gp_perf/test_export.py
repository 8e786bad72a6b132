"""Tests for history export."""

from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone

import pandas as pd
import pytest

from gp_perf.export import history_to_dataframe, save_history, summarize_history
from gp_perf.models import MetricWindow


pytestmark = pytest.mark.unit_perf

T0 = datetime(2024, 1, 1, tzinfo=timezone.utc)


@pytest.fixture
def windows() -> list[MetricWindow]:
    return [
        MetricWindow(timestamp=T0, load_time=1000, memory_usage=40),
        MetricWindow(timestamp=T0 + timedelta(seconds=30), load_time=3000),
    ]


def test_dataframe_marks_unreported_as_nan(windows) -> None:
    df = history_to_dataframe(windows)
    assert list(df.index) == [pd.Timestamp(T0), pd.Timestamp(T0 + timedelta(seconds=30))]
    assert df["load_time"].tolist() == [1000, 3000]
    assert pd.isna(df["memory_usage"].iloc[1])
    assert df["render_time"].isna().all()


def test_summary_skips_metrics_without_readings(windows) -> None:
    stats = summarize_history(windows)
    assert set(stats) == {"load_time", "memory_usage"}
    assert stats["load_time"]["mean"] == 2000
    assert stats["load_time"]["max"] == 3000
    assert summarize_history([]) == {}


def test_save_history_csv_and_json(windows, tmp_path) -> None:
    csv_path = tmp_path / "history.csv"
    save_history(windows, csv_path)
    assert csv_path.read_text().splitlines()[0].startswith("timestamp,load_time")

    json_path = tmp_path / "history.json"
    save_history(windows, json_path, format="json")
    rows = json.loads(json_path.read_text())
    assert len(rows) == 2
    assert rows[0]["load_time"] == 1000


def test_save_history_rejects_unknown_format(windows, tmp_path) -> None:
    with pytest.raises(ValueError):
        save_history(windows, tmp_path / "history.xml", format="xml")

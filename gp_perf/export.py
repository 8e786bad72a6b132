"""Tabular views of the metric history."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Iterable

import pandas as pd

from gp_perf.models import MetricName, MetricWindow

logger = logging.getLogger(__name__)


def history_to_dataframe(windows: Iterable[MetricWindow]) -> pd.DataFrame:
    """
    Build a DataFrame indexed by window timestamp.

    Unreported readings (0.0) become NaN so pandas statistics skip them.
    """
    rows = [window.to_dict() for window in windows]
    if not rows:
        return pd.DataFrame()
    df = pd.DataFrame(rows)
    df["timestamp"] = pd.to_datetime(df["timestamp"])
    df.set_index("timestamp", inplace=True)
    metric_columns = [m.value for m in MetricName]
    df[metric_columns] = df[metric_columns].where(df[metric_columns] > 0)
    return df


def summarize_history(windows: Iterable[MetricWindow]) -> Dict[str, Dict[str, float]]:
    """
    Summary statistics for every metric with at least one reading.

    Returns:
        Mapping of metric name to mean, max and p95
    """
    df = history_to_dataframe(windows)
    if df.empty:
        return {}

    stats: Dict[str, Dict[str, float]] = {}
    for col in df.columns:
        series = df[col].dropna()
        if series.empty:
            continue
        stats[col] = {
            "mean": float(series.mean()),
            "max": float(series.max()),
            "p95": float(series.quantile(0.95)),
        }
    return stats


def save_history(windows: Iterable[MetricWindow], filepath: Path, format: str = "csv") -> None:
    """
    Save the history to file.

    Args:
        filepath: Path to save the data
        format: Format to save in ('csv', 'json')
    """
    df = history_to_dataframe(windows)

    if format == "csv":
        df.to_csv(filepath)
    elif format == "json":
        df.reset_index().to_json(filepath, orient="records", date_format="iso")
    else:
        raise ValueError(f"Unsupported format: {format}")

    logger.info("Saved metric history to %s", filepath)

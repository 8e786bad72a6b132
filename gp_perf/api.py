"""Stable performance-tracking API surface."""

from gp_perf.defaults import get_tracker, reset_tracker
from gp_perf.export import history_to_dataframe, save_history, summarize_history
from gp_perf.models import IssueSeverity, MetricName, MetricWindow, PerformanceIssue
from gp_perf.sampler import PeriodicSampler
from gp_perf.sources import CallableSource, MemoryUsageSource, NetworkLatencySource, SampleSource
from gp_perf.thresholds import DEFAULT_THRESHOLDS, Threshold, performance_score
from gp_perf.tracker import PerformanceTracker, default_sources

__all__ = [
    "CallableSource",
    "DEFAULT_THRESHOLDS",
    "IssueSeverity",
    "MemoryUsageSource",
    "MetricName",
    "MetricWindow",
    "NetworkLatencySource",
    "PerformanceIssue",
    "PerformanceTracker",
    "PeriodicSampler",
    "SampleSource",
    "Threshold",
    "default_sources",
    "get_tracker",
    "history_to_dataframe",
    "performance_score",
    "reset_tracker",
    "save_history",
    "summarize_history",
]

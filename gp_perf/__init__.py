"""Performance telemetry: sampled metric history with threshold issues."""

from gp_perf.api import MetricName, MetricWindow, PerformanceIssue, PerformanceTracker, get_tracker

__all__ = ["MetricName", "MetricWindow", "PerformanceIssue", "PerformanceTracker", "get_tracker"]

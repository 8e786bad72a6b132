"""Per-metric threshold rules, issue messages and the health score."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Optional

from gp_perf.models import IssueSeverity, MetricName, MetricWindow, PerformanceIssue


@dataclass(frozen=True)
class Threshold:
    warning: float
    error: float


DEFAULT_THRESHOLDS: Mapping[MetricName, Threshold] = {
    MetricName.LOAD_TIME: Threshold(warning=3000, error=5000),
    MetricName.RENDER_TIME: Threshold(warning=100, error=200),
    MetricName.MEMORY_USAGE: Threshold(warning=70, error=90),
    MetricName.NETWORK_LATENCY: Threshold(warning=1000, error=3000),
    MetricName.ERROR_RATE: Threshold(warning=1, error=5),
}

# Points deducted from the health score when the latest reading exceeds
# the metric's warning cutoff.
SCORE_PENALTIES: Mapping[MetricName, int] = {
    MetricName.LOAD_TIME: 20,
    MetricName.MEMORY_USAGE: 15,
    MetricName.NETWORK_LATENCY: 10,
    MetricName.ERROR_RATE: 25,
}

_LABELS: Mapping[MetricName, tuple[str, str, int]] = {
    MetricName.LOAD_TIME: ("Page load time", "ms", 0),
    MetricName.RENDER_TIME: ("Render time", "ms", 0),
    MetricName.MEMORY_USAGE: ("Memory usage", "%", 1),
    MetricName.NETWORK_LATENCY: ("Network latency", "ms", 0),
    MetricName.ERROR_RATE: ("Error rate", "%", 1),
}


def issue_message(metric: MetricName, value: float, severity: IssueSeverity) -> str:
    label = _LABELS.get(metric)
    if label is None:
        return f"{metric.value} performance is {severity.value}"
    name, unit, precision = label
    return f"{name} ({value:.{precision}f}{unit}) is {severity.value}"


def evaluate(
    metric: MetricName,
    value: float,
    thresholds: Mapping[MetricName, Threshold] = DEFAULT_THRESHOLDS,
) -> Optional[PerformanceIssue]:
    """Return the issue raised by ``value``, error taking precedence."""
    threshold = thresholds.get(metric)
    if threshold is None:
        return None
    if value > threshold.error:
        severity, cutoff = IssueSeverity.ERROR, threshold.error
    elif value > threshold.warning:
        severity, cutoff = IssueSeverity.WARNING, threshold.warning
    else:
        return None
    return PerformanceIssue(
        type=severity,
        metric=metric,
        value=value,
        threshold=cutoff,
        message=issue_message(metric, value, severity),
    )


def performance_score(
    window: Optional[MetricWindow],
    thresholds: Mapping[MetricName, Threshold] = DEFAULT_THRESHOLDS,
) -> int:
    if window is None:
        return 0
    score = 100
    for metric, penalty in SCORE_PENALTIES.items():
        threshold = thresholds.get(metric)
        if threshold is not None and window.get(metric) > threshold.warning:
            score -= penalty
    return max(0, score)

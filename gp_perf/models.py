"""Metric windows and performance issues."""

from __future__ import annotations

from dataclasses import dataclass, fields, replace
from datetime import datetime
from enum import Enum
from typing import Any


class MetricName(str, Enum):
    LOAD_TIME = "load_time"
    RENDER_TIME = "render_time"
    MEMORY_USAGE = "memory_usage"
    CACHE_HIT_RATE = "cache_hit_rate"
    NETWORK_LATENCY = "network_latency"
    ERROR_RATE = "error_rate"

    @classmethod
    def parse(cls, value: "MetricName | str") -> "MetricName":
        """Accept enum members, snake_case values or the camelCase names used by the portal front end."""
        if isinstance(value, cls):
            return value
        key = str(value)
        alias = _CAMEL_ALIASES.get(key)
        if alias is not None:
            return alias
        try:
            return cls(key)
        except ValueError:
            raise ValueError(f"Unknown metric: {value!r}") from None


_CAMEL_ALIASES = {
    "loadTime": MetricName.LOAD_TIME,
    "renderTime": MetricName.RENDER_TIME,
    "memoryUsage": MetricName.MEMORY_USAGE,
    "cacheHitRate": MetricName.CACHE_HIT_RATE,
    "networkLatency": MetricName.NETWORK_LATENCY,
    "errorRate": MetricName.ERROR_RATE,
}


@dataclass
class MetricWindow:
    """One time bucket of readings; 0.0 means "not reported"."""

    timestamp: datetime
    load_time: float = 0.0
    render_time: float = 0.0
    memory_usage: float = 0.0
    cache_hit_rate: float = 0.0
    network_latency: float = 0.0
    error_rate: float = 0.0

    def get(self, metric: MetricName | str) -> float:
        return getattr(self, MetricName.parse(metric).value)

    def set(self, metric: MetricName | str, value: float) -> None:
        setattr(self, MetricName.parse(metric).value, float(value))

    def copy(self) -> "MetricWindow":
        return replace(self)

    def readings(self) -> dict[MetricName, float]:
        return {metric: self.get(metric) for metric in MetricName}

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {f.name: getattr(self, f.name) for f in fields(self)}
        data["timestamp"] = self.timestamp.isoformat()
        return data


class IssueSeverity(str, Enum):
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True)
class PerformanceIssue:
    """A metric reading that crossed one of its thresholds."""

    type: IssueSeverity
    metric: MetricName
    value: float
    threshold: float
    message: str

    @property
    def key(self) -> tuple[MetricName, IssueSeverity]:
        return (self.metric, self.type)

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type.value,
            "metric": self.metric.value,
            "value": self.value,
            "threshold": self.threshold,
            "message": self.message,
        }

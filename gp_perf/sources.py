"""
Sample sources feeding the performance tracker.

Each source produces one reading for one metric per call. Sources raise
MetricCollectionError when a reading cannot be taken; the sampler logs the
failure and moves on to the next source.
"""

from __future__ import annotations

import logging
import time
import urllib.error
import urllib.request
from abc import ABC, abstractmethod
from typing import Any, Callable, Optional

import psutil

from gp_common.errors import MetricCollectionError, wrap_error
from gp_perf.models import MetricName

logger = logging.getLogger(__name__)


class SampleSource(ABC):
    """Abstract base class for all sample sources."""

    metric: MetricName

    def __init__(self, name: str) -> None:
        self.name = name

    @abstractmethod
    def sample(self) -> Optional[float]:
        """
        Take a single reading.

        Returns:
            The reading, or None when the source has nothing to report
        """


class MemoryUsageSource(SampleSource):
    """System memory usage percentage via psutil."""

    metric = MetricName.MEMORY_USAGE

    def __init__(self, name: str = "memory") -> None:
        super().__init__(name)

    def sample(self) -> Optional[float]:
        try:
            return float(psutil.virtual_memory().percent)
        except Exception as exc:
            raise wrap_error(
                MetricCollectionError,
                "Failed to read memory usage",
                context={"source": self.name},
                cause=exc,
            ) from exc


class NetworkLatencySource(SampleSource):
    """Round-trip time of a HEAD request to a probe URL, in milliseconds.

    Any HTTP response counts as a completed round trip, including error
    statuses. Connection failures and timeouts are collection errors.
    """

    metric = MetricName.NETWORK_LATENCY

    def __init__(
        self,
        url: str,
        timeout_seconds: float = 5.0,
        name: str = "latency-probe",
        opener: Callable[..., Any] = urllib.request.urlopen,
        timer: Callable[[], float] = time.perf_counter,
    ) -> None:
        super().__init__(name)
        self.url = url
        self.timeout = timeout_seconds
        self._open = opener
        self._timer = timer

    def sample(self) -> Optional[float]:
        req = urllib.request.Request(
            self.url,
            method="HEAD",
            headers={"Cache-Control": "no-cache"},
        )
        start = self._timer()
        try:
            with self._open(req, timeout=self.timeout):
                pass
        except urllib.error.HTTPError:
            pass
        except (urllib.error.URLError, OSError) as exc:
            raise wrap_error(
                MetricCollectionError,
                "Network latency probe failed",
                context={"source": self.name, "url": self.url},
                cause=exc,
            ) from exc
        return (self._timer() - start) * 1000.0


class CallableSource(SampleSource):
    """Adapt a plain function into a sample source."""

    def __init__(self, metric: MetricName | str, func: Callable[[], Optional[float]], name: str = "") -> None:
        self.metric = MetricName.parse(metric)
        super().__init__(name or f"{self.metric.value}-callable")
        self._func = func

    def sample(self) -> Optional[float]:
        try:
            return self._func()
        except MetricCollectionError:
            raise
        except Exception as exc:
            raise wrap_error(
                MetricCollectionError,
                f"{self.name} source failed",
                context={"source": self.name},
                cause=exc,
            ) from exc

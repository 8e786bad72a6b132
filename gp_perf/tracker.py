"""Performance tracker: coalesced metric history, threshold issues, fan-out."""

from __future__ import annotations

import logging
import math
import time
from collections import deque
from contextlib import contextmanager
from datetime import timedelta
from typing import Deque, Dict, Iterable, Iterator, List, Mapping, Optional

from gp_common.config.settings import TrackerSettings
from gp_common.scheduling import Scheduler, ThreadingScheduler
from gp_notify.subscribable import SubscribableStore
from gp_perf.models import MetricName, MetricWindow, PerformanceIssue
from gp_perf.sampler import PeriodicSampler
from gp_perf.sources import MemoryUsageSource, NetworkLatencySource, SampleSource
from gp_perf.thresholds import DEFAULT_THRESHOLDS, Threshold, evaluate, performance_score
from gp_perf.windows import record_sample

logger = logging.getLogger(__name__)


def default_sources(settings: TrackerSettings) -> List[SampleSource]:
    return [
        MemoryUsageSource(),
        NetworkLatencySource(settings.probe_url, settings.probe_timeout_seconds),
    ]


class PerformanceTracker(SubscribableStore[List[MetricWindow]]):
    """Collect metric samples into a bounded, coalesced history.

    ``add_metric`` is the single entry point for both self-sampled and
    externally reported readings. Listeners receive copies of the history.
    """

    def __init__(
        self,
        *,
        scheduler: Optional[Scheduler] = None,
        settings: Optional[TrackerSettings] = None,
        sources: Optional[Iterable[SampleSource]] = None,
        thresholds: Optional[Mapping[MetricName, Threshold]] = None,
    ) -> None:
        super().__init__()
        self.settings = settings or TrackerSettings()
        self._scheduler: Scheduler = scheduler or ThreadingScheduler()
        self._thresholds = dict(thresholds if thresholds is not None else DEFAULT_THRESHOLDS)
        self._coalesce = timedelta(milliseconds=self.settings.coalesce_window_ms)
        self._history: Deque[MetricWindow] = deque(maxlen=self.settings.history_limit)
        self._issues: List[PerformanceIssue] = []
        self._page_load_recorded = False
        self.sampler = PeriodicSampler(
            sources if sources is not None else default_sources(self.settings),
            self.add_metric,
            self._scheduler,
            interval_seconds=self.settings.sample_interval_seconds,
            name="performance-sampler",
        )

    # ---- Lifecycle ---------------------------------------------------------
    def start(self) -> None:
        self.sampler.start()

    def stop(self) -> None:
        self.sampler.stop()

    # ---- Recording ---------------------------------------------------------
    def add_metric(self, name: MetricName | str, value: float) -> bool:
        """Record one reading; non-finite values are logged and dropped."""
        metric = MetricName.parse(name)
        value = float(value)
        if not math.isfinite(value):
            logger.warning("Ignoring non-finite %s reading: %s", metric.value, value)
            return False

        with self._lock:
            record_sample(
                self._history, metric, value, self._scheduler.clock.now(), self._coalesce
            )
            issue = evaluate(metric, value, self._thresholds)
            if issue is not None:
                self._add_issue(issue)
            self.notify()
        return True

    def track_render(self, component: str, elapsed_ms: float) -> None:
        logger.debug("Render of %s took %.1fms", component, elapsed_ms)
        self.add_metric(MetricName.RENDER_TIME, elapsed_ms)

    @contextmanager
    def timed_render(self, component: str) -> Iterator[None]:
        """Record the wall time spent inside the block as a render time."""
        start = time.perf_counter()
        try:
            yield
        finally:
            self.track_render(component, (time.perf_counter() - start) * 1000.0)

    def track_error(self) -> None:
        """Bump the latest window's error rate by one."""
        with self._lock:
            latest = self._history[-1] if self._history else None
            current = latest.error_rate if latest else 0.0
            self.add_metric(MetricName.ERROR_RATE, current + 1)

    def record_page_load(self, navigation_start: float, load_end: float) -> bool:
        """Record the one-time page-load sample from two monotonic instants in seconds."""
        with self._lock:
            if self._page_load_recorded:
                logger.debug("Page load already recorded; ignoring")
                return False
            elapsed_ms = max(0.0, load_end - navigation_start) * 1000.0
            self._page_load_recorded = self.add_metric(MetricName.LOAD_TIME, elapsed_ms)
            return self._page_load_recorded

    # ---- Reads -------------------------------------------------------------
    def snapshot(self) -> List[MetricWindow]:
        return [window.copy() for window in self._history]

    @property
    def history(self) -> List[MetricWindow]:
        with self._lock:
            return self.snapshot()

    def get_latest(self) -> Optional[MetricWindow]:
        with self._lock:
            return self._history[-1].copy() if self._history else None

    def get_average(self, count: int = 10) -> Dict[MetricName, float]:
        """Mean of each metric over the last ``count`` windows.

        Windows that did not report a metric are left out of that metric's
        mean; metrics with no reports at all are omitted.
        """
        if count <= 0:
            return {}
        with self._lock:
            recent = list(self._history)[-count:]
        averages: Dict[MetricName, float] = {}
        for metric in MetricName:
            values = [v for v in (w.get(metric) for w in recent) if v > 0]
            if values:
                averages[metric] = sum(values) / len(values)
        return averages

    def get_issues(self) -> List[PerformanceIssue]:
        with self._lock:
            return list(self._issues)

    def clear_issues(self) -> None:
        with self._lock:
            self._issues = []
            self.notify()

    @property
    def score(self) -> int:
        with self._lock:
            latest = self._history[-1] if self._history else None
            return performance_score(latest, self._thresholds)

    # ---- Internals ---------------------------------------------------------
    def _add_issue(self, issue: PerformanceIssue) -> None:
        self._issues = [i for i in self._issues if i.key != issue.key]
        self._issues.append(issue)
        if len(self._issues) > self.settings.issue_limit:
            self._issues = self._issues[-self.settings.issue_limit :]
        logger.info("Performance issue: %s", issue.message)

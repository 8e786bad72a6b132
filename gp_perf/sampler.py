"""Recurring sampler that feeds source readings into a sink."""

from __future__ import annotations

import logging
from collections import deque
from typing import Callable, Iterable, List, Optional

from gp_common.errors import MetricCollectionError, error_to_payload, wrap_error
from gp_common.scheduling import ScheduledTask, Scheduler
from gp_perf.models import MetricName
from gp_perf.sources import SampleSource

logger = logging.getLogger(__name__)

Sink = Callable[[MetricName, float], None]


class PeriodicSampler:
    """Poll a set of sources every ``interval_seconds`` through a scheduler."""

    def __init__(
        self,
        sources: Iterable[SampleSource],
        sink: Sink,
        scheduler: Scheduler,
        interval_seconds: float = 30.0,
        name: str = "sampler",
    ) -> None:
        self.name = name
        self.interval_seconds = interval_seconds
        self.sources: List[SampleSource] = list(sources)
        self._sink = sink
        self._scheduler = scheduler
        self._is_running = False
        self._task: Optional[ScheduledTask] = None
        self._errors: deque[MetricCollectionError] = deque(maxlen=50)

    @property
    def is_running(self) -> bool:
        return self._is_running

    def start(self) -> None:
        """Arm the recurring timer; the first tick happens one interval from now."""
        if self._is_running:
            logger.warning("%s is already running", self.name)
            return
        self._is_running = True
        self._arm()
        logger.info("%s started (every %.1fs)", self.name, self.interval_seconds)

    def stop(self) -> None:
        if not self._is_running:
            return
        self._is_running = False
        if self._task is not None:
            self._task.cancel()
            self._task = None
        logger.info("%s stopped", self.name)

    def sample_once(self) -> int:
        """Read every source once; returns how many readings reached the sink."""
        recorded = 0
        for source in self.sources:
            try:
                value = source.sample()
                if value is None:
                    continue
                self._sink(source.metric, value)
            except MetricCollectionError as exc:
                self._errors.append(exc)
                logger.warning("Sample skipped: %s", error_to_payload(exc))
                continue
            except Exception as exc:
                error = wrap_error(
                    MetricCollectionError,
                    f"{source.name} source failed unexpectedly",
                    context={"source": source.name},
                    cause=exc,
                )
                self._errors.append(error)
                logger.error("Error in %s source: %s", source.name, exc, exc_info=True)
                continue
            recorded += 1
        return recorded

    def get_errors(self) -> list[MetricCollectionError]:
        return list(self._errors)

    def _arm(self) -> None:
        self._task = self._scheduler.call_later(self.interval_seconds, self._tick)

    def _tick(self) -> None:
        if not self._is_running:
            return
        try:
            self.sample_once()
        finally:
            if self._is_running:
                self._arm()

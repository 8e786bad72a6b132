"""Merge-by-recency for metric windows."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import MutableSequence

from gp_perf.models import MetricName, MetricWindow


def find_or_create_window(
    history: MutableSequence[MetricWindow],
    now: datetime,
    interval: timedelta,
) -> tuple[MetricWindow, bool]:
    """Return the window a sample taken at ``now`` belongs to.

    Only the most recent window is considered: it is reused when its
    timestamp is closer than ``interval`` to ``now``. Otherwise a fresh,
    not yet appended window is returned together with ``True``.
    """
    if history:
        latest = history[-1]
        if abs(now - latest.timestamp) < interval:
            return latest, False
    return MetricWindow(timestamp=now), True


def record_sample(
    history: MutableSequence[MetricWindow],
    metric: MetricName,
    value: float,
    now: datetime,
    interval: timedelta,
) -> MetricWindow:
    """Write ``value`` into the matching window, appending it if new.

    A merged window takes the sample's timestamp. Bounding the history is
    left to the container (e.g. ``deque(maxlen=...)``).
    """
    window, created = find_or_create_window(history, now, interval)
    window.set(metric, value)
    window.timestamp = now
    if created:
        history.append(window)
    return window

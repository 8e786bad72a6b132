"""Process-wide default performance tracker."""

from __future__ import annotations

import threading
from typing import Optional

from gp_common.config.settings import TrackerSettings
from gp_perf.tracker import PerformanceTracker

_default_tracker: Optional[PerformanceTracker] = None
_default_lock = threading.Lock()


def get_tracker() -> PerformanceTracker:
    """Return the shared tracker; sampling starts on first use unless disabled."""
    global _default_tracker
    with _default_lock:
        if _default_tracker is None:
            settings = TrackerSettings.from_env()
            tracker = PerformanceTracker(settings=settings)
            if settings.sampling_enabled:
                tracker.start()
            _default_tracker = tracker
        return _default_tracker


def reset_tracker() -> None:
    global _default_tracker
    with _default_lock:
        if _default_tracker is not None:
            _default_tracker.stop()
        _default_tracker = None

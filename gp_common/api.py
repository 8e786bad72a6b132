"""Public API surface for gp_common."""

from gp_common.config.settings import NotificationSettings, TrackerSettings
from gp_common.logging import configure_logging
from gp_common.scheduling import (
    ManualClock,
    ManualScheduler,
    ScheduledTask,
    SystemClock,
    ThreadingScheduler,
)

__all__ = [
    "configure_logging",
    "ManualClock",
    "ManualScheduler",
    "NotificationSettings",
    "ScheduledTask",
    "SystemClock",
    "ThreadingScheduler",
    "TrackerSettings",
]

"""Configuration helpers for the observability core."""

from gp_common.config.env import parse_bool_env, parse_float_env, parse_int_env
from gp_common.config.settings import (
    NOTIFICATIONS_STORAGE_KEY,
    NotificationSettings,
    TrackerSettings,
)

__all__ = [
    "NOTIFICATIONS_STORAGE_KEY",
    "NotificationSettings",
    "TrackerSettings",
    "parse_bool_env",
    "parse_float_env",
    "parse_int_env",
]

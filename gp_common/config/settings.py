"""Settings for the notification store and the performance tracker."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Callable, Mapping, Optional

from pydantic import BaseModel, Field, ValidationError

from gp_common.config.env import parse_bool_env, parse_float_env, parse_int_env
from gp_common.errors import ConfigurationError

NOTIFICATIONS_STORAGE_KEY = "gst-notifications"


class NotificationSettings(BaseModel):
    """Configuration for the notification store."""

    storage_key: str = Field(default=NOTIFICATIONS_STORAGE_KEY, min_length=1, description="Key of the persisted snapshot")
    storage_path: Optional[Path] = Field(default=None, description="JSON file backing the key-value store; in-memory when unset")
    default_duration_ms: int = Field(default=5000, ge=0, description="Lifetime of non-persistent notifications without an explicit duration")
    toast_limit: int = Field(default=3, ge=0, description="Maximum number of entries in the toast projection")

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "NotificationSettings":
        env = os.environ if environ is None else environ
        overrides: dict[str, Any] = {}
        _take(env, "GP_NOTIFY_STORAGE_KEY", "storage_key", overrides, str)
        _take(env, "GP_NOTIFY_STORAGE_PATH", "storage_path", overrides, Path)
        _take(env, "GP_NOTIFY_DEFAULT_DURATION_MS", "default_duration_ms", overrides, parse_int_env)
        _take(env, "GP_NOTIFY_TOAST_LIMIT", "toast_limit", overrides, parse_int_env)
        return _validate(cls, overrides)


class TrackerSettings(BaseModel):
    """Configuration for the performance tracker and its sampler."""

    coalesce_window_ms: int = Field(default=5000, ge=0, description="Samples closer than this to the latest window are merged into it")
    history_limit: int = Field(default=100, gt=0, description="Number of metric windows retained")
    issue_limit: int = Field(default=10, gt=0, description="Number of issues retained")
    sample_interval_seconds: float = Field(default=30.0, gt=0, description="Cadence of the self-sampling timer")
    sampling_enabled: bool = Field(default=True, description="Start the self-sampling timer for the default tracker")
    probe_url: str = Field(default="http://127.0.0.1/ping", description="URL probed with HEAD requests for network latency")
    probe_timeout_seconds: float = Field(default=5.0, gt=0, description="Timeout of the latency probe")

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "TrackerSettings":
        env = os.environ if environ is None else environ
        overrides: dict[str, Any] = {}
        _take(env, "GP_PERF_COALESCE_WINDOW_MS", "coalesce_window_ms", overrides, parse_int_env)
        _take(env, "GP_PERF_HISTORY_LIMIT", "history_limit", overrides, parse_int_env)
        _take(env, "GP_PERF_ISSUE_LIMIT", "issue_limit", overrides, parse_int_env)
        _take(env, "GP_PERF_SAMPLE_INTERVAL", "sample_interval_seconds", overrides, parse_float_env)
        _take(env, "GP_PERF_SAMPLING", "sampling_enabled", overrides, parse_bool_env)
        _take(env, "GP_PERF_PROBE_URL", "probe_url", overrides, str)
        _take(env, "GP_PERF_PROBE_TIMEOUT", "probe_timeout_seconds", overrides, parse_float_env)
        return _validate(cls, overrides)


def _take(
    env: Mapping[str, str],
    var: str,
    field: str,
    overrides: dict[str, Any],
    parse: Callable[[str], Any],
) -> None:
    raw = env.get(var)
    if raw is None or raw == "":
        return
    value = parse(raw)
    if value is None:
        raise ConfigurationError(
            f"Invalid value for {var}: {raw!r}",
            context={"variable": var, "value": raw},
        )
    overrides[field] = value


def _validate(model: type[BaseModel], overrides: dict[str, Any]) -> Any:
    try:
        return model.model_validate(overrides)
    except ValidationError as exc:
        raise ConfigurationError(
            f"Invalid {model.__name__}",
            context={"fields": sorted(overrides)},
            cause=exc,
        ) from exc

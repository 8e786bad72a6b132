"""Process-wide default notification store."""

from __future__ import annotations

import threading
from typing import Optional

from gp_common.config.settings import NotificationSettings
from gp_notify.persistence import InMemoryKeyValueStore, JsonFileKeyValueStore, KeyValueStore
from gp_notify.store import NotificationStore

_default_store: Optional[NotificationStore] = None
_default_lock = threading.Lock()


def build_backend(settings: NotificationSettings) -> KeyValueStore:
    if settings.storage_path is not None:
        return JsonFileKeyValueStore(settings.storage_path)
    return InMemoryKeyValueStore()


def get_notification_store() -> NotificationStore:
    """Return the shared store, building it from ``GP_NOTIFY_*`` on first use."""
    global _default_store
    with _default_lock:
        if _default_store is None:
            settings = NotificationSettings.from_env()
            _default_store = NotificationStore(build_backend(settings), settings=settings)
        return _default_store


def reset_notification_store() -> None:
    global _default_store
    with _default_lock:
        _default_store = None

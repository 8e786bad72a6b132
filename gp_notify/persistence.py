"""Key-value persistence for the notification snapshot."""

from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Protocol

from gp_common.errors import NotificationPersistenceError, wrap_error
from gp_notify.models import Notification

logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    """String-to-string storage in the style of browser local storage."""

    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...

    def remove(self, key: str) -> None: ...


class InMemoryKeyValueStore:
    """Volatile backend, useful for tests and short-lived processes."""

    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)


class JsonFileKeyValueStore:
    """Single JSON object on disk mapping keys to string values.

    Writes go through a temporary file and ``os.replace`` so a crash never
    leaves a half-written document behind.
    """

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path).expanduser()
        self._lock = threading.Lock()

    def _read_all(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        with open(self.path, "r", encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError(f"{self.path} does not contain a JSON object")
        return data

    def _write_all(self, data: Dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            value = self._read_all().get(key)
        return value if value is None else str(value)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            try:
                data = self._read_all()
            except ValueError:
                logger.warning("Replacing unreadable storage file %s", self.path)
                data = {}
            data[key] = value
            self._write_all(data)

    def remove(self, key: str) -> None:
        with self._lock:
            data = self._read_all()
            if data.pop(key, None) is not None:
                self._write_all(data)


def encode_notifications(notifications: Iterable[Notification]) -> str:
    """Serialize notifications to the persisted JSON array."""
    try:
        return json.dumps([n.to_dict() for n in notifications])
    except (TypeError, ValueError) as exc:
        raise wrap_error(
            NotificationPersistenceError,
            "Failed to serialize notifications",
            cause=exc,
        ) from exc


def decode_notifications(raw: Optional[str]) -> List[Notification]:
    """Parse the persisted JSON array; None or empty input gives []."""
    if not raw:
        return []
    try:
        payload = json.loads(raw)
        if not isinstance(payload, list):
            raise ValueError("persisted notifications are not a JSON array")
        return [Notification.from_dict(item) for item in payload]
    except (KeyError, TypeError, ValueError, OverflowError) as exc:
        raise wrap_error(
            NotificationPersistenceError,
            "Failed to restore notifications",
            context={"length": len(raw)},
            cause=exc,
        ) from exc


def load_snapshot(backend: KeyValueStore, key: str) -> List[Notification]:
    """Read and decode the snapshot stored under ``key``."""
    try:
        raw = backend.get(key)
    except Exception as exc:
        raise wrap_error(
            NotificationPersistenceError,
            "Failed to read notification storage",
            context={"key": key},
            cause=exc,
        ) from exc
    return decode_notifications(raw)


def save_snapshot(backend: KeyValueStore, key: str, notifications: Iterable[Notification]) -> None:
    """Encode and write the snapshot under ``key``."""
    encoded = encode_notifications(notifications)
    try:
        backend.set(key, encoded)
    except Exception as exc:
        raise wrap_error(
            NotificationPersistenceError,
            "Failed to write notification storage",
            context={"key": key},
            cause=exc,
        ) from exc

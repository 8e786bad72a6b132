"""Canonical notification list with expiry, persistence and fan-out."""

from __future__ import annotations

import logging
import uuid
from typing import Dict, List, Optional

from gp_common.config.settings import NotificationSettings
from gp_common.errors import NotificationPersistenceError, error_to_payload, wrap_error
from gp_common.scheduling import Clock, ScheduledTask, Scheduler, ThreadingScheduler
from gp_notify.models import (
    Notification,
    NotificationAction,
    NotificationCategory,
    NotificationPriority,
    NotificationType,
)
from gp_notify.persistence import (
    InMemoryKeyValueStore,
    KeyValueStore,
    load_snapshot,
    save_snapshot,
)
from gp_notify.subscribable import SubscribableStore

logger = logging.getLogger(__name__)


class NotificationStore(SubscribableStore[List[Notification]]):
    """Owns the newest-first list of notifications.

    Every mutation is applied, written to the key-value backend and then
    published to subscribers, in that order. Persistence failures are logged
    and never undo the in-memory change. Non-persistent entries get an expiry
    task keyed by their id; the task checks on firing whether its entry is
    still there, so removal or a bulk clear turns it into a no-op.
    """

    def __init__(
        self,
        backend: Optional[KeyValueStore] = None,
        *,
        scheduler: Optional[Scheduler] = None,
        settings: Optional[NotificationSettings] = None,
    ) -> None:
        super().__init__()
        self.settings = settings or NotificationSettings()
        self._backend: KeyValueStore = backend if backend is not None else InMemoryKeyValueStore()
        self._scheduler: Scheduler = scheduler or ThreadingScheduler()
        self._notifications: List[Notification] = []
        self._expiry_tasks: Dict[str, ScheduledTask] = {}
        self._restore()

    # ---- Reads -------------------------------------------------------------
    @property
    def clock(self) -> Clock:
        return self._scheduler.clock

    def snapshot(self) -> List[Notification]:
        return list(self._notifications)

    @property
    def notifications(self) -> List[Notification]:
        with self._lock:
            return list(self._notifications)

    @property
    def unread_count(self) -> int:
        with self._lock:
            return sum(1 for n in self._notifications if not n.read)

    @property
    def toasts(self) -> List[Notification]:
        """Newest non-persistent entries, capped at the toast limit."""
        with self._lock:
            transient = [n for n in self._notifications if not n.persistent]
            return transient[: self.settings.toast_limit]

    def get(self, notification_id: str) -> Optional[Notification]:
        with self._lock:
            return next((n for n in self._notifications if n.id == notification_id), None)

    def __len__(self) -> int:
        with self._lock:
            return len(self._notifications)

    # ---- Mutations ---------------------------------------------------------
    def add(
        self,
        title: str,
        message: str,
        type: NotificationType | str = NotificationType.INFO,
        *,
        persistent: bool = False,
        duration_ms: Optional[int] = None,
        action: Optional[NotificationAction] = None,
        category: NotificationCategory | str | None = None,
        priority: NotificationPriority | str | None = None,
    ) -> str:
        """Insert a new unread notification and return its id."""
        if duration_ms is not None and duration_ms < 0:
            raise ValueError(f"duration_ms must be >= 0, got {duration_ms}")
        if duration_ms is None and not persistent:
            duration_ms = self.settings.default_duration_ms

        with self._lock:
            notification = Notification(
                id=uuid.uuid4().hex,
                type=NotificationType(type),
                title=title,
                message=message,
                timestamp=self._scheduler.clock.now(),
                persistent=persistent,
                duration_ms=duration_ms,
                read=False,
                action=action,
                category=NotificationCategory(category) if category else None,
                priority=NotificationPriority(priority) if priority else None,
            )
            self._notifications.insert(0, notification)
            self._persist()
            if not persistent:
                self._schedule_expiry(notification.id, duration_ms / 1000.0)
            logger.debug("Added %s notification %s", notification.type.value, notification.id)
            self.notify()
            return notification.id

    def remove(self, notification_id: str) -> None:
        with self._lock:
            task = self._expiry_tasks.pop(notification_id, None)
            if task is not None:
                task.cancel()
            if not self._drop(notification_id):
                return
            self._persist()
            self.notify()

    def mark_read(self, notification_id: str) -> None:
        with self._lock:
            for index, notification in enumerate(self._notifications):
                if notification.id == notification_id:
                    if notification.read:
                        return
                    self._notifications[index] = notification.mark_read()
                    break
            else:
                return
            self._persist()
            self.notify()

    def mark_all_read(self) -> None:
        with self._lock:
            if all(n.read for n in self._notifications):
                return
            self._notifications = [n.mark_read() for n in self._notifications]
            self._persist()
            self.notify()

    def clear_all(self) -> None:
        with self._lock:
            for task in self._expiry_tasks.values():
                task.cancel()
            self._expiry_tasks.clear()
            self._notifications = []
            self._persist()
            self.notify()

    # ---- Convenience producers --------------------------------------------
    def success(self, title: str, message: str, **options) -> str:
        return self.add(title, message, NotificationType.SUCCESS, **options)

    def error(self, title: str, message: str, **options) -> str:
        """Errors stay until dismissed unless told otherwise."""
        options.setdefault("persistent", True)
        return self.add(title, message, NotificationType.ERROR, **options)

    def warning(self, title: str, message: str, **options) -> str:
        return self.add(title, message, NotificationType.WARNING, **options)

    def info(self, title: str, message: str, **options) -> str:
        return self.add(title, message, NotificationType.INFO, **options)

    # ---- Internals ---------------------------------------------------------
    def _drop(self, notification_id: str) -> bool:
        remaining = [n for n in self._notifications if n.id != notification_id]
        if len(remaining) == len(self._notifications):
            return False
        self._notifications = remaining
        return True

    def _schedule_expiry(self, notification_id: str, delay_seconds: float) -> None:
        self._expiry_tasks[notification_id] = self._scheduler.call_later(
            delay_seconds, self._expire, notification_id
        )

    def _expire(self, notification_id: str) -> None:
        with self._lock:
            self._expiry_tasks.pop(notification_id, None)
            if not self._drop(notification_id):
                return
            logger.debug("Expired notification %s", notification_id)
            self._persist()
            self.notify()

    def _persist(self) -> None:
        try:
            save_snapshot(self._backend, self.settings.storage_key, self._notifications)
        except NotificationPersistenceError as exc:
            logger.warning("Could not persist notifications: %s", error_to_payload(exc))

    def _restore(self) -> None:
        try:
            restored = load_snapshot(self._backend, self.settings.storage_key)
        except NotificationPersistenceError as exc:
            logger.warning("Discarding stored notifications: %s", error_to_payload(exc))
            return

        now = self._scheduler.clock.now()
        default_ms = self.settings.default_duration_ms
        try:
            entries = [(n, n.expires_at(default_ms)) for n in restored]
        except OverflowError as exc:
            error = wrap_error(
                NotificationPersistenceError,
                "Stored notification lifetime is out of range",
                context={"key": self.settings.storage_key},
                cause=exc,
            )
            logger.warning("Discarding stored notifications: %s", error_to_payload(error))
            return

        kept = [(n, deadline) for n, deadline in entries if deadline is None or deadline > now]
        kept.sort(key=lambda entry: entry[0].timestamp, reverse=True)
        self._notifications = [n for n, _ in kept]
        for notification, deadline in kept:
            if deadline is not None:
                self._schedule_expiry(notification.id, (deadline - now).total_seconds())

        dropped = len(restored) - len(kept)
        if dropped:
            logger.info("Dropped %d expired notifications on restore", dropped)
            self._persist()
        logger.debug("Restored %d notifications", len(kept))

"""Persistent, self-expiring notification store with subscriber fan-out."""

from gp_notify.api import (
    Notification,
    NotificationAction,
    NotificationStore,
    NotificationType,
    get_notification_store,
)

__all__ = [
    "Notification",
    "NotificationAction",
    "NotificationStore",
    "NotificationType",
    "get_notification_store",
]

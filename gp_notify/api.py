"""Stable notification API surface."""

from gp_notify.defaults import get_notification_store, reset_notification_store
from gp_notify.models import (
    Notification,
    NotificationAction,
    NotificationCategory,
    NotificationPriority,
    NotificationType,
)
from gp_notify.persistence import (
    InMemoryKeyValueStore,
    JsonFileKeyValueStore,
    KeyValueStore,
    decode_notifications,
    encode_notifications,
)
from gp_notify.reporting import (
    format_age,
    notify_application_approved,
    notify_application_submitted,
    notify_document_required,
    notify_payment_required,
    notify_system_maintenance,
    report_error,
    report_success,
    report_upload_error,
    report_upload_success,
    validation_errors,
)
from gp_notify.store import NotificationStore
from gp_notify.subscribable import SubscribableStore

__all__ = [
    "InMemoryKeyValueStore",
    "JsonFileKeyValueStore",
    "KeyValueStore",
    "Notification",
    "NotificationAction",
    "NotificationCategory",
    "NotificationPriority",
    "NotificationStore",
    "NotificationType",
    "SubscribableStore",
    "decode_notifications",
    "encode_notifications",
    "format_age",
    "get_notification_store",
    "notify_application_approved",
    "notify_application_submitted",
    "notify_document_required",
    "notify_payment_required",
    "notify_system_maintenance",
    "report_error",
    "report_success",
    "report_upload_error",
    "report_upload_success",
    "reset_notification_store",
    "validation_errors",
]

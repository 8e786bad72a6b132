"""Turn errors, uploads and registration events into notifications.

The registration lifecycle producers (``notify_*``) all create persistent
entries tagged with a category and priority.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Callable, Mapping, Optional

from gp_notify.models import (
    NotificationAction,
    NotificationCategory,
    NotificationPriority,
    NotificationType,
)
from gp_notify.store import NotificationStore

logger = logging.getLogger(__name__)

ERROR_TITLES: dict[str, str] = {
    "VALIDATION_ERROR": "Validation Error",
    "AUTHENTICATION_ERROR": "Authentication Required",
    "AUTHORIZATION_ERROR": "Access Denied",
    "NOT_FOUND": "Not Found",
    "CONFLICT": "Conflict",
    "RATE_LIMIT": "Rate Limit Exceeded",
    "SERVER_ERROR": "Server Error",
    "NETWORK_ERROR": "Network Error",
    "TIMEOUT": "Request Timeout",
}


def error_title(code: Optional[str]) -> str:
    return ERROR_TITLES.get(code or "", "Error")


def report_error(
    store: NotificationStore,
    error: Any,
    context: Optional[str] = None,
    *,
    on_login: Optional[Callable[[], None]] = None,
) -> str:
    """Add an error notification describing ``error``.

    ``error`` is either an API error payload (``{"error": {"code": ...,
    "message": ..., "field": ...}}``) or an exception. Authentication errors
    carry a "Login" action wired to ``on_login``.
    """
    title = "Error"
    message = "An unexpected error occurred"
    code: Optional[str] = None

    api_error = error.get("error") if isinstance(error, Mapping) else None
    if isinstance(api_error, Mapping):
        code = api_error.get("code")
        title = error_title(code)
        message = str(api_error.get("message") or message)
        if context:
            message = f"{context}: {message}"
        if api_error.get("field"):
            message = f"{api_error['field']}: {message}"
    elif isinstance(error, BaseException) and str(error):
        message = f"{context}: {error}" if context else str(error)
    elif isinstance(error, Mapping) and error.get("message"):
        message = f"{context}: {error['message']}" if context else str(error["message"])

    action = None
    if code == "AUTHENTICATION_ERROR":
        action = NotificationAction(label="Login", on_click=on_login)

    logger.info("Reporting error notification: %s", message)
    return store.error(title, message, action=action)


def report_success(store: NotificationStore, message: str, context: Optional[str] = None) -> str:
    return store.success("Success", f"{context}: {message}" if context else message)


def validation_errors(store: NotificationStore, errors: Mapping[str, str]) -> list[str]:
    """Add one error notification per invalid field."""
    return [
        store.error("Validation Error", f"{field}: {message}")
        for field, message in errors.items()
    ]


def report_upload_success(store: NotificationStore, filename: str) -> str:
    return store.success("Upload Complete", f"{filename} uploaded successfully")


def report_upload_error(store: NotificationStore, filename: str, error: str) -> str:
    return store.error("Upload Failed", f"Failed to upload {filename}: {error}")


def _format_amount(amount: float) -> str:
    value = float(amount)
    return str(int(value)) if value.is_integer() else f"{value:.2f}"


def notify_application_submitted(store: NotificationStore, reference: str) -> str:
    return store.add(
        "Application Submitted",
        f"Your GST registration application {reference} has been submitted successfully.",
        NotificationType.SUCCESS,
        persistent=True,
        category=NotificationCategory.APPLICATION,
        priority=NotificationPriority.MEDIUM,
    )


def notify_application_approved(
    store: NotificationStore,
    reference: str,
    gst_number: str,
    *,
    on_view_certificate: Optional[Callable[[], None]] = None,
) -> str:
    return store.add(
        "Application Approved",
        f"Your GST application {reference} has been approved. GST Number: {gst_number}",
        NotificationType.SUCCESS,
        persistent=True,
        action=NotificationAction("View Certificate", on_view_certificate),
        category=NotificationCategory.APPLICATION,
        priority=NotificationPriority.HIGH,
    )


def notify_payment_required(
    store: NotificationStore,
    amount: float,
    reference: str,
    *,
    on_pay: Optional[Callable[[], None]] = None,
) -> str:
    return store.add(
        "Payment Required",
        f"Payment of ${_format_amount(amount)} is required for application {reference}.",
        NotificationType.WARNING,
        persistent=True,
        action=NotificationAction("Make Payment", on_pay),
        category=NotificationCategory.PAYMENT,
        priority=NotificationPriority.HIGH,
    )


def notify_document_required(
    store: NotificationStore,
    document_type: str,
    reference: str,
    *,
    on_upload: Optional[Callable[[], None]] = None,
) -> str:
    return store.add(
        "Document Required",
        f"{document_type} is required for application {reference}.",
        NotificationType.WARNING,
        persistent=True,
        action=NotificationAction("Upload Document", on_upload),
        category=NotificationCategory.DOCUMENT,
        priority=NotificationPriority.MEDIUM,
    )


def notify_system_maintenance(store: NotificationStore, message: str) -> str:
    return store.add(
        "System Maintenance",
        message,
        NotificationType.INFO,
        persistent=True,
        category=NotificationCategory.SYSTEM,
        priority=NotificationPriority.LOW,
    )


def format_age(timestamp: datetime, now: datetime) -> str:
    """Render how long ago ``timestamp`` was, e.g. "5m ago"."""
    seconds = (now - timestamp).total_seconds()
    minutes = int(seconds // 60)
    hours = int(seconds // 3600)
    days = int(seconds // 86400)
    if minutes < 1:
        return "Just now"
    if minutes < 60:
        return f"{minutes}m ago"
    if hours < 24:
        return f"{hours}h ago"
    return f"{days}d ago"

"""Notification records and their serialized form."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Callable, Mapping, Optional


class NotificationType(str, Enum):
    SUCCESS = "success"
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


class NotificationCategory(str, Enum):
    SYSTEM = "system"
    APPLICATION = "application"
    PAYMENT = "payment"
    DOCUMENT = "document"


class NotificationPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


@dataclass(frozen=True)
class NotificationAction:
    """Single follow-up action offered with a notification.

    The callback does not survive persistence: a restored action keeps its
    label and has ``on_click`` set to None.
    """

    label: str
    on_click: Optional[Callable[[], None]] = field(default=None, compare=False)

    def invoke(self) -> bool:
        if self.on_click is None:
            return False
        self.on_click()
        return True


@dataclass(frozen=True)
class Notification:
    """A user-facing message record held by the notification store."""

    id: str
    type: NotificationType
    title: str
    message: str
    timestamp: datetime
    persistent: bool = False
    duration_ms: Optional[int] = None
    read: bool = False
    action: Optional[NotificationAction] = None
    category: Optional[NotificationCategory] = None
    priority: Optional[NotificationPriority] = None

    def mark_read(self) -> "Notification":
        return self if self.read else replace(self, read=True)

    def expires_at(self, default_duration_ms: int) -> Optional[datetime]:
        """Deadline of a non-persistent entry, None for persistent ones."""
        if self.persistent:
            return None
        duration = self.duration_ms if self.duration_ms is not None else default_duration_ms
        return self.timestamp + timedelta(milliseconds=duration)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type.value,
            "title": self.title,
            "message": self.message,
            "timestamp": self.timestamp.isoformat(),
            "persistent": self.persistent,
            "duration": self.duration_ms,
            "read": self.read,
            "action": {"label": self.action.label} if self.action else None,
            "category": self.category.value if self.category else None,
            "priority": self.priority.value if self.priority else None,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Notification":
        """Rebuild a notification from :meth:`to_dict` output.

        Raises KeyError, TypeError or ValueError on malformed input.
        """
        timestamp = datetime.fromisoformat(str(data["timestamp"]))
        if timestamp.tzinfo is None:
            timestamp = timestamp.replace(tzinfo=timezone.utc)
        action_data = data.get("action")
        duration = data.get("duration")
        return cls(
            id=str(data["id"]),
            type=NotificationType(data["type"]),
            title=str(data["title"]),
            message=str(data["message"]),
            timestamp=timestamp,
            persistent=bool(data.get("persistent", False)),
            duration_ms=int(duration) if duration is not None else None,
            read=bool(data.get("read", False)),
            action=NotificationAction(label=str(action_data["label"])) if action_data else None,
            category=_optional_enum(NotificationCategory, data.get("category")),
            priority=_optional_enum(NotificationPriority, data.get("priority")),
        )


def _optional_enum(enum_cls: type[Enum], value: Any) -> Any:
    return enum_cls(value) if value is not None else None

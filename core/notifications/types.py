"""
Type definitions for scheduled notifications and delivery outcomes.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from core.enums import DeliveryStatus


@dataclass(frozen=True)
class NotificationDefinition:
    """A weekly notification as stored in the notifications table."""

    id: int
    message: str
    day_of_week: int  # 0 = Sunday ... 6 = Saturday
    time: str  # "HH:MM", 24-hour, scheduler timezone
    is_active: bool = True
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "NotificationDefinition":
        """Build from a database row mapping (extra columns are ignored)."""
        return cls(
            id=row["id"],
            message=row["message"],
            day_of_week=row["day_of_week"],
            time=row["time"],
            is_active=bool(row.get("is_active", True)),
            created_at=row.get("created_at"),
            updated_at=row.get("updated_at"),
        )


@dataclass(frozen=True)
class DeliveryLogEntry:
    """One recorded delivery attempt."""

    notification_id: int
    status: DeliveryStatus
    error_message: str | None = None  # Only set when status is failed
    sent_at: datetime | None = None


@dataclass(frozen=True)
class SendResult:
    """Outcome of a single MessageSender.send() call."""

    success: bool
    error: str | None = None

    @classmethod
    def ok(cls) -> "SendResult":
        return cls(success=True)

    @classmethod
    def failed(cls, error: str) -> "SendResult":
        return cls(success=False, error=error or "Unknown error")

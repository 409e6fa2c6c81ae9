"""Notification and delivery log queries using SQLAlchemy Core."""

from typing import Any

from sqlalchemy import delete, func, insert, select, update
from sqlalchemy.ext.asyncio import AsyncConnection

from ..enums import DeliveryStatus
from ..tables import notification_logs, notifications

# Columns a caller may change through update_notification()
UPDATABLE_FIELDS = ("message", "day_of_week", "time", "is_active")


async def list_notifications(conn: AsyncConnection) -> list[dict[str, Any]]:
    """Get all notifications, active or not, ordered by id."""
    result = await conn.execute(select(notifications).order_by(notifications.c.id))
    return [dict(row) for row in result.mappings()]


async def list_active_notifications(conn: AsyncConnection) -> list[dict[str, Any]]:
    """Get every notification with is_active = true."""
    result = await conn.execute(
        select(notifications)
        .where(notifications.c.is_active.is_(True))
        .order_by(notifications.c.id)
    )
    return [dict(row) for row in result.mappings()]


async def list_active_notifications_for_day(
    conn: AsyncConnection,
    day_of_week: int,
) -> list[dict[str, Any]]:
    """Get active notifications scheduled on one day (0 = Sunday)."""
    result = await conn.execute(
        select(notifications)
        .where(notifications.c.is_active.is_(True))
        .where(notifications.c.day_of_week == day_of_week)
        .order_by(notifications.c.time, notifications.c.id)
    )
    return [dict(row) for row in result.mappings()]


async def get_notification_by_id(
    conn: AsyncConnection,
    notification_id: int,
) -> dict[str, Any] | None:
    result = await conn.execute(
        select(notifications).where(notifications.c.id == notification_id)
    )
    row = result.mappings().first()
    return dict(row) if row else None


async def create_notification(
    conn: AsyncConnection,
    message: str,
    day_of_week: int,
    time: str,
    is_active: bool = True,
) -> dict[str, Any]:
    """Insert a notification and return the stored row."""
    result = await conn.execute(
        insert(notifications)
        .values(
            message=message,
            day_of_week=day_of_week,
            time=time,
            is_active=is_active,
        )
        .returning(notifications)
    )
    return dict(result.mappings().one())


async def update_notification(
    conn: AsyncConnection,
    notification_id: int,
    changes: dict[str, Any],
) -> dict[str, Any] | None:
    """
    Apply a partial update and bump updated_at.

    Keys outside UPDATABLE_FIELDS are ignored.

    Returns:
        The updated row, or None if the id does not exist
    """
    values = {k: v for k, v in changes.items() if k in UPDATABLE_FIELDS}
    values["updated_at"] = func.now()

    result = await conn.execute(
        update(notifications)
        .where(notifications.c.id == notification_id)
        .values(**values)
        .returning(notifications)
    )
    row = result.mappings().first()
    return dict(row) if row else None


async def delete_notification(conn: AsyncConnection, notification_id: int) -> bool:
    """Delete a notification. Returns False if it did not exist."""
    result = await conn.execute(
        delete(notifications)
        .where(notifications.c.id == notification_id)
        .returning(notifications.c.id)
    )
    return result.first() is not None


async def insert_notification_log(
    conn: AsyncConnection,
    notification_id: int,
    status: DeliveryStatus,
    error_message: str | None = None,
) -> None:
    await conn.execute(
        insert(notification_logs).values(
            notification_id=notification_id,
            status=status,
            error_message=error_message,
        )
    )


async def list_notification_logs(
    conn: AsyncConnection,
    notification_id: int,
    limit: int = 50,
) -> list[dict[str, Any]]:
    """Delivery history for one notification, newest first."""
    result = await conn.execute(
        select(notification_logs)
        .where(notification_logs.c.notification_id == notification_id)
        .order_by(notification_logs.c.sent_at.desc(), notification_logs.c.log_id.desc())
        .limit(limit)
    )
    return [dict(row) for row in result.mappings()]

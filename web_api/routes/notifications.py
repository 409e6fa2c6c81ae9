"""
Notification routes.

Endpoints:
- GET /api/notifications - List all notifications (?day_of_week=N: active ones on that day)
- GET /api/notifications/{id} - Get one notification
- GET /api/notifications/{id}/logs - Delivery history, newest first
- POST /api/notifications - Create a notification
- PUT /api/notifications/{id} - Partially update a notification
- DELETE /api/notifications/{id} - Delete a notification
- POST /api/notifications/{id}/toggle - Flip is_active

Every mutation commits its write first, then rearms the scheduler. If the
rearm fails the response is a 500 even though the write is already stored.
"""

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field, field_validator

from core.constants import TIME_PATTERN
from core.database import get_connection, get_transaction
from core.notifications.errors import RepositoryError
from core.notifications.scheduler import NotificationScheduler
from core.queries.notifications import (
    create_notification,
    delete_notification,
    get_notification_by_id,
    list_active_notifications_for_day,
    list_notification_logs,
    list_notifications,
    update_notification,
)
from web_api.dependencies import get_scheduler

router = APIRouter(prefix="/api/notifications", tags=["notifications"])


class NotificationCreate(BaseModel):
    """Schema for creating a notification."""

    message: str = Field(min_length=1)
    day_of_week: int = Field(ge=0, le=6, description="0 (Sunday) to 6 (Saturday)")
    time: str = Field(description="HH:MM, 24-hour")
    is_active: bool = True

    @field_validator("time")
    @classmethod
    def check_time(cls, value: str | None) -> str | None:
        if value is not None and not TIME_PATTERN.match(value):
            raise ValueError("time must be HH:MM (24-hour)")
        return value


class NotificationUpdate(BaseModel):
    """Schema for a partial update. Omitted fields are left unchanged."""

    message: str | None = Field(default=None, min_length=1)
    day_of_week: int | None = Field(default=None, ge=0, le=6)
    time: str | None = None
    is_active: bool | None = None

    @field_validator("time")
    @classmethod
    def check_time(cls, value: str | None) -> str | None:
        if value is not None and not TIME_PATTERN.match(value):
            raise ValueError("time must be HH:MM (24-hour)")
        return value


async def _rearm(scheduler: NotificationScheduler) -> None:
    try:
        await scheduler.rearm_all()
    except RepositoryError as e:
        raise HTTPException(500, f"Scheduler refresh failed: {e}")


@router.get("")
async def get_all_notifications(
    day_of_week: int | None = Query(None, ge=0, le=6),
) -> dict[str, Any]:
    """All notifications, or only the active ones scheduled on day_of_week."""
    async with get_connection() as conn:
        if day_of_week is None:
            rows = await list_notifications(conn)
        else:
            rows = await list_active_notifications_for_day(conn, day_of_week)

    return {"success": True, "data": rows, "count": len(rows)}


@router.get("/{notification_id}")
async def get_notification(notification_id: int) -> dict[str, Any]:
    async with get_connection() as conn:
        row = await get_notification_by_id(conn, notification_id)

    if not row:
        raise HTTPException(404, "Notification not found")

    return {"success": True, "data": row}


@router.get("/{notification_id}/logs")
async def get_notification_logs(
    notification_id: int,
    limit: int = Query(50, ge=1, le=500),
) -> dict[str, Any]:
    """
    Delivery attempts for a notification.

    Logs are kept after a notification is deleted, so this doesn't 404.
    """
    async with get_connection() as conn:
        rows = await list_notification_logs(conn, notification_id, limit=limit)

    return {"success": True, "data": rows, "count": len(rows)}


@router.post("", status_code=201)
async def create_notification_endpoint(
    request: NotificationCreate,
    scheduler: NotificationScheduler = Depends(get_scheduler),
) -> dict[str, Any]:
    async with get_transaction() as conn:
        row = await create_notification(
            conn,
            message=request.message,
            day_of_week=request.day_of_week,
            time=request.time,
            is_active=request.is_active,
        )

    await _rearm(scheduler)

    return {
        "success": True,
        "data": row,
        "message": "Notification created and scheduled successfully",
    }


@router.put("/{notification_id}")
async def update_notification_endpoint(
    notification_id: int,
    request: NotificationUpdate,
    scheduler: NotificationScheduler = Depends(get_scheduler),
) -> dict[str, Any]:
    changes = request.model_dump(exclude_unset=True, exclude_none=True)
    if not changes:
        raise HTTPException(400, "No fields to update")

    async with get_transaction() as conn:
        row = await update_notification(conn, notification_id, changes)

    if not row:
        raise HTTPException(404, "Notification not found")

    await _rearm(scheduler)

    return {
        "success": True,
        "data": row,
        "message": "Notification updated and rescheduled successfully",
    }


@router.delete("/{notification_id}")
async def delete_notification_endpoint(
    notification_id: int,
    scheduler: NotificationScheduler = Depends(get_scheduler),
) -> dict[str, Any]:
    async with get_transaction() as conn:
        deleted = await delete_notification(conn, notification_id)

    if not deleted:
        raise HTTPException(404, "Notification not found")

    await _rearm(scheduler)

    return {"success": True, "message": "Notification deleted successfully"}


@router.post("/{notification_id}/toggle")
async def toggle_notification_endpoint(
    notification_id: int,
    scheduler: NotificationScheduler = Depends(get_scheduler),
) -> dict[str, Any]:
    async with get_transaction() as conn:
        current = await get_notification_by_id(conn, notification_id)
        if not current:
            raise HTTPException(404, "Notification not found")

        row = await update_notification(
            conn, notification_id, {"is_active": not current["is_active"]}
        )

    await _rearm(scheduler)

    state = "activated" if row["is_active"] else "deactivated"
    return {
        "success": True,
        "data": row,
        "message": f"Notification {state} successfully",
    }

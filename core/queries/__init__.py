"""Query layer for database operations using SQLAlchemy Core."""

from .notifications import (
    create_notification,
    delete_notification,
    get_notification_by_id,
    insert_notification_log,
    list_active_notifications,
    list_active_notifications_for_day,
    list_notification_logs,
    list_notifications,
    update_notification,
)

__all__ = [
    # Notifications
    "list_notifications",
    "list_active_notifications",
    "list_active_notifications_for_day",
    "get_notification_by_id",
    "create_notification",
    "update_notification",
    "delete_notification",
    # Delivery logs
    "insert_notification_log",
    "list_notification_logs",
]

"""
Notification store as seen by the scheduler.

The scheduler only needs to read active definitions and record delivery
outcomes. NotificationRepository names that contract; SqlNotificationRepository
implements it on top of core.queries.notifications.
"""

import logging
from typing import Protocol

from sqlalchemy.exc import SQLAlchemyError

from core.enums import DeliveryStatus
from core.notifications.errors import LogWriteFailure, RepositoryError
from core.notifications.types import NotificationDefinition

logger = logging.getLogger(__name__)


class NotificationRepository(Protocol):
    async def list_active(self) -> list[NotificationDefinition]: ...

    async def create_notification_log(
        self,
        notification_id: int,
        status: DeliveryStatus,
        error_message: str | None = None,
    ) -> None: ...


class SqlNotificationRepository:
    """NotificationRepository backed by the notifications/notification_logs tables."""

    async def list_active(self) -> list[NotificationDefinition]:
        """
        Fetch all active notification definitions.

        Raises:
            RepositoryError: If the database cannot be reached or the query fails
        """
        from core.database import get_connection
        from core.queries.notifications import list_active_notifications

        try:
            async with get_connection() as conn:
                rows = await list_active_notifications(conn)
        except (SQLAlchemyError, OSError) as e:
            logger.error(f"Failed to fetch active notifications: {e}")
            raise RepositoryError(f"Failed to fetch active notifications: {e}") from e

        return [NotificationDefinition.from_row(row) for row in rows]

    async def create_notification_log(
        self,
        notification_id: int,
        status: DeliveryStatus,
        error_message: str | None = None,
    ) -> None:
        """
        Record one delivery attempt.

        Raises:
            LogWriteFailure: If the row could not be written
        """
        from core.database import get_transaction
        from core.queries.notifications import insert_notification_log

        try:
            async with get_transaction() as conn:
                await insert_notification_log(
                    conn,
                    notification_id=notification_id,
                    status=status,
                    error_message=error_message if status == DeliveryStatus.failed else None,
                )
        except (SQLAlchemyError, OSError) as e:
            raise LogWriteFailure(
                f"Failed to log {status.value} delivery for notification {notification_id}: {e}"
            ) from e

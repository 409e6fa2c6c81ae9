"""
Weekly Slack notifications.

Public API:
    NotificationScheduler - owns the armed job set (arm_one, disarm_one,
        initialize_all, rearm_all, count, list_jobs, send_test_message)
    create_notification_scheduler() - scheduler wired to the database and Slack
    WeeklyRecurrence - typed (minute, hour, day_of_week) rule
    SlackWebhookSender - outbound Slack channel
    SqlNotificationRepository - database-backed store
"""

from .channels.slack import MessageSender, SlackWebhookSender
from .errors import LogWriteFailure, NotificationError, RepositoryError, SendFailure
from .recurrence import WeeklyRecurrence
from .repository import NotificationRepository, SqlNotificationRepository
from .scheduler import EngineState, NotificationScheduler, create_notification_scheduler
from .types import DeliveryLogEntry, NotificationDefinition, SendResult

__all__ = [
    # Engine
    "NotificationScheduler",
    "EngineState",
    "create_notification_scheduler",
    "WeeklyRecurrence",
    # Collaborators
    "NotificationRepository",
    "SqlNotificationRepository",
    "MessageSender",
    "SlackWebhookSender",
    # Types
    "NotificationDefinition",
    "DeliveryLogEntry",
    "SendResult",
    # Errors
    "NotificationError",
    "RepositoryError",
    "SendFailure",
    "LogWriteFailure",
]

"""Exceptions raised by the notification scheduler and its collaborators."""


class NotificationError(Exception):
    """Base class for notification scheduling errors."""


class RepositoryError(NotificationError):
    """The notification store is unreachable or a query failed."""


class SendFailure(NotificationError):
    """A message could not be delivered to the outbound channel."""


class LogWriteFailure(NotificationError):
    """A delivery outcome could not be recorded."""

"""
APScheduler-based weekly notification scheduler.

NotificationScheduler owns the live set of armed jobs: exactly one APScheduler
job per active notification, keyed by notification id. The notifications
table is the source of truth, so jobs live in APScheduler's in-memory job
store and the whole set is rebuilt from the database on start and after
every change (rearm_all).

Jobs are lightweight: each stores only the notification id and message, and
the firing handler sends the message and records exactly one delivery log
entry. A failed send is not retried; the next weekly occurrence is the retry.
"""

import enum
import logging
import threading
from types import MappingProxyType
from typing import Mapping

import pytz
import sentry_sdk
from apscheduler.job import Job
from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.schedulers.base import BaseScheduler

from core import config
from core.constants import DEFAULT_TEST_MESSAGE, JOB_ID_PREFIX
from core.enums import DeliveryStatus
from core.notifications.channels.slack import MessageSender
from core.notifications.errors import RepositoryError, SendFailure
from core.notifications.recurrence import WeeklyRecurrence
from core.notifications.repository import NotificationRepository
from core.notifications.types import NotificationDefinition, SendResult

logger = logging.getLogger(__name__)


JOB_DEFAULTS = {
    "coalesce": True,  # Combine missed runs into one
    "max_instances": 1,
    "misfire_grace_time": 3600,  # Allow 1 hour late execution
}

_NO_JOBS: Mapping[int, Job] = MappingProxyType({})


class EngineState(str, enum.Enum):
    empty = "empty"
    loading = "loading"
    armed = "armed"


def job_id_for(notification_id: int) -> str:
    return f"{JOB_ID_PREFIX}{notification_id}"


class NotificationScheduler:
    """
    Keeps one armed APScheduler job per active notification.

    The id -> job map is an immutable snapshot replaced under a single lock.
    The lock is never held across repository or sender calls.
    """

    def __init__(
        self,
        repository: NotificationRepository,
        sender: MessageSender,
        scheduler: BaseScheduler | None = None,
        timezone: str | None = None,
    ):
        self._repository = repository
        self._sender = sender
        self._timezone = timezone or config.get_scheduler_timezone()
        self._scheduler = scheduler or AsyncIOScheduler(
            timezone=pytz.timezone(self._timezone),
            job_defaults=JOB_DEFAULTS,
        )
        self._lock = threading.Lock()
        self._jobs: Mapping[int, Job] = _NO_JOBS
        self._state = EngineState.empty
        # Refresh tickets: a refresh older than the last committed one is discarded
        self._generation = 0
        self._committed_generation = 0

    # =========================================================================
    # Lifecycle
    # =========================================================================

    @property
    def state(self) -> EngineState:
        return self._state

    @property
    def timezone(self) -> str:
        return self._timezone

    def start(self) -> None:
        """Start the underlying APScheduler scheduler (needs a running event loop)."""
        if not self._scheduler.running:
            self._scheduler.start()
            logger.info(f"Notification scheduler started ({self._timezone})")

    def shutdown(self) -> None:
        """Stop firing. In-flight sends are not waited on."""
        if self._scheduler.running:
            self._scheduler.shutdown(wait=False)
            logger.info("Notification scheduler stopped")

    # =========================================================================
    # Arm / disarm
    # =========================================================================

    def arm_one(self, definition: NotificationDefinition) -> None:
        """
        Arm (or re-arm) the job for one notification.

        Any existing job for the id is removed first. An inactive definition
        only clears the existing job.

        Raises:
            ValueError: If an active definition has an invalid day or time
        """
        recurrence = None
        if definition.is_active:
            recurrence = WeeklyRecurrence.from_schedule(definition.day_of_week, definition.time)

        with self._lock:
            jobs = dict(self._jobs)
            existing = jobs.pop(definition.id, None)
            if existing is not None:
                self._remove_job(existing)
            if recurrence is not None:
                jobs[definition.id] = self._add_job(definition, recurrence)
            self._jobs = MappingProxyType(jobs)

        if recurrence is not None:
            logger.info(
                f"Scheduled notification {definition.id} for {recurrence.describe()}"
            )
        elif existing is not None:
            logger.info(f"Unscheduled inactive notification {definition.id}")

    def disarm_one(self, notification_id: int) -> None:
        """Remove the job for an id. No-op if it isn't armed."""
        with self._lock:
            if notification_id not in self._jobs:
                return
            jobs = dict(self._jobs)
            self._remove_job(jobs.pop(notification_id))
            self._jobs = MappingProxyType(jobs)

        logger.info(f"Unscheduled notification {notification_id}")

    # =========================================================================
    # Full reload
    # =========================================================================

    async def initialize_all(self) -> int:
        """
        Arm one job per active notification in the store.

        Returns:
            Number of armed jobs

        Raises:
            RepositoryError: If the store can't be read (zero jobs stay armed)
        """
        logger.info("Initializing scheduler with database notifications...")
        return await self._reload()

    async def rearm_all(self) -> int:
        """
        Replace the whole job set with the store's current active notifications.

        Old jobs are stopped and new ones armed in a single critical section,
        so count() never sees a mix. On a failed fetch every job is stopped.

        Returns:
            Number of armed jobs

        Raises:
            RepositoryError: If the store can't be read (zero jobs stay armed)
        """
        logger.info("Refreshing scheduler...")
        return await self._reload()

    async def _reload(self) -> int:
        with self._lock:
            self._generation += 1
            generation = self._generation
            self._state = EngineState.loading

        try:
            definitions = await self._repository.list_active()
        except Exception as e:
            self._fail_closed(generation)
            logger.error(f"Failed to load notifications, all jobs stopped: {e}")
            if isinstance(e, RepositoryError):
                raise
            raise RepositoryError(str(e)) from e

        with self._lock:
            if generation < self._committed_generation:
                logger.info(f"Discarding superseded refresh #{generation}")
                return len(self._jobs)
            self._committed_generation = generation

            for job in self._jobs.values():
                self._remove_job(job)

            jobs: dict[int, Job] = {}
            for definition in definitions:
                if not definition.is_active:
                    continue
                try:
                    recurrence = WeeklyRecurrence.from_schedule(
                        definition.day_of_week, definition.time
                    )
                except ValueError as e:
                    logger.error(f"Skipping notification {definition.id}: {e}")
                    sentry_sdk.capture_message(
                        f"Invalid schedule for notification {definition.id}: {e}"
                    )
                    continue
                jobs[definition.id] = self._add_job(definition, recurrence)

            self._jobs = MappingProxyType(jobs)
            if generation == self._generation:
                self._state = EngineState.armed

        logger.info(f"Scheduled {len(jobs)} notifications")
        return len(jobs)

    def _fail_closed(self, generation: int) -> None:
        with self._lock:
            if generation < self._committed_generation:
                return
            self._committed_generation = generation
            for job in self._jobs.values():
                self._remove_job(job)
            self._jobs = _NO_JOBS
            if generation == self._generation:
                self._state = EngineState.empty

    # =========================================================================
    # Observability
    # =========================================================================

    def count(self) -> int:
        """Number of currently armed jobs."""
        return len(self._jobs)

    def list_jobs(self) -> list[str]:
        """Armed job ids, ordered by notification id."""
        return [job_id_for(notification_id) for notification_id in sorted(self._jobs)]

    def is_armed(self, notification_id: int) -> bool:
        return notification_id in self._jobs

    # =========================================================================
    # Sending
    # =========================================================================

    async def send_test_message(self, text: str | None = None) -> None:
        """
        Send one message right away, bypassing the schedule. Not logged.

        Raises:
            SendFailure: If the message could not be delivered
        """
        result = await self._sender.send(text or DEFAULT_TEST_MESSAGE)
        if not result.success:
            logger.error(f"Failed to send test message: {result.error}")
            raise SendFailure(result.error or "Unknown error")
        logger.info("Test message sent successfully")

    async def _fire(self, notification_id: int, message: str) -> None:
        """
        Send one scheduled notification and record the outcome.

        This is the job function called by APScheduler. Nothing escapes it:
        an error here must not affect the job or any other job.
        """
        logger.info(f"Sending scheduled notification {notification_id}")

        try:
            result = await self._sender.send(message)
        except Exception as e:
            logger.error(f"Sender raised for notification {notification_id}: {e}")
            result = SendResult.failed(str(e) or type(e).__name__)

        error = None
        if result.success:
            status = DeliveryStatus.sent
            logger.info(f"Scheduled notification sent successfully: {notification_id}")
        else:
            status = DeliveryStatus.failed
            error = result.error or "Unknown error"
            logger.error(f"Failed to send scheduled notification {notification_id}: {error}")

        try:
            await self._repository.create_notification_log(notification_id, status, error)
        except Exception as e:
            logger.error(
                f"Failed to record {status.value} delivery for notification {notification_id}: {e}"
            )
            sentry_sdk.capture_exception(e)

    # =========================================================================
    # APScheduler plumbing (call with self._lock held)
    # =========================================================================

    def _add_job(self, definition: NotificationDefinition, recurrence: WeeklyRecurrence) -> Job:
        return self._scheduler.add_job(
            self._fire,
            trigger=recurrence.to_trigger(self._timezone),
            id=job_id_for(definition.id),
            name=f"notification {definition.id} ({recurrence.describe()})",
            replace_existing=True,
            kwargs={
                "notification_id": definition.id,
                "message": definition.message,
            },
            **JOB_DEFAULTS,
        )

    def _remove_job(self, job: Job) -> None:
        try:
            self._scheduler.remove_job(job.id)
        except JobLookupError:
            pass  # Already gone


def create_notification_scheduler() -> NotificationScheduler:
    """Build a scheduler wired to the database and the Slack webhook from env."""
    from core.notifications.channels.slack import SlackWebhookSender
    from core.notifications.repository import SqlNotificationRepository

    return NotificationScheduler(
        repository=SqlNotificationRepository(),
        sender=SlackWebhookSender.from_env(),
        timezone=config.get_scheduler_timezone(),
    )

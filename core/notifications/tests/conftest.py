"""Fixtures for notification scheduler tests.

FakeRepository and FakeSender stand in for the database and Slack so the
scheduler runs against a real in-memory APScheduler without network I/O.
"""

import pytest
import pytest_asyncio
from apscheduler.schedulers.asyncio import AsyncIOScheduler

from core.enums import DeliveryStatus
from core.notifications.errors import RepositoryError
from core.notifications.scheduler import NotificationScheduler
from core.notifications.types import DeliveryLogEntry, NotificationDefinition, SendResult


class FakeRepository:
    """In-memory notification store."""

    def __init__(self, definitions: list[NotificationDefinition] | None = None):
        self.definitions = {d.id: d for d in definitions or []}
        self.logs: list[DeliveryLogEntry] = []
        self.fail_reads = False
        self.fail_log_writes = False
        self.list_calls = 0

    def put(self, definition: NotificationDefinition) -> None:
        self.definitions[definition.id] = definition

    def remove(self, notification_id: int) -> None:
        del self.definitions[notification_id]

    async def list_active(self) -> list[NotificationDefinition]:
        self.list_calls += 1
        if self.fail_reads:
            raise RepositoryError("connection refused")
        return [d for d in self.definitions.values() if d.is_active]

    async def create_notification_log(
        self,
        notification_id: int,
        status: DeliveryStatus,
        error_message: str | None = None,
    ) -> None:
        if self.fail_log_writes:
            raise RuntimeError("insert failed")
        self.logs.append(DeliveryLogEntry(notification_id, status, error_message))


class FakeSender:
    """Records sent messages and returns a configurable result."""

    def __init__(self, result: SendResult | None = None):
        self.result = result or SendResult.ok()
        self.raises: Exception | None = None
        self.sent: list[str] = []

    async def send(self, text: str) -> SendResult:
        self.sent.append(text)
        if self.raises:
            raise self.raises
        return self.result


def make_definition(
    notification_id: int,
    day_of_week: int = 1,
    time: str = "09:00",
    is_active: bool = True,
    message: str | None = None,
) -> NotificationDefinition:
    return NotificationDefinition(
        id=notification_id,
        message=message or f"Reminder {notification_id}",
        day_of_week=day_of_week,
        time=time,
        is_active=is_active,
    )


@pytest.fixture
def repository():
    return FakeRepository(
        [
            make_definition(1, day_of_week=1, time="09:00"),
            make_definition(2, day_of_week=3, time="14:05"),
            make_definition(3, day_of_week=5, time="17:30"),
            make_definition(4, day_of_week=0, time="08:00", is_active=False),
        ]
    )


@pytest.fixture
def sender():
    return FakeSender()


@pytest_asyncio.fixture
async def aps_scheduler():
    """Real APScheduler, started paused so no job actually fires during a test."""
    scheduler = AsyncIOScheduler(timezone="UTC")
    scheduler.start(paused=True)
    yield scheduler
    scheduler.shutdown(wait=False)


@pytest_asyncio.fixture
async def engine(repository, sender, aps_scheduler):
    return NotificationScheduler(
        repository=repository,
        sender=sender,
        scheduler=aps_scheduler,
        timezone="UTC",
    )

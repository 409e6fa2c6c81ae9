"""
Scheduler routes.

Endpoints:
- GET /api/scheduler/jobs - Armed job ids and engine state
- POST /api/scheduler/refresh - Rebuild the job set from the database
- POST /api/scheduler/test-message - Send one unscheduled test message
"""

from typing import Any

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from core.notifications.errors import RepositoryError, SendFailure
from core.notifications.scheduler import NotificationScheduler
from web_api.dependencies import get_scheduler

router = APIRouter(prefix="/api/scheduler", tags=["scheduler"])


class TestMessageRequest(BaseModel):
    text: str | None = None


@router.get("/jobs")
async def get_jobs(
    scheduler: NotificationScheduler = Depends(get_scheduler),
) -> dict[str, Any]:
    jobs = scheduler.list_jobs()
    return {
        "success": True,
        "state": scheduler.state.value,
        "count": len(jobs),
        "jobs": jobs,
    }


@router.post("/refresh")
async def refresh(
    scheduler: NotificationScheduler = Depends(get_scheduler),
) -> dict[str, Any]:
    """Rearm every job. Used by `python main.py --refresh`."""
    try:
        count = await scheduler.rearm_all()
    except RepositoryError as e:
        raise HTTPException(500, f"Scheduler refresh failed: {e}")

    return {"success": True, "count": count}


@router.post("/test-message")
async def test_message(
    request: TestMessageRequest | None = None,
    scheduler: NotificationScheduler = Depends(get_scheduler),
) -> dict[str, Any]:
    try:
        await scheduler.send_test_message(request.text if request else None)
    except SendFailure as e:
        raise HTTPException(502, f"Test message failed: {e}")

    return {"success": True, "message": "Test message sent"}

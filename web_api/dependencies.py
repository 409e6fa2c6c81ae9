"""FastAPI dependencies shared by the routers."""

from fastapi import HTTPException, Request

from core.notifications.scheduler import NotificationScheduler


def get_scheduler(request: Request) -> NotificationScheduler:
    """
    The NotificationScheduler owned by this app.

    main.py's lifespan creates it and stores it on app.state; tests assign
    their own instance the same way.
    """
    scheduler = getattr(request.app.state, "scheduler", None)
    if scheduler is None:
        raise HTTPException(503, "Scheduler not initialized")
    return scheduler

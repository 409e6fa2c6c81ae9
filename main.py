"""
SWAB Server entry point.

Architecture:
- One Python process, one asyncio event loop
- FastAPI serves the notification CRUD API
- NotificationScheduler (APScheduler) fires weekly Slack messages on the same loop

The scheduler is created in FastAPI's lifespan, armed from the database
before the server accepts traffic, and stored on app.state for the routers.

Run with: python main.py [--test] [--validate-webhook] [--refresh] [--port PORT]
"""

import argparse
import asyncio
import sys
from contextlib import asynccontextmanager
from pathlib import Path

from dotenv import load_dotenv

project_root = Path(__file__).parent

# Load .env.local first (if exists), then .env as fallback
# .env.local is gitignored and used for local dev overrides
load_dotenv(project_root / ".env.local")  # Local overrides (gitignored)
load_dotenv()  # Fallback to .env

import httpx
import sentry_sdk
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from core import config
from core.database import check_connection, close_engine
from core.notifications.errors import RepositoryError, SendFailure
from core.notifications.scheduler import create_notification_scheduler
from web_api.errors import register_exception_handlers
from web_api.routes.notifications import router as notifications_router
from web_api.routes.scheduler import router as scheduler_router


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    FastAPI lifespan context manager.

    Arms every active notification before traffic is accepted. A database
    failure here aborts startup: the schedule can't be trusted.
    """
    ok, warnings = config.check_required_env_vars()
    for warning in warnings:
        print(warning)
    if not ok:
        raise RuntimeError("Missing required environment variables")

    print("Starting SWAB Server...")
    scheduler = create_notification_scheduler()
    app.state.scheduler = scheduler

    try:
        count = await scheduler.initialize_all()
    except RepositoryError as e:
        print(f"Failed to start server: {e}")
        sentry_sdk.capture_exception(e)
        await close_engine()
        raise

    scheduler.start()
    print(f"📊 Active scheduled jobs: {count}")

    yield  # FastAPI runs here, scheduler fires alongside it

    print("\nShutting down SWAB Server...")
    scheduler.shutdown()
    await close_engine()


app = FastAPI(
    title="SWAB Server API",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.get_allowed_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

app.include_router(notifications_router)
app.include_router(scheduler_router)


def _scheduled_jobs(request: Request) -> int | None:
    scheduler = getattr(request.app.state, "scheduler", None)
    return scheduler.count() if scheduler else None


@app.get("/")
async def root(request: Request):
    return {
        "message": "SWAB Server API",
        "version": app.version,
        "status": "running",
        "scheduled_jobs": _scheduled_jobs(request),
    }


@app.get("/health")
async def health(request: Request):
    scheduler = getattr(request.app.state, "scheduler", None)
    database_ok = await check_connection()
    return {
        "status": "healthy" if database_ok else "degraded",
        "database": "connected" if database_ok else "unreachable",
        "scheduler_state": scheduler.state.value if scheduler else None,
        "scheduled_jobs": _scheduled_jobs(request),
    }


# =============================================================================
# CLI commands
# =============================================================================


async def send_test_message() -> bool:
    """Send one test message to Slack. Returns True on success."""
    try:
        scheduler = create_notification_scheduler()
    except ValueError as e:
        print(f"❌ {e}")
        return False

    try:
        await scheduler.send_test_message()
    except SendFailure as e:
        print(f"❌ Failed to send test message: {e}")
        return False

    print("✅ Test message sent! Check your Slack channel.")
    return True


async def request_refresh(api_url: str) -> bool:
    """Ask a running server to rearm its scheduler. Returns True on success."""
    try:
        async with httpx.AsyncClient(timeout=30.0) as client:
            response = await client.post(f"{api_url}/api/scheduler/refresh")
    except httpx.HTTPError as e:
        print(f"❌ Could not reach server at {api_url}: {e}")
        return False

    if response.status_code != 200:
        try:
            error = response.json().get("error", response.text)
        except ValueError:
            error = response.text
        print(f"❌ Refresh failed ({response.status_code}): {error}")
        return False

    print(f"✅ Scheduler refreshed: {response.json()['count']} active jobs")
    return True


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="SWAB Server")
    parser.add_argument(
        "--test",
        action="store_true",
        help="Send one test message to Slack and exit (non-zero on failure)",
    )
    parser.add_argument(
        "--validate-webhook",
        action="store_true",
        help="Check the Slack webhook and report the result (always exits 0)",
    )
    parser.add_argument(
        "--refresh",
        action="store_true",
        help="Ask the running server to reload all notifications and exit",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=config.get_api_port(),
        help="Port to run the server on (default: API_PORT or 3000)",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    if args.test:
        print("Running test mode...")
        return 0 if asyncio.run(send_test_message()) else 1

    if args.validate_webhook:
        print("Validating Slack webhook...")
        if asyncio.run(send_test_message()):
            print("✅ Webhook is working correctly!")
        else:
            print("❌ Webhook validation failed!")
        return 0

    if args.refresh:
        return 0 if asyncio.run(request_refresh(config.get_api_url())) else 1

    import uvicorn

    # Pass app object directly (not string) to avoid module reimport issues
    uvicorn.run(
        app,
        host="0.0.0.0",
        port=args.port,
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())

"""
Centralized configuration for SWAB Server.

All settings come from environment variables (loaded from .env / .env.local
by main.py and the root conftest).
"""

import os


def is_dev_mode() -> bool:
    """Check if running in development mode (DEV_MODE env)."""
    return os.getenv("DEV_MODE", "").lower() in ("true", "1", "yes")


def is_production() -> bool:
    """Check if running on Railway (production environment)."""
    return bool(os.environ.get("RAILWAY_ENVIRONMENT"))


def get_api_port() -> int:
    """Get API server port from env or default."""
    return int(os.getenv("API_PORT", "3000"))


def get_api_url() -> str:
    """Base URL of a running server, used by the --refresh CLI flag."""
    return os.environ.get("API_URL", f"http://localhost:{get_api_port()}").rstrip("/")


def get_allowed_origins() -> list[str]:
    """Get list of allowed CORS origins."""
    origins = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
        "http://localhost:5173",
        "http://127.0.0.1:5173",
    ]

    env_frontend = os.environ.get("FRONTEND_URL")
    if env_frontend and env_frontend not in origins:
        origins.append(env_frontend)

    return origins


def get_slack_webhook_url() -> str:
    """Slack incoming webhook URL. Raises ValueError when unset."""
    url = os.environ.get("SLACK_WEBHOOK_URL", "")
    if not url:
        raise ValueError("SLACK_WEBHOOK_URL environment variable must be set")
    return url


def get_slack_username() -> str:
    return os.environ.get("SLACK_USERNAME", "SWAB Bot")


def get_slack_icon_emoji() -> str:
    return os.environ.get("SLACK_ICON_EMOJI", ":clock1:")


def get_slack_timeout() -> float:
    """Timeout in seconds for a single webhook call."""
    return float(os.environ.get("SLACK_TIMEOUT_SECONDS", "10"))


def get_scheduler_timezone() -> str:
    """The single timezone that notification times are interpreted in."""
    return os.environ.get("SCHEDULER_TIMEZONE", "UTC")


# Required environment variables
# Format: (name, description, required_in_dev)
REQUIRED_ENV_VARS = [
    ("DATABASE_URL", "PostgreSQL connection string", True),
    ("SLACK_WEBHOOK_URL", "Slack incoming webhook URL", True),
    ("SCHEDULER_TIMEZONE", "Timezone for notification times (defaults to UTC)", False),
]


def check_required_env_vars() -> tuple[bool, list[str]]:
    """
    Check that required environment variables are set.

    Returns:
        (all_ok, warnings): Tuple of success flag and list of warning messages
    """
    warnings = []
    errors = []
    in_dev = is_dev_mode()

    for name, description, required_in_dev in REQUIRED_ENV_VARS:
        value = os.environ.get(name)

        if not value:
            if is_production() and required_in_dev:
                errors.append(f"  ✗ {name}: Not set ({description})")
            elif required_in_dev or not in_dev:
                warnings.append(f"  ⚠ {name}: Not set ({description})")

    if errors:
        for error in errors:
            print(error)
        return False, warnings

    return True, warnings

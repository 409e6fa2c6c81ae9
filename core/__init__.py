"""
Core business logic - independent of the HTTP layer.
Used by the web API, the CLI in main.py and the Alembic environment.
"""

# Database (SQLAlchemy)
from .database import get_connection, get_transaction, get_engine, close_engine, check_connection

# Constants
from .constants import DAY_NAMES, DEFAULT_TEST_MESSAGE

# Enums
from .enums import DeliveryStatus

__all__ = [
    # Database (SQLAlchemy)
    'get_connection', 'get_transaction', 'get_engine', 'close_engine', 'check_connection',
    # Constants
    'DAY_NAMES', 'DEFAULT_TEST_MESSAGE',
    # Enums
    'DeliveryStatus',
]

"""SQLAlchemy enum definitions for the database schema."""

import enum

from sqlalchemy import Enum as SQLEnum


class DeliveryStatus(str, enum.Enum):
    sent = "sent"
    failed = "failed"


# References the PostgreSQL type created by migration 001 (create_type=False)
delivery_status_enum = SQLEnum(
    DeliveryStatus, name="delivery_status", create_type=False, native_enum=True
)

"""SQLAlchemy Core table definitions for the database schema."""

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    Index,
    Integer,
    MetaData,
    Table,
    Text,
    func,
)
from sqlalchemy.dialects.postgresql import TIMESTAMP

from .enums import delivery_status_enum

# Naming convention for constraints (helps Alembic generate better names)
convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}
metadata = MetaData(naming_convention=convention)


# =====================================================
# 1. NOTIFICATIONS
# =====================================================
notifications = Table(
    "notifications",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("message", Text, nullable=False),
    Column("day_of_week", Integer, nullable=False),  # 0 = Sunday ... 6 = Saturday
    Column("time", Text, nullable=False),  # "HH:MM", scheduler timezone
    Column("is_active", Boolean, nullable=False, server_default="true"),
    Column("created_at", TIMESTAMP(timezone=True), server_default=func.now()),
    Column("updated_at", TIMESTAMP(timezone=True), server_default=func.now()),
    CheckConstraint("day_of_week BETWEEN 0 AND 6", name="day_of_week_range"),
    CheckConstraint("length(message) > 0", name="message_not_empty"),
    Index("idx_notifications_is_active", "is_active"),
    Index("idx_notifications_day_of_week", "day_of_week"),
)


# =====================================================
# 2. NOTIFICATION_LOGS
# =====================================================
# No foreign key: log rows outlive deleted notifications.
notification_logs = Table(
    "notification_logs",
    metadata,
    Column("log_id", Integer, primary_key=True, autoincrement=True),
    Column("notification_id", Integer, nullable=False),
    Column("status", delivery_status_enum, nullable=False),
    Column("error_message", Text),  # Why it failed (if applicable)
    Column("sent_at", TIMESTAMP(timezone=True), server_default=func.now()),
    Index("idx_notification_logs_notification_id", "notification_id"),
    Index("idx_notification_logs_sent_at", "sent_at"),
)

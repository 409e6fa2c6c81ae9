"""Create notifications and notification_logs tables.

Revision ID: 001
Revises:
Create Date: 2024-12-08

notification_logs has no foreign key to notifications: delivery history is
kept after a notification is deleted.
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Create the enum type
    op.execute("CREATE TYPE delivery_status AS ENUM ('sent', 'failed')")

    op.create_table(
        "notifications",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("day_of_week", sa.Integer(), nullable=False),
        sa.Column("time", sa.Text(), nullable=False),
        sa.Column(
            "is_active", sa.Boolean(), server_default=sa.text("true"), nullable=False
        ),
        sa.Column(
            "created_at",
            postgresql.TIMESTAMP(timezone=True),
            server_default=sa.text("now()"),
            nullable=True,
        ),
        sa.Column(
            "updated_at",
            postgresql.TIMESTAMP(timezone=True),
            server_default=sa.text("now()"),
            nullable=True,
        ),
        sa.CheckConstraint(
            "day_of_week BETWEEN 0 AND 6",
            name=op.f("ck_notifications_day_of_week_range"),
        ),
        sa.CheckConstraint(
            "length(message) > 0",
            name=op.f("ck_notifications_message_not_empty"),
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_notifications")),
    )
    op.create_index(
        "idx_notifications_is_active", "notifications", ["is_active"], unique=False
    )
    op.create_index(
        "idx_notifications_day_of_week", "notifications", ["day_of_week"], unique=False
    )

    op.create_table(
        "notification_logs",
        sa.Column("log_id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("notification_id", sa.Integer(), nullable=False),
        sa.Column(
            "status",
            postgresql.ENUM("sent", "failed", name="delivery_status", create_type=False),
            nullable=False,
        ),
        sa.Column("error_message", sa.Text(), nullable=True),
        sa.Column(
            "sent_at",
            postgresql.TIMESTAMP(timezone=True),
            server_default=sa.text("now()"),
            nullable=True,
        ),
        sa.PrimaryKeyConstraint("log_id", name=op.f("pk_notification_logs")),
    )
    op.create_index(
        "idx_notification_logs_notification_id",
        "notification_logs",
        ["notification_id"],
        unique=False,
    )
    op.create_index(
        "idx_notification_logs_sent_at", "notification_logs", ["sent_at"], unique=False
    )


def downgrade() -> None:
    op.drop_index("idx_notification_logs_sent_at", table_name="notification_logs")
    op.drop_index(
        "idx_notification_logs_notification_id", table_name="notification_logs"
    )
    op.drop_table("notification_logs")
    op.drop_index("idx_notifications_day_of_week", table_name="notifications")
    op.drop_index("idx_notifications_is_active", table_name="notifications")
    op.drop_table("notifications")
    op.execute("DROP TYPE delivery_status")

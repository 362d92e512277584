"""Initial attendance ledger schema

Revision ID: 0001_initial
Revises:
Create Date: 2025-06-20 00:00:00
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "0001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

attendance_event_status = postgresql.ENUM(
    "CHECK_IN",
    "CHECK_OUT",
    name="attendance_event_status",
    create_type=False,
)
attendance_event_source = postgresql.ENUM(
    "SELF_SERVICE",
    "MANUAL",
    name="attendance_event_source",
    create_type=False,
)


def upgrade() -> None:
    bind = op.get_bind()
    attendance_event_status.create(bind, checkfirst=True)
    attendance_event_source.create(bind, checkfirst=True)

    op.create_table(
        "attendance_events",
        sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
        sa.Column("employee_id", sa.String(length=64), nullable=False),
        sa.Column("status", attendance_event_status, nullable=False),
        sa.Column("ts_utc", sa.DateTime(timezone=True), nullable=False),
        sa.Column("work_date", sa.Date(), nullable=False),
        sa.Column(
            "source",
            attendance_event_source,
            nullable=False,
            server_default=sa.text("'SELF_SERVICE'"),
        ),
        sa.Column("location", sa.String(length=255), nullable=True),
        sa.Column("notes", sa.String(length=1000), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
    )
    op.create_index("ix_attendance_events_employee_id", "attendance_events", ["employee_id"], unique=False)
    op.create_index("ix_attendance_events_ts_utc", "attendance_events", ["ts_utc"], unique=False)
    op.create_index(
        "ix_attendance_events_employee_ts",
        "attendance_events",
        ["employee_id", "ts_utc"],
        unique=False,
    )

    op.create_table(
        "admin_notifications",
        sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
        sa.Column("employee_id", sa.String(length=64), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("is_read", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
    )
    op.create_index("ix_admin_notifications_employee_id", "admin_notifications", ["employee_id"], unique=False)
    op.create_index("ix_admin_notifications_is_read", "admin_notifications", ["is_read"], unique=False)

    op.create_table(
        "profile_change_logs",
        sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
        sa.Column("employee_id", sa.String(length=64), nullable=False),
        sa.Column("changed_field", sa.String(length=50), nullable=False),
        sa.Column("old_value", sa.Text(), nullable=True),
        sa.Column("new_value", sa.Text(), nullable=True),
        sa.Column(
            "changed_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
    )
    op.create_index("ix_profile_change_logs_employee_id", "profile_change_logs", ["employee_id"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_profile_change_logs_employee_id", table_name="profile_change_logs")
    op.drop_table("profile_change_logs")
    op.drop_index("ix_admin_notifications_is_read", table_name="admin_notifications")
    op.drop_index("ix_admin_notifications_employee_id", table_name="admin_notifications")
    op.drop_table("admin_notifications")
    op.drop_index("ix_attendance_events_employee_ts", table_name="attendance_events")
    op.drop_index("ix_attendance_events_ts_utc", table_name="attendance_events")
    op.drop_index("ix_attendance_events_employee_id", table_name="attendance_events")
    op.drop_table("attendance_events")

    bind = op.get_bind()
    attendance_event_source.drop(bind, checkfirst=True)
    attendance_event_status.drop(bind, checkfirst=True)

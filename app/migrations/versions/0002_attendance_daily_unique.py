"""Enforce one self-service check-in and check-out per employee day

Revision ID: 0002_attendance_daily_unique
Revises: 0001_initial
Create Date: 2025-06-24 10:30:00
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "0002_attendance_daily_unique"
down_revision: Union[str, None] = "0001_initial"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_index(
        "uq_attendance_events_self_service_daily",
        "attendance_events",
        ["employee_id", "work_date", "status"],
        unique=True,
        postgresql_where=sa.text("source = 'SELF_SERVICE'"),
        sqlite_where=sa.text("source = 'SELF_SERVICE'"),
    )


def downgrade() -> None:
    op.drop_index("uq_attendance_events_self_service_daily", table_name="attendance_events")

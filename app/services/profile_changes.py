from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.models import ProfileChangeLog

logger = logging.getLogger("app.profile_changes")


def build_change_message(change: ProfileChangeLog) -> str:
    return (
        f'Profile updated: {change.changed_field} changed from "{change.old_value}" '
        f'to "{change.new_value}" for employee {change.employee_id}'
    )


def record_profile_change(
    db: Session,
    *,
    employee_id: str,
    changed_field: str,
    old_value: str | None,
    new_value: str | None,
) -> ProfileChangeLog:
    change = ProfileChangeLog(
        employee_id=employee_id,
        changed_field=changed_field,
        old_value=old_value,
        new_value=new_value,
    )
    db.add(change)
    db.commit()
    db.refresh(change)
    logger.info(
        "profile_change_recorded",
        extra={
            "change_id": str(change.id),
            "employee_id": employee_id,
            "changed_field": changed_field,
        },
    )
    return change


def list_profile_changes(db: Session, *, employee_id: str | None = None) -> list[ProfileChangeLog]:
    stmt = select(ProfileChangeLog)
    if employee_id is not None:
        stmt = stmt.where(ProfileChangeLog.employee_id == employee_id)
    stmt = stmt.order_by(ProfileChangeLog.changed_at.desc(), ProfileChangeLog.id.desc())
    return list(db.scalars(stmt).all())

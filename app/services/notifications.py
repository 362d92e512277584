from __future__ import annotations

import logging
from collections.abc import Callable
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.db import SessionLocal
from app.errors import NOT_FOUND, ApiError
from app.models import AdminNotification

logger = logging.getLogger("app.notifications")


def create_notification(db: Session, *, employee_id: str, message: str) -> AdminNotification:
    notification = AdminNotification(employee_id=employee_id, message=message, is_read=False)
    db.add(notification)
    db.commit()
    db.refresh(notification)
    logger.info(
        "admin_notification_created",
        extra={"notification_id": str(notification.id), "employee_id": employee_id},
    )
    return notification


def list_notifications(db: Session, *, unread_only: bool = False) -> list[AdminNotification]:
    stmt = select(AdminNotification)
    if unread_only:
        stmt = stmt.where(AdminNotification.is_read.is_(False))
    stmt = stmt.order_by(AdminNotification.created_at.desc(), AdminNotification.id.desc())
    return list(db.scalars(stmt).all())


def mark_notification_read(db: Session, notification_id: UUID) -> AdminNotification:
    notification = db.get(AdminNotification, notification_id)
    if notification is None:
        raise ApiError(status_code=404, code=NOT_FOUND, message="Notification not found.")
    if not notification.is_read:
        notification.is_read = True
        db.commit()
        db.refresh(notification)
    return notification


def notify_admins_best_effort(
    employee_id: str,
    message: str,
    *,
    session_factory: Callable[[], Session] | None = None,
) -> None:
    """Write an admin notification in its own session, logging instead of raising."""
    factory = session_factory or SessionLocal
    db = factory()
    try:
        create_notification(db, employee_id=employee_id, message=message)
    except Exception:
        db.rollback()
        logger.exception(
            "admin_notification_dispatch_failed",
            extra={"employee_id": employee_id},
        )
    finally:
        db.close()

from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.db import get_db
from app.schemas import AdminNotificationRead
from app.security import CallerContext, require_admin
from app.services.notifications import list_notifications, mark_notification_read

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("", response_model=list[AdminNotificationRead])
def all_notifications(
    _admin: CallerContext = Depends(require_admin),
    db: Session = Depends(get_db),
) -> list[AdminNotificationRead]:
    return [AdminNotificationRead.model_validate(item) for item in list_notifications(db)]


@router.get("/unread", response_model=list[AdminNotificationRead])
def unread_notifications(
    _admin: CallerContext = Depends(require_admin),
    db: Session = Depends(get_db),
) -> list[AdminNotificationRead]:
    return [AdminNotificationRead.model_validate(item) for item in list_notifications(db, unread_only=True)]


@router.patch("/{notification_id}/read", response_model=AdminNotificationRead)
def mark_read(
    notification_id: UUID,
    _admin: CallerContext = Depends(require_admin),
    db: Session = Depends(get_db),
) -> AdminNotificationRead:
    return AdminNotificationRead.model_validate(mark_notification_read(db, notification_id))

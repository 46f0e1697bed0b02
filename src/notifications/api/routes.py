"""Admin endpoints for the notification outbox."""

from typing import Literal

from fastapi import APIRouter, Query
from sqlalchemy import select

from identity.api.dependencies import AdminUser, DbSession
from notifications.api.schemas import NotificationListResponse, NotificationResponse
from notifications.notification.notification import Notification
from shared.errors import NotFound

router = APIRouter(prefix="/admin/notifications", tags=["admin"])


@router.get("", response_model=NotificationListResponse)
def list_notifications(
    admin: AdminUser,
    db: DbSession,
    status: Literal["Pending", "Sent", "Failed"] | None = None,
    limit: int = Query(50, ge=1, le=200),
) -> NotificationListResponse:
    query = select(Notification).order_by(Notification.created_at.desc(), Notification.id.desc()).limit(limit)
    if status:
        query = query.where(Notification.status == status)
    items = db.scalars(query).all()
    return NotificationListResponse(items=[NotificationResponse.model_validate(n) for n in items])


@router.post("/{notification_id}/retry", response_model=NotificationResponse)
def retry_notification(notification_id: int, admin: AdminUser, db: DbSession) -> NotificationResponse:
    notification = db.get(Notification, notification_id)
    if notification is None:
        raise NotFound(f"Notification {notification_id} not found")
    notification.retry()
    db.commit()
    return NotificationResponse.model_validate(notification)

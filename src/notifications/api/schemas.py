"""Pydantic response schemas for the Notifications API."""

from datetime import datetime

from pydantic import BaseModel


class NotificationResponse(BaseModel):
    model_config = {"from_attributes": True}

    id: int
    notification_type: str
    channel: str
    recipient: str
    subject: str
    status: str
    attempts: int
    last_error: str | None = None
    created_at: datetime
    sent_at: datetime | None = None


class NotificationListResponse(BaseModel):
    items: list[NotificationResponse]

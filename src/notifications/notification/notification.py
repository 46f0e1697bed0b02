"""Notification outbox — one row per message to send.

Rows are inserted in the same transaction as the business change that
triggered them (an order placed, a status change) and sent later by
``notifications.notification.dispatch.dispatch_pending``.

State Machine:
    PENDING → SENT
    PENDING → PENDING (failed attempt, retried)
    PENDING → FAILED (attempts exhausted)
    FAILED → PENDING (manual retry)
"""

from datetime import datetime
from enum import Enum

import structlog
from sqlalchemy import JSON, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, Session, mapped_column

from shared.db import Base, utcnow
from shared.errors import InvalidTransition

logger = structlog.get_logger(__name__)


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class NotificationType(Enum):
    WELCOME = "Welcome"
    ORDER_CONFIRMATION = "OrderConfirmation"
    ORDER_STATUS_UPDATE = "OrderStatusUpdate"


class NotificationChannel(Enum):
    EMAIL = "Email"


class NotificationStatus(Enum):
    PENDING = "Pending"
    SENT = "Sent"
    FAILED = "Failed"


# ---------------------------------------------------------------------------
# Model
# ---------------------------------------------------------------------------
class Notification(Base):
    __tablename__ = "notifications"
    __table_args__ = (Index("ix_notifications_status_created", "status", "created_at"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    notification_type: Mapped[str] = mapped_column(String(40))
    channel: Mapped[str] = mapped_column(String(16), default=NotificationChannel.EMAIL.value)
    recipient: Mapped[str] = mapped_column(String(254))
    subject: Mapped[str] = mapped_column(String(200))
    body: Mapped[str] = mapped_column(Text)
    context: Mapped[dict] = mapped_column(JSON, default=dict)
    status: Mapped[str] = mapped_column(String(16), default=NotificationStatus.PENDING.value)
    attempts: Mapped[int] = mapped_column(Integer, default=0)
    last_error: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(default=utcnow)
    sent_at: Mapped[datetime | None] = mapped_column(nullable=True)

    def mark_sent(self) -> None:
        self._require_pending()
        self.attempts += 1
        self.status = NotificationStatus.SENT.value
        self.sent_at = utcnow()
        self.last_error = None

    def record_failure(self, reason: str, *, max_attempts: int) -> None:
        """Count a failed attempt; give up once ``max_attempts`` is reached."""
        self._require_pending()
        self.attempts += 1
        self.last_error = reason
        if self.attempts >= max_attempts:
            self.status = NotificationStatus.FAILED.value

    def retry(self) -> None:
        if self.status != NotificationStatus.FAILED.value:
            raise InvalidTransition(f"Notification {self.id} is {self.status}, only Failed notifications can be retried")
        self.status = NotificationStatus.PENDING.value
        self.attempts = 0

    def _require_pending(self) -> None:
        if self.status != NotificationStatus.PENDING.value:
            raise InvalidTransition(f"Notification {self.id} is {self.status}, not Pending")


def enqueue_notification(
    session: Session,
    notification_type: NotificationType,
    recipient: str,
    context: dict,
) -> Notification:
    """Render the template for ``notification_type`` and add a pending row."""
    from notifications.templates import get_template

    template = get_template(notification_type.value)
    content = template.render(context)
    notification = Notification(
        notification_type=notification_type.value,
        channel=template.default_channels[0],
        recipient=recipient,
        subject=content["subject"],
        body=content["body"],
        context=context,
    )
    session.add(notification)
    logger.debug("notification_enqueued", notification_type=notification_type.value, recipient=recipient)
    return notification

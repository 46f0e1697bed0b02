"""Outbox dispatch — sends pending notifications through a channel adapter.

Run from the management CLI (``manage.py dispatch-notifications``); there is
no background worker inside the web process.
"""

from dataclasses import dataclass

import structlog
from sqlalchemy import select

from notifications.channel import EmailDeliveryError, EmailPort, get_channel
from notifications.notification.notification import Notification, NotificationStatus
from shared.db import Database

logger = structlog.get_logger(__name__)

DEFAULT_MAX_ATTEMPTS = 3


@dataclass
class DispatchResult:
    sent: int = 0
    retrying: int = 0
    failed: int = 0


def dispatch_pending(
    database: Database,
    adapter: EmailPort | None = None,
    *,
    limit: int = 100,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
) -> DispatchResult:
    """Send up to ``limit`` pending notifications, oldest first.

    Each notification is claimed, sent and recorded in its own transaction,
    so an outcome is committed as soon as the channel returns and a crash
    half way through never resends what already went out.
    """
    result = DispatchResult()

    with database.session() as session:
        pending_ids = session.scalars(
            select(Notification.id)
            .where(Notification.status == NotificationStatus.PENDING.value)
            .order_by(Notification.created_at, Notification.id)
            .limit(limit)
        ).all()

    for notification_id in pending_ids:
        with database.transaction() as session:
            notification = session.scalars(
                select(Notification)
                .where(
                    Notification.id == notification_id,
                    Notification.status == NotificationStatus.PENDING.value,
                )
                .with_for_update(skip_locked=True)
            ).first()
            if notification is None:
                # Sent or claimed by another dispatcher since the listing
                continue
            _deliver(notification, adapter or get_channel(notification.channel), max_attempts, result)

    logger.info("notifications_dispatched", sent=result.sent, retrying=result.retrying, failed=result.failed)
    return result


def _deliver(notification: Notification, channel: EmailPort, max_attempts: int, result: DispatchResult) -> None:
    try:
        channel.send(notification.recipient, notification.subject, notification.body)
    except EmailDeliveryError as exc:
        reason = str(exc)
    except Exception as exc:
        logger.exception("notification_channel_error", notification_id=notification.id)
        reason = f"{type(exc).__name__}: {exc}"
    else:
        notification.mark_sent()
        result.sent += 1
        return

    notification.record_failure(reason, max_attempts=max_attempts)
    if notification.status == NotificationStatus.FAILED.value:
        result.failed += 1
        logger.error("notification_failed", notification_id=notification.id, error=reason)
    else:
        result.retrying += 1
        logger.warning(
            "notification_attempt_failed",
            notification_id=notification.id,
            attempts=notification.attempts,
            error=reason,
        )

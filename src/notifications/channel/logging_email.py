"""Email adapter that writes messages to the log instead of delivering them."""

from uuid import uuid4

import structlog

from notifications.channel.email_port import EmailPort

logger = structlog.get_logger(__name__)


class LoggingEmailAdapter(EmailPort):
    def send(self, to: str, subject: str, body: str) -> str:
        message_id = f"email-{uuid4().hex[:12]}"
        logger.info("email_logged", message_id=message_id, to=to, subject=subject)
        return message_id

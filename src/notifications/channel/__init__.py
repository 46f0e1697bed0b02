"""Channel adapter registry.

Real delivery is outside this service; the default email adapter only logs.
"""

from notifications.channel.email_port import EmailDeliveryError, EmailPort
from notifications.channel.logging_email import LoggingEmailAdapter
from notifications.notification.notification import NotificationChannel

_channel_instances: dict[str, EmailPort] = {}


def get_channel(channel_type: str) -> EmailPort:
    """Return the configured adapter for ``channel_type`` (one per type)."""
    if channel_type not in _channel_instances:
        if channel_type == NotificationChannel.EMAIL.value:
            _channel_instances[channel_type] = LoggingEmailAdapter()
        else:
            raise ValueError(f"Unknown channel type: {channel_type}")

    return _channel_instances[channel_type]


__all__ = ["EmailDeliveryError", "EmailPort", "get_channel"]

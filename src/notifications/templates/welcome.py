"""Welcome notification template — sent when a customer registers."""

from notifications.notification.notification import (
    NotificationChannel,
    NotificationType,
)


class WelcomeTemplate:
    notification_type = NotificationType.WELCOME.value
    default_channels = [NotificationChannel.EMAIL.value]

    @staticmethod
    def render(context: dict) -> dict:
        name = context.get("name") or "there"
        return {
            "subject": f"Welcome to Maison, {name}",
            "body": (
                f"Dear {name},\n\n"
                "Thank you for creating an account with Maison.\n\n"
                "Your wishlist, cart and orders now follow you on every device.\n\n"
                "With our compliments,\n"
                "The Maison Team"
            ),
        }

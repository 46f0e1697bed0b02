"""Order status template — sent when an admin moves an order along."""

from notifications.notification.notification import (
    NotificationChannel,
    NotificationType,
)

_HEADLINES = {
    "confirmed": "has been confirmed and is being prepared",
    "shipped": "is on its way",
    "delivered": "has been delivered",
    "cancelled": "has been cancelled",
}


class OrderStatusUpdateTemplate:
    notification_type = NotificationType.ORDER_STATUS_UPDATE.value
    default_channels = [NotificationChannel.EMAIL.value]

    @staticmethod
    def render(context: dict) -> dict:
        order_code = context.get("order_code", "N/A")
        status = context.get("status", "updated")
        headline = _HEADLINES.get(status, f"is now {status}")
        body = f"Your order #{order_code} {headline}.\n\n"
        if status == "cancelled":
            body += "If payment was captured, a refund will be processed automatically.\n\n"
        body += "If you have questions, please contact our client services team."
        return {
            "subject": f"Order #{order_code}: {status.capitalize()}",
            "body": body,
        }

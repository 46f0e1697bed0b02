"""Order confirmation template — sent when an order is placed."""

from notifications.notification.notification import (
    NotificationChannel,
    NotificationType,
)


class OrderConfirmationTemplate:
    notification_type = NotificationType.ORDER_CONFIRMATION.value
    default_channels = [NotificationChannel.EMAIL.value]

    @staticmethod
    def render(context: dict) -> dict:
        order_code = context.get("order_code", "N/A")
        total = context.get("total", "0.00")
        currency = context.get("currency", "USD")
        lines = context.get("lines", [])
        summary = "\n".join(
            f"  {line['quantity']} x {line['product_name']} @ {currency} {line['unit_price']}" for line in lines
        )
        return {
            "subject": f"Order #{order_code} Confirmed",
            "body": (
                f"Your order #{order_code} has been placed.\n\n"
                f"{summary}\n\n"
                f"Order Total: {currency} {total}\n\n"
                "We'll notify you once your order ships.\n\n"
                "Thank you for shopping with Maison."
            ),
        }

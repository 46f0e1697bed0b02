"""Tests for notification templates and the template registry."""

import pytest
from notifications.notification.notification import Notification, NotificationStatus, NotificationType
from notifications.templates import TEMPLATE_REGISTRY, get_template
from shared.errors import InvalidTransition


class TestRegistry:
    def test_every_type_has_a_template(self):
        assert set(TEMPLATE_REGISTRY) == {t.value for t in NotificationType}

    def test_every_template_defaults_to_email(self):
        for template in TEMPLATE_REGISTRY.values():
            assert template.default_channels == ["Email"]

    def test_unknown_type(self):
        with pytest.raises(ValueError):
            get_template("Newsletter")


class TestRendering:
    def test_order_confirmation_lists_lines_and_total(self):
        content = get_template("OrderConfirmation").render(
            {
                "order_code": "482913",
                "currency": "USD",
                "total": "8400.00",
                "lines": [{"product_id": "P1", "product_name": "Shoulder Bag", "quantity": 2, "unit_price": "4200.00"}],
            }
        )
        assert content["subject"] == "Order #482913 Confirmed"
        assert "2 x Shoulder Bag @ USD 4200.00" in content["body"]
        assert "Order Total: USD 8400.00" in content["body"]

    def test_welcome_uses_the_name(self):
        content = get_template("Welcome").render({"name": "Claire"})
        assert content["subject"] == "Welcome to Maison, Claire"

    def test_welcome_without_a_name(self):
        assert "Dear there" in get_template("Welcome").render({})["body"]

    @pytest.mark.parametrize(
        "status, phrase",
        [("shipped", "is on its way"), ("cancelled", "has been cancelled"), ("returned", "is now returned")],
    )
    def test_status_update_headline(self, status, phrase):
        content = get_template("OrderStatusUpdate").render({"order_code": "482913", "status": status})
        assert phrase in content["body"]
        assert content["subject"] == f"Order #482913: {status.capitalize()}"


class TestNotificationStates:
    def _pending(self):
        return Notification(status=NotificationStatus.PENDING.value, attempts=0)

    def test_mark_sent(self):
        notification = self._pending()
        notification.mark_sent()
        assert notification.status == "Sent"
        assert notification.attempts == 1
        assert notification.sent_at is not None

    def test_failures_keep_it_pending_until_the_limit(self):
        notification = self._pending()
        notification.record_failure("mailbox full", max_attempts=2)
        assert notification.status == "Pending"
        assert notification.last_error == "mailbox full"

        notification.record_failure("mailbox full", max_attempts=2)
        assert notification.status == "Failed"
        assert notification.attempts == 2

    def test_retry_resets_a_failed_notification(self):
        notification = Notification(status=NotificationStatus.FAILED.value, attempts=3)
        notification.retry()
        assert notification.status == "Pending"
        assert notification.attempts == 0

    def test_only_failed_notifications_can_be_retried(self):
        with pytest.raises(InvalidTransition):
            self._pending().retry()

    def test_sent_notifications_cannot_fail(self):
        notification = Notification(status=NotificationStatus.SENT.value, attempts=1)
        with pytest.raises(InvalidTransition):
            notification.record_failure("late bounce", max_attempts=3)

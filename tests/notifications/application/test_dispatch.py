"""Tests for queuing notifications and dispatching the outbox."""

import pytest
from notifications.channel import get_channel
from notifications.channel.fake_email import FakeEmailAdapter
from notifications.channel.logging_email import LoggingEmailAdapter
from notifications.notification.dispatch import dispatch_pending
from notifications.notification.notification import Notification, NotificationType, enqueue_notification


@pytest.fixture()
def queued(database):
    with database.transaction() as s:
        enqueue_notification(s, NotificationType.WELCOME, "claire@example.com", {"name": "Claire"})
        enqueue_notification(s, NotificationType.WELCOME, "marc@example.com", {"name": "Marc"})


def _statuses(database):
    with database.session() as s:
        return sorted((n.recipient, n.status, n.attempts) for n in s.query(Notification))


class TestEnqueue:
    def test_renders_the_template_into_the_row(self, session):
        notification = enqueue_notification(
            session, NotificationType.ORDER_STATUS_UPDATE, "claire@example.com", {"order_code": "482913", "status": "shipped"}
        )
        session.flush()

        assert notification.status == "Pending"
        assert notification.channel == "Email"
        assert notification.subject == "Order #482913: Shipped"
        assert notification.context == {"order_code": "482913", "status": "shipped"}


class TestDispatch:
    def test_sends_pending_notifications(self, database, queued):
        adapter = FakeEmailAdapter()

        result = dispatch_pending(database, adapter)

        assert (result.sent, result.retrying, result.failed) == (2, 0, 0)
        assert sorted(email["to"] for email in adapter.sent_emails) == ["claire@example.com", "marc@example.com"]
        assert _statuses(database) == [("claire@example.com", "Sent", 1), ("marc@example.com", "Sent", 1)]

    def test_sent_notifications_are_not_sent_twice(self, database, queued):
        dispatch_pending(database, FakeEmailAdapter())
        adapter = FakeEmailAdapter()

        assert dispatch_pending(database, adapter).sent == 0
        assert adapter.sent_emails == []

    def test_failed_attempt_is_retried_later(self, database, queued):
        result = dispatch_pending(database, FakeEmailAdapter(should_succeed=False, failure_reason="SMTP timeout"))

        assert result.retrying == 2
        assert _statuses(database) == [("claire@example.com", "Pending", 1), ("marc@example.com", "Pending", 1)]

    def test_gives_up_after_max_attempts(self, database, queued):
        failing = FakeEmailAdapter(should_succeed=False)
        dispatch_pending(database, failing, max_attempts=2)
        result = dispatch_pending(database, failing, max_attempts=2)

        assert result.failed == 2
        with database.session() as s:
            assert {n.last_error for n in s.query(Notification)} == {"Email delivery failed"}
        assert dispatch_pending(database, FakeEmailAdapter()).sent == 0

    def test_unexpected_channel_error_keeps_earlier_deliveries(self, database, queued):
        class FlakyAdapter(FakeEmailAdapter):
            def send(self, to, subject, body):
                if self.sent_emails:
                    raise RuntimeError("connection reset by peer")
                return super().send(to, subject, body)

        adapter = FlakyAdapter()
        result = dispatch_pending(database, adapter)

        assert (result.sent, result.retrying, result.failed) == (1, 1, 0)
        assert [email["to"] for email in adapter.sent_emails] == ["claire@example.com"]
        assert _statuses(database) == [("claire@example.com", "Sent", 1), ("marc@example.com", "Pending", 1)]
        with database.session() as s:
            marc = s.query(Notification).filter_by(recipient="marc@example.com").one()
            assert marc.last_error == "RuntimeError: connection reset by peer"

        retry = FakeEmailAdapter()
        assert dispatch_pending(database, retry).sent == 1
        assert [email["to"] for email in retry.sent_emails] == ["marc@example.com"]

    def test_limit(self, database, queued):
        assert dispatch_pending(database, FakeEmailAdapter(), limit=1).sent == 1

    def test_default_channel_logs_instead_of_sending(self, database, queued):
        assert isinstance(get_channel("Email"), LoggingEmailAdapter)
        assert dispatch_pending(database).sent == 2

    def test_unknown_channel(self):
        with pytest.raises(ValueError):
            get_channel("Carrier pigeon")

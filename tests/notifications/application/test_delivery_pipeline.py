"""Application tests for DeliverNotification: preferences, DND and fan-out."""

import json
from datetime import UTC, datetime

import pytest
from notifications.channel import get_channel
from notifications.notification.delivery import DeliverNotification, deliver, plan_delivery
from notifications.notification.notification import Notification
from notifications.notification.queries import recount_unread, unread_count
from notifications.preference.management import UpdatePreferences
from notifications.preference.preference import NotificationPreference
from notifications.realtime.registry import get_registry
from protean import current_domain
from protean.exceptions import ValidationError

PREFERENCES = {
    "email": {"enabled": True, "frequency": "immediate"},
    "sms": {"enabled": False, "frequency": "immediate"},
    "push": {"enabled": True, "frequency": "immediate"},
    "in_app": {"enabled": True, "show_badge": True},
    "categories": {
        "orders": True,
        "payments": True,
        "websites": True,
        "messages": False,
        "support": True,
        "system": True,
    },
    "do_not_disturb": {"enabled": True, "start_time": "22:00", "end_time": "08:00"},
    "timezone": "UTC",
}


def _save_preferences(user_id, **changes):
    document = {**PREFERENCES, **changes}
    current_domain.process(UpdatePreferences(user_id=user_id, document=json.dumps(document)), asynchronous=False)


def _deliver(user_ids, category="orders", notification_type="order_created", occurred_at=None, **extra):
    return current_domain.process(
        DeliverNotification(
            user_ids=json.dumps(user_ids),
            category=category,
            notification_type=notification_type,
            title="New order received",
            message="You received a new order.",
            data=json.dumps({"order_id": "ord-001"}),
            occurred_at=occurred_at,
            **extra,
        ),
        asynchronous=False,
    )


def _notifications_for(user_id):
    repo = current_domain.repository_for(Notification)
    return repo._dao.query.filter(user_id=user_id).all().items


class TestDelivery:
    def test_creates_unread_notification_and_counts_it(self):
        ids = _deliver(["user-d1"])

        assert len(ids) == 1
        notification = current_domain.repository_for(Notification).get(ids[0])
        assert notification.status == "unread"
        assert notification.data_dict == {"order_id": "ord-001"}
        assert unread_count("user-d1") == 1
        assert recount_unread("user-d1") == 1

    def test_default_preferences_send_email_and_push(self):
        _deliver(["user-d1"], occurred_at=datetime(2024, 5, 1, 12, 0, tzinfo=UTC))

        assert len(get_channel("email").sent_emails) == 1
        assert len(get_channel("push").sent_pushes) == 1
        assert get_channel("sms").sent_messages == []

    def test_fan_out_to_many_users(self):
        ids = _deliver(["user-a", "user-b", "user-a", ""])
        assert len(ids) == 2
        assert unread_count("user-a") == 1
        assert unread_count("user-b") == 1

    def test_no_target_users(self):
        with pytest.raises(ValidationError):
            _deliver([])

    def test_unknown_category(self):
        with pytest.raises(ValidationError):
            _deliver(["user-d1"], category="billing")

    def test_unknown_type(self):
        with pytest.raises(ValidationError):
            _deliver(["user-d1"], notification_type="order_lost")

    def test_invalid_user_ids_json(self):
        with pytest.raises(ValidationError):
            current_domain.process(
                DeliverNotification(
                    user_ids="not json",
                    category="orders",
                    notification_type="order_created",
                    title="t",
                    message="m",
                ),
                asynchronous=False,
            )


class TestPreferences:
    def test_disabled_category_drops_notification(self):
        _save_preferences("user-p1")
        ids = _deliver(["user-p1"], category="messages", notification_type="message_received")

        assert ids == []
        assert _notifications_for("user-p1") == []
        assert unread_count("user-p1") == 0

    def test_disabled_in_app_drops_notification(self):
        _save_preferences("user-p2", in_app={"enabled": False, "show_badge": True})
        assert _deliver(["user-p2"]) == []

    def test_digest_frequency_is_not_sent_immediately(self):
        _save_preferences("user-p3", email={"enabled": True, "frequency": "daily_digest"})
        ids = _deliver(["user-p3"], occurred_at=datetime(2024, 5, 1, 12, 0, tzinfo=UTC))

        notification = current_domain.repository_for(Notification).get(ids[0])
        assert notification.channel_list == ["push"]
        assert get_channel("email").sent_emails == []

    def test_only_affected_user_is_filtered(self):
        _save_preferences("user-p4")
        ids = _deliver(["user-p4", "user-p5"], category="messages", notification_type="message_received")
        assert len(ids) == 1
        assert unread_count("user-p5") == 1


class TestDoNotDisturb:
    def test_push_suppressed_inside_window(self):
        _save_preferences("user-dnd")
        ids = _deliver(["user-dnd"], occurred_at=datetime(2024, 5, 1, 23, 30, tzinfo=UTC))

        notification = current_domain.repository_for(Notification).get(ids[0])
        assert notification.push_suppressed is True
        assert notification.channel_list == ["email"]
        assert get_channel("push").sent_pushes == []
        assert len(get_channel("email").sent_emails) == 1

    def test_push_sent_outside_window(self):
        _save_preferences("user-dnd")
        ids = _deliver(["user-dnd"], occurred_at=datetime(2024, 5, 1, 9, 0, tzinfo=UTC))

        notification = current_domain.repository_for(Notification).get(ids[0])
        assert notification.push_suppressed is False
        assert len(get_channel("push").sent_pushes) == 1

    def test_in_app_stored_and_published_during_dnd(self):
        _save_preferences("user-dnd")
        connection = get_registry().register("user-dnd")

        _deliver(["user-dnd"], occurred_at=datetime(2024, 5, 1, 23, 30, tzinfo=UTC))

        assert unread_count("user-dnd") == 1
        message = connection.mailbox.get_nowait()
        assert message["event"] == "new_notification"
        assert message["payload"]["push_suppressed"] is True


class TestPlanDelivery:
    def test_plan_with_defaults(self):
        pref = NotificationPreference.defaults_for("user-plan")
        plan = plan_delivery(pref, "orders", datetime(2024, 5, 1, 12, 0, tzinfo=UTC))
        assert plan.channels == ["email", "push"]
        assert plan.push_suppressed is False


class TestDirectDeliver:
    def test_deliver_function(self):
        ids = deliver(
            user_ids=["user-fn"],
            category="system",
            notification_type="system_announcement",
            title="Maintenance",
            message="Scheduled maintenance tonight.",
            priority="urgent",
        )
        notification = current_domain.repository_for(Notification).get(ids[0])
        assert notification.priority == "urgent"
        assert unread_count("user-fn") == 1

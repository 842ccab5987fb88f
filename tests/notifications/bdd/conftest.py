"""Shared BDD fixtures and step definitions for the Notifications domain."""

import json
from datetime import UTC, datetime, timedelta

import pytest
from notifications.channel import get_channel
from notifications.notification.archiving import ArchiveNotification
from notifications.notification.delivery import DeliverNotification
from notifications.notification.notification import Notification
from notifications.notification.queries import list_notifications, unread_count
from notifications.notification.reading import MarkAllNotificationsRead, MarkNotificationRead
from notifications.preference.management import UpdatePreferences
from notifications.preference.preference import NotificationPreference
from protean import current_domain
from pytest_bdd import given, parsers, then, when
from shared.exceptions import AuthorizationError

_TYPES = {
    "orders": "order_created",
    "payments": "payment_received",
    "messages": "message_received",
    "system": "system_announcement",
}


@pytest.fixture()
def error():
    """Container for captured errors."""
    return {"exc": None}


@pytest.fixture()
def delivered():
    """Ids of the notifications delivered during the scenario."""
    return []


def _deliver(user_id, category="orders"):
    return current_domain.process(
        DeliverNotification(
            user_ids=json.dumps([user_id]),
            category=category,
            notification_type=_TYPES[category],
            title=f"{category} update",
            message="Something happened.",
        ),
        asynchronous=False,
    )


def _save(user_id, change):
    document = NotificationPreference.defaults_for(user_id).to_document()
    change(document)
    current_domain.process(
        UpdatePreferences(user_id=user_id, document=json.dumps(document)),
        asynchronous=False,
    )


def _latest(user_id):
    return str(list_notifications(user_id)["items"][0].id)


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('user "{user_id}" has no notifications'))
def no_notifications(user_id):
    assert unread_count(user_id) == 0


@given(parsers.cfparse('user "{user_id}" has {count:d} unread notifications'))
@given(parsers.cfparse('user "{user_id}" has {count:d} unread notification'))
def some_notifications(user_id, count, delivered):
    for _ in range(count):
        delivered.extend(_deliver(user_id))


@given(parsers.cfparse('"{user_id}" has muted the "{category}" category'))
def muted_category(user_id, category):
    def change(document):
        document["categories"][category] = False

    _save(user_id, change)


@given(parsers.cfparse('"{user_id}" has disabled the "{channel}" channel'))
def disabled_channel(user_id, channel):
    def change(document):
        document[channel]["enabled"] = False

    _save(user_id, change)


@given(parsers.cfparse('"{user_id}" is in a do-not-disturb window'))
def inside_quiet_hours(user_id):
    now = datetime.now(UTC)

    def change(document):
        document["timezone"] = "UTC"
        document["do_not_disturb"] = {
            "enabled": True,
            "start_time": (now - timedelta(hours=1)).strftime("%H:%M"),
            "end_time": (now + timedelta(hours=1)).strftime("%H:%M"),
        }

    _save(user_id, change)


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when(parsers.cfparse('an "{category}" notification is delivered to "{user_id}"'))
@when(parsers.cfparse('a "{category}" notification is delivered to "{user_id}"'))
def deliver_notification(category, user_id, delivered):
    delivered.extend(_deliver(user_id, category))


@when(parsers.cfparse('"{user_id}" reads her latest notification'))
@when(parsers.cfparse('"{user_id}" reads her latest notification again'))
def read_latest(user_id):
    current_domain.process(
        MarkNotificationRead(notification_id=_latest(user_id), acting_user_id=user_id),
        asynchronous=False,
    )


@when(parsers.cfparse('"{user_id}" archives her latest notification'))
def archive_latest(user_id):
    current_domain.process(
        ArchiveNotification(notification_id=_latest(user_id), acting_user_id=user_id),
        asynchronous=False,
    )


@when(parsers.cfparse('"{user_id}" marks all notifications read'))
def read_all(user_id):
    current_domain.process(MarkAllNotificationsRead(user_id=user_id), asynchronous=False)


@when(parsers.cfparse("\"{user_id}\" reads alice's latest notification"))
def read_someone_elses(user_id, error):
    try:
        current_domain.process(
            MarkNotificationRead(notification_id=_latest("alice"), acting_user_id=user_id),
            asynchronous=False,
        )
    except AuthorizationError as exc:
        error["exc"] = exc


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('"{user_id}" has {count:d} unread notifications'))
@then(parsers.cfparse('"{user_id}" has {count:d} unread notification'))
def unread_is(user_id, count):
    assert unread_count(user_id) == count


@then(parsers.cfparse('"{user_id}" sees {count:d} notification in her inbox'))
def inbox_size(user_id, count):
    assert list_notifications(user_id)["total"] == count


@then(parsers.cfparse('an email was sent to "{user_id}"'))
def email_sent(user_id):
    assert any(e["to"] == user_id for e in get_channel("email").sent_emails)


@then(parsers.cfparse('no email was sent to "{user_id}"'))
def no_email(user_id):
    assert not any(e["to"] == user_id for e in get_channel("email").sent_emails)


@then(parsers.cfparse('no push was sent to "{user_id}"'))
def no_push(user_id):
    assert not any(p["user_id"] == user_id for p in get_channel("push").sent_pushes)


@then("the notification is flagged as push suppressed")
def push_suppressed(delivered):
    notification = current_domain.repository_for(Notification).get(delivered[-1])
    assert notification.push_suppressed is True


@then("the action is refused")
def refused(error):
    assert isinstance(error["exc"], AuthorizationError)

"""Application tests for read, read-all, archive and delete."""

import json

import pytest
from notifications.notification.archiving import ArchiveNotification
from notifications.notification.deletion import DeleteNotification
from notifications.notification.delivery import DeliverNotification
from notifications.notification.notification import Notification, NotificationStatus
from notifications.notification.queries import list_notifications, recount_unread, unread_count
from notifications.notification.reading import MarkAllNotificationsRead, MarkNotificationRead
from protean import current_domain
from protean.exceptions import ObjectNotFoundError, ValidationError
from shared.exceptions import AuthorizationError, InvalidStateTransition


def _deliver(user_id="user-l1", category="orders", notification_type="order_created"):
    return current_domain.process(
        DeliverNotification(
            user_ids=json.dumps([user_id]),
            category=category,
            notification_type=notification_type,
            title="Title",
            message="Message",
        ),
        asynchronous=False,
    )[0]


def _process(command):
    return current_domain.process(command, asynchronous=False)


def _assert_counter_consistent(user_id):
    assert unread_count(user_id) == recount_unread(user_id)


class TestMarkRead:
    def test_marks_read_and_decrements(self):
        notification_id = _deliver()
        status = _process(MarkNotificationRead(notification_id=notification_id, acting_user_id="user-l1"))

        assert status == NotificationStatus.READ.value
        assert unread_count("user-l1") == 0
        _assert_counter_consistent("user-l1")

    def test_is_idempotent(self):
        notification_id = _deliver()
        _deliver()
        for _ in range(3):
            _process(MarkNotificationRead(notification_id=notification_id, acting_user_id="user-l1"))

        assert unread_count("user-l1") == 1
        _assert_counter_consistent("user-l1")

    def test_other_users_notification(self):
        notification_id = _deliver()
        with pytest.raises(AuthorizationError):
            _process(MarkNotificationRead(notification_id=notification_id, acting_user_id="intruder"))
        assert unread_count("user-l1") == 1

    def test_unknown_notification(self):
        with pytest.raises(ObjectNotFoundError):
            _process(MarkNotificationRead(notification_id="missing", acting_user_id="user-l1"))

    def test_archived_cannot_be_read(self):
        notification_id = _deliver()
        _process(ArchiveNotification(notification_id=notification_id, acting_user_id="user-l1"))
        with pytest.raises(InvalidStateTransition):
            _process(MarkNotificationRead(notification_id=notification_id, acting_user_id="user-l1"))


class TestMarkAllRead:
    def test_reads_everything_and_resets_counter(self):
        for _ in range(3):
            _deliver()
        _deliver(user_id="user-other")

        updated = _process(MarkAllNotificationsRead(user_id="user-l1"))

        assert updated == 3
        assert unread_count("user-l1") == 0
        assert unread_count("user-other") == 1
        _assert_counter_consistent("user-l1")

    def test_nothing_to_read(self):
        assert _process(MarkAllNotificationsRead(user_id="user-empty")) == 0
        assert unread_count("user-empty") == 0


class TestArchive:
    def test_archiving_unread_decrements(self):
        notification_id = _deliver()
        status = _process(ArchiveNotification(notification_id=notification_id, acting_user_id="user-l1"))
        assert status == NotificationStatus.ARCHIVED.value
        assert unread_count("user-l1") == 0

    def test_archiving_read_keeps_counter(self):
        read_id = _deliver()
        _deliver()
        _process(MarkNotificationRead(notification_id=read_id, acting_user_id="user-l1"))
        _process(ArchiveNotification(notification_id=read_id, acting_user_id="user-l1"))
        assert unread_count("user-l1") == 1
        _assert_counter_consistent("user-l1")

    def test_archiving_twice(self):
        notification_id = _deliver()
        _process(ArchiveNotification(notification_id=notification_id, acting_user_id="user-l1"))
        _process(ArchiveNotification(notification_id=notification_id, acting_user_id="user-l1"))
        assert unread_count("user-l1") == 0

    def test_archived_hidden_from_default_listing(self):
        archived = _deliver()
        _deliver()
        _process(ArchiveNotification(notification_id=archived, acting_user_id="user-l1"))

        assert list_notifications("user-l1")["total"] == 1
        assert list_notifications("user-l1", status="archived")["total"] == 1


class TestDelete:
    def test_delete_unread(self):
        notification_id = _deliver()
        _process(DeleteNotification(notification_id=notification_id, acting_user_id="user-l1"))

        with pytest.raises(ObjectNotFoundError):
            current_domain.repository_for(Notification).get(notification_id)
        assert unread_count("user-l1") == 0
        _assert_counter_consistent("user-l1")

    def test_delete_read_keeps_counter(self):
        notification_id = _deliver()
        _deliver()
        _process(MarkNotificationRead(notification_id=notification_id, acting_user_id="user-l1"))
        _process(DeleteNotification(notification_id=notification_id, acting_user_id="user-l1"))
        assert unread_count("user-l1") == 1

    def test_delete_someone_elses(self):
        notification_id = _deliver()
        with pytest.raises(AuthorizationError):
            _process(DeleteNotification(notification_id=notification_id, acting_user_id="intruder"))


class TestListing:
    def test_filters(self):
        _deliver()
        _deliver(category="payments", notification_type="payment_received")

        assert list_notifications("user-l1", category="payments")["total"] == 1
        assert list_notifications("user-l1", notification_type="order_created")["total"] == 1
        assert list_notifications("user-l1", status="unread")["total"] == 2

    def test_newest_first(self):
        first = _deliver()
        second = _deliver()
        items = list_notifications("user-l1")["items"]
        assert [str(n.id) for n in items] == [second, first]

    def test_invalid_filters(self):
        with pytest.raises(ValidationError):
            list_notifications("user-l1", status="deleted")
        with pytest.raises(ValidationError):
            list_notifications("user-l1", limit=500)


class TestLargeInboxes:
    """More notifications than a single repository page holds."""

    COUNT = 105

    def _fill(self):
        return [_deliver() for _ in range(self.COUNT)]

    def test_read_all_covers_every_notification(self):
        self._fill()

        updated = _process(MarkAllNotificationsRead(user_id="user-l1"))

        assert updated == self.COUNT
        assert unread_count("user-l1") == 0
        assert recount_unread("user-l1") == 0

    def test_counter_matches_storage(self):
        self._fill()
        assert unread_count("user-l1") == self.COUNT
        _assert_counter_consistent("user-l1")

    def test_last_page_is_reachable(self):
        self._fill()

        page = list_notifications("user-l1", page=6, limit=20)

        assert page["total"] == self.COUNT
        assert len(page["items"]) == 5

    def test_delete_after_read_all_keeps_counter_consistent(self):
        ids = self._fill()
        _process(MarkAllNotificationsRead(user_id="user-l1"))
        fresh = _deliver()

        _process(DeleteNotification(notification_id=ids[0], acting_user_id="user-l1"))
        _process(DeleteNotification(notification_id=fresh, acting_user_id="user-l1"))

        assert unread_count("user-l1") == 0
        _assert_counter_consistent("user-l1")
        assert list_notifications("user-l1", limit=100)["total"] == self.COUNT - 1

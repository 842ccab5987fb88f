"""Quality review events reach Notifications users while they are connected."""

import json

from notifications.domain import notifications
from notifications.notification.queries import list_notifications, unread_count
from notifications.realtime.registry import get_registry
from protean import current_domain
from quality.check.assignment import AssignReviewer
from quality.check.creation import CreateQualityCheck
from quality.check.review import CompleteManualReview, StartManualReview
from quality.reviewer.management import RegisterReviewer

import review_relay


def _reviewed_check(verdict="approved", comments=None):
    current_domain.process(RegisterReviewer(user_id="rev-live", name="Reviewer"), asynchronous=False)
    check_id = current_domain.process(
        CreateQualityCheck(
            order_id="ord-live",
            website_id="web-live",
            submitted_by="pub-live",
            title="Autumn recipes",
            priority="medium",
            tags=json.dumps([]),
        ),
        asynchronous=False,
    )
    current_domain.process(AssignReviewer(quality_check_id=check_id), asynchronous=False)
    current_domain.process(StartManualReview(quality_check_id=check_id), asynchronous=False)
    current_domain.process(
        CompleteManualReview(quality_check_id=check_id, verdict=verdict, comments=comments),
        asynchronous=False,
    )
    return check_id


def _drain(connection):
    messages = []
    while not connection.mailbox.empty():
        messages.append(connection.mailbox.get_nowait())
    return messages


class TestReviewNotifications:
    def test_submitter_receives_verdict_live(self):
        connection = get_registry().register("pub-live")

        check_id = _reviewed_check(comments="Lovely")

        messages = _drain(connection)
        assert len(messages) == 1
        payload = messages[0]["payload"]
        assert messages[0]["event"] == "new_notification"
        assert payload["type"] == "quality_check_passed"
        assert payload["data"]["quality_check_id"] == check_id
        assert payload["message"].endswith("Lovely")

    def test_reviewer_receives_assignment_live(self):
        connection = get_registry().register("rev-live")

        check_id = _reviewed_check()

        messages = _drain(connection)
        assert [m["payload"]["type"] for m in messages] == ["quality_check_assigned"]
        assert messages[0]["payload"]["action_url"] == f"/quality/checks/{check_id}"

    def test_notifications_are_stored_in_notifications_domain(self):
        _reviewed_check(verdict="needs_revision", comments="Add sources")

        with notifications.domain_context():
            assert unread_count("pub-live") == 1
            page = list_notifications("pub-live")
            assert page["items"][0].notification_type == "quality_revision_requested"

    def test_disabled_relay_leaves_notifications_untouched(self):
        review_relay.disable()
        connection = get_registry().register("pub-live")

        _reviewed_check()

        assert connection.mailbox.empty()
        with notifications.domain_context():
            assert unread_count("pub-live") == 0

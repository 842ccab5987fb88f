"""Shared BDD fixtures and step definitions for the Quality domain."""

import pytest
from pytest_bdd import given, parsers, then, when
from quality.check.events import (
    CommentAdded,
    ManualReviewCompleted,
    ManualReviewStarted,
    ReviewerAssigned,
    RevisionSubmitted,
)
from quality.check.quality_check import QualityCheck
from shared.exceptions import InvalidStateTransition

_QUALITY_EVENT_CLASSES = {
    "ReviewerAssigned": ReviewerAssigned,
    "ManualReviewStarted": ManualReviewStarted,
    "ManualReviewCompleted": ManualReviewCompleted,
    "CommentAdded": CommentAdded,
    "RevisionSubmitted": RevisionSubmitted,
}


@pytest.fixture()
def error():
    """Container for captured workflow errors."""
    return {"exc": None}


def _new_check():
    check = QualityCheck.create(order_id="ord-bdd", website_id="web-bdd", submitted_by="pub-bdd")
    check._events.clear()
    return check


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given("a pending quality check", target_fixture="check")
def pending_check():
    return _new_check()


@given(parsers.cfparse('a check under review by "{reviewer_id}"'), target_fixture="check")
def check_under_review(reviewer_id):
    check = _new_check()
    check.assign(reviewer_id)
    check._events.clear()
    return check


@given("a passed quality check", target_fixture="check")
def passed_check():
    check = _new_check()
    check.start_review()
    check.complete_review("approved")
    check._events.clear()
    return check


@given("a check waiting for a revision", target_fixture="check")
def check_waiting_for_revision():
    check = _new_check()
    check.assign("rev-bdd")
    check.start_review()
    check.complete_review("needs_revision", "Too short")
    check._events.clear()
    return check


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when(parsers.cfparse('reviewer "{reviewer_id}" is assigned'))
def assign_reviewer(check, reviewer_id):
    check.assign(reviewer_id)


@when("the review is started")
def start_review(check, error):
    try:
        check.start_review()
    except InvalidStateTransition as exc:
        error["exc"] = exc


@when(parsers.cfparse('the review is completed with verdict "{verdict}"'))
def complete_review(check, verdict):
    check.complete_review(verdict, "Reviewed")


@when(parsers.cfparse('"{user_id}" comments "{text}"'))
def add_comment(check, user_id, text):
    check.add_comment(user_id, text)


@when(parsers.cfparse('"{user_id}" submits a revision'))
def submit_revision(check, user_id, error):
    try:
        check.submit_revision(user_id, "Updated draft")
    except InvalidStateTransition as exc:
        error["exc"] = exc


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the check status is "{status}"'))
def check_status_is(check, status):
    assert check.status == status


@then(parsers.cfparse("a {event_type} event is raised"))
def event_raised(check, event_type):
    event_cls = _QUALITY_EVENT_CLASSES[event_type]
    assert any(
        isinstance(e, event_cls) for e in check._events
    ), f"No {event_type} event found. Events: {[type(e).__name__ for e in check._events]}"


@then("the action fails with an invalid transition")
def action_failed(error):
    assert isinstance(error["exc"], InvalidStateTransition)


@then(parsers.cfparse("the check has {count:d} comment"))
def comment_count(check, count):
    assert len(check.comments) == count


@then(parsers.cfparse("the latest revision number is {number:d}"))
def latest_revision(check, number):
    assert check.ordered_revisions()[-1].revision_number == number

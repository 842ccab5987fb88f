"""Tests for the Reviewer roster aggregate."""

import pytest
from protean.exceptions import ValidationError
from quality.reviewer.events import ReviewerAvailabilityChanged, ReviewerRegistered
from quality.reviewer.reviewer import Reviewer


class TestReviewer:
    def test_register(self):
        reviewer = Reviewer.register(user_id="rev-001", name="Ada")
        assert reviewer.is_active is True
        assert reviewer.active_reviews == 0
        assert reviewer.idle_since is not None
        assert isinstance(reviewer._events[0], ReviewerRegistered)

    def test_take_and_release_assignment(self):
        reviewer = Reviewer.register(user_id="rev-001", name="Ada")
        idle_since = reviewer.idle_since

        reviewer.take_assignment()
        reviewer.take_assignment()
        assert reviewer.active_reviews == 2

        reviewer.release_assignment()
        assert reviewer.active_reviews == 1
        assert reviewer.idle_since == idle_since

        reviewer.release_assignment()
        assert reviewer.active_reviews == 0
        assert reviewer.idle_since >= idle_since

    def test_release_without_load_is_noop(self):
        reviewer = Reviewer.register(user_id="rev-001", name="Ada")
        reviewer.release_assignment()
        assert reviewer.active_reviews == 0

    def test_negative_load_rejected(self):
        reviewer = Reviewer.register(user_id="rev-001", name="Ada")
        with pytest.raises(ValidationError):
            reviewer.active_reviews = -1

    def test_availability_change_raises_event_once(self):
        reviewer = Reviewer.register(user_id="rev-001", name="Ada")
        reviewer._events.clear()

        reviewer.set_availability(False)
        reviewer.set_availability(False)

        assert reviewer.is_active is False
        assert len(reviewer._events) == 1
        assert isinstance(reviewer._events[0], ReviewerAvailabilityChanged)

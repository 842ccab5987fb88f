"""Application tests for quality check listing, filtering and paging."""

from datetime import UTC, datetime, timedelta

import pytest
from protean import current_domain
from protean.exceptions import ValidationError
from quality.check.assignment import AssignReviewer
from quality.check.creation import CreateQualityCheck
from quality.check.queries import list_my_checks, list_overdue_checks, list_quality_checks
from quality.check.review import CompleteManualReview, StartManualReview
from quality.reviewer.management import RegisterReviewer


def _create(order_id, priority="medium", deadline=None, submitted_by="pub-q"):
    return current_domain.process(
        CreateQualityCheck(
            order_id=order_id,
            website_id="web-q",
            submitted_by=submitted_by,
            priority=priority,
            deadline=deadline,
        ),
        asynchronous=False,
    )


class TestListQualityChecks:
    def test_filters_by_status_and_priority(self):
        _create("ord-1", priority="low")
        urgent = _create("ord-2", priority="urgent")
        current_domain.process(StartManualReview(quality_check_id=urgent), asynchronous=False)

        in_progress = list_quality_checks(status="in_progress")
        assert [str(c.id) for c in in_progress["items"]] == [urgent]

        low = list_quality_checks(priority="low")
        assert low["total"] == 1

    def test_filters_by_submitter(self):
        _create("ord-1", submitted_by="pub-a")
        _create("ord-2", submitted_by="pub-b")
        result = list_quality_checks(submitted_by="pub-a")
        assert [c.submitted_by for c in result["items"]] == ["pub-a"]

    def test_sort_by_priority(self):
        for order_id, priority in (("ord-1", "medium"), ("ord-2", "urgent"), ("ord-3", "low")):
            _create(order_id, priority=priority)

        desc = list_quality_checks(sort_by="priority", sort_order="desc")
        assert [c.priority for c in desc["items"]] == ["urgent", "medium", "low"]

        asc = list_quality_checks(sort_by="priority", sort_order="asc")
        assert [c.priority for c in asc["items"]] == ["low", "medium", "urgent"]

    def test_missing_deadline_sorts_first_ascending(self):
        soon = datetime.now(UTC) + timedelta(days=1)
        _create("ord-dl", deadline=soon)
        _create("ord-none")

        result = list_quality_checks(sort_by="deadline", sort_order="asc")
        assert [c.order_id for c in result["items"]] == ["ord-none", "ord-dl"]

    def test_pagination(self):
        for i in range(5):
            _create(f"ord-{i}")

        page = list_quality_checks(page=2, limit=2)
        assert page["total"] == 5
        assert page["page"] == 2
        assert len(page["items"]) == 2

        last = list_quality_checks(page=3, limit=2)
        assert len(last["items"]) == 1

    def test_more_checks_than_one_storage_page(self):
        for i in range(105):
            _create(f"ord-{i}")

        page = list_quality_checks(page=6, limit=20)
        assert page["total"] == 105
        assert len(page["items"]) == 5

    @pytest.mark.parametrize(
        "kwargs",
        [{"sort_by": "title"}, {"sort_order": "sideways"}, {"page": 0}, {"limit": 0}, {"limit": 101}],
    )
    def test_invalid_arguments(self, kwargs):
        with pytest.raises(ValidationError):
            list_quality_checks(**kwargs)


class TestMyChecks:
    def test_only_checks_assigned_to_reviewer(self):
        current_domain.process(RegisterReviewer(user_id="rev-q", name="Q"), asynchronous=False)
        mine = _create("ord-mine")
        _create("ord-other")
        current_domain.process(AssignReviewer(quality_check_id=mine), asynchronous=False)

        result = list_my_checks("rev-q")
        assert [str(c.id) for c in result["items"]] == [mine]


class TestOverdueChecks:
    def test_only_open_checks_past_deadline(self):
        past = datetime.now(UTC) - timedelta(days=2)
        overdue = _create("ord-late", deadline=past)
        finished = _create("ord-done", deadline=past)
        _create("ord-future", deadline=datetime.now(UTC) + timedelta(days=2))
        _create("ord-open")

        current_domain.process(StartManualReview(quality_check_id=finished), asynchronous=False)
        current_domain.process(
            CompleteManualReview(quality_check_id=finished, verdict="rejected"),
            asynchronous=False,
        )

        result = list_overdue_checks()
        assert [str(c.id) for c in result["items"]] == [overdue]

    def test_found_among_many_open_checks(self):
        for i in range(100):
            _create(f"ord-open-{i}", deadline=datetime.now(UTC) + timedelta(days=2))
        overdue = _create("ord-late", deadline=datetime.now(UTC) - timedelta(hours=1))

        result = list_overdue_checks()
        assert result["total"] == 1
        assert [str(c.id) for c in result["items"]] == [overdue]

"""Tests for the QualityCheck review workflow: transitions and their guards."""

import pytest
from protean.exceptions import ValidationError
from quality.check.events import (
    AutomatedChecksCompleted,
    CommentAdded,
    ManualReviewCompleted,
    ManualReviewStarted,
    ReviewerAssigned,
    RevisionSubmitted,
)
from quality.check.quality_check import QualityCheck, QualityStatus, ReviewStatus
from quality.scoring.aggregator import AGGREGATOR_VERSION
from shared.exceptions import InvalidStateTransition


def _check_at(status):
    """Create a check and drive it to the requested status."""
    check = QualityCheck.create(order_id="ord-sm", website_id="web-sm", submitted_by="pub-sm")

    if status == QualityStatus.PENDING:
        pass
    elif status == QualityStatus.UNDER_REVIEW:
        check.assign("rev-sm")
    elif status == QualityStatus.IN_PROGRESS:
        check.assign("rev-sm")
        check.start_review()
    elif status in (QualityStatus.PASSED, QualityStatus.FAILED, QualityStatus.NEEDS_REVISION):
        verdict = {
            QualityStatus.PASSED: "approved",
            QualityStatus.FAILED: "rejected",
            QualityStatus.NEEDS_REVISION: "needs_revision",
        }[status]
        check.assign("rev-sm")
        check.start_review()
        check.complete_review(verdict, "Reviewed")
    else:
        raise ValueError(f"Cannot build a check in {status}")

    check._events.clear()
    return check


# ---------------------------------------------------------------
# Happy path transitions
# ---------------------------------------------------------------
class TestValidTransitions:
    def test_pending_to_under_review_on_assign(self):
        check = _check_at(QualityStatus.PENDING)
        check.assign("rev-001")
        assert check.status == QualityStatus.UNDER_REVIEW.value
        assert check.assigned_to == "rev-001"
        assert isinstance(check._events[-1], ReviewerAssigned)

    def test_pending_to_in_progress_without_assignment(self):
        check = _check_at(QualityStatus.PENDING)
        check.start_review()
        assert check.status == QualityStatus.IN_PROGRESS.value
        assert check.review_status == ReviewStatus.IN_PROGRESS.value
        assert check.review_started_at is not None
        event = check._events[-1]
        assert isinstance(event, ManualReviewStarted)
        assert event.previous_status == "pending"

    def test_under_review_to_in_progress(self):
        check = _check_at(QualityStatus.UNDER_REVIEW)
        check.start_review()
        assert check.status == QualityStatus.IN_PROGRESS.value
        assert check._events[-1].previous_status == "under_review"

    @pytest.mark.parametrize(
        "verdict, expected",
        [
            ("approved", QualityStatus.PASSED),
            ("rejected", QualityStatus.FAILED),
            ("needs_revision", QualityStatus.NEEDS_REVISION),
        ],
    )
    def test_complete_review_outcomes(self, verdict, expected):
        check = _check_at(QualityStatus.IN_PROGRESS)
        check.complete_review(verdict, "Notes for the writer")

        assert check.status == expected.value
        assert check.review_status == ReviewStatus.COMPLETED.value
        assert check.final_verdict == verdict
        assert check.final_comments == "Notes for the writer"
        assert check.revisions_requested is (verdict == "needs_revision")

        event = check._events[-1]
        assert isinstance(event, ManualReviewCompleted)
        assert event.verdict == verdict
        assert event.status == expected.value
        assert event.submitted_by == "pub-sm"

    def test_needs_revision_to_under_review_on_revision(self):
        check = _check_at(QualityStatus.NEEDS_REVISION)
        check.submit_revision("pub-sm", "Fixed the intro")

        assert check.status == QualityStatus.UNDER_REVIEW.value
        assert check.review_status == ReviewStatus.NOT_STARTED.value
        assert check.final_verdict is None
        assert check.assigned_to == "rev-sm"
        assert check.ordered_revisions()[0].revision_number == 1
        assert isinstance(check._events[-1], RevisionSubmitted)


# ---------------------------------------------------------------
# Invalid transitions
# ---------------------------------------------------------------
class TestInvalidTransitions:
    @pytest.mark.parametrize(
        "status",
        [
            QualityStatus.UNDER_REVIEW,
            QualityStatus.IN_PROGRESS,
            QualityStatus.NEEDS_REVISION,
            QualityStatus.PASSED,
            QualityStatus.FAILED,
        ],
    )
    def test_assign_only_from_pending(self, status):
        check = _check_at(status)
        with pytest.raises(InvalidStateTransition):
            check.assign("rev-002")

    @pytest.mark.parametrize(
        "status",
        [QualityStatus.IN_PROGRESS, QualityStatus.NEEDS_REVISION, QualityStatus.PASSED, QualityStatus.FAILED],
    )
    def test_start_review_rejected(self, status):
        check = _check_at(status)
        with pytest.raises(InvalidStateTransition):
            check.start_review()

    @pytest.mark.parametrize(
        "status",
        [QualityStatus.PENDING, QualityStatus.UNDER_REVIEW, QualityStatus.PASSED, QualityStatus.FAILED],
    )
    def test_complete_review_requires_in_progress(self, status):
        check = _check_at(status)
        with pytest.raises(InvalidStateTransition):
            check.complete_review("approved")

    @pytest.mark.parametrize(
        "status",
        [QualityStatus.PENDING, QualityStatus.UNDER_REVIEW, QualityStatus.IN_PROGRESS, QualityStatus.PASSED],
    )
    def test_revision_requires_needs_revision(self, status):
        check = _check_at(status)
        with pytest.raises(InvalidStateTransition):
            check.submit_revision("pub-sm")

    def test_rejection_names_the_transition(self):
        check = _check_at(QualityStatus.PASSED)
        with pytest.raises(InvalidStateTransition) as exc:
            check.start_review()
        assert exc.value.messages == {"status": ["Cannot transition from passed to in_progress"]}

    def test_rejected_operation_leaves_check_unchanged(self):
        check = _check_at(QualityStatus.PASSED)
        version = check.lock_version
        with pytest.raises(InvalidStateTransition):
            check.start_review()
        assert check.status == QualityStatus.PASSED.value
        assert check.lock_version == version
        assert check._events == []

    def test_unknown_verdict_reported_before_status(self):
        check = _check_at(QualityStatus.PENDING)
        with pytest.raises(ValidationError) as exc:
            check.complete_review("maybe")
        assert "verdict" in exc.value.messages

    def test_unknown_verdict_in_progress(self):
        check = _check_at(QualityStatus.IN_PROGRESS)
        with pytest.raises(ValidationError):
            check.complete_review("maybe")
        assert check.status == QualityStatus.IN_PROGRESS.value


# ---------------------------------------------------------------
# Comments, revisions and automated snapshots
# ---------------------------------------------------------------
class TestComments:
    @pytest.mark.parametrize("status", list(QualityStatus))
    def test_comment_allowed_in_every_status(self, status):
        check = _check_at(status)
        check.add_comment("pub-sm", "A remark")
        assert len(check.comments) == 1
        assert isinstance(check._events[-1], CommentAdded)

    def test_comments_keep_insertion_order(self):
        check = _check_at(QualityStatus.PENDING)
        for i in range(3):
            check.add_comment("pub-sm", f"comment {i}")

        ordered = check.ordered_comments()
        assert [c.text for c in ordered] == ["comment 0", "comment 1", "comment 2"]
        assert [c.sequence for c in ordered] == [1, 2, 3]
        assert ordered[0].created_at <= ordered[1].created_at <= ordered[2].created_at

    def test_blank_comment_rejected(self):
        check = _check_at(QualityStatus.PENDING)
        with pytest.raises(ValidationError):
            check.add_comment("pub-sm", "   ")
        assert check.comments == []


class TestRevisionLoop:
    def test_revision_numbers_increase_by_one(self):
        check = _check_at(QualityStatus.NEEDS_REVISION)
        check.submit_revision("pub-sm", "First pass")
        check.start_review()
        check.complete_review("needs_revision", "Still too short")
        check.submit_revision("pub-sm", "Second pass")

        assert [r.revision_number for r in check.ordered_revisions()] == [1, 2]
        assert check.status == QualityStatus.UNDER_REVIEW.value

    def test_revision_then_approval(self):
        check = _check_at(QualityStatus.NEEDS_REVISION)
        check.submit_revision("pub-sm")
        check.start_review()
        check.complete_review("approved")
        assert check.status == QualityStatus.PASSED.value
        assert check.is_terminal is True


class TestAutomatedSnapshot:
    def test_snapshot_does_not_change_status(self):
        check = _check_at(QualityStatus.UNDER_REVIEW)
        check.record_automated_checks({"overall_passed": False, "aggregator_version": "2024.1"})

        assert check.status == QualityStatus.UNDER_REVIEW.value
        assert check.automated_result["overall_passed"] is False
        assert "ran_at" in check.automated_result
        assert isinstance(check._events[-1], AutomatedChecksCompleted)

    def test_snapshot_is_replaced_not_merged(self):
        check = _check_at(QualityStatus.PENDING)
        check.record_automated_checks({"overall_passed": False, "grammar": {"score": 10}})
        check.record_automated_checks({"overall_passed": True})
        assert "grammar" not in check.automated_result
        assert check.automated_result["overall_passed"] is True

    def test_snapshot_without_version_uses_current_aggregator(self):
        check = _check_at(QualityStatus.PENDING)
        check.record_automated_checks({"overall_passed": True})

        assert check.automated_result["aggregator_version"] == AGGREGATOR_VERSION
        assert check._events[-1].aggregator_version == AGGREGATOR_VERSION

    def test_snapshot_keeps_reported_version(self):
        check = _check_at(QualityStatus.PENDING)
        check.record_automated_checks({"overall_passed": True, "aggregator_version": "2023.9"})

        assert check._events[-1].aggregator_version == "2023.9"

    def test_failure_keeps_previous_snapshot(self):
        check = _check_at(QualityStatus.PENDING)
        check.record_automated_checks({"overall_passed": True})
        version = check.lock_version
        check.record_automated_checks_failure("timed out", 2)
        assert check.automated_result["overall_passed"] is True
        assert check.lock_version == version

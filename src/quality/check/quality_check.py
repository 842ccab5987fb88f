"""QualityCheck aggregate — the core of the Quality domain.

One quality check is one review cycle for a unit of submitted content tied
to an order and a website. It consumes automated scoring snapshots and
manual review actions, and raises a domain event on every transition.

CQRS (not event sourced): the record is read far more often than it
changes, and terminal checks are kept for audit rather than replayed.

State Machine (6 states):
    PENDING → UNDER_REVIEW (reviewer assigned) | IN_PROGRESS (review started)
    UNDER_REVIEW → IN_PROGRESS
    IN_PROGRESS → PASSED | FAILED | NEEDS_REVISION
    NEEDS_REVISION → UNDER_REVIEW (revision submitted)
    PASSED, FAILED → (terminal)

Every operation checks all of its preconditions before touching a field,
so a rejected operation leaves the aggregate unchanged and raises no event.
"""

import json
from datetime import UTC, datetime
from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import (
    Boolean,
    DateTime,
    HasMany,
    Identifier,
    Integer,
    String,
    Text,
)

from quality.check.events import (
    AutomatedChecksCompleted,
    AutomatedChecksFailed,
    CommentAdded,
    ManualReviewCompleted,
    ManualReviewStarted,
    QualityCheckCreated,
    ReviewerAssigned,
    RevisionSubmitted,
)
from quality.domain import quality
from quality.scoring.aggregator import AGGREGATOR_VERSION
from shared.exceptions import ConcurrencyConflict, InvalidStateTransition


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class QualityStatus(Enum):
    PENDING = "pending"
    UNDER_REVIEW = "under_review"
    IN_PROGRESS = "in_progress"
    NEEDS_REVISION = "needs_revision"
    PASSED = "passed"
    FAILED = "failed"


class Priority(Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class Verdict(Enum):
    APPROVED = "approved"
    REJECTED = "rejected"
    NEEDS_REVISION = "needs_revision"


class ReviewStatus(Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


TERMINAL_STATUSES = {QualityStatus.PASSED, QualityStatus.FAILED}

# Verdict → status the check moves to when the review completes
_VERDICT_OUTCOME = {
    Verdict.APPROVED: QualityStatus.PASSED,
    Verdict.REJECTED: QualityStatus.FAILED,
    Verdict.NEEDS_REVISION: QualityStatus.NEEDS_REVISION,
}


# ---------------------------------------------------------------------------
# State Machine
# ---------------------------------------------------------------------------
_VALID_TRANSITIONS = {
    QualityStatus.PENDING: {QualityStatus.UNDER_REVIEW, QualityStatus.IN_PROGRESS},
    QualityStatus.UNDER_REVIEW: {QualityStatus.IN_PROGRESS},
    QualityStatus.IN_PROGRESS: {
        QualityStatus.PASSED,
        QualityStatus.FAILED,
        QualityStatus.NEEDS_REVISION,
    },
    QualityStatus.NEEDS_REVISION: {QualityStatus.UNDER_REVIEW},
    QualityStatus.PASSED: set(),  # Terminal state
    QualityStatus.FAILED: set(),  # Terminal state
}


def _parse_enum(enum_cls, value, field_name):
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(e.value for e in enum_cls)
        raise ValidationError({field_name: [f"Unknown {field_name} '{value}'. Expected one of: {allowed}"]}) from None


def _normalize_tags(tags):
    unique = []
    for tag in tags or []:
        tag = str(tag).strip()
        if tag and tag not in unique:
            unique.append(tag)
    return unique


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@quality.entity(part_of="QualityCheck")
class Comment:
    """A remark left on the check by a reviewer or the submitter."""

    author_id = Identifier(required=True)
    text = Text(required=True)
    sequence = Integer(required=True)
    created_at = DateTime(required=True)


@quality.entity(part_of="QualityCheck")
class Revision:
    """One answer to a revision request."""

    revision_number = Integer(required=True)
    submitted_by = Identifier(required=True)
    submitted_at = DateTime(required=True)
    changes = Text()


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@quality.aggregate
class QualityCheck:
    """A content quality review cycle for one order's submitted content."""

    # References
    order_id = Identifier(required=True)
    website_id = Identifier(required=True)
    submitted_by = Identifier(required=True)
    assigned_to = Identifier()
    title = String(max_length=255)

    # Workflow
    status = String(choices=QualityStatus, default=QualityStatus.PENDING.value)
    priority = String(choices=Priority, default=Priority.MEDIUM.value)
    deadline = DateTime()

    # Automated scoring snapshot (JSON: dimension → {score, passed, details})
    automated_checks = Text()

    # Manual review
    review_status = String(choices=ReviewStatus, default=ReviewStatus.NOT_STARTED.value)
    review_started_at = DateTime()
    review_completed_at = DateTime()
    final_verdict = String(choices=Verdict)
    final_comments = Text()
    revisions_requested = Boolean(default=False)

    # Append-only history
    comments = HasMany(Comment)
    revisions = HasMany(Revision)

    tags = Text()  # JSON list of unique strings

    # Incremented on every applied change; checked by commands carrying expected_version
    lock_version = Integer(default=0)

    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Invariants
    # -------------------------------------------------------------------
    @invariant.post
    def open_review_cycle_matches_status(self):
        in_review = self.review_status == ReviewStatus.IN_PROGRESS.value
        in_progress = self.status == QualityStatus.IN_PROGRESS.value
        if in_review != in_progress:
            raise ValidationError({"review_status": ["A manual review is open exactly while the check is in progress"]})

    @invariant.post
    def revision_numbers_are_consecutive(self):
        numbers = sorted(r.revision_number for r in self.revisions)
        if numbers != list(range(1, len(numbers) + 1)):
            raise ValidationError({"revisions": ["Revision numbers must increase by one starting from 1"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(
        cls,
        order_id,
        website_id,
        submitted_by,
        priority=None,
        deadline=None,
        tags=None,
        title=None,
    ):
        """Open a new quality check in PENDING."""
        errors = {}
        for name, value in (("order_id", order_id), ("website_id", website_id), ("submitted_by", submitted_by)):
            if not value or not str(value).strip():
                errors[name] = [f"{name} is required"]
        if errors:
            raise ValidationError(errors)

        priority = _parse_enum(Priority, priority or Priority.MEDIUM.value, "priority")
        tag_list = _normalize_tags(tags)
        if deadline is not None and deadline.tzinfo is None:
            deadline = deadline.replace(tzinfo=UTC)
        now = datetime.now(UTC)

        check = cls(
            order_id=order_id,
            website_id=website_id,
            submitted_by=submitted_by,
            title=title,
            status=QualityStatus.PENDING.value,
            priority=priority.value,
            deadline=deadline,
            review_status=ReviewStatus.NOT_STARTED.value,
            revisions_requested=False,
            tags=json.dumps(tag_list),
            lock_version=0,
            created_at=now,
            updated_at=now,
        )

        check.raise_(
            QualityCheckCreated(
                quality_check_id=str(check.id),
                order_id=str(order_id),
                website_id=str(website_id),
                submitted_by=str(submitted_by),
                title=title,
                priority=priority.value,
                deadline=deadline,
                tags=json.dumps(tag_list),
                status=QualityStatus.PENDING.value,
                created_at=now,
            )
        )

        return check

    # -------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------
    @property
    def tag_list(self) -> list[str]:
        return json.loads(self.tags) if self.tags else []

    @property
    def automated_result(self) -> dict | None:
        return json.loads(self.automated_checks) if self.automated_checks else None

    @property
    def is_terminal(self) -> bool:
        return QualityStatus(self.status) in TERMINAL_STATUSES

    def is_overdue(self, now=None) -> bool:
        now = now or datetime.now(UTC)
        return self.deadline is not None and self.deadline < now and not self.is_terminal

    def assert_version(self, expected_version):
        """Reject a write based on a stale read of this check."""
        if expected_version is not None and int(expected_version) != self.lock_version:
            raise ConcurrencyConflict(
                {
                    "lock_version": [
                        f"Quality check {self.id} is at version {self.lock_version}, expected {expected_version}"
                    ]
                }
            )

    def _assert_can_transition(self, target_status):
        """Validate state machine transition."""
        current = QualityStatus(self.status)
        if target_status not in _VALID_TRANSITIONS.get(current, set()):
            raise InvalidStateTransition(
                {"status": [f"Cannot transition from {current.value} to {target_status.value}"]}
            )

    def _touch(self, now):
        self.updated_at = now
        self.lock_version = (self.lock_version or 0) + 1

    # -------------------------------------------------------------------
    # Automated checks
    # -------------------------------------------------------------------
    def record_automated_checks(self, result: dict):
        """Replace the automated snapshot. Status is never changed by scoring."""
        now = datetime.now(UTC)
        snapshot = dict(result)
        snapshot["aggregator_version"] = snapshot.get("aggregator_version") or AGGREGATOR_VERSION
        snapshot["ran_at"] = now.isoformat()

        self.automated_checks = json.dumps(snapshot)
        self._touch(now)

        self.raise_(
            AutomatedChecksCompleted(
                quality_check_id=str(self.id),
                overall_passed=bool(result.get("overall_passed")),
                aggregator_version=str(snapshot["aggregator_version"]),
                lock_version=self.lock_version,
                ran_at=now,
            )
        )

    def record_automated_checks_failure(self, reason: str, attempts: int):
        """Note a failed scoring run; the previous snapshot stays in place."""
        self.raise_(
            AutomatedChecksFailed(
                quality_check_id=str(self.id),
                reason=reason,
                attempts=attempts,
                failed_at=datetime.now(UTC),
            )
        )

    # -------------------------------------------------------------------
    # Assignment
    # -------------------------------------------------------------------
    def assign(self, reviewer_id):
        """Hand the check to a reviewer: PENDING → UNDER_REVIEW."""
        self._assert_can_transition(QualityStatus.UNDER_REVIEW)
        if QualityStatus(self.status) != QualityStatus.PENDING:
            raise InvalidStateTransition({"status": ["Reviewers can only be assigned to pending checks"]})

        now = datetime.now(UTC)
        with atomic_change(self):
            self.assigned_to = reviewer_id
            self.status = QualityStatus.UNDER_REVIEW.value
            self._touch(now)

        self.raise_(
            ReviewerAssigned(
                quality_check_id=str(self.id),
                order_id=str(self.order_id),
                website_id=str(self.website_id),
                reviewer_id=str(reviewer_id),
                title=self.title,
                lock_version=self.lock_version,
                assigned_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Manual review
    # -------------------------------------------------------------------
    def start_review(self):
        """Open the manual review cycle: PENDING | UNDER_REVIEW → IN_PROGRESS."""
        previous = QualityStatus(self.status)
        self._assert_can_transition(QualityStatus.IN_PROGRESS)

        now = datetime.now(UTC)
        with atomic_change(self):
            self.status = QualityStatus.IN_PROGRESS.value
            self.review_status = ReviewStatus.IN_PROGRESS.value
            self.review_started_at = now
            self.review_completed_at = None
            self._touch(now)

        self.raise_(
            ManualReviewStarted(
                quality_check_id=str(self.id),
                reviewer_id=str(self.assigned_to) if self.assigned_to else None,
                previous_status=previous.value,
                lock_version=self.lock_version,
                started_at=now,
            )
        )

    def complete_review(self, verdict, comments=None):
        """Close the review cycle with a verdict.

        The verdict is validated before the status so that an unknown
        verdict is reported as such even on a check in the wrong state.
        """
        verdict = _parse_enum(Verdict, verdict, "verdict")
        target = _VERDICT_OUTCOME[verdict]
        self._assert_can_transition(target)

        now = datetime.now(UTC)
        with atomic_change(self):
            self.status = target.value
            self.review_status = ReviewStatus.COMPLETED.value
            self.review_completed_at = now
            self.final_verdict = verdict.value
            self.final_comments = comments
            self.revisions_requested = verdict == Verdict.NEEDS_REVISION
            self._touch(now)

        self.raise_(
            ManualReviewCompleted(
                quality_check_id=str(self.id),
                order_id=str(self.order_id),
                website_id=str(self.website_id),
                submitted_by=str(self.submitted_by),
                reviewer_id=str(self.assigned_to) if self.assigned_to else None,
                title=self.title,
                verdict=verdict.value,
                status=target.value,
                comments=comments,
                lock_version=self.lock_version,
                completed_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Comments
    # -------------------------------------------------------------------
    def add_comment(self, author_id, text):
        """Append a comment. Allowed in every status, including terminal ones."""
        if not author_id:
            raise ValidationError({"author_id": ["Comment author is required"]})
        if not text or not text.strip():
            raise ValidationError({"text": ["Comment text cannot be empty"]})

        now = datetime.now(UTC)
        sequence = 1
        if self.comments:
            last = max(self.comments, key=lambda c: c.sequence)
            sequence = last.sequence + 1
            # Comment timestamps never go backwards
            if last.created_at and last.created_at > now:
                now = last.created_at

        with atomic_change(self):
            self.add_comments(
                Comment(
                    author_id=author_id,
                    text=text.strip(),
                    sequence=sequence,
                    created_at=now,
                )
            )
            self._touch(now)

        self.raise_(
            CommentAdded(
                quality_check_id=str(self.id),
                author_id=str(author_id),
                text=text.strip(),
                sequence=sequence,
                created_at=now,
            )
        )

    def ordered_comments(self):
        return sorted(self.comments, key=lambda c: c.sequence)

    # -------------------------------------------------------------------
    # Revisions
    # -------------------------------------------------------------------
    def submit_revision(self, submitted_by, changes=None):
        """Answer a revision request: NEEDS_REVISION → UNDER_REVIEW."""
        self._assert_can_transition(QualityStatus.UNDER_REVIEW)
        if QualityStatus(self.status) != QualityStatus.NEEDS_REVISION:
            raise InvalidStateTransition({"status": ["Revisions can only be submitted when a revision was requested"]})
        if not submitted_by:
            raise ValidationError({"submitted_by": ["Revision submitter is required"]})

        now = datetime.now(UTC)
        revision_number = max((r.revision_number for r in self.revisions), default=0) + 1

        with atomic_change(self):
            self.add_revisions(
                Revision(
                    revision_number=revision_number,
                    submitted_by=submitted_by,
                    submitted_at=now,
                    changes=changes,
                )
            )
            self.status = QualityStatus.UNDER_REVIEW.value
            self.review_status = ReviewStatus.NOT_STARTED.value
            self.final_verdict = None
            self._touch(now)

        self.raise_(
            RevisionSubmitted(
                quality_check_id=str(self.id),
                revision_number=revision_number,
                submitted_by=str(submitted_by),
                changes=changes,
                lock_version=self.lock_version,
                submitted_at=now,
            )
        )

    def ordered_revisions(self):
        return sorted(self.revisions, key=lambda r: r.revision_number)

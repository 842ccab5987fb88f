"""Domain events for the QualityCheck aggregate.

Every transition raises exactly one event. ``ReviewerAssigned`` and
``ManualReviewCompleted`` are also published to other domains; their
contracts live in ``shared.events.quality`` and must keep the same fields.
"""

from protean.fields import Boolean, DateTime, Identifier, Integer, String, Text

from quality.domain import quality


@quality.event(part_of="QualityCheck")
class QualityCheckCreated:
    """Submitted content entered the quality workflow."""

    __version__ = 1

    quality_check_id = Identifier(required=True)
    order_id = Identifier(required=True)
    website_id = Identifier(required=True)
    submitted_by = Identifier(required=True)
    title = String()
    priority = String(required=True)
    deadline = DateTime()
    tags = Text()  # JSON list
    status = String(required=True)
    created_at = DateTime(required=True)


@quality.event(part_of="QualityCheck")
class AutomatedChecksCompleted:
    """A fresh automated scoring snapshot replaced the previous one."""

    __version__ = 1

    quality_check_id = Identifier(required=True)
    overall_passed = Boolean(required=True)
    aggregator_version = String(required=True)
    lock_version = Integer()
    ran_at = DateTime(required=True)


@quality.event(part_of="QualityCheck")
class AutomatedChecksFailed:
    """The scoring job gave up; the previous snapshot was kept."""

    __version__ = 1

    quality_check_id = Identifier(required=True)
    reason = Text(required=True)
    attempts = Integer(required=True)
    failed_at = DateTime(required=True)


@quality.event(part_of="QualityCheck")
class ReviewerAssigned:
    """A reviewer picked up the check."""

    __version__ = 1

    quality_check_id = Identifier(required=True)
    order_id = Identifier(required=True)
    website_id = Identifier(required=True)
    reviewer_id = Identifier(required=True)
    title = String()
    lock_version = Integer()
    assigned_at = DateTime(required=True)


@quality.event(part_of="QualityCheck")
class ManualReviewStarted:
    __version__ = 1

    quality_check_id = Identifier(required=True)
    reviewer_id = Identifier()
    previous_status = String(required=True)
    lock_version = Integer()
    started_at = DateTime(required=True)


@quality.event(part_of="QualityCheck")
class ManualReviewCompleted:
    """A manual review cycle finished with a verdict."""

    __version__ = 1

    quality_check_id = Identifier(required=True)
    order_id = Identifier(required=True)
    website_id = Identifier(required=True)
    submitted_by = Identifier(required=True)
    reviewer_id = Identifier()
    title = String()
    verdict = String(required=True)
    status = String(required=True)
    comments = Text()
    lock_version = Integer()
    completed_at = DateTime(required=True)


@quality.event(part_of="QualityCheck")
class CommentAdded:
    __version__ = 1

    quality_check_id = Identifier(required=True)
    author_id = Identifier(required=True)
    text = Text(required=True)
    sequence = Integer(required=True)
    created_at = DateTime(required=True)


@quality.event(part_of="QualityCheck")
class RevisionSubmitted:
    """The submitter answered a revision request."""

    __version__ = 1

    quality_check_id = Identifier(required=True)
    revision_number = Integer(required=True)
    submitted_by = Identifier(required=True)
    changes = Text()
    lock_version = Integer()
    submitted_at = DateTime(required=True)

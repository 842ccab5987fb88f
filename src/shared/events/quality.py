"""Cross-domain event contracts for Quality domain events.

These classes define the event shape for consumption by other domains
(the Notifications domain tells submitters and reviewers about review
outcomes). They are registered as external events via
domain.register_external_event() with matching __type__ strings so
Protean's stream deserialization works correctly.

The source-of-truth events are in src/quality/check/events.py.
"""

from protean.core.event import BaseEvent
from protean.fields import DateTime, Identifier, Integer, String, Text


class ReviewerAssigned(BaseEvent):
    """A reviewer was assigned to a quality check."""

    __version__ = 1

    quality_check_id = Identifier(required=True)
    order_id = Identifier(required=True)
    website_id = Identifier(required=True)
    reviewer_id = Identifier(required=True)
    title = String()
    lock_version = Integer()
    assigned_at = DateTime(required=True)


class ManualReviewCompleted(BaseEvent):
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

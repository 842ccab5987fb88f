"""Domain events for the Reviewer aggregate."""

from protean.fields import Boolean, DateTime, Identifier, String

from quality.domain import quality


@quality.event(part_of="Reviewer")
class ReviewerRegistered:
    __version__ = 1

    reviewer_id = Identifier(required=True)
    user_id = Identifier(required=True)
    name = String(required=True)
    registered_at = DateTime(required=True)


@quality.event(part_of="Reviewer")
class ReviewerAvailabilityChanged:
    __version__ = 1

    reviewer_id = Identifier(required=True)
    user_id = Identifier(required=True)
    is_active = Boolean(required=True)
    changed_at = DateTime(required=True)

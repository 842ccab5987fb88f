"""Reviewer aggregate — the roster used to route quality checks.

Each reviewer tracks how many checks are currently assigned to them. The
assignment policy picks the least-loaded active reviewer, preferring the
one that has been idle the longest.
"""

from datetime import UTC, datetime

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Identifier, Integer, String
from protean.utils.globals import current_domain

from quality.domain import quality
from quality.reviewer.events import ReviewerAvailabilityChanged, ReviewerRegistered


@quality.aggregate
class Reviewer:
    user_id = Identifier(required=True, unique=True)
    name = String(required=True, max_length=100)
    is_active = Boolean(default=True)
    active_reviews = Integer(default=0)
    idle_since = DateTime()
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def load_is_never_negative(self):
        if self.active_reviews is not None and self.active_reviews < 0:
            raise ValidationError({"active_reviews": ["Active review count cannot be negative"]})

    @classmethod
    def register(cls, user_id, name):
        now = datetime.now(UTC)
        reviewer = cls(
            user_id=user_id,
            name=name,
            is_active=True,
            active_reviews=0,
            idle_since=now,
            created_at=now,
            updated_at=now,
        )
        reviewer.raise_(
            ReviewerRegistered(
                reviewer_id=str(reviewer.id),
                user_id=str(user_id),
                name=name,
                registered_at=now,
            )
        )
        return reviewer

    def set_availability(self, is_active):
        if bool(is_active) == self.is_active:
            return

        now = datetime.now(UTC)
        self.is_active = bool(is_active)
        self.updated_at = now

        self.raise_(
            ReviewerAvailabilityChanged(
                reviewer_id=str(self.id),
                user_id=str(self.user_id),
                is_active=self.is_active,
                changed_at=now,
            )
        )

    def take_assignment(self):
        self.active_reviews = (self.active_reviews or 0) + 1
        self.updated_at = datetime.now(UTC)

    def release_assignment(self):
        if not self.active_reviews:
            return
        now = datetime.now(UTC)
        self.active_reviews -= 1
        if self.active_reviews == 0:
            self.idle_since = now
        self.updated_at = now


def find_reviewer(user_id):
    """Return the roster entry for a user, or None."""
    repo = current_domain.repository_for(Reviewer)
    matches = repo._dao.query.filter(user_id=str(user_id)).limit(None).all().items
    return matches[0] if matches else None


def pick_least_loaded_reviewer():
    """Least-loaded active reviewer; ties go to the one idle the longest."""
    repo = current_domain.repository_for(Reviewer)
    candidates = repo._dao.query.filter(is_active=True).limit(None).all().items
    if not candidates:
        raise ValidationError({"assigned_to": ["No active reviewer is available"]})

    return min(
        candidates,
        key=lambda r: (r.active_reviews or 0, r.idle_since or r.created_at, str(r.user_id)),
    )

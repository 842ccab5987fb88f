"""Inbox aggregate — the per-user unread counter.

One inbox per user. The counter is only ever moved in the same unit of
work as the notification change that justifies it, so it always equals
the number of UNREAD notifications the user owns.
"""

from datetime import UTC, datetime

from notifications.domain import notifications
from notifications.notification.events import UnreadCountChanged
from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Identifier, Integer
from protean.utils.globals import current_domain


@notifications.aggregate
class Inbox:
    user_id: Identifier(required=True, unique=True)
    unread_count: Integer(default=0)
    updated_at: DateTime()

    @invariant.post
    def unread_count_is_never_negative(self):
        if self.unread_count is not None and self.unread_count < 0:
            raise ValidationError({"unread_count": ["Unread count cannot be negative"]})

    def _set(self, value):
        now = datetime.now(UTC)
        self.unread_count = value
        self.updated_at = now
        self.raise_(
            UnreadCountChanged(
                user_id=str(self.user_id),
                unread_count=value,
                changed_at=now,
            )
        )

    def increment(self):
        self._set((self.unread_count or 0) + 1)

    def decrement(self):
        self._set((self.unread_count or 0) - 1)

    def reset(self, value=0):
        if value != self.unread_count:
            self._set(value)


def inbox_for(user_id) -> Inbox:
    """Stored inbox of a user, or a fresh empty one (not yet persisted)."""
    repo = current_domain.repository_for(Inbox)
    inboxes = repo._dao.query.filter(user_id=str(user_id)).limit(None).all().items
    if inboxes:
        return inboxes[0]
    return Inbox(user_id=str(user_id), unread_count=0, updated_at=datetime.now(UTC))

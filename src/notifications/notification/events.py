"""Domain events for the Notification and Inbox aggregates."""

from notifications.domain import notifications
from protean.fields import Boolean, DateTime, Identifier, Integer, String, Text


@notifications.event(part_of="Notification")
class NotificationCreated:
    """A notification was stored for a user.

    Carries the full payload so that live connections and channel adapters
    can be served without reloading the aggregate.
    """

    __version__ = 1

    notification_id: Identifier(required=True)
    user_id: Identifier(required=True)
    notification_type: String(required=True)
    category: String(required=True)
    title: String(required=True)
    message: Text(required=True)
    data: Text()  # JSON
    priority: String(required=True)
    action_url: String()
    status: String(required=True)
    channels: Text()  # JSON list of immediate channels
    push_suppressed: Boolean(default=False)
    created_at: DateTime(required=True)


@notifications.event(part_of="Notification")
class NotificationRead:
    __version__ = 1

    notification_id: Identifier(required=True)
    user_id: Identifier(required=True)
    read_at: DateTime(required=True)


@notifications.event(part_of="Notification")
class NotificationArchived:
    __version__ = 1

    notification_id: Identifier(required=True)
    user_id: Identifier(required=True)
    was_unread: Boolean(required=True)
    archived_at: DateTime(required=True)


@notifications.event(part_of="Inbox")
class UnreadCountChanged:
    """The unread counter of a user's inbox moved."""

    __version__ = 1

    user_id: Identifier(required=True)
    unread_count: Integer(required=True)
    changed_at: DateTime(required=True)

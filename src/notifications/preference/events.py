"""Domain events for the NotificationPreference aggregate."""

from notifications.domain import notifications
from protean.fields import DateTime, Identifier, Integer, Text


@notifications.event(part_of="NotificationPreference")
class PreferencesUpdated:
    """A user saved their notification preferences (whole document)."""

    __version__ = 1

    preference_id: Identifier(required=True)
    user_id: Identifier(required=True)
    document: Text(required=True)  # JSON
    updated_at: DateTime(required=True)


@notifications.event(part_of="NotificationPreference")
class DigestSent:
    """A summary email of unread notifications went out."""

    __version__ = 1

    preference_id: Identifier(required=True)
    user_id: Identifier(required=True)
    frequency: Text(required=True)
    notification_count: Integer(required=True)
    sent_at: DateTime(required=True)

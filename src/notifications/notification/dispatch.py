"""Internal dispatch handler — fan-out and immediate channel delivery.

Reacts to NotificationCreated after the notification and inbox counter are
committed: fans the full payload out to every live connection of the
user (see ``notifications.realtime.fanout``), then sends the planned
immediate channels through their adapters. A failed send is retried
with bounded backoff and then dropped; the notification itself stays
stored and unread either way.
"""

import json

import structlog
from notifications.channel import get_channel
from notifications.channel.message import OutboundMessage
from notifications.domain import notifications
from notifications.notification.events import NotificationCreated
from notifications.notification.notification import Notification
from notifications.notification.retry import deliver_with_retry
from notifications.realtime.fanout import get_fanout
from protean.utils.mixins import handle
from shared.exceptions import DeliveryError

logger = structlog.get_logger(__name__)

NEW_NOTIFICATION_EVENT = "new_notification"


def payload_from_event(event: NotificationCreated) -> dict:
    return {
        "id": str(event.notification_id),
        "user_id": str(event.user_id),
        "type": event.notification_type,
        "category": event.category,
        "title": event.title,
        "message": event.message,
        "data": json.loads(event.data) if event.data else {},
        "priority": event.priority,
        "action_url": event.action_url,
        "status": event.status,
        "channels": json.loads(event.channels) if event.channels else [],
        "push_suppressed": bool(event.push_suppressed),
        "created_at": event.created_at.isoformat() if event.created_at else None,
        "read_at": None,
        "archived_at": None,
    }


def _send_via_channel(channel: str, message: OutboundMessage) -> None:
    """Send through one adapter, turning any failure into a DeliveryError."""
    try:
        result = get_channel(channel).send(message)
    except Exception as exc:
        raise DeliveryError({channel: [str(exc)]}) from exc

    if result.get("status") != "sent":
        raise DeliveryError({channel: [result.get("error", "Unknown dispatch error")]})


@notifications.event_handler(part_of=Notification)
class NotificationDispatcher:
    """Delivers freshly stored notifications to connections and channels."""

    @handle(NotificationCreated)
    def on_notification_created(self, event: NotificationCreated) -> None:
        payload = payload_from_event(event)

        live = {"event": NEW_NOTIFICATION_EVENT, "payload": payload}
        fanned_out = deliver_with_retry(
            lambda: get_fanout().publish(payload["user_id"], live),
            notification_id=payload["id"],
            channel="realtime",
        )

        message = OutboundMessage(
            user_id=payload["user_id"],
            notification_id=payload["id"],
            title=payload["title"],
            body=payload["message"],
            category=payload["category"],
            priority=payload["priority"],
            action_url=payload["action_url"],
            data=payload["data"],
        )

        sent, dropped = [], []
        for channel in payload["channels"]:
            ok = deliver_with_retry(
                lambda ch=channel: _send_via_channel(ch, message),
                notification_id=payload["id"],
                channel=channel,
            )
            (sent if ok else dropped).append(channel)

        logger.info(
            "notification_dispatched",
            notification_id=payload["id"],
            user_id=payload["user_id"],
            fanned_out=fanned_out,
            channels_sent=sent,
            channels_dropped=dropped,
            push_suppressed=payload["push_suppressed"],
        )

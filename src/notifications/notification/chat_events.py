"""Inbound cross-domain event handler — Notifications reacts to chat messages.

Every participant except the sender is notified.
"""

import json

import structlog
from notifications.domain import notifications
from notifications.notification.delivery import deliver
from notifications.notification.notification import (
    Notification,
    NotificationCategory,
    NotificationType,
)
from protean.utils.mixins import handle
from shared.events.chat import MessageSent

logger = structlog.get_logger(__name__)

notifications.register_external_event(MessageSent, "Chat.MessageSent.v1")


@notifications.event_handler(part_of=Notification, stream_category="chat::message")
class ChatEventsHandler:
    @handle(MessageSent)
    def on_message_sent(self, event: MessageSent) -> None:
        recipients = [r for r in json.loads(event.recipient_ids or "[]") if str(r) != str(event.sender_id)]
        if not recipients:
            logger.info("chat_message_without_recipients", chat_id=str(event.chat_id))
            return

        sender = event.sender_name or "Someone"
        deliver(
            user_ids=recipients,
            category=NotificationCategory.MESSAGES.value,
            notification_type=NotificationType.MESSAGE_RECEIVED.value,
            title=f"New message from {sender}",
            message=event.preview or "You have a new message.",
            data={
                "chat_id": str(event.chat_id),
                "message_id": str(event.message_id),
                "sender_id": str(event.sender_id),
            },
            action_url=f"/chats/{event.chat_id}",
            occurred_at=event.sent_at,
            source="Chat.MessageSent.v1",
        )

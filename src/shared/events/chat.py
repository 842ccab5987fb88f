"""Cross-domain event contracts for chat events.

Chat is owned by the messaging collaborator. A single MessageSent event
fans out to every participant of the conversation except the sender.
"""

from protean.core.event import BaseEvent
from protean.fields import DateTime, Identifier, String, Text


class MessageSent(BaseEvent):
    """A chat message was posted to a conversation."""

    __version__ = 1

    message_id = Identifier(required=True)
    chat_id = Identifier(required=True)
    sender_id = Identifier(required=True)
    sender_name = String(max_length=200)
    recipient_ids = Text(required=True)  # JSON list of user ids
    preview = String(max_length=200)
    sent_at = DateTime(required=True)

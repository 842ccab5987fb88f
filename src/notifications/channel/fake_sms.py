"""Fake SMS adapter — records sent texts for testing."""

from uuid import uuid4

from notifications.channel.message import OutboundMessage
from notifications.channel.sms_port import SMSPort

SMS_MAX_LENGTH = 160


class FakeSMSAdapter(SMSPort):
    def __init__(self):
        self.sent_messages: list[dict] = []
        self.attempts = 0
        self._failures_left = 0
        self.failure_reason = "SMS gateway unavailable"

    def fail_next(self, times: int = 1, failure_reason: str = "SMS gateway unavailable"):
        self._failures_left = times
        self.failure_reason = failure_reason

    def send(self, message: OutboundMessage) -> dict:
        self.attempts += 1
        if self._failures_left > 0:
            self._failures_left -= 1
            return {"message_id": None, "status": "failed", "error": self.failure_reason}

        message_id = f"sms-{uuid4().hex[:12]}"
        self.sent_messages.append(
            {
                "message_id": message_id,
                "to": message.user_id,
                "body": f"{message.title}: {message.body}"[:SMS_MAX_LENGTH],
            }
        )
        return {"message_id": message_id, "status": "sent"}

    def reset(self):
        self.sent_messages.clear()
        self.attempts = 0
        self._failures_left = 0

"""Fake push adapter — records sent pushes for testing."""

from uuid import uuid4

from notifications.channel.message import OutboundMessage
from notifications.channel.push_port import PushPort


class FakePushAdapter(PushPort):
    def __init__(self):
        self.sent_pushes: list[dict] = []
        self.attempts = 0
        self._failures_left = 0
        self.failure_reason = "Push service unavailable"

    def fail_next(self, times: int = 1, failure_reason: str = "Push service unavailable"):
        self._failures_left = times
        self.failure_reason = failure_reason

    def send(self, message: OutboundMessage) -> dict:
        self.attempts += 1
        if self._failures_left > 0:
            self._failures_left -= 1
            return {"message_id": None, "status": "failed", "error": self.failure_reason}

        message_id = f"push-{uuid4().hex[:12]}"
        self.sent_pushes.append(
            {
                "message_id": message_id,
                "user_id": message.user_id,
                "title": message.title,
                "body": message.body,
                "data": {"notification_id": message.notification_id, "action_url": message.action_url},
            }
        )
        return {"message_id": message_id, "status": "sent"}

    def reset(self):
        self.sent_pushes.clear()
        self.attempts = 0
        self._failures_left = 0

"""Fake email adapter — records sent emails and digests for testing."""

from uuid import uuid4

from notifications.channel.email_port import EmailPort
from notifications.channel.message import OutboundMessage


class FakeEmailAdapter(EmailPort):
    """Email adapter that records messages in memory for test assertions.

    ``fail_next(n)`` makes the next ``n`` sends fail, to exercise retries.
    """

    def __init__(self):
        self.sent_emails: list[dict] = []
        self.sent_digests: list[dict] = []
        self.attempts = 0
        self._failures_left = 0
        self.failure_reason = "Email relay unavailable"

    def fail_next(self, times: int = 1, failure_reason: str = "Email relay unavailable"):
        self._failures_left = times
        self.failure_reason = failure_reason

    def _should_fail(self) -> bool:
        self.attempts += 1
        if self._failures_left > 0:
            self._failures_left -= 1
            return True
        return False

    def send(self, message: OutboundMessage) -> dict:
        if self._should_fail():
            return {"message_id": None, "status": "failed", "error": self.failure_reason}

        message_id = f"email-{uuid4().hex[:12]}"
        self.sent_emails.append(
            {
                "message_id": message_id,
                "to": message.user_id,
                "subject": message.title,
                "body": message.body,
                "notification_id": message.notification_id,
            }
        )
        return {"message_id": message_id, "status": "sent"}

    def send_digest(self, user_id: str, frequency: str, items: list[dict]) -> dict:
        if self._should_fail():
            return {"message_id": None, "status": "failed", "error": self.failure_reason}

        message_id = f"digest-{uuid4().hex[:12]}"
        self.sent_digests.append(
            {
                "message_id": message_id,
                "to": user_id,
                "frequency": frequency,
                "items": items,
            }
        )
        return {"message_id": message_id, "status": "sent"}

    def reset(self):
        self.sent_emails.clear()
        self.sent_digests.clear()
        self.attempts = 0
        self._failures_left = 0

"""Email channel port — abstract interface for email dispatch."""

from abc import ABC, abstractmethod

from notifications.channel.message import OutboundMessage


class EmailPort(ABC):
    """Abstract interface for email dispatch adapters.

    Adapters address the user by id; resolving the mailbox is the
    adapter's concern.
    """

    @abstractmethod
    def send(self, message: OutboundMessage) -> dict:
        """Send one notification by email.

        Returns:
            dict with keys: message_id, status ("sent" or "failed"), error (optional)
        """
        ...

    @abstractmethod
    def send_digest(self, user_id: str, frequency: str, items: list[dict]) -> dict:
        """Send one summary email listing several unread notifications."""
        ...

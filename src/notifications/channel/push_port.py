"""Push notification channel port — abstract interface for push dispatch."""

from abc import ABC, abstractmethod

from notifications.channel.message import OutboundMessage


class PushPort(ABC):
    @abstractmethod
    def send(self, message: OutboundMessage) -> dict:
        """Send a push notification to every device of the user.

        Returns:
            dict with keys: message_id, status ("sent" or "failed"), error (optional)
        """
        ...

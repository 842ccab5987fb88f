"""SMS channel port — abstract interface for SMS dispatch."""

from abc import ABC, abstractmethod

from notifications.channel.message import OutboundMessage


class SMSPort(ABC):
    @abstractmethod
    def send(self, message: OutboundMessage) -> dict:
        """Send a short text built from the notification title.

        Returns:
            dict with keys: message_id, status ("sent" or "failed"), error (optional)
        """
        ...

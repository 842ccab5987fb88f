"""What a channel adapter receives for one notification."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class OutboundMessage:
    user_id: str
    notification_id: str
    title: str
    body: str
    category: str
    priority: str
    action_url: str | None = None
    data: dict = field(default_factory=dict)

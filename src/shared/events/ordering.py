"""Cross-domain event contracts for order lifecycle events.

Orders live in the marketplace collaborator, outside this repository.
These classes define the shape of the order events the Notifications
domain consumes. They are registered as external events via
domain.register_external_event() with matching __type__ strings so
Protean's stream deserialization works correctly.
"""

from protean.core.event import BaseEvent
from protean.fields import DateTime, Float, Identifier, String


class OrderCreated(BaseEvent):
    """A buyer placed an order for content on a publisher's website.

    Consumed by the Notifications domain to tell the publisher about
    the new order.
    """

    __version__ = 1

    order_id = Identifier(required=True)
    buyer_id = Identifier(required=True)
    publisher_id = Identifier(required=True)
    website_id = Identifier()
    total = Float(required=True)
    currency = String(default="USD")
    created_at = DateTime(required=True)


class OrderPaid(BaseEvent):
    """Payment for the order was captured and held in escrow."""

    __version__ = 1

    order_id = Identifier(required=True)
    buyer_id = Identifier(required=True)
    publisher_id = Identifier(required=True)
    total = Float(required=True)
    currency = String(default="USD")
    paid_at = DateTime(required=True)


class OrderCompleted(BaseEvent):
    """The order was delivered and accepted by the buyer."""

    __version__ = 1

    order_id = Identifier(required=True)
    buyer_id = Identifier(required=True)
    publisher_id = Identifier(required=True)
    completed_at = DateTime(required=True)

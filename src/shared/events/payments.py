"""Cross-domain event contracts for payment events.

Payments are processed by the payments collaborator; the Notifications
domain consumes these shapes. They are registered as external events via
domain.register_external_event() with matching __type__ strings so
Protean's stream deserialization works correctly.
"""

from protean.core.event import BaseEvent
from protean.fields import Boolean, DateTime, Float, Identifier, Integer, String


class PaymentSucceeded(BaseEvent):
    """Payment was successfully captured by the gateway."""

    __version__ = 1

    payment_id = Identifier(required=True)
    order_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    amount = Float(required=True)
    currency = String(required=True)
    succeeded_at = DateTime(required=True)


class PaymentFailed(BaseEvent):
    """Payment processing failed at the gateway."""

    __version__ = 1

    payment_id = Identifier(required=True)
    order_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    reason = String(required=True)
    attempt_number = Integer(required=True)
    can_retry = Boolean(required=True)
    failed_at = DateTime(required=True)

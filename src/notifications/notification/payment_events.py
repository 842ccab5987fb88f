"""Inbound cross-domain event handler — Notifications reacts to Payment events."""

import structlog
from notifications.domain import notifications
from notifications.notification.delivery import deliver
from notifications.notification.notification import (
    Notification,
    NotificationCategory,
    NotificationPriority,
    NotificationType,
)
from protean.utils.mixins import handle
from shared.events.payments import PaymentFailed, PaymentSucceeded

logger = structlog.get_logger(__name__)

notifications.register_external_event(PaymentSucceeded, "Payments.PaymentSucceeded.v1")
notifications.register_external_event(PaymentFailed, "Payments.PaymentFailed.v1")


@notifications.event_handler(part_of=Notification, stream_category="payments::payment")
class PaymentEventsHandler:
    @handle(PaymentSucceeded)
    def on_payment_succeeded(self, event: PaymentSucceeded) -> None:
        deliver(
            user_ids=[event.customer_id],
            category=NotificationCategory.PAYMENTS.value,
            notification_type=NotificationType.PAYMENT_RECEIVED.value,
            title="Payment received",
            message=f"We received your payment of {event.amount:.2f} {event.currency}.",
            data={"payment_id": str(event.payment_id), "order_id": str(event.order_id)},
            action_url=f"/orders/{event.order_id}",
            occurred_at=event.succeeded_at,
            source="Payments.PaymentSucceeded.v1",
        )

    @handle(PaymentFailed)
    def on_payment_failed(self, event: PaymentFailed) -> None:
        message = f"Your payment could not be processed: {event.reason}."
        if event.can_retry:
            message += " Please try again."

        deliver(
            user_ids=[event.customer_id],
            category=NotificationCategory.PAYMENTS.value,
            notification_type=NotificationType.PAYMENT_FAILED.value,
            title="Payment failed",
            message=message,
            data={
                "payment_id": str(event.payment_id),
                "order_id": str(event.order_id),
                "attempt_number": event.attempt_number,
                "can_retry": bool(event.can_retry),
            },
            priority=NotificationPriority.HIGH.value,
            action_url=f"/orders/{event.order_id}",
            occurred_at=event.failed_at,
            source="Payments.PaymentFailed.v1",
        )

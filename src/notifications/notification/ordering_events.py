"""Inbound cross-domain event handler — Notifications reacts to Order events.

OrderCreated and OrderPaid go to the publisher who has to deliver the
content; OrderCompleted goes to both parties.
"""

import structlog
from notifications.domain import notifications
from notifications.notification.delivery import deliver
from notifications.notification.notification import (
    Notification,
    NotificationCategory,
    NotificationType,
)
from protean.utils.mixins import handle
from shared.events.ordering import OrderCompleted, OrderCreated, OrderPaid

logger = structlog.get_logger(__name__)

notifications.register_external_event(OrderCreated, "Ordering.OrderCreated.v1")
notifications.register_external_event(OrderPaid, "Ordering.OrderPaid.v1")
notifications.register_external_event(OrderCompleted, "Ordering.OrderCompleted.v1")


def _order_url(order_id) -> str:
    return f"/orders/{order_id}"


@notifications.event_handler(part_of=Notification, stream_category="ordering::order")
class OrderingEventsHandler:
    @handle(OrderCreated)
    def on_order_created(self, event: OrderCreated) -> None:
        deliver(
            user_ids=[event.publisher_id],
            category=NotificationCategory.ORDERS.value,
            notification_type=NotificationType.ORDER_CREATED.value,
            title="New order received",
            message=f"You received a new order worth {event.total:.2f} {event.currency}.",
            data={
                "order_id": str(event.order_id),
                "website_id": str(event.website_id) if event.website_id else None,
            },
            action_url=_order_url(event.order_id),
            occurred_at=event.created_at,
            source="Ordering.OrderCreated.v1",
        )

    @handle(OrderPaid)
    def on_order_paid(self, event: OrderPaid) -> None:
        deliver(
            user_ids=[event.publisher_id],
            category=NotificationCategory.ORDERS.value,
            notification_type=NotificationType.ORDER_PAID.value,
            title="Order paid",
            message=f"The buyer paid {event.total:.2f} {event.currency}. You can start working on the order.",
            data={"order_id": str(event.order_id)},
            action_url=_order_url(event.order_id),
            occurred_at=event.paid_at,
            source="Ordering.OrderPaid.v1",
        )

    @handle(OrderCompleted)
    def on_order_completed(self, event: OrderCompleted) -> None:
        deliver(
            user_ids=[event.buyer_id, event.publisher_id],
            category=NotificationCategory.ORDERS.value,
            notification_type=NotificationType.ORDER_COMPLETED.value,
            title="Order completed",
            message="The order has been completed.",
            data={"order_id": str(event.order_id)},
            action_url=_order_url(event.order_id),
            occurred_at=event.completed_at,
            source="Ordering.OrderCompleted.v1",
        )

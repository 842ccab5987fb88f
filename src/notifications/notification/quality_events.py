"""Inbound cross-domain event handler — Notifications reacts to Quality events.

Tells reviewers about new assignments and submitters about review
outcomes. Quality notifications belong to the ``orders`` category since
every quality check is tied to an order.
"""

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
from shared.events.quality import ManualReviewCompleted, ReviewerAssigned

logger = structlog.get_logger(__name__)

notifications.register_external_event(ReviewerAssigned, "Quality.ReviewerAssigned.v1")
notifications.register_external_event(ManualReviewCompleted, "Quality.ManualReviewCompleted.v1")

# verdict → (type, priority, title)
_OUTCOMES = {
    "approved": (
        NotificationType.QUALITY_CHECK_PASSED,
        NotificationPriority.MEDIUM,
        "Your content passed the quality review",
    ),
    "rejected": (
        NotificationType.QUALITY_CHECK_FAILED,
        NotificationPriority.HIGH,
        "Your content failed the quality review",
    ),
    "needs_revision": (
        NotificationType.QUALITY_REVISION_REQUESTED,
        NotificationPriority.HIGH,
        "Revision requested for your content",
    ),
}


def _check_url(quality_check_id) -> str:
    return f"/quality/checks/{quality_check_id}"


@notifications.event_handler(part_of=Notification, stream_category="quality::quality_check")
class QualityEventsHandler:
    @handle(ReviewerAssigned)
    def on_reviewer_assigned(self, event: ReviewerAssigned) -> None:
        """Notify the reviewer that a check is waiting for them."""
        label = event.title or f"order {event.order_id}"
        deliver(
            user_ids=[event.reviewer_id],
            category=NotificationCategory.ORDERS.value,
            notification_type=NotificationType.QUALITY_CHECK_ASSIGNED.value,
            title="New quality check assigned",
            message=f"You have been assigned the quality check for {label}.",
            data={
                "quality_check_id": str(event.quality_check_id),
                "order_id": str(event.order_id),
                "website_id": str(event.website_id),
            },
            action_url=_check_url(event.quality_check_id),
            occurred_at=event.assigned_at,
            source="Quality.ReviewerAssigned.v1",
        )

    @handle(ManualReviewCompleted)
    def on_manual_review_completed(self, event: ManualReviewCompleted) -> None:
        """Notify the submitter of the verdict."""
        outcome = _OUTCOMES.get(event.verdict)
        if outcome is None:
            logger.warning(
                "unknown_quality_verdict",
                quality_check_id=str(event.quality_check_id),
                verdict=event.verdict,
            )
            return

        notification_type, priority, title = outcome
        message = title + "."
        if event.comments:
            message = f"{title}: {event.comments}"

        deliver(
            user_ids=[event.submitted_by],
            category=NotificationCategory.ORDERS.value,
            notification_type=notification_type.value,
            title=title,
            message=message,
            data={
                "quality_check_id": str(event.quality_check_id),
                "order_id": str(event.order_id),
                "website_id": str(event.website_id),
                "verdict": event.verdict,
                "status": event.status,
            },
            priority=priority.value,
            action_url=_check_url(event.quality_check_id),
            occurred_at=event.completed_at,
            source="Quality.ManualReviewCompleted.v1",
        )

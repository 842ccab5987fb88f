"""DeliverNotification — the intake envelope of the delivery pipeline.

Every producer (Quality events, order/payment/chat collaborators, external
systems through the HTTP intake) ends up here. Per target user:

1. resolve preferences (stored or defaults); a disabled category or a
   disabled in-app channel drops the notification silently;
2. plan the immediate channels; during the user's DND window push is
   removed from the plan and the notification is flagged ``push_suppressed``;
3. persist the UNREAD notification and bump the user's inbox counter in
   the same unit of work.

Fan-out to live connections and channel sends happen in the dispatcher,
after the unit of work commits.
"""

import json
from dataclasses import dataclass, field
from datetime import UTC, datetime

import structlog
from notifications.domain import notifications
from notifications.inbox.inbox import Inbox, inbox_for
from notifications.notification.notification import (
    DeliveryChannel,
    Notification,
    NotificationCategory,
    NotificationPriority,
    NotificationType,
    validate_enum,
)
from notifications.preference.preference import get_preferences
from notifications.preference.quiet_hours import in_do_not_disturb
from protean.exceptions import ValidationError
from protean.fields import DateTime, String, Text
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

logger = structlog.get_logger(__name__)


@dataclass
class DeliveryPlan:
    channels: list[str] = field(default_factory=list)
    push_suppressed: bool = False


def plan_delivery(preference, category, at) -> DeliveryPlan | None:
    """Decide how a notification of ``category`` reaches the user at ``at``.

    Returns None when the notification must not be stored at all.
    """
    if not preference.in_app.enabled or not preference.allows_category(category):
        return None

    channels = preference.immediate_channels()
    push_suppressed = False
    if DeliveryChannel.PUSH.value in channels and in_do_not_disturb(preference, at):
        channels.remove(DeliveryChannel.PUSH.value)
        push_suppressed = True

    return DeliveryPlan(channels=channels, push_suppressed=push_suppressed)


@notifications.command(part_of="Notification")
class DeliverNotification:
    """Envelope describing one fact to deliver to one or more users."""

    user_ids: Text(required=True)  # JSON list of user ids
    category: String(required=True)
    notification_type: String(required=True)
    title: String(required=True, max_length=255)
    message: Text(required=True)
    data: Text()  # JSON
    priority: String(default=NotificationPriority.MEDIUM.value)
    action_url: String(max_length=1000)
    occurred_at: DateTime()
    source: String(max_length=200)


def _unique_users(user_ids) -> list[str]:
    unique = []
    for user_id in user_ids or []:
        user_id = str(user_id).strip() if user_id is not None else ""
        if user_id and user_id not in unique:
            unique.append(user_id)
    if not unique:
        raise ValidationError({"user_ids": ["At least one target user is required"]})
    return unique


def deliver(
    user_ids,
    category,
    notification_type,
    title,
    message,
    data=None,
    priority=NotificationPriority.MEDIUM.value,
    action_url=None,
    occurred_at=None,
    source=None,
) -> list[str]:
    """Run steps 1–3 of the pipeline for every target user.

    Returns the ids of the notifications created; users whose preferences
    drop the notification are skipped.
    """
    category = validate_enum(NotificationCategory, category, "category")
    notification_type = validate_enum(NotificationType, notification_type, "notification_type")
    priority = validate_enum(NotificationPriority, priority or NotificationPriority.MEDIUM.value, "priority")
    if not title or not message:
        raise ValidationError({"message": ["Title and message are required"]})

    at = occurred_at or datetime.now(UTC)
    repo = current_domain.repository_for(Notification)
    inbox_repo = current_domain.repository_for(Inbox)

    created = []
    for user_id in _unique_users(user_ids):
        plan = plan_delivery(get_preferences(user_id), category, at)
        if plan is None:
            logger.info(
                "notification_dropped_by_preferences",
                user_id=user_id,
                category=category,
                notification_type=notification_type,
            )
            continue

        notification = Notification.create(
            user_id=user_id,
            notification_type=notification_type,
            category=category,
            title=title,
            message=message,
            data=data,
            priority=priority,
            action_url=action_url,
            channels=plan.channels,
            push_suppressed=plan.push_suppressed,
        )
        inbox = inbox_for(user_id)
        inbox.increment()

        repo.add(notification)
        inbox_repo.add(inbox)
        created.append(str(notification.id))

    logger.info(
        "notifications_created",
        notification_type=notification_type,
        source=source,
        count=len(created),
    )
    return created


@notifications.command_handler(part_of=Notification)
class DeliverNotificationHandler:
    @handle(DeliverNotification)
    def deliver_notification(self, command: DeliverNotification):
        try:
            user_ids = json.loads(command.user_ids)
            data = json.loads(command.data) if command.data else {}
        except (TypeError, ValueError):
            raise ValidationError({"user_ids": ["user_ids and data must be valid JSON"]}) from None
        if not isinstance(user_ids, list):
            raise ValidationError({"user_ids": ["user_ids must be a JSON list"]})

        return deliver(
            user_ids=user_ids,
            category=command.category,
            notification_type=command.notification_type,
            title=command.title,
            message=command.message,
            data=data,
            priority=command.priority,
            action_url=command.action_url,
            occurred_at=command.occurred_at,
            source=command.source,
        )

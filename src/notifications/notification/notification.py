"""Notification aggregate (CQRS) — one addressed fact delivered to one user.

Notifications are created by the delivery pipeline from domain events and
collaborator envelopes, and then only move through the user's read/archive
actions. Deletion is permanent and handled by the repository.

State Machine (3 states):
    UNREAD → READ
    UNREAD → ARCHIVED
    READ → ARCHIVED
    ARCHIVED → (terminal, no restore)
"""

import json
from datetime import UTC, datetime
from enum import Enum

from notifications.domain import notifications
from notifications.notification.events import (
    NotificationArchived,
    NotificationCreated,
    NotificationRead,
)
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Identifier, String, Text
from shared.exceptions import InvalidStateTransition


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class NotificationType(Enum):
    ORDER_CREATED = "order_created"
    ORDER_PAID = "order_paid"
    ORDER_COMPLETED = "order_completed"
    PAYMENT_RECEIVED = "payment_received"
    PAYMENT_FAILED = "payment_failed"
    MESSAGE_RECEIVED = "message_received"
    WEBSITE_APPROVED = "website_approved"
    WEBSITE_REJECTED = "website_rejected"
    QUALITY_CHECK_ASSIGNED = "quality_check_assigned"
    QUALITY_CHECK_PASSED = "quality_check_passed"
    QUALITY_CHECK_FAILED = "quality_check_failed"
    QUALITY_REVISION_REQUESTED = "quality_revision_requested"
    SUPPORT_TICKET_UPDATED = "support_ticket_updated"
    SYSTEM_ANNOUNCEMENT = "system_announcement"


class NotificationCategory(Enum):
    ORDERS = "orders"
    PAYMENTS = "payments"
    WEBSITES = "websites"
    MESSAGES = "messages"
    SUPPORT = "support"
    SYSTEM = "system"


class NotificationPriority(Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class NotificationStatus(Enum):
    UNREAD = "unread"
    READ = "read"
    ARCHIVED = "archived"


class DeliveryChannel(Enum):
    """Out-of-app channels. In-app delivery is implied by the record itself."""

    EMAIL = "email"
    SMS = "sms"
    PUSH = "push"


# ---------------------------------------------------------------------------
# State Machine
# ---------------------------------------------------------------------------
_VALID_TRANSITIONS = {
    NotificationStatus.UNREAD: {NotificationStatus.READ, NotificationStatus.ARCHIVED},
    NotificationStatus.READ: {NotificationStatus.ARCHIVED},
    NotificationStatus.ARCHIVED: set(),  # Terminal
}


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@notifications.aggregate
class Notification:
    """A single notification addressed to one user."""

    # Recipient
    user_id: Identifier(required=True)

    # Classification
    notification_type: String(choices=NotificationType, required=True)
    category: String(choices=NotificationCategory, required=True)
    priority: String(choices=NotificationPriority, default=NotificationPriority.MEDIUM.value)

    # Content
    title: String(required=True, max_length=255)
    message: Text(required=True)
    data: Text()  # JSON — opaque payload, e.g. {"chat_id": ...}
    action_url: String(max_length=1000)

    # Status
    status: String(choices=NotificationStatus, default=NotificationStatus.UNREAD.value)

    # Delivery plan
    channels: Text()  # JSON list of DeliveryChannel values sent immediately
    push_suppressed: Boolean(default=False)

    # Timestamps
    created_at: DateTime()
    read_at: DateTime()
    archived_at: DateTime()
    updated_at: DateTime()

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(
        cls,
        user_id,
        notification_type,
        category,
        title,
        message,
        data=None,
        priority=NotificationPriority.MEDIUM.value,
        action_url=None,
        channels=None,
        push_suppressed=False,
        created_at=None,
    ):
        """Create a new notification in UNREAD status."""
        now = created_at or datetime.now(UTC)
        data_json = json.dumps(data or {})
        channels_json = json.dumps(list(channels or []))

        notification = cls(
            user_id=user_id,
            notification_type=notification_type,
            category=category,
            priority=priority or NotificationPriority.MEDIUM.value,
            title=title,
            message=message,
            data=data_json,
            action_url=action_url,
            status=NotificationStatus.UNREAD.value,
            channels=channels_json,
            push_suppressed=push_suppressed,
            created_at=now,
            updated_at=now,
        )

        notification.raise_(
            NotificationCreated(
                notification_id=str(notification.id),
                user_id=str(user_id),
                notification_type=notification_type,
                category=category,
                title=title,
                message=message,
                data=data_json,
                priority=notification.priority,
                action_url=action_url,
                status=NotificationStatus.UNREAD.value,
                channels=channels_json,
                push_suppressed=push_suppressed,
                created_at=now,
            )
        )

        return notification

    # -------------------------------------------------------------------
    # Query helpers
    # -------------------------------------------------------------------
    @property
    def is_unread(self) -> bool:
        return self.status == NotificationStatus.UNREAD.value

    @property
    def channel_list(self) -> list[str]:
        return json.loads(self.channels) if self.channels else []

    @property
    def data_dict(self) -> dict:
        return json.loads(self.data) if self.data else {}

    def to_payload(self) -> dict:
        """Wire representation pushed to clients and returned by the API."""
        return {
            "id": str(self.id),
            "user_id": str(self.user_id),
            "type": self.notification_type,
            "category": self.category,
            "title": self.title,
            "message": self.message,
            "data": self.data_dict,
            "priority": self.priority,
            "action_url": self.action_url,
            "status": self.status,
            "channels": self.channel_list,
            "push_suppressed": bool(self.push_suppressed),
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "read_at": self.read_at.isoformat() if self.read_at else None,
            "archived_at": self.archived_at.isoformat() if self.archived_at else None,
        }

    # -------------------------------------------------------------------
    # State transitions
    # -------------------------------------------------------------------
    def _assert_can_transition(self, target_status):
        """Validate state machine transition."""
        current = NotificationStatus(self.status)
        if target_status not in _VALID_TRANSITIONS.get(current, set()):
            raise InvalidStateTransition(
                {"status": [f"Cannot transition from {current.value} to {target_status.value}"]}
            )

    def mark_read(self) -> bool:
        """Mark as read. Returns True only when the notification was unread.

        Reading an already read notification is a no-op; reading an archived
        one is rejected.
        """
        if self.status == NotificationStatus.READ.value:
            return False
        self._assert_can_transition(NotificationStatus.READ)

        now = datetime.now(UTC)
        self.status = NotificationStatus.READ.value
        self.read_at = now
        self.updated_at = now

        self.raise_(
            NotificationRead(
                notification_id=str(self.id),
                user_id=str(self.user_id),
                read_at=now,
            )
        )
        return True

    def archive(self) -> bool:
        """Archive. Returns True when the notification was still unread."""
        if self.status == NotificationStatus.ARCHIVED.value:
            return False
        self._assert_can_transition(NotificationStatus.ARCHIVED)

        was_unread = self.is_unread
        now = datetime.now(UTC)
        self.status = NotificationStatus.ARCHIVED.value
        self.archived_at = now
        self.updated_at = now

        self.raise_(
            NotificationArchived(
                notification_id=str(self.id),
                user_id=str(self.user_id),
                was_unread=was_unread,
                archived_at=now,
            )
        )
        return was_unread


def validate_enum(enum_cls, value, field_name):
    """Return the enum value or raise a ValidationError naming the allowed values."""
    try:
        return enum_cls(value).value
    except ValueError:
        allowed = ", ".join(e.value for e in enum_cls)
        raise ValidationError({field_name: [f"Unknown {field_name} '{value}'. Expected one of: {allowed}"]}) from None

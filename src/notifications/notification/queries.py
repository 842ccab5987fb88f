"""Read-side helpers: notification listing and unread counts."""

from notifications.inbox.inbox import Inbox
from notifications.notification.notification import (
    Notification,
    NotificationCategory,
    NotificationStatus,
    NotificationType,
    validate_enum,
)
from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

MAX_PAGE_SIZE = 100


def list_notifications(
    user_id,
    status=None,
    category=None,
    notification_type=None,
    page=1,
    limit=20,
    sort_order="desc",
) -> dict:
    """A user's notifications, newest first. Archived ones only on request."""
    if page < 1:
        raise ValidationError({"page": ["Page must be 1 or greater"]})
    if not 1 <= limit <= MAX_PAGE_SIZE:
        raise ValidationError({"limit": [f"Limit must be between 1 and {MAX_PAGE_SIZE}"]})
    if sort_order not in ("asc", "desc"):
        raise ValidationError({"sort_order": ["sort_order must be 'asc' or 'desc'"]})

    filters = {"user_id": str(user_id)}
    if status:
        filters["status"] = validate_enum(NotificationStatus, status, "status")
    if category:
        filters["category"] = validate_enum(NotificationCategory, category, "category")
    if notification_type:
        filters["notification_type"] = validate_enum(NotificationType, notification_type, "notification_type")

    repo = current_domain.repository_for(Notification)
    items = repo._dao.query.filter(**filters).limit(None).all().items
    if not status:
        items = [n for n in items if n.status != NotificationStatus.ARCHIVED.value]

    items = sorted(items, key=lambda n: str(n.id))
    items = sorted(items, key=lambda n: n.created_at, reverse=sort_order == "desc")

    start = (page - 1) * limit
    return {
        "items": items[start : start + limit],
        "total": len(items),
        "page": page,
        "limit": limit,
    }


def unread_count(user_id) -> int:
    """The user's inbox counter (0 for users who never received anything)."""
    repo = current_domain.repository_for(Inbox)
    inboxes = repo._dao.query.filter(user_id=str(user_id)).limit(None).all().items
    return inboxes[0].unread_count if inboxes else 0


def recount_unread(user_id) -> int:
    """Count UNREAD notifications straight from storage."""
    repo = current_domain.repository_for(Notification)
    return len(
        repo._dao.query.filter(
            user_id=str(user_id),
            status=NotificationStatus.UNREAD.value,
        ).limit(None).all().items
    )

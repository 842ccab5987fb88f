"""MarkNotificationRead / MarkAllNotificationsRead.

Reading is idempotent: the inbox counter only moves on an UNREAD → READ
transition, in the same unit of work as the notification.
"""

from notifications.domain import notifications
from notifications.inbox.inbox import Inbox, inbox_for
from notifications.notification.notification import Notification, NotificationStatus
from protean.fields import Identifier
from protean.utils.globals import current_domain
from protean.utils.mixins import handle
from shared.exceptions import AuthorizationError


def load_owned(notification_id, acting_user_id) -> Notification:
    """Load a notification the acting user owns."""
    notification = current_domain.repository_for(Notification).get(notification_id)
    if str(notification.user_id) != str(acting_user_id):
        raise AuthorizationError({"notification_id": ["Notification belongs to another user"]})
    return notification


@notifications.command(part_of="Notification")
class MarkNotificationRead:
    notification_id: Identifier(required=True)
    acting_user_id: Identifier(required=True)


@notifications.command(part_of="Notification")
class MarkAllNotificationsRead:
    user_id: Identifier(required=True)


@notifications.command_handler(part_of=Notification)
class ReadNotificationsHandler:
    @handle(MarkNotificationRead)
    def mark_read(self, command: MarkNotificationRead):
        notification = load_owned(command.notification_id, command.acting_user_id)

        if notification.mark_read():
            inbox = inbox_for(notification.user_id)
            inbox.decrement()
            current_domain.repository_for(Notification).add(notification)
            current_domain.repository_for(Inbox).add(inbox)

        return notification.status

    @handle(MarkAllNotificationsRead)
    def mark_all_read(self, command: MarkAllNotificationsRead):
        repo = current_domain.repository_for(Notification)
        unread = repo._dao.query.filter(
            user_id=str(command.user_id),
            status=NotificationStatus.UNREAD.value,
        ).limit(None).all().items

        for notification in unread:
            notification.mark_read()
            repo.add(notification)

        inbox = inbox_for(command.user_id)
        inbox.reset(0)
        current_domain.repository_for(Inbox).add(inbox)

        return len(unread)

"""ArchiveNotification — hide a notification for good (no restore)."""

from notifications.domain import notifications
from notifications.inbox.inbox import Inbox, inbox_for
from notifications.notification.notification import Notification, NotificationStatus
from notifications.notification.reading import load_owned
from protean.fields import Identifier
from protean.utils.globals import current_domain
from protean.utils.mixins import handle


@notifications.command(part_of="Notification")
class ArchiveNotification:
    notification_id: Identifier(required=True)
    acting_user_id: Identifier(required=True)


@notifications.command_handler(part_of=Notification)
class ArchiveNotificationHandler:
    @handle(ArchiveNotification)
    def archive(self, command: ArchiveNotification):
        notification = load_owned(command.notification_id, command.acting_user_id)

        if notification.status == NotificationStatus.ARCHIVED.value:
            return notification.status

        was_unread = notification.archive()

        current_domain.repository_for(Notification).add(notification)
        if was_unread:
            inbox = inbox_for(notification.user_id)
            inbox.decrement()
            current_domain.repository_for(Inbox).add(inbox)

        return notification.status

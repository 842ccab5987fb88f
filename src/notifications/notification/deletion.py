"""DeleteNotification — permanent removal by the owner."""

import structlog
from notifications.domain import notifications
from notifications.inbox.inbox import Inbox, inbox_for
from notifications.notification.notification import Notification
from notifications.notification.reading import load_owned
from protean.fields import Identifier
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

logger = structlog.get_logger(__name__)


@notifications.command(part_of="Notification")
class DeleteNotification:
    notification_id: Identifier(required=True)
    acting_user_id: Identifier(required=True)


@notifications.command_handler(part_of=Notification)
class DeleteNotificationHandler:
    @handle(DeleteNotification)
    def delete(self, command: DeleteNotification):
        notification = load_owned(command.notification_id, command.acting_user_id)
        was_unread = notification.is_unread

        current_domain.repository_for(Notification)._dao.delete(notification)
        if was_unread:
            inbox = inbox_for(notification.user_id)
            inbox.decrement()
            current_domain.repository_for(Inbox).add(inbox)

        logger.info(
            "notification_deleted",
            notification_id=str(notification.id),
            user_id=str(notification.user_id),
            was_unread=was_unread,
        )

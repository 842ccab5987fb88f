"""SendDigests — periodic summary emails for digest subscribers.

Users whose email frequency is ``daily_digest`` or ``weekly_digest`` get
one email listing their unread notifications created since the previous
digest, once the period has elapsed. Designed to be triggered by an
external scheduler; running it twice in a period sends nothing new.
"""

from datetime import UTC, datetime, timedelta

import structlog
from notifications.channel import get_channel
from notifications.domain import notifications
from notifications.notification.notification import (
    DeliveryChannel,
    Notification,
    NotificationStatus,
)
from notifications.notification.retry import deliver_with_retry
from notifications.preference.preference import Frequency, NotificationPreference
from protean.fields import DateTime
from protean.utils.globals import current_domain
from protean.utils.mixins import handle
from shared.exceptions import DeliveryError

logger = structlog.get_logger(__name__)

DIGEST_PERIODS = {
    Frequency.DAILY_DIGEST.value: timedelta(days=1),
    Frequency.WEEKLY_DIGEST.value: timedelta(days=7),
}


@notifications.command(part_of="NotificationPreference")
class SendDigests:
    as_of: DateTime()


def _digest_items(user_id, since) -> list[dict]:
    repo = current_domain.repository_for(Notification)
    unread = repo._dao.query.filter(
        user_id=str(user_id),
        status=NotificationStatus.UNREAD.value,
    ).limit(None).all().items
    items = [n for n in unread if since is None or n.created_at > since]
    items.sort(key=lambda n: n.created_at)
    return [
        {
            "id": str(n.id),
            "title": n.title,
            "category": n.category,
            "created_at": n.created_at.isoformat(),
        }
        for n in items
    ]


def _send_digest(user_id, frequency, items):
    result = get_channel(DeliveryChannel.EMAIL.value).send_digest(user_id, frequency, items)
    if result.get("status") != "sent":
        raise DeliveryError({"email": [result.get("error", "Digest delivery failed")]})


@notifications.command_handler(part_of=NotificationPreference)
class SendDigestsHandler:
    @handle(SendDigests)
    def send_digests(self, command: SendDigests):
        as_of = command.as_of or datetime.now(UTC)
        if as_of.tzinfo is None:
            as_of = as_of.replace(tzinfo=UTC)
        repo = current_domain.repository_for(NotificationPreference)

        sent = 0
        for preference in repo._dao.query.limit(None).all().items:
            frequency = preference.email.frequency
            period = DIGEST_PERIODS.get(frequency)
            if period is None or not preference.email.enabled:
                continue

            last = preference.last_digest_at
            if last is not None and as_of - last < period:
                continue

            items = _digest_items(preference.user_id, since=last or as_of - period)
            if not items:
                continue

            ok = deliver_with_retry(
                lambda p=preference, f=frequency, i=items: _send_digest(str(p.user_id), f, i),
                user_id=str(preference.user_id),
                channel="email_digest",
            )
            if ok:
                preference.mark_digest_sent(frequency, len(items), as_of)
                repo.add(preference)
                sent += 1

        logger.info("digests_sent", count=sent, as_of=as_of.isoformat())
        return sent

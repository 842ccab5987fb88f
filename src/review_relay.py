"""In-process relay of Quality review events to the Notifications domain.

Under the production overlay the Notifications Engine consumes the
``quality::quality_check`` stream. With synchronous event processing
there is no Engine, so the web app enables this handler and the same
Notifications handler runs right after the Quality command commits.

The delivery runs in an empty context: Protean keeps one Unit of Work
stack for all domains, and the Notifications transaction must not join
the Quality handler's.
"""

import contextvars

import structlog
from notifications.domain import notifications
from notifications.notification.quality_events import QualityEventsHandler
from protean.utils import Processing
from protean.utils.mixins import handle
from protean.utils.reflection import declared_fields
from quality.check import events
from quality.check.quality_check import QualityCheck
from quality.domain import quality

from shared.events import quality as contracts

logger = structlog.get_logger(__name__)

_enabled = False


def enable() -> None:
    global _enabled
    _enabled = True


def disable() -> None:
    global _enabled
    _enabled = False


def _deliver(contract_cls, values, handler) -> None:
    with notifications.domain_context():
        handler(QualityEventsHandler(), contract_cls(**values))


def _relay(event, contract_cls, handler) -> None:
    if not _enabled or quality.config["event_processing"] != Processing.SYNC.value:
        return

    values = {name: getattr(event, name) for name in declared_fields(contract_cls)}
    logger.debug(
        "quality_event_relayed",
        event=event.__class__.__name__,
        quality_check_id=str(event.quality_check_id),
    )
    contextvars.Context().run(_deliver, contract_cls, values, handler)


@quality.event_handler(part_of=QualityCheck)
class NotificationsRelay:
    @handle(events.ReviewerAssigned)
    def on_reviewer_assigned(self, event: events.ReviewerAssigned) -> None:
        _relay(event, contracts.ReviewerAssigned, QualityEventsHandler.on_reviewer_assigned)

    @handle(events.ManualReviewCompleted)
    def on_manual_review_completed(self, event: events.ManualReviewCompleted) -> None:
        _relay(
            event,
            contracts.ManualReviewCompleted,
            QualityEventsHandler.on_manual_review_completed,
        )

"""QualityStats — number of checks per status, for the review dashboard."""

from protean.core.projector import on
from protean.exceptions import ObjectNotFoundError
from protean.fields import DateTime, Identifier, Integer
from protean.utils.globals import current_domain

from quality.check.events import (
    ManualReviewCompleted,
    ManualReviewStarted,
    QualityCheckCreated,
    ReviewerAssigned,
    RevisionSubmitted,
)
from quality.check.quality_check import QualityCheck, QualityStatus
from quality.domain import quality

STATS_ID = "quality-stats"

_COUNTERS = {
    QualityStatus.PENDING.value: "pending",
    QualityStatus.UNDER_REVIEW.value: "under_review",
    QualityStatus.IN_PROGRESS.value: "in_progress",
    QualityStatus.NEEDS_REVISION.value: "needs_revision",
    QualityStatus.PASSED.value: "passed",
    QualityStatus.FAILED.value: "failed",
}


@quality.projection
class QualityStats:
    stats_id = Identifier(identifier=True, required=True)
    total = Integer(default=0)
    pending = Integer(default=0)
    under_review = Integer(default=0)
    in_progress = Integer(default=0)
    needs_revision = Integer(default=0)
    passed = Integer(default=0)
    failed = Integer(default=0)
    updated_at = DateTime()

    def as_dict(self):
        return {
            "total": self.total,
            **{name: getattr(self, name) or 0 for name in _COUNTERS.values()},
        }


def _load():
    repo = current_domain.repository_for(QualityStats)
    try:
        return repo.get(STATS_ID)
    except ObjectNotFoundError:
        return QualityStats(stats_id=STATS_ID)


def _move(from_status, to_status, at):
    repo = current_domain.repository_for(QualityStats)
    stats = _load()
    if from_status is not None:
        name = _COUNTERS[from_status]
        setattr(stats, name, max(0, (getattr(stats, name) or 0) - 1))
    else:
        stats.total = (stats.total or 0) + 1
    name = _COUNTERS[to_status]
    setattr(stats, name, (getattr(stats, name) or 0) + 1)
    stats.updated_at = at
    repo.add(stats)


def get_quality_stats() -> dict:
    return _load().as_dict()


@quality.projector(projector_for=QualityStats, aggregates=[QualityCheck])
class QualityStatsProjector:
    @on(QualityCheckCreated)
    def on_created(self, event):
        _move(None, event.status, event.created_at)

    @on(ReviewerAssigned)
    def on_reviewer_assigned(self, event):
        _move(QualityStatus.PENDING.value, QualityStatus.UNDER_REVIEW.value, event.assigned_at)

    @on(ManualReviewStarted)
    def on_review_started(self, event):
        _move(event.previous_status, QualityStatus.IN_PROGRESS.value, event.started_at)

    @on(ManualReviewCompleted)
    def on_review_completed(self, event):
        _move(QualityStatus.IN_PROGRESS.value, event.status, event.completed_at)

    @on(RevisionSubmitted)
    def on_revision_submitted(self, event):
        _move(QualityStatus.NEEDS_REVISION.value, QualityStatus.UNDER_REVIEW.value, event.submitted_at)

"""Read-side helpers for quality checks (listing, filtering, paging)."""

from datetime import UTC, datetime

from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

from quality.check.quality_check import Priority, QualityCheck, QualityStatus

SORTABLE_FIELDS = ("created_at", "deadline", "priority", "status")
MAX_PAGE_SIZE = 100

_PRIORITY_RANK = {
    Priority.LOW.value: 0,
    Priority.MEDIUM.value: 1,
    Priority.HIGH.value: 2,
    Priority.URGENT.value: 3,
}
_STATUS_RANK = {status.value: rank for rank, status in enumerate(QualityStatus)}
_EPOCH = datetime.min.replace(tzinfo=UTC)


def get_quality_check(quality_check_id) -> QualityCheck:
    return current_domain.repository_for(QualityCheck).get(quality_check_id)


def _sort_key(sort_by):
    if sort_by == "priority":
        return lambda c: _PRIORITY_RANK.get(c.priority, 0)
    if sort_by == "status":
        return lambda c: _STATUS_RANK.get(c.status, 0)
    # Checks without a deadline sort as the earliest value
    return lambda c: getattr(c, sort_by) or _EPOCH


def _paginate(items, page, limit):
    if page < 1:
        raise ValidationError({"page": ["Page must be 1 or greater"]})
    if not 1 <= limit <= MAX_PAGE_SIZE:
        raise ValidationError({"limit": [f"Limit must be between 1 and {MAX_PAGE_SIZE}"]})

    start = (page - 1) * limit
    return {
        "items": items[start : start + limit],
        "total": len(items),
        "page": page,
        "limit": limit,
    }


def list_quality_checks(
    status=None,
    priority=None,
    assigned_to=None,
    submitted_by=None,
    sort_by="created_at",
    sort_order="desc",
    page=1,
    limit=20,
) -> dict:
    """Filtered, sorted and paginated view over all checks."""
    if sort_by not in SORTABLE_FIELDS:
        raise ValidationError({"sort_by": [f"sort_by must be one of: {', '.join(SORTABLE_FIELDS)}"]})
    if sort_order not in ("asc", "desc"):
        raise ValidationError({"sort_order": ["sort_order must be 'asc' or 'desc'"]})

    filters = {}
    if status:
        filters["status"] = status
    if priority:
        filters["priority"] = priority
    if assigned_to:
        filters["assigned_to"] = str(assigned_to)
    if submitted_by:
        filters["submitted_by"] = str(submitted_by)

    dao = current_domain.repository_for(QualityCheck)._dao
    query = dao.query.filter(**filters) if filters else dao.query
    items = query.limit(None).all().items

    items = sorted(items, key=lambda c: str(c.id))
    items = sorted(items, key=_sort_key(sort_by), reverse=sort_order == "desc")
    return _paginate(items, page, limit)


def list_my_checks(user_id, page=1, limit=20) -> dict:
    """Checks currently assigned to the given reviewer."""
    return list_quality_checks(assigned_to=user_id, sort_by="deadline", sort_order="asc", page=page, limit=limit)


def list_overdue_checks(now=None, page=1, limit=20) -> dict:
    """Non-terminal checks whose deadline has passed, most overdue first."""
    now = now or datetime.now(UTC)
    dao = current_domain.repository_for(QualityCheck)._dao
    items = [c for c in dao.query.limit(None).all().items if c.is_overdue(now)]
    items.sort(key=lambda c: (c.deadline, str(c.id)))
    return _paginate(items, page, limit)

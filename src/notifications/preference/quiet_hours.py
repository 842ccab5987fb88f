"""Do-not-disturb window evaluation.

The window is expressed in the user's local clock. ``start > end`` wraps
past midnight (22:00–08:00 covers 23:30 and 07:59); ``start == end`` is an
empty window. The end bound is exclusive.
"""

from datetime import UTC, datetime, time
from zoneinfo import ZoneInfo

from notifications.preference.preference import parse_hhmm


def is_within_window(local: time, start: time, end: time) -> bool:
    if start == end:
        return False
    if start < end:
        return start <= local < end
    return local >= start or local < end


def local_time(moment: datetime, timezone: str) -> time:
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=UTC)
    return moment.astimezone(ZoneInfo(timezone or "UTC")).time().replace(second=0, microsecond=0)


def in_do_not_disturb(preference, moment: datetime) -> bool:
    """True when the preference's DND window is enabled and covers ``moment``."""
    dnd = preference.do_not_disturb
    if dnd is None or not dnd.enabled:
        return False

    start = time(*parse_hhmm(dnd.start_time, "start_time"))
    end = time(*parse_hhmm(dnd.end_time, "end_time"))
    return is_within_window(local_time(moment, preference.timezone), start, end)

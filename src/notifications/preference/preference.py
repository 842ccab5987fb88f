"""NotificationPreference aggregate (CQRS) — per-user delivery configuration.

One record per user, enumerating every setting explicitly:

* ``email`` / ``sms`` / ``push`` — enabled flag and frequency
* ``in_app`` — enabled flag and badge display
* ``categories`` — one switch per notification category
* ``do_not_disturb`` — local-time window during which push is held back
* ``timezone`` — IANA zone used to evaluate the DND window

Users without a stored record get ``defaults_for(user_id)``; nothing is
persisted until the user saves. Saving replaces the whole document.
"""

import json
import os
from datetime import UTC, datetime
from enum import Enum
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from notifications.domain import notifications
from notifications.notification.notification import DeliveryChannel, NotificationCategory
from notifications.preference.events import DigestSent, PreferencesUpdated
from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Identifier, String, ValueObject
from protean.utils.globals import current_domain


class Frequency(Enum):
    IMMEDIATE = "immediate"
    DAILY_DIGEST = "daily_digest"
    WEEKLY_DIGEST = "weekly_digest"
    DISABLED = "disabled"


DEFAULT_DND_START = "22:00"
DEFAULT_DND_END = "08:00"


def default_timezone() -> str:
    return os.getenv("NOTIFICATIONS_DEFAULT_TIMEZONE", "UTC")


def parse_hhmm(value, field_name="time"):
    """Parse an ``HH:MM`` string into (hour, minute)."""
    parts = str(value or "").split(":")
    try:
        if len(parts) != 2 or len(parts[0]) != 2 or len(parts[1]) != 2:
            raise ValueError
        hour, minute = int(parts[0]), int(parts[1])
        if not (0 <= hour <= 23 and 0 <= minute <= 59):
            raise ValueError
    except ValueError:
        raise ValidationError({field_name: [f"Invalid time format: {value}. Use HH:MM"]}) from None
    return hour, minute


def validate_timezone(name):
    try:
        ZoneInfo(str(name))
    except (ZoneInfoNotFoundError, ValueError):
        raise ValidationError({"timezone": [f"Unknown timezone: {name}"]}) from None
    return str(name)


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@notifications.value_object(part_of="NotificationPreference")
class ChannelSetting:
    """Delivery setting of one out-of-app channel."""

    enabled: Boolean(default=True)
    frequency: String(choices=Frequency, default=Frequency.IMMEDIATE.value)

    @property
    def is_immediate(self) -> bool:
        return bool(self.enabled) and self.frequency == Frequency.IMMEDIATE.value


@notifications.value_object(part_of="NotificationPreference")
class InAppSetting:
    enabled: Boolean(default=True)
    show_badge: Boolean(default=True)


@notifications.value_object(part_of="NotificationPreference")
class CategorySettings:
    """One switch per notification category."""

    orders: Boolean(default=True)
    payments: Boolean(default=True)
    websites: Boolean(default=True)
    messages: Boolean(default=True)
    support: Boolean(default=True)
    system: Boolean(default=True)

    def allows(self, category) -> bool:
        return bool(getattr(self, category, False))


@notifications.value_object(part_of="NotificationPreference")
class DoNotDisturb:
    """Local-time window; wraps past midnight when start is after end."""

    enabled: Boolean(default=False)
    start_time: String(max_length=5, default=DEFAULT_DND_START)
    end_time: String(max_length=5, default=DEFAULT_DND_END)

    @invariant.post
    def times_are_hhmm(self):
        parse_hhmm(self.start_time, "start_time")
        parse_hhmm(self.end_time, "end_time")


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@notifications.aggregate
class NotificationPreference:
    """A user's notification delivery preferences."""

    user_id: Identifier(required=True, unique=True)

    email: ValueObject(ChannelSetting)
    sms: ValueObject(ChannelSetting)
    push: ValueObject(ChannelSetting)
    in_app: ValueObject(InAppSetting)
    categories: ValueObject(CategorySettings)
    do_not_disturb: ValueObject(DoNotDisturb)
    timezone: String(max_length=64, default="UTC")

    last_digest_at: DateTime()
    created_at: DateTime()
    updated_at: DateTime()

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def defaults_for(cls, user_id):
        """System defaults: email and push immediate, SMS off, everything else on."""
        now = datetime.now(UTC)
        return cls(
            user_id=user_id,
            email=ChannelSetting(enabled=True, frequency=Frequency.IMMEDIATE.value),
            sms=ChannelSetting(enabled=False, frequency=Frequency.IMMEDIATE.value),
            push=ChannelSetting(enabled=True, frequency=Frequency.IMMEDIATE.value),
            in_app=InAppSetting(enabled=True, show_badge=True),
            categories=CategorySettings(),
            do_not_disturb=DoNotDisturb(
                enabled=False,
                start_time=DEFAULT_DND_START,
                end_time=DEFAULT_DND_END,
            ),
            timezone=default_timezone(),
            created_at=now,
            updated_at=now,
        )

    # -------------------------------------------------------------------
    # Document conversion
    # -------------------------------------------------------------------
    def to_document(self) -> dict:
        return {
            channel.value: {
                "enabled": bool(getattr(self, channel.value).enabled),
                "frequency": getattr(self, channel.value).frequency,
            }
            for channel in DeliveryChannel
        } | {
            "in_app": {
                "enabled": bool(self.in_app.enabled),
                "show_badge": bool(self.in_app.show_badge),
            },
            "categories": {c.value: self.categories.allows(c.value) for c in NotificationCategory},
            "do_not_disturb": {
                "enabled": bool(self.do_not_disturb.enabled),
                "start_time": self.do_not_disturb.start_time,
                "end_time": self.do_not_disturb.end_time,
            },
            "timezone": self.timezone,
        }

    def replace(self, document):
        """Replace every setting with the validated document (no merge)."""
        clean = validate_document(document)
        now = datetime.now(UTC)

        self.email = ChannelSetting(**clean["email"])
        self.sms = ChannelSetting(**clean["sms"])
        self.push = ChannelSetting(**clean["push"])
        self.in_app = InAppSetting(**clean["in_app"])
        self.categories = CategorySettings(**clean["categories"])
        self.do_not_disturb = DoNotDisturb(**clean["do_not_disturb"])
        self.timezone = clean["timezone"]
        self.updated_at = now

        self.raise_(
            PreferencesUpdated(
                preference_id=str(self.id),
                user_id=str(self.user_id),
                document=json.dumps(clean),
                updated_at=now,
            )
        )

    def mark_digest_sent(self, frequency, notification_count, sent_at):
        self.last_digest_at = sent_at
        self.updated_at = sent_at

        self.raise_(
            DigestSent(
                preference_id=str(self.id),
                user_id=str(self.user_id),
                frequency=frequency,
                notification_count=notification_count,
                sent_at=sent_at,
            )
        )

    # -------------------------------------------------------------------
    # Query helpers
    # -------------------------------------------------------------------
    def allows_category(self, category) -> bool:
        return self.categories.allows(category)

    def immediate_channels(self) -> list[str]:
        """Channels that are enabled with the ``immediate`` frequency."""
        return [c.value for c in DeliveryChannel if getattr(self, c.value).is_immediate]


# ---------------------------------------------------------------------------
# Validation of a whole document
# ---------------------------------------------------------------------------
_DOCUMENT_SECTIONS = ("email", "sms", "push", "in_app", "categories", "do_not_disturb", "timezone")


def _require_bool(errors, path, value):
    if not isinstance(value, bool):
        errors[path] = [f"{path} must be true or false"]
    return value


def validate_document(document) -> dict:
    """Check every section of a preference document and return it normalized.

    Raises:
        ValidationError: listing every offending path.
    """
    if not isinstance(document, dict):
        raise ValidationError({"preferences": ["Preferences must be an object"]})

    errors = {}
    unknown = set(document) - set(_DOCUMENT_SECTIONS)
    if unknown:
        errors["preferences"] = [f"Unknown sections: {', '.join(sorted(unknown))}"]
    missing = [s for s in _DOCUMENT_SECTIONS if s not in document]
    for section in missing:
        errors[section] = [f"{section} is required"]
    if errors:
        raise ValidationError(errors)

    clean = {}
    frequencies = {f.value for f in Frequency}
    for channel in DeliveryChannel:
        setting = document[channel.value]
        if not isinstance(setting, dict):
            errors[channel.value] = [f"{channel.value} must be an object"]
            continue
        enabled = _require_bool(errors, f"{channel.value}.enabled", setting.get("enabled"))
        frequency = setting.get("frequency")
        if frequency not in frequencies:
            errors[f"{channel.value}.frequency"] = [f"Unknown frequency '{frequency}'"]
        clean[channel.value] = {"enabled": enabled, "frequency": frequency}

    in_app = document["in_app"]
    if isinstance(in_app, dict):
        clean["in_app"] = {
            "enabled": _require_bool(errors, "in_app.enabled", in_app.get("enabled")),
            "show_badge": _require_bool(errors, "in_app.show_badge", in_app.get("show_badge", True)),
        }
    else:
        errors["in_app"] = ["in_app must be an object"]

    categories = document["categories"]
    if isinstance(categories, dict):
        known = {c.value for c in NotificationCategory}
        unknown_categories = set(categories) - known
        if unknown_categories:
            errors["categories"] = [f"Unknown categories: {', '.join(sorted(unknown_categories))}"]
        clean["categories"] = {}
        for name in sorted(known):
            if name not in categories:
                errors[f"categories.{name}"] = [f"categories.{name} is required"]
            else:
                clean["categories"][name] = _require_bool(errors, f"categories.{name}", categories[name])
    else:
        errors["categories"] = ["categories must be an object"]

    dnd = document["do_not_disturb"]
    if isinstance(dnd, dict):
        for key in ("start_time", "end_time"):
            try:
                parse_hhmm(dnd.get(key), f"do_not_disturb.{key}")
            except ValidationError as exc:
                errors.update(exc.messages)
        clean["do_not_disturb"] = {
            "enabled": _require_bool(errors, "do_not_disturb.enabled", dnd.get("enabled")),
            "start_time": dnd.get("start_time"),
            "end_time": dnd.get("end_time"),
        }
    else:
        errors["do_not_disturb"] = ["do_not_disturb must be an object"]

    try:
        clean["timezone"] = validate_timezone(document["timezone"])
    except ValidationError as exc:
        errors.update(exc.messages)

    if errors:
        raise ValidationError(errors)
    return clean


def get_preferences(user_id) -> NotificationPreference:
    """Stored preferences of a user, or synthesized defaults (not persisted)."""
    repo = current_domain.repository_for(NotificationPreference)
    stored = repo._dao.query.filter(user_id=str(user_id)).limit(None).all().items
    return stored[0] if stored else NotificationPreference.defaults_for(user_id)


def find_preferences(user_id) -> NotificationPreference | None:
    repo = current_domain.repository_for(NotificationPreference)
    stored = repo._dao.query.filter(user_id=str(user_id)).limit(None).all().items
    return stored[0] if stored else None

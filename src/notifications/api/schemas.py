"""Pydantic request/response models for the Notifications API.

API schemas are separate from Protean commands (anti-corruption pattern).
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Request Models
# ---------------------------------------------------------------------------
class ChannelSettingModel(BaseModel):
    enabled: bool
    frequency: str = Field(..., examples=["immediate"])


class InAppSettingModel(BaseModel):
    enabled: bool
    show_badge: bool = True


class CategorySettingsModel(BaseModel):
    orders: bool
    payments: bool
    websites: bool
    messages: bool
    support: bool
    system: bool


class DoNotDisturbModel(BaseModel):
    enabled: bool
    start_time: str = Field(..., examples=["22:00"])
    end_time: str = Field(..., examples=["08:00"])


class PreferencesDocument(BaseModel):
    """The complete preference document; saving replaces it as a whole."""

    email: ChannelSettingModel
    sms: ChannelSettingModel
    push: ChannelSettingModel
    in_app: InAppSettingModel
    categories: CategorySettingsModel
    do_not_disturb: DoNotDisturbModel
    timezone: str = Field(..., examples=["Europe/Berlin"])


class NotificationEnvelope(BaseModel):
    """Intake envelope for collaborators that publish over HTTP."""

    user_ids: list[str] = Field(..., min_length=1)
    category: str = Field(..., examples=["orders"])
    type: str = Field(..., examples=["order_created"])
    title: str = Field(..., min_length=1, max_length=255)
    message: str = Field(..., min_length=1)
    data: dict[str, Any] = {}
    priority: str = "medium"
    action_url: str | None = None
    occurred_at: datetime | None = None
    source: str | None = None


class SendDigestsRequest(BaseModel):
    as_of: datetime | None = None


# ---------------------------------------------------------------------------
# Response Models
# ---------------------------------------------------------------------------
class StatusResponse(BaseModel):
    status: str = "ok"


class NotificationResponse(BaseModel):
    id: str
    user_id: str
    type: str
    category: str
    title: str
    message: str
    data: dict[str, Any] = {}
    priority: str
    action_url: str | None = None
    status: str
    channels: list[str] = []
    push_suppressed: bool = False
    created_at: str | None = None
    read_at: str | None = None
    archived_at: str | None = None


class NotificationListResponse(BaseModel):
    items: list[NotificationResponse]
    total: int
    page: int
    limit: int
    unread_count: int


class UnreadCountResponse(BaseModel):
    unread_count: int


class NotificationStatusResponse(BaseModel):
    id: str
    status: str
    unread_count: int


class MarkAllReadResponse(BaseModel):
    updated: int
    unread_count: int


class DeliveryResponse(BaseModel):
    notification_ids: list[str]


class SendDigestsResponse(BaseModel):
    digests_sent: int

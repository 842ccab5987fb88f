"""FastAPI routes for the Notifications domain.

Thin adapters that translate HTTP requests into domain commands.
No business logic — just schema→command→response translation.
The caller is always the owner: notifications and preferences are
addressed through the authenticated identity, never by user id.
Commands run in the threadpool: channel retries back off with blocking
sleeps and must not stall the event loop that serves the WebSockets.
"""

import json

from fastapi import APIRouter, Depends, Query
from fastapi.concurrency import run_in_threadpool
from notifications.api.schemas import (
    DeliveryResponse,
    MarkAllReadResponse,
    NotificationEnvelope,
    NotificationListResponse,
    NotificationResponse,
    NotificationStatusResponse,
    PreferencesDocument,
    SendDigestsRequest,
    SendDigestsResponse,
    StatusResponse,
    UnreadCountResponse,
)
from notifications.notification.archiving import ArchiveNotification
from notifications.notification.deletion import DeleteNotification
from notifications.notification.delivery import DeliverNotification
from notifications.notification.digest import SendDigests
from notifications.notification.queries import list_notifications, unread_count
from notifications.notification.reading import MarkAllNotificationsRead, MarkNotificationRead
from notifications.preference.management import UpdatePreferences
from notifications.preference.preference import get_preferences
from protean.utils.globals import current_domain
from shared.auth import Actor, current_actor

router = APIRouter(prefix="/notifications", tags=["notifications"])


# ---------------------------------------------------------------------------
# Inbox
# ---------------------------------------------------------------------------
@router.get("", response_model=NotificationListResponse)
async def get_notifications(
    status: str | None = None,
    category: str | None = None,
    type: str | None = None,
    sort_order: str = "desc",
    page: int = Query(1),
    limit: int = Query(20),
    actor: Actor = Depends(current_actor),
) -> NotificationListResponse:
    """The caller's notifications, newest first; archived only when asked for."""
    result = list_notifications(
        actor.user_id,
        status=status,
        category=category,
        notification_type=type,
        page=page,
        limit=limit,
        sort_order=sort_order,
    )
    return NotificationListResponse(
        items=[NotificationResponse(**n.to_payload()) for n in result["items"]],
        total=result["total"],
        page=result["page"],
        limit=result["limit"],
        unread_count=unread_count(actor.user_id),
    )


@router.get("/unread-count", response_model=UnreadCountResponse)
async def get_unread_count(actor: Actor = Depends(current_actor)) -> UnreadCountResponse:
    return UnreadCountResponse(unread_count=unread_count(actor.user_id))


@router.put("/read-all", response_model=MarkAllReadResponse)
async def mark_all_read(actor: Actor = Depends(current_actor)) -> MarkAllReadResponse:
    command = MarkAllNotificationsRead(user_id=actor.user_id)
    updated = await run_in_threadpool(current_domain.process, command, asynchronous=False)
    return MarkAllReadResponse(updated=updated, unread_count=unread_count(actor.user_id))


# ---------------------------------------------------------------------------
# Preferences
# ---------------------------------------------------------------------------
@router.get("/preferences", response_model=PreferencesDocument)
async def read_preferences(actor: Actor = Depends(current_actor)) -> PreferencesDocument:
    """Stored preferences, or the defaults when the caller never saved any."""
    return PreferencesDocument(**get_preferences(actor.user_id).to_document())


@router.put("/preferences", response_model=PreferencesDocument)
async def save_preferences(
    body: PreferencesDocument,
    actor: Actor = Depends(current_actor),
) -> PreferencesDocument:
    """Replace the caller's whole preference document."""
    command = UpdatePreferences(user_id=actor.user_id, document=json.dumps(body.model_dump()))
    document = await run_in_threadpool(current_domain.process, command, asynchronous=False)
    return PreferencesDocument(**document)


# ---------------------------------------------------------------------------
# Collaborator intake
# ---------------------------------------------------------------------------
@router.post("/events", status_code=201, response_model=DeliveryResponse)
async def publish_event(
    body: NotificationEnvelope,
    actor: Actor = Depends(current_actor),
) -> DeliveryResponse:
    """Accept a notification envelope from a trusted collaborator."""
    actor.require_admin()
    command = DeliverNotification(
        user_ids=json.dumps(body.user_ids),
        category=body.category,
        notification_type=body.type,
        title=body.title,
        message=body.message,
        data=json.dumps(body.data),
        priority=body.priority,
        action_url=body.action_url,
        occurred_at=body.occurred_at,
        source=body.source or f"http:{actor.user_id}",
    )
    notification_ids = await run_in_threadpool(current_domain.process, command, asynchronous=False)
    return DeliveryResponse(notification_ids=notification_ids)


# ---------------------------------------------------------------------------
# Maintenance — periodic background job endpoints
# ---------------------------------------------------------------------------
@router.post("/maintenance/send-digests", response_model=SendDigestsResponse)
async def send_digests(
    body: SendDigestsRequest | None = None,
    actor: Actor = Depends(current_actor),
) -> SendDigestsResponse:
    """Send due digest emails. Called periodically by an external scheduler."""
    actor.require_admin()
    command = SendDigests(as_of=body.as_of if body else None)
    sent = await run_in_threadpool(current_domain.process, command, asynchronous=False)
    return SendDigestsResponse(digests_sent=sent)


# ---------------------------------------------------------------------------
# Notification lifecycle
# ---------------------------------------------------------------------------
@router.put("/{notification_id}/read", response_model=NotificationStatusResponse)
async def mark_read(notification_id: str, actor: Actor = Depends(current_actor)) -> NotificationStatusResponse:
    command = MarkNotificationRead(notification_id=notification_id, acting_user_id=actor.user_id)
    status = await run_in_threadpool(current_domain.process, command, asynchronous=False)
    return NotificationStatusResponse(id=notification_id, status=status, unread_count=unread_count(actor.user_id))


@router.put("/{notification_id}/archive", response_model=NotificationStatusResponse)
async def archive(notification_id: str, actor: Actor = Depends(current_actor)) -> NotificationStatusResponse:
    command = ArchiveNotification(notification_id=notification_id, acting_user_id=actor.user_id)
    status = await run_in_threadpool(current_domain.process, command, asynchronous=False)
    return NotificationStatusResponse(id=notification_id, status=status, unread_count=unread_count(actor.user_id))


@router.delete("/{notification_id}", response_model=StatusResponse)
async def delete(notification_id: str, actor: Actor = Depends(current_actor)) -> StatusResponse:
    command = DeleteNotification(notification_id=notification_id, acting_user_id=actor.user_id)
    await run_in_threadpool(current_domain.process, command, asynchronous=False)
    return StatusResponse()

"""
Notification endpoints — admin broadcast management plus the operator's own
unread counter.

The unread counter is pushed over ``WS /stream`` instead of being polled.
Every change made through this router (mark-read, mark-all-read, send) is
published to the session's subscribers through the NotificationHub.

Messages (server -> client):
  - {"event": "unread_count", "data": {"unread_count": N}}
  - {"event": "notification_sent", "data": {"title": ..., "user_id": ...}}
  - {"event": "session_closed", "data": {}}
"""

import asyncio
import logging

from fastapi import APIRouter, Depends, Query, WebSocket, status

from invest_admin.api.deps import (
    get_current_session,
    get_platform,
    get_session_service,
    list_params,
    outcome_response,
    session_store,
    upstream_error,
)
from invest_admin.schemas.common import ListPage, MutationResult
from invest_admin.schemas.notification import Notification, NotificationSend
from invest_admin.schemas.stats import NotificationStats
from invest_admin.services import aggregation
from invest_admin.services.filters import NOTIFICATION_FILTER
from invest_admin.services.notification_hub import (
    NOTIFICATION_SENT,
    SESSION_CLOSED,
    UNREAD_COUNT,
    notification_hub,
)
from invest_admin.services.platform_client import PlatformAPIError, PlatformClient
from invest_admin.services.session_service import AdminSession, SessionService
from invest_admin.services.views import ListParams, ensure_loaded, list_view

logger = logging.getLogger(__name__)

router = APIRouter()


# ---------------------------------------------------------------------------
# Admin notification list
# ---------------------------------------------------------------------------


@router.get("", response_model=ListPage[Notification])
async def list_notifications(
    params: ListParams = Depends(list_params),
    session: AdminSession = Depends(get_current_session),
    client: PlatformClient = Depends(get_platform),
):
    """``status`` filters read/unread, ``type`` the notification type."""
    store = session_store(session, "notifications")
    return await list_view(
        store, lambda: client.list_notifications(session.token), NOTIFICATION_FILTER, params
    )


@router.get("/stats", response_model=NotificationStats)
async def get_notification_stats(
    refresh: bool = True,
    session: AdminSession = Depends(get_current_session),
    client: PlatformClient = Depends(get_platform),
):
    store = session_store(session, "notifications")
    error = await ensure_loaded(store, lambda: client.list_notifications(session.token), refresh)
    stats = aggregation.notification_stats(store.items)
    stats.error = error
    return stats


@router.post("", response_model=MutationResult, status_code=status.HTTP_201_CREATED)
async def send_notification(
    payload: NotificationSend,
    session: AdminSession = Depends(get_current_session),
    client: PlatformClient = Depends(get_platform),
):
    """Send to one user, or to everyone when ``user_id`` is omitted."""
    store = session_store(session, "notifications")

    def apply(result: dict):
        sent = result.get("notification")
        item = store.prepend(Notification.model_validate(sent)) if isinstance(sent, dict) else None
        notification_hub.broadcast(
            NOTIFICATION_SENT, {"title": payload.title, "user_id": payload.user_id}
        )
        return item

    outcome = await store.mutate(
        lambda: client.send_notification(
            session.token, payload.title, payload.message, payload.user_id
        ),
        apply,
        success_message="Notification sent successfully",
    )
    return outcome_response(outcome)


@router.put("/{notification_id}/read", response_model=MutationResult)
async def mark_notification_read(
    notification_id: int,
    session: AdminSession = Depends(get_current_session),
    client: PlatformClient = Depends(get_platform),
):
    store = session_store(session, "notifications")

    def apply(_result):
        before = store.get(notification_id)
        item = store.patch(notification_id, is_read=True)
        # Only the operator's own unread notifications move their counter.
        if before is not None and not before.is_read and before.user_id == session.user.id:
            notification_hub.decrement_unread(session.session_id)
        return item

    outcome = await store.mutate(
        lambda: client.mark_notification_read(session.token, notification_id),
        apply,
        success_message="Notification marked as read",
    )
    return outcome_response(outcome)


@router.delete("/{notification_id}", response_model=MutationResult)
async def delete_notification(
    notification_id: int,
    session: AdminSession = Depends(get_current_session),
    client: PlatformClient = Depends(get_platform),
):
    store = session_store(session, "notifications")
    outcome = await store.mutate(
        lambda: client.delete_notification(session.token, notification_id),
        lambda _: store.remove(notification_id),
        success_message="Notification deleted successfully",
    )
    return outcome_response(outcome)


# ---------------------------------------------------------------------------
# Operator's own unread counter
# ---------------------------------------------------------------------------


@router.get("/unread-count")
async def get_unread_count(
    session: AdminSession = Depends(get_current_session),
    client: PlatformClient = Depends(get_platform),
):
    try:
        count = await client.get_unread_count(session.token)
    except PlatformAPIError as exc:
        raise upstream_error(exc.message, exc.status_code)
    return {"unread_count": notification_hub.set_unread(session.session_id, count)}


@router.put("/mark-all-read", response_model=MutationResult)
async def mark_all_read(
    session: AdminSession = Depends(get_current_session),
    client: PlatformClient = Depends(get_platform),
):
    store = session_store(session, "notifications")

    def apply(_result):
        for item in store.items:
            if item.user_id == session.user.id and not item.is_read:
                store.patch(item.id, is_read=True)
        notification_hub.set_unread(session.session_id, 0)

    outcome = await store.mutate(
        lambda: client.mark_all_read(session.token),
        apply,
        success_message="All notifications marked as read",
    )
    return outcome_response(outcome)


# ---------------------------------------------------------------------------
# WS /stream — unread counter subscription
# ---------------------------------------------------------------------------


async def _pump(websocket: WebSocket, queue: asyncio.Queue) -> None:
    while True:
        message = await queue.get()
        if message is None:
            await websocket.send_json({"event": SESSION_CLOSED, "data": {}})
            return
        await websocket.send_json(message)


async def _until_disconnect(websocket: WebSocket) -> None:
    # Client messages carry no meaning; only the disconnect matters.
    while True:
        message = await websocket.receive()
        if message["type"] == "websocket.disconnect":
            return


@router.websocket("/stream")
async def notification_stream(
    websocket: WebSocket,
    session_id: str | None = Query(None, alias="session"),
    service: SessionService = Depends(get_session_service),
):
    """
    Subscribe to unread-count updates for one session.

    The current count is sent right after the handshake; the stream ends
    with ``session_closed`` when the session logs out.
    """
    session = await service.get(session_id) if session_id else None
    if session is None:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    await websocket.accept()
    sid = session.session_id
    queue = notification_hub.subscribe(sid)

    try:
        count = await service.client.get_unread_count(session.token)
        notification_hub.set_unread(sid, count)
    except PlatformAPIError as exc:
        logger.warning("Unread count unavailable for stream: %s", exc.message)
        notification_hub.publish(sid, UNREAD_COUNT, {"unread_count": notification_hub.unread(sid)})

    pump = asyncio.create_task(_pump(websocket, queue))
    listener = asyncio.create_task(_until_disconnect(websocket))
    try:
        done, _ = await asyncio.wait({pump, listener}, return_when=asyncio.FIRST_COMPLETED)
        for task in done:
            if task.exception() is not None:
                logger.debug("Notification stream ended: %r", task.exception())
        if pump in done and pump.exception() is None:
            await websocket.close()
    finally:
        pump.cancel()
        listener.cancel()
        notification_hub.unsubscribe(sid, queue)

"""Endpoints and websocket handler for user notifications."""

from __future__ import annotations

import logging
from typing import NoReturn

from anyio import to_thread
from fastapi import (
    APIRouter,
    Depends,
    HTTPException,
    Query,
    WebSocket,
    WebSocketDisconnect,
    status,
)
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.application.use_cases.notifications import (
    NotificationNotFoundError,
    count_notifications,
    delete_notifications,
    get_notification,
    list_by_delivery_status,
    list_notifications,
    mark_notifications_read,
    poll_notifications,
    retry_delivery,
    update_delivery_status,
)
from app.config import get_settings
from app.domain.entities import AuthContext, Notification
from app.infrastructure.database import SessionLocal, get_db
from app.infrastructure.notifications import notification_manager, serialize_notification
from app.infrastructure.repositories import NotificationRepository
from app.interfaces.api.dependencies import get_auth_context, resolve_auth_context
from app.interfaces.api.schemas import (
    DeletedIdsRead,
    DeliveryStatusListResponse,
    DeliveryStatusUpdateRequest,
    MessageResponse,
    NotificationCountResponse,
    NotificationCountsRead,
    NotificationDeleteRequest,
    NotificationDeleteResponse,
    NotificationDetailResponse,
    NotificationListResponse,
    NotificationMarkReadRequest,
    NotificationMarkReadResponse,
    NotificationPollResponse,
    NotificationRead,
    NotificationUpdateResponse,
    RetryDeliveryRequest,
    SubscriptionRead,
    SubscriptionResponse,
    UpdatedIdsRead,
)

router = APIRouter(prefix="/api/notifications", tags=["notifications"])
logger = logging.getLogger(__name__)


def _notification_to_schema(notification: Notification) -> NotificationRead:
    return NotificationRead(
        id=notification.id or 0,
        user_id=notification.user_id,
        title=notification.title,
        message=notification.message,
        type=notification.type,
        related_to=notification.related.kind if notification.related else None,
        related_id=notification.related.id if notification.related else None,
        is_read=notification.is_read,
        actions=notification.actions,
        created_at=notification.created_at,
        updated_at=notification.updated_at,
        expires_at=notification.expires_at,
        delivery_status=notification.delivery_status,
        delivery_channel=notification.delivery_channel,
        delivery_attempts=notification.delivery_attempts,
        last_delivery_attempt=notification.last_delivery_attempt,
    )


def _raise_store_error(exc: SQLAlchemyError, message: str, auth: AuthContext) -> NoReturn:
    logger.exception("%s for user %s", message, auth.user_id)
    raise HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=message
    ) from exc


@router.get("", response_model=NotificationListResponse)
@router.get("/", response_model=NotificationListResponse, include_in_schema=False)
def list_user_notifications(
    unread_only: bool = False,
    limit: int | None = Query(None, ge=0),
    offset: int = Query(0, ge=0),
    delivery_status: str | None = None,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(get_auth_context),
) -> NotificationListResponse:
    """Return a newest-first page of the caller's notifications."""

    try:
        page = list_notifications(
            db,
            user_id=auth.user_id,
            unread_only=unread_only,
            limit=limit,
            offset=offset,
            delivery_status=delivery_status,
        )
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except SQLAlchemyError as exc:
        _raise_store_error(exc, "Error fetching notifications", auth)

    return NotificationListResponse(
        count=len(page.items),
        total=page.total,
        unread=page.unread,
        data=[_notification_to_schema(notification) for notification in page.items],
    )


@router.get("/count", response_model=NotificationCountResponse)
def read_notification_count(
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(get_auth_context),
) -> NotificationCountResponse:
    """Return total, unread and per delivery status counts."""

    try:
        counts = count_notifications(db, user_id=auth.user_id)
    except SQLAlchemyError as exc:
        _raise_store_error(exc, "Error fetching notification counts", auth)

    return NotificationCountResponse(
        data=NotificationCountsRead(
            total=counts.total, unread=counts.unread, by_status=counts.by_status
        )
    )


@router.get("/poll", response_model=NotificationPollResponse)
def poll_user_notifications(
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(get_auth_context),
) -> NotificationPollResponse:
    """HTTP fallback for clients without a websocket connection."""

    try:
        notifications = poll_notifications(db, user_id=auth.user_id)
    except SQLAlchemyError as exc:
        _raise_store_error(exc, "Error polling for notifications", auth)

    return NotificationPollResponse(
        count=len(notifications),
        data=[_notification_to_schema(notification) for notification in notifications],
    )


@router.get("/status/{delivery_status}", response_model=DeliveryStatusListResponse)
def list_notifications_by_delivery_status(
    delivery_status: str,
    limit: int | None = Query(None, ge=0),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(get_auth_context),
) -> DeliveryStatusListResponse:
    try:
        page = list_by_delivery_status(
            db, user_id=auth.user_id, status=delivery_status, limit=limit, offset=offset
        )
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except SQLAlchemyError as exc:
        _raise_store_error(exc, "Error fetching notifications", auth)

    return DeliveryStatusListResponse(
        count=len(page.items),
        total=page.total,
        data=[_notification_to_schema(notification) for notification in page.items],
    )


@router.patch("/mark-read", response_model=NotificationMarkReadResponse)
def mark_read(
    payload: NotificationMarkReadRequest,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(get_auth_context),
) -> NotificationMarkReadResponse:
    """Mark the given notifications, or all of them, as read."""

    try:
        updated_ids = mark_notifications_read(
            db, user_id=auth.user_id, ids=payload.ids, all=payload.all
        )
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except SQLAlchemyError as exc:
        _raise_store_error(exc, "Error updating notifications", auth)

    return NotificationMarkReadResponse(
        message=f"{len(updated_ids)} notifications marked as read",
        data=UpdatedIdsRead(updated_ids=updated_ids),
    )


@router.delete("", response_model=NotificationDeleteResponse)
@router.delete("/", response_model=NotificationDeleteResponse, include_in_schema=False)
def delete_user_notifications(
    payload: NotificationDeleteRequest | None = None,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(get_auth_context),
) -> NotificationDeleteResponse:
    try:
        deleted_ids = delete_notifications(
            db, user_id=auth.user_id, ids=payload.ids if payload else None
        )
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except SQLAlchemyError as exc:
        _raise_store_error(exc, "Error deleting notifications", auth)

    return NotificationDeleteResponse(
        message=f"{len(deleted_ids)} notifications deleted",
        data=DeletedIdsRead(deleted_ids=deleted_ids),
    )


@router.patch("/delivery-status", response_model=NotificationUpdateResponse)
def change_delivery_status(
    payload: DeliveryStatusUpdateRequest,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(get_auth_context),
) -> NotificationUpdateResponse:
    if payload.id is None or not payload.status:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Notification ID and status are required",
        )
    try:
        notification = update_delivery_status(
            db, user_id=auth.user_id, notification_id=payload.id, status=payload.status
        )
    except NotificationNotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Notification not found or you do not have permission to update it",
        ) from exc
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except SQLAlchemyError as exc:
        _raise_store_error(exc, "Error updating notification delivery status", auth)

    return NotificationUpdateResponse(
        message="Notification delivery status updated",
        data=_notification_to_schema(notification),
    )


@router.post("/retry-delivery", response_model=NotificationUpdateResponse)
def retry_notification_delivery(
    payload: RetryDeliveryRequest,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(get_auth_context),
) -> NotificationUpdateResponse:
    if payload.id is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Notification ID is required"
        )
    try:
        notification = retry_delivery(db, user_id=auth.user_id, notification_id=payload.id)
    except NotificationNotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Notification not found or you do not have permission to retry delivery",
        ) from exc
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except SQLAlchemyError as exc:
        _raise_store_error(exc, "Error retrying notification delivery", auth)

    return NotificationUpdateResponse(
        message="Notification delivery retry initiated",
        data=_notification_to_schema(notification),
    )


@router.post("/subscribe", response_model=SubscriptionResponse)
def subscribe(auth: AuthContext = Depends(get_auth_context)) -> SubscriptionResponse:
    """Tell the client where to open its realtime connection."""

    return SubscriptionResponse(
        message="WebSocket service is available",
        data=SubscriptionRead(
            websocket_url=get_settings().websocket_url,
            user_channel=f"user:{auth.user_id}",
        ),
    )


@router.post("/unsubscribe", response_model=MessageResponse)
def unsubscribe(auth: AuthContext = Depends(get_auth_context)) -> MessageResponse:
    # Sockets are dropped by the client closing them.
    return MessageResponse(message="Successfully unsubscribed from notifications")


def _load_unread(user_id: int) -> list[Notification]:
    session = SessionLocal()
    try:
        return list(
            NotificationRepository(session).list_for_user(user_id, unread_only=True, limit=50)
        )
    finally:
        session.close()


def _acknowledge(user_id: int, ids: list[int]) -> None:
    session = SessionLocal()
    try:
        mark_notifications_read(session, user_id=user_id, ids=ids)
    except SQLAlchemyError:
        logger.exception("Error acknowledging notifications for user %s", user_id)
    finally:
        session.close()


@router.websocket("/ws")
async def notifications_websocket(websocket: WebSocket) -> None:
    """Websocket endpoint that streams notifications to the authenticated user.

    Database work runs in worker threads so one socket never blocks the loop.
    """

    token = websocket.query_params.get("token")
    if not token:
        await websocket.close(code=1008)
        return

    try:
        auth = resolve_auth_context(token)
    except HTTPException:
        await websocket.close(code=1008)
        return

    try:
        pending_notifications = await to_thread.run_sync(_load_unread, auth.user_id)
    except SQLAlchemyError:
        logger.exception("Error loading pending notifications for user %s", auth.user_id)
        await websocket.close(code=1011)
        return

    await notification_manager.connect(auth.user_id, websocket)
    try:
        await websocket.send_json(
            {"type": "init", "data": [serialize_notification(n) for n in pending_notifications]}
        )
        while True:
            try:
                message = await websocket.receive_json()
            except WebSocketDisconnect:
                raise
            except ValueError:
                continue

            if not isinstance(message, dict):
                continue

            message_type = message.get("type")
            if message_type == "ping":
                await websocket.send_json({"type": "pong"})
                continue

            if message_type == "ack":
                ids = message.get("ids", [])
                if isinstance(ids, list):
                    ids = [value for value in ids if isinstance(value, int)]
                if isinstance(ids, list) and ids:
                    await to_thread.run_sync(_acknowledge, auth.user_id, ids)
                continue
    except WebSocketDisconnect:
        notification_manager.disconnect(auth.user_id, websocket)
    except Exception:  # pragma: no cover
        notification_manager.disconnect(auth.user_id, websocket)
        raise


@router.get("/{notification_id}", response_model=NotificationDetailResponse)
def read_notification(
    notification_id: int,
    db: Session = Depends(get_db),
    auth: AuthContext = Depends(get_auth_context),
) -> NotificationDetailResponse:
    """Return one notification; foreign ids are reported as not found."""

    try:
        notification = get_notification(
            db, user_id=auth.user_id, notification_id=notification_id
        )
    except NotificationNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except SQLAlchemyError as exc:
        _raise_store_error(exc, "Error fetching notification", auth)

    return NotificationDetailResponse(data=_notification_to_schema(notification))

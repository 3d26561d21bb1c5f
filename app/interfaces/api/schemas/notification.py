"""Pydantic models describing notification payloads."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field


class NotificationRead(BaseModel):
    """Representation of a notification delivered to the client."""

    id: int
    user_id: int
    title: str
    message: str
    type: str
    related_to: str | None = None
    related_id: int | None = None
    is_read: bool
    actions: dict[str, Any] | None = None
    created_at: datetime
    updated_at: datetime
    expires_at: datetime | None = None
    delivery_status: str
    delivery_channel: str
    delivery_attempts: int = 0
    last_delivery_attempt: datetime | None = None


class NotificationMarkReadRequest(BaseModel):
    """Payload used to mark notifications as read, by id or all at once."""

    ids: list[int] | None = Field(default=None, description="Notification identifiers")
    all: bool = Field(default=False, description="Mark every unread notification as read")


class NotificationDeleteRequest(BaseModel):
    ids: list[int] | None = Field(default=None, description="Notification identifiers")


class DeliveryStatusUpdateRequest(BaseModel):
    id: int | None = None
    status: str | None = None


class RetryDeliveryRequest(BaseModel):
    id: int | None = None


class NotificationListResponse(BaseModel):
    success: bool = True
    count: int
    total: int
    unread: int
    data: list[NotificationRead]


class NotificationPollResponse(BaseModel):
    success: bool = True
    count: int
    data: list[NotificationRead]


class DeliveryStatusListResponse(BaseModel):
    success: bool = True
    count: int
    total: int
    data: list[NotificationRead]


class NotificationCountsRead(BaseModel):
    total: int
    unread: int
    by_status: dict[str, int] = Field(default_factory=dict)


class NotificationCountResponse(BaseModel):
    success: bool = True
    data: NotificationCountsRead


class NotificationDetailResponse(BaseModel):
    success: bool = True
    data: NotificationRead


class NotificationUpdateResponse(BaseModel):
    success: bool = True
    message: str
    data: NotificationRead


class UpdatedIdsRead(BaseModel):
    updated_ids: list[int]


class DeletedIdsRead(BaseModel):
    deleted_ids: list[int]


class NotificationMarkReadResponse(BaseModel):
    success: bool = True
    message: str
    data: UpdatedIdsRead


class NotificationDeleteResponse(BaseModel):
    success: bool = True
    message: str
    data: DeletedIdsRead


class SubscriptionRead(BaseModel):
    websocket_url: str
    user_channel: str


class SubscriptionResponse(BaseModel):
    success: bool = True
    message: str
    data: SubscriptionRead


class MessageResponse(BaseModel):
    success: bool = True
    message: str


__all__ = [
    "NotificationRead",
    "NotificationMarkReadRequest",
    "NotificationDeleteRequest",
    "DeliveryStatusUpdateRequest",
    "RetryDeliveryRequest",
    "NotificationListResponse",
    "NotificationPollResponse",
    "DeliveryStatusListResponse",
    "NotificationCountsRead",
    "NotificationCountResponse",
    "NotificationDetailResponse",
    "NotificationUpdateResponse",
    "UpdatedIdsRead",
    "DeletedIdsRead",
    "NotificationMarkReadResponse",
    "NotificationDeleteResponse",
    "SubscriptionRead",
    "SubscriptionResponse",
    "MessageResponse",
]

from .notification import (
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

__all__ = [
    "DeletedIdsRead",
    "DeliveryStatusListResponse",
    "DeliveryStatusUpdateRequest",
    "MessageResponse",
    "NotificationCountResponse",
    "NotificationCountsRead",
    "NotificationDeleteRequest",
    "NotificationDeleteResponse",
    "NotificationDetailResponse",
    "NotificationListResponse",
    "NotificationMarkReadRequest",
    "NotificationMarkReadResponse",
    "NotificationPollResponse",
    "NotificationRead",
    "NotificationUpdateResponse",
    "RetryDeliveryRequest",
    "SubscriptionRead",
    "SubscriptionResponse",
    "UpdatedIdsRead",
]

"""Repository implementations for infrastructure layer."""

from .lookup_repository import PaymentLookupRepository, ServiceRequestLookupRepository
from .notification_repository import NotificationRepository

__all__ = [
    "NotificationRepository",
    "PaymentLookupRepository",
    "ServiceRequestLookupRepository",
]

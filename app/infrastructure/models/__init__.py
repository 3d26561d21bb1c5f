"""ORM models used by the application infrastructure."""

from .marketplace import (
    HomeownerModel,
    PaymentModel,
    PropertyModel,
    ServiceModel,
    ServiceProviderModel,
    ServiceRequestModel,
)
from .notification import NotificationModel, mark_stale_notifications_read

__all__ = [
    "HomeownerModel",
    "PaymentModel",
    "PropertyModel",
    "ServiceModel",
    "ServiceProviderModel",
    "ServiceRequestModel",
    "NotificationModel",
    "mark_stale_notifications_read",
]

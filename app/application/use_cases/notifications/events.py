"""Build notifications from service request and payment lifecycle events."""

from __future__ import annotations

import logging
from typing import NamedTuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.domain.entities import (
    NOTIFICATION_TYPE_ERROR,
    NOTIFICATION_TYPE_INFO,
    NOTIFICATION_TYPE_SUCCESS,
    NOTIFICATION_TYPE_WARNING,
    Notification,
    PaymentSummary,
    RelatedEntity,
    ServiceRequestSummary,
)
from app.infrastructure.repositories import (
    PaymentLookupRepository,
    ServiceRequestLookupRepository,
)

from .store import create_notification

logger = logging.getLogger(__name__)

RELATED_SERVICE_REQUEST = "service_request"
RELATED_PAYMENT = "payment"


class MessageTemplate(NamedTuple):
    title: str
    message: str
    type: str


SERVICE_REQUEST_TEMPLATES: dict[str, MessageTemplate] = {
    "created": MessageTemplate(
        "New Service Request Created",
        "Your service request for {service_name} at {property_address} has been created successfully.",
        NOTIFICATION_TYPE_SUCCESS,
    ),
    "updated": MessageTemplate(
        "Service Request Updated",
        "Your service request for {service_name} has been updated.",
        NOTIFICATION_TYPE_INFO,
    ),
    "status_changed": MessageTemplate(
        "Service Request Status Changed",
        "The status of your service request for {service_name} has changed to {status}.",
        NOTIFICATION_TYPE_INFO,
    ),
    "new_bid": MessageTemplate(
        "New Bid Received",
        "You have received a new bid for your service request for {service_name}.",
        NOTIFICATION_TYPE_INFO,
    ),
    "bid_accepted": MessageTemplate(
        "Bid Accepted",
        "A bid has been accepted for your service request for {service_name}.",
        NOTIFICATION_TYPE_SUCCESS,
    ),
    "payment_required": MessageTemplate(
        "Payment Required",
        "Payment is required for your service request for {service_name}.",
        NOTIFICATION_TYPE_WARNING,
    ),
    "completed": MessageTemplate(
        "Service Request Completed",
        "Your service request for {service_name} has been marked as completed.",
        NOTIFICATION_TYPE_SUCCESS,
    ),
    "cancelled": MessageTemplate(
        "Service Request Cancelled",
        "Your service request for {service_name} has been cancelled.",
        NOTIFICATION_TYPE_ERROR,
    ),
}
SERVICE_REQUEST_FALLBACK = MessageTemplate(
    "Service Request Update",
    "Your service request for {service_name} has been updated.",
    NOTIFICATION_TYPE_INFO,
)

PAYMENT_TEMPLATES: dict[str, MessageTemplate] = {
    "created": MessageTemplate(
        "Payment Initiated",
        "A payment of {amount} has been initiated for {service_name}.",
        NOTIFICATION_TYPE_INFO,
    ),
    "completed": MessageTemplate(
        "Payment Completed",
        "Your payment of {amount} for {service_name} has been processed successfully.",
        NOTIFICATION_TYPE_SUCCESS,
    ),
    "failed": MessageTemplate(
        "Payment Failed",
        "Your payment for {service_name} has failed. Please try again.",
        NOTIFICATION_TYPE_ERROR,
    ),
    "refunded": MessageTemplate(
        "Payment Refunded",
        "Your payment of {amount} for {service_name} has been refunded.",
        NOTIFICATION_TYPE_INFO,
    ),
    "received": MessageTemplate(
        "Payment Received",
        "You have received a payment of {amount} for {service_description}.",
        NOTIFICATION_TYPE_SUCCESS,
    ),
}
PAYMENT_FALLBACK = MessageTemplate(
    "Payment Update",
    "Your payment for {service_name} has been updated.",
    NOTIFICATION_TYPE_INFO,
)


def render_service_request_message(
    summary: ServiceRequestSummary, action: str
) -> MessageTemplate:
    """Return the title/message/type for ``action`` on ``summary``."""

    template = SERVICE_REQUEST_TEMPLATES.get(action, SERVICE_REQUEST_FALLBACK)
    return MessageTemplate(
        title=template.title,
        message=template.message.format(
            service_name=summary.service_name,
            property_address=summary.property_address,
            status=summary.status or "unknown",
        ),
        type=template.type,
    )


def render_payment_message(summary: PaymentSummary, action: str) -> MessageTemplate:
    """Return the title/message/type for ``action`` on ``summary``."""

    template = PAYMENT_TEMPLATES.get(action, PAYMENT_FALLBACK)
    return MessageTemplate(
        title=template.title,
        message=template.message.format(
            amount=summary.formatted_amount,
            service_name=summary.service_name,
            service_description=summary.service_description or summary.service_name,
        ),
        type=template.type,
    )


def _view_action(url: str) -> dict[str, dict[str, str]]:
    return {"view": {"label": "View Details", "url": url}}


def notify_service_request(
    session: Session, *, service_request_id: int, user_id: int, action: str
) -> Notification | None:
    """Notify ``user_id`` about ``action`` on a service request.

    Returns ``None`` when the request cannot be found or the notification
    cannot be stored; the caller's own operation must carry on regardless.
    """

    try:
        summary = ServiceRequestLookupRepository(session).get_summary(service_request_id)
    except SQLAlchemyError:
        session.rollback()
        logger.exception(
            "Error loading service request %s for notification", service_request_id
        )
        return None
    if summary is None:
        logger.error("Service request %s not found for notification", service_request_id)
        return None

    rendered = render_service_request_message(summary, action)
    return create_notification(
        session,
        user_id=user_id,
        title=rendered.title,
        message=rendered.message,
        type=rendered.type,
        related=RelatedEntity(kind=RELATED_SERVICE_REQUEST, id=service_request_id),
        actions=_view_action(f"/service-requests/{service_request_id}"),
    )


def notify_payment(
    session: Session, *, payment_id: int, user_id: int, action: str
) -> Notification | None:
    """Notify ``user_id`` about ``action`` on a payment."""

    summary = _load_payment(session, payment_id)
    if summary is None:
        return None
    return _create_payment_notification(session, summary, user_id=user_id, action=action)


def notify_payment_participants(
    session: Session, *, payment_id: int, action: str
) -> list[Notification]:
    """Notify the homeowner of ``action`` and, once completed, the provider too.

    A completed payment tells the homeowner it was processed and the provider
    that the money was received.
    """

    summary = _load_payment(session, payment_id)
    if summary is None:
        return []

    created: list[Notification] = []
    if summary.homeowner_user_id:
        notification = _create_payment_notification(
            session, summary, user_id=summary.homeowner_user_id, action=action
        )
        if notification is not None:
            created.append(notification)
    if action == "completed" and summary.provider_user_id:
        notification = _create_payment_notification(
            session, summary, user_id=summary.provider_user_id, action="received"
        )
        if notification is not None:
            created.append(notification)
    return created


def _load_payment(session: Session, payment_id: int) -> PaymentSummary | None:
    try:
        summary = PaymentLookupRepository(session).get_summary(payment_id)
    except SQLAlchemyError:
        session.rollback()
        logger.exception("Error loading payment %s for notification", payment_id)
        return None
    if summary is None:
        logger.error("Payment %s not found for notification", payment_id)
    return summary


def _create_payment_notification(
    session: Session, summary: PaymentSummary, *, user_id: int, action: str
) -> Notification | None:
    rendered = render_payment_message(summary, action)
    return create_notification(
        session,
        user_id=user_id,
        title=rendered.title,
        message=rendered.message,
        type=rendered.type,
        related=RelatedEntity(kind=RELATED_PAYMENT, id=summary.id),
        actions=_view_action(f"/payments/{summary.id}"),
    )


__all__ = [
    "RELATED_SERVICE_REQUEST",
    "RELATED_PAYMENT",
    "MessageTemplate",
    "SERVICE_REQUEST_TEMPLATES",
    "PAYMENT_TEMPLATES",
    "render_service_request_message",
    "render_payment_message",
    "notify_service_request",
    "notify_payment",
    "notify_payment_participants",
]

"""Read-only lookups of marketplace records used to word notifications."""

from __future__ import annotations

from decimal import Decimal

from sqlalchemy.orm import Session

from app.domain.entities import PaymentSummary, ServiceRequestSummary
from app.infrastructure.models import PaymentModel, ServiceRequestModel


class ServiceRequestLookupRepository:
    """Resolve display data for a service request."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get_summary(self, service_request_id: int) -> ServiceRequestSummary | None:
        model = self.session.get(ServiceRequestModel, service_request_id)
        if model is None or model.service is None or model.property is None:
            return None
        return ServiceRequestSummary(
            id=model.id,
            service_name=model.service.name,
            property_address=model.property.address,
            status=model.status,
            description=model.description,
        )


class PaymentLookupRepository:
    """Resolve display data and participants for a payment."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get_summary(self, payment_id: int) -> PaymentSummary | None:
        model = self.session.get(PaymentModel, payment_id)
        if model is None:
            return None
        service_request = model.service_request
        if (
            service_request is None
            or service_request.service is None
            or model.provider is None
            or model.homeowner is None
        ):
            return None
        return PaymentSummary(
            id=model.id,
            amount=Decimal(model.amount),
            service_name=service_request.service.name,
            service_description=service_request.description,
            provider_name=model.provider.company_name,
            homeowner_user_id=model.homeowner.user_id,
            provider_user_id=model.provider.user_id,
            status=model.status,
        )


__all__ = ["ServiceRequestLookupRepository", "PaymentLookupRepository"]

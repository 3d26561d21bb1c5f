"""Read-only projection of a payment used to word notifications."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal


@dataclass(frozen=True)
class PaymentSummary:
    """Display data joined from the payment and its service request, service and provider."""

    id: int
    amount: Decimal
    service_name: str
    service_description: str | None
    provider_name: str
    homeowner_user_id: int | None = None
    provider_user_id: int | None = None
    status: str | None = None

    @property
    def formatted_amount(self) -> str:
        return f"${self.amount:.2f}"


__all__ = ["PaymentSummary"]

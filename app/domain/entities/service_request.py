"""Read-only projection of a service request used to word notifications."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ServiceRequestSummary:
    """Display data joined from the service request, its service and property."""

    id: int
    service_name: str
    property_address: str
    status: str | None = None
    description: str | None = None


__all__ = ["ServiceRequestSummary"]

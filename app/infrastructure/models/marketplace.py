"""Read-only mappings of the marketplace tables notifications are worded from.

These tables belong to the service request, bidding and payment modules. The
notification service only joins them to fetch display names and never writes
to them outside of tests.
"""

from sqlalchemy import Column, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import relationship

from app.infrastructure.database import Base


class ServiceModel(Base):
    """Catalog entry for a kind of home service (e.g. lawn mowing)."""

    __tablename__ = "services"

    id = Column(Integer, primary_key=True)
    name = Column(String(255), nullable=False)


class PropertyModel(Base):
    """A homeowner's property."""

    __tablename__ = "properties"

    id = Column(Integer, primary_key=True)
    address = Column(String(255), nullable=False)


class HomeownerModel(Base):
    __tablename__ = "homeowners"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, nullable=False, index=True)


class ServiceProviderModel(Base):
    __tablename__ = "service_providers"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, nullable=False, index=True)
    company_name = Column(String(255), nullable=False)


class ServiceRequestModel(Base):
    """A homeowner's request for a service at one of their properties."""

    __tablename__ = "service_requests"

    id = Column(Integer, primary_key=True)
    service_id = Column(Integer, ForeignKey("services.id"), nullable=False)
    property_id = Column(Integer, ForeignKey("properties.id"), nullable=False)
    status = Column(String(50), nullable=True)
    description = Column(Text, nullable=True)

    service = relationship("ServiceModel", lazy="joined")
    property = relationship("PropertyModel", lazy="joined")


class PaymentModel(Base):
    __tablename__ = "payments"

    id = Column(Integer, primary_key=True)
    service_request_id = Column(
        Integer, ForeignKey("service_requests.id"), nullable=False
    )
    homeowner_id = Column(Integer, ForeignKey("homeowners.id"), nullable=False)
    provider_id = Column(Integer, ForeignKey("service_providers.id"), nullable=False)
    amount = Column(Numeric(10, 2), nullable=False)
    status = Column(String(50), nullable=True)

    service_request = relationship("ServiceRequestModel", lazy="joined")
    homeowner = relationship("HomeownerModel", lazy="joined")
    provider = relationship("ServiceProviderModel", lazy="joined")


__all__ = [
    "ServiceModel",
    "PropertyModel",
    "HomeownerModel",
    "ServiceProviderModel",
    "ServiceRequestModel",
    "PaymentModel",
]

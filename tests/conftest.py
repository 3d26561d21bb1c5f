"""Shared fixtures: a throwaway SQLite database and an app bound to it."""

from __future__ import annotations

import os
import sys
import tempfile
from decimal import Decimal
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

TEST_DB_PATH = Path(tempfile.mkdtemp(prefix="notifications-tests-")) / "test.db"
os.environ["DATABASE_URL"] = f"sqlite:///{TEST_DB_PATH}"
os.environ["SECRET_KEY"] = "test-secret"
os.environ["ENVIRONMENT"] = "test"
os.environ["APP_TIMEZONE"] = "UTC"

from app.config import reset_settings_cache  # noqa: E402
from app.domain.entities import AuthContext  # noqa: E402
from app.infrastructure import database  # noqa: E402
from app.infrastructure import models  # noqa: E402,F401  # register tables


@pytest.fixture(autouse=True)
def reset_database():
    """Give every test an empty schema."""

    database.Base.metadata.drop_all(bind=database.engine, checkfirst=True)
    database.Base.metadata.create_all(bind=database.engine)
    yield
    database.Base.metadata.drop_all(bind=database.engine, checkfirst=True)


@pytest.fixture(autouse=True)
def fresh_settings():
    """Drop settings cached by a test that changed the environment."""

    yield
    reset_settings_cache()


@pytest.fixture()
def db_session():
    session = database.SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def app():
    from main import create_app

    return create_app()


@pytest.fixture()
def act_as(app):
    """Return a helper that makes subsequent requests run as ``user_id``."""

    from app.interfaces.api.dependencies import get_auth_context

    def _act_as(user_id: int) -> AuthContext:
        context = AuthContext(user_id=user_id, email=f"user{user_id}@example.com", role="homeowner")
        app.dependency_overrides[get_auth_context] = lambda: context
        return context

    yield _act_as
    app.dependency_overrides.clear()


@pytest.fixture()
def client(app):
    from fastapi.testclient import TestClient

    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture()
def marketplace(db_session):
    """Seed one service request and one payment with their display data."""

    from app.infrastructure.models import (
        HomeownerModel,
        PaymentModel,
        PropertyModel,
        ServiceModel,
        ServiceProviderModel,
        ServiceRequestModel,
    )

    service = ServiceModel(id=1, name="Lawn Mowing")
    home = PropertyModel(id=1, address="12 Elm Street")
    homeowner = HomeownerModel(id=1, user_id=101)
    provider = ServiceProviderModel(id=1, user_id=202, company_name="Green Thumb LLC")
    service_request = ServiceRequestModel(
        id=7,
        service_id=1,
        property_id=1,
        status="in_progress",
        description="Front and back yard",
    )
    payment = PaymentModel(
        id=9,
        service_request_id=7,
        homeowner_id=1,
        provider_id=1,
        amount=Decimal("150.00"),
        status="pending",
    )
    db_session.add_all([service, home, homeowner, provider, service_request, payment])
    db_session.commit()
    return {"service_request_id": 7, "payment_id": 9, "homeowner_user_id": 101, "provider_user_id": 202}


@pytest.fixture()
def anyio_backend():
    """The async code under test is asyncio-based."""

    return "asyncio"

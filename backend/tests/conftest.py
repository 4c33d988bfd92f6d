"""
Pytest configuration and fixtures for backend tests.

Tests run against SQLite in-memory. The environment is prepared before the
application is imported so settings, engine and limiter pick it up.
"""

import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ENVIRONMENT"] = "test"
os.environ["CREATE_TABLES_ON_STARTUP"] = "false"
os.environ["SEED_ON_STARTUP"] = "false"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["IDENTITY_MODE"] = "opaque"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from tipsy_shared.config.constants import Roles, StaffStatus
from tipsy_shared.infrastructure.db import get_db
from tipsy_shared.security.rate_limit import limiter
from tipsy_api.main import app
from tipsy_api.models import Base, Restaurant, Staff, User


# SQLite in-memory database shared by every connection of a test
SQLALCHEMY_DATABASE_URL = "sqlite://"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

limiter.enabled = False


def bearer(user_or_credential) -> dict[str, str]:
    """Authorization header for a seeded user or a raw credential."""
    credential = getattr(user_or_credential, "auth_user_id", user_or_credential)
    return {"Authorization": f"Bearer {credential}"}


@pytest.fixture(scope="function")
def db_session():
    """
    Create a fresh database session for each test.
    Uses SQLite in-memory for isolation.
    """
    Base.metadata.create_all(bind=engine)

    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db_session):
    """
    Create a test client with database session override.
    """
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db_session):
    """Factory inserting a user whose bearer credential is its auth_user_id."""
    def _make(auth_user_id: str, role: str = Roles.WORKER, name: str | None = None, email: str | None = None) -> User:
        user = User(
            auth_user_id=auth_user_id,
            role=role,
            name=name or auth_user_id.replace("_", " ").title(),
            email=email or f"{auth_user_id}@tipsy.test",
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return _make


@pytest.fixture
def admin(make_user):
    return make_user("admin_auth_1", Roles.ADMIN, "Platform Admin", "admin@tipsy.test")


@pytest.fixture
def owner(make_user):
    return make_user("owner_auth_1", Roles.OWNER, "Rajesh Kumar", "rajesh@tipsy.test")


@pytest.fixture
def other_owner(make_user):
    return make_user("owner_auth_2", Roles.OWNER, "Meera Iyer", "meera@tipsy.test")


@pytest.fixture
def worker(make_user):
    return make_user("worker_auth_1", Roles.WORKER, "Aisha Sharma", "aisha@tipsy.test")


@pytest.fixture
def other_worker(make_user):
    return make_user("worker_auth_2", Roles.WORKER, "Vikram Rao", "vikram@tipsy.test")


@pytest.fixture
def restaurant(db_session, owner):
    restaurant = Restaurant(
        owner_user_id=owner.id,
        name="Tipsy Test Kitchen",
        address="12 MG Road, Bengaluru",
        upi_handle="tipsy@upi",
    )
    db_session.add(restaurant)
    db_session.commit()
    db_session.refresh(restaurant)
    return restaurant


@pytest.fixture
def staff(db_session, restaurant, worker):
    """The worker as active staff reachable through the ``aisha-qr`` slug."""
    member = Staff(
        restaurant_id=restaurant.id,
        user_id=worker.id,
        role_in_restaurant="server",
        qr_slug="aisha-qr",
        status=StaffStatus.ACTIVE,
    )
    db_session.add(member)
    db_session.commit()
    db_session.refresh(member)
    return member


@pytest.fixture
def headers_for():
    """``headers_for(user)`` or ``headers_for("raw-credential")``."""
    return bearer

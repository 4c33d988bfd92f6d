"""
Seed data for development and testing.
Creates one admin, one owner with a restaurant, one worker on its staff and
the default feature flags.

Idempotent: every row is looked up by its natural key before it is inserted.
"""

from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.orm import Session

from tipsy_shared.config.constants import Roles, StaffStatus
from tipsy_shared.config.logging import get_logger
from tipsy_shared.infrastructure.db import safe_commit
from tipsy_api.models import Feature, Restaurant, Staff, User, WorkerProfile
from tipsy_api.services.domain.worker_service import qrcode_url_for

logger = get_logger(__name__)


# Bearer credentials of the seeded accounts (opaque identity mode)
ADMIN_CREDENTIAL = "admin_auth_1"
OWNER_CREDENTIAL = "owner_auth_1"
WORKER_CREDENTIAL = "worker_auth_1"

DEMO_RESTAURANT_NAME = "Tipsy Test Kitchen"
DEMO_QR_SLUG = "aisha-qr"

DEFAULT_FEATURES = [
    {
        "key": "qr_scanner",
        "name": "QR Code Scanner",
        "description": "Enable QR code scanning functionality for tip submissions",
        "enabled": True,
    },
    {
        "key": "owner_analytics",
        "name": "Owner Analytics Dashboard",
        "description": "Advanced analytics and reporting for restaurant owners",
        "enabled": True,
    },
    {
        "key": "review_moderation",
        "name": "Review Moderation System",
        "description": "Allow owners to moderate and approve customer reviews",
        "enabled": True,
    },
    {
        "key": "upi_payments",
        "name": "UPI Payment Integration",
        "description": "Direct UPI payment processing for tips",
        "enabled": True,
    },
    {
        "key": "tip_goals",
        "name": "Worker Tip Goals",
        "description": "Let workers set monthly tip goals",
        "enabled": False,
    },
]


def _get_or_create_user(db: Session, auth_user_id: str, role: str, name: str, email: str) -> User:
    user = db.scalar(select(User).where(User.auth_user_id == auth_user_id))
    if user is None:
        user = User(auth_user_id=auth_user_id, role=role, name=name, email=email)
        db.add(user)
        db.flush()
        logger.info("Seeded user", user_id=user.id, role=role)
    return user


def seed_users(db: Session) -> tuple[User, User, User]:
    admin = _get_or_create_user(db, ADMIN_CREDENTIAL, Roles.ADMIN, "Platform Admin", "admin@tipsy.test")
    owner = _get_or_create_user(db, OWNER_CREDENTIAL, Roles.OWNER, "Rajesh Kumar", "rajesh@tipsy.test")
    worker = _get_or_create_user(db, WORKER_CREDENTIAL, Roles.WORKER, "Aisha Sharma", "aisha@tipsy.test")
    return admin, owner, worker


def seed_restaurant(db: Session, owner: User, worker: User) -> Restaurant:
    """The demo restaurant with the worker on staff and a worker profile."""
    restaurant = db.scalar(
        select(Restaurant).where(
            Restaurant.owner_user_id == owner.id,
            Restaurant.name == DEMO_RESTAURANT_NAME,
        )
    )
    if restaurant is None:
        restaurant = Restaurant(
            owner_user_id=owner.id,
            name=DEMO_RESTAURANT_NAME,
            address="12 MG Road, Bengaluru",
            upi_handle="tipsy@upi",
        )
        db.add(restaurant)
        db.flush()
        logger.info("Seeded restaurant", restaurant_id=restaurant.id)

    if db.scalar(select(Staff.id).where(Staff.qr_slug == DEMO_QR_SLUG)) is None:
        db.add(Staff(
            restaurant_id=restaurant.id,
            user_id=worker.id,
            role_in_restaurant="server",
            qr_slug=DEMO_QR_SLUG,
            status=StaffStatus.ACTIVE,
            joined_at=datetime.now(timezone.utc),
        ))

    if db.scalar(select(WorkerProfile.id).where(WorkerProfile.user_id == worker.id)) is None:
        db.add(WorkerProfile(
            user_id=worker.id,
            restaurant_id=restaurant.id,
            display_name=worker.name,
            bio="Server at Tipsy Test Kitchen",
            upi_vpa="aisha@upi",
            qrcode_url=qrcode_url_for(worker.id),
        ))

    return restaurant


def seed_features(db: Session) -> int:
    """Insert missing default flags. Existing flags keep their admin-set state."""
    existing = set(db.scalars(select(Feature.key)))
    created = 0
    for data in DEFAULT_FEATURES:
        if data["key"] not in existing:
            db.add(Feature(**data))
            created += 1
    return created


def seed(db: Session) -> None:
    """Seed the demo data set in one transaction."""
    _, owner, worker = seed_users(db)
    seed_restaurant(db, owner, worker)
    created = seed_features(db)
    safe_commit(db)
    logger.info("Seed completed", features_created=created)

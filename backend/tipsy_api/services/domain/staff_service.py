"""
Staff Service.

Manages memberships of users at restaurants. Every membership gets a unique
QR slug that tippers scan to reach the worker.

Usage:
    from tipsy_api.services.domain import StaffService

    service = StaffService(db)
    members = service.list_for_restaurant(user, restaurant_id)
    member = service.add(user, data)
"""

from __future__ import annotations

import re
import secrets
from datetime import datetime, timezone

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from tipsy_shared.config.constants import InvitationStatus, StaffStatus
from tipsy_shared.config.logging import audit_privileged_action, get_logger
from tipsy_shared.infrastructure.db import safe_commit
from tipsy_shared.utils.exceptions import DuplicateEntityError, NotFoundError
from tipsy_shared.utils.venue_schemas import StaffCreate, StaffDeleted, StaffMemberOutput

from tipsy_api.models import Restaurant, Staff, StaffInvitation, User
from tipsy_api.services.lookup import ReferenceLookup
from tipsy_api.services.permissions import PermissionContext

logger = get_logger(__name__)

_NON_ALNUM = re.compile(r"[^a-z0-9]")


def _slug_part(value: str, fallback: str) -> str:
    return _NON_ALNUM.sub("", value.lower()) or fallback


def generate_qr_slug(restaurant_name: str, user_name: str) -> str:
    """``<restaurant>-<user>-<random>`` using lowercase alphanumerics only."""
    return "-".join((
        _slug_part(restaurant_name, "restaurant"),
        _slug_part(user_name, "worker"),
        secrets.token_hex(4),
    ))


def new_staff(
    restaurant: Restaurant,
    user: User,
    role_in_restaurant: str,
    status: str = StaffStatus.ACTIVE,
) -> Staff:
    """Build a membership row; active rows are stamped as joined now."""
    return Staff(
        restaurant_id=restaurant.id,
        user_id=user.id,
        role_in_restaurant=role_in_restaurant,
        qr_slug=generate_qr_slug(restaurant.name, user.name),
        status=status,
        joined_at=datetime.now(timezone.utc) if status == StaffStatus.ACTIVE else None,
    )


class StaffService:
    """
    Service for staff memberships.

    Business rules:
    - The restaurant's owner or an admin manages its staff
    - One membership per (restaurant, user)
    - Removing a member revokes invitations that point at it
    """

    def __init__(self, db: Session):
        self._db = db
        self._lookup = ReferenceLookup(db)

    def find_membership(self, restaurant_id: int, user_id: int) -> Staff | None:
        return self._db.scalar(
            select(Staff).where(Staff.restaurant_id == restaurant_id, Staff.user_id == user_id)
        )

    def list_for_restaurant(self, user: User, restaurant_id: int) -> list[StaffMemberOutput]:
        restaurant = self._lookup.get_restaurant(restaurant_id)
        PermissionContext(user).require_owner_or_admin(restaurant, "view staff of this restaurant")

        members = self._db.scalars(
            select(Staff)
            .options(selectinload(Staff.user))
            .where(Staff.restaurant_id == restaurant.id)
            .order_by(Staff.created_at.asc(), Staff.id.asc())
        )
        return [StaffMemberOutput.model_validate(member) for member in members]

    def add(self, user: User, data: StaffCreate) -> StaffMemberOutput:
        restaurant = self._lookup.get_restaurant(data.restaurant_id)
        PermissionContext(user).require_owner_or_admin(restaurant, "add staff to this restaurant")

        member_user = self._lookup.find_user_by_email(data.user_email)
        if member_user is None:
            raise NotFoundError("User", code="USER_NOT_FOUND", email=data.user_email)

        if self.find_membership(restaurant.id, member_user.id) is not None:
            raise DuplicateEntityError("Staff", code="DUPLICATE_STAFF", restaurant_id=restaurant.id)

        staff = new_staff(restaurant, member_user, data.role_in_restaurant)
        self._db.add(staff)
        try:
            safe_commit(self._db)
        except IntegrityError:
            raise DuplicateEntityError("Staff", code="DUPLICATE_STAFF", restaurant_id=restaurant.id)

        self._db.refresh(staff)
        audit_privileged_action(
            "STAFF_ADDED",
            actor_id=user.id,
            actor_role=user.role,
            target="staff",
            target_id=staff.id,
            restaurant_id=restaurant.id,
        )
        return StaffMemberOutput.model_validate(staff)

    def remove(self, user: User, staff_id: int) -> StaffDeleted:
        staff = self._lookup.get_staff(staff_id)
        restaurant = staff.restaurant
        PermissionContext(user).require_owner_or_admin(restaurant, "remove this staff member")

        deleted = StaffMemberOutput.model_validate(staff)
        message = f"Staff member {staff.user.name} removed from {restaurant.name}"

        self._db.execute(
            update(StaffInvitation)
            .where(
                StaffInvitation.staff_id == staff.id,
                StaffInvitation.status == InvitationStatus.PENDING,
            )
            .values(status=InvitationStatus.REVOKED)
        )
        self._db.execute(
            update(StaffInvitation)
            .where(StaffInvitation.staff_id == staff.id)
            .values(staff_id=None)
        )
        self._db.delete(staff)
        safe_commit(self._db)

        audit_privileged_action(
            "STAFF_REMOVED",
            actor_id=user.id,
            actor_role=user.role,
            target="staff",
            target_id=staff_id,
            restaurant_id=restaurant.id,
        )
        return StaffDeleted(success=True, message=message, deleted_staff=deleted)

"""
Restaurant Service.

Owners create and manage their restaurants. Deleting a restaurant removes
its staff, invitations and worker profiles while tips and reviews keep
their rows with the restaurant reference cleared.
"""

from __future__ import annotations

from sqlalchemy import delete, func, select, update
from sqlalchemy.orm import Session, selectinload

from tipsy_shared.config.constants import Roles
from tipsy_shared.config.logging import audit_privileged_action, get_logger
from tipsy_shared.infrastructure.db import safe_commit
from tipsy_shared.utils.exceptions import NotFoundError, ValidationError
from tipsy_shared.utils.schemas import UserRef
from tipsy_shared.utils.venue_schemas import (
    RestaurantCreate,
    RestaurantDetail,
    RestaurantListItem,
    RestaurantOutput,
    RestaurantUpdate,
    StaffMemberOutput,
)

from tipsy_api.models import Restaurant, Review, Staff, Tip, User, WorkerProfile
from tipsy_api.services.lookup import ReferenceLookup
from tipsy_api.services.permissions import Action, PermissionContext

logger = get_logger(__name__)


class RestaurantService:
    """
    Domain service for restaurants.

    Business rules:
    - Only owners create restaurants; the creator becomes the owner
    - Owner, staff and admins may read a restaurant's detail
    - Only the owner updates or deletes it
    """

    def __init__(self, db: Session):
        self._db = db
        self._lookup = ReferenceLookup(db)

    def list_owned(self, user: User, *, limit: int, offset: int) -> list[RestaurantListItem]:
        """The owner's restaurants with their staff counts."""
        staff_count = func.count(Staff.id).label("staff_count")
        rows = self._db.execute(
            select(Restaurant, staff_count)
            .outerjoin(Staff, Staff.restaurant_id == Restaurant.id)
            .where(Restaurant.owner_user_id == user.id)
            .group_by(Restaurant.id)
            .order_by(Restaurant.created_at.desc(), Restaurant.id.desc())
            .offset(offset)
            .limit(limit)
        ).all()

        return [
            RestaurantListItem(
                **RestaurantOutput.model_validate(restaurant).model_dump(),
                staff_count=count,
            )
            for restaurant, count in rows
        ]

    def create(self, user: User, data: RestaurantCreate) -> Restaurant:
        restaurant = Restaurant(
            owner_user_id=user.id,
            name=data.name,
            address=data.address,
            upi_handle=data.upi_handle,
        )
        self._db.add(restaurant)
        safe_commit(self._db)
        self._db.refresh(restaurant)

        logger.info("Restaurant created", restaurant_id=restaurant.id, owner_user_id=user.id)
        return restaurant

    def get_detail(self, user: User, restaurant_id: int) -> RestaurantDetail:
        restaurant = self._db.scalar(
            select(Restaurant)
            .options(
                selectinload(Restaurant.owner),
                selectinload(Restaurant.staff).selectinload(Staff.user),
            )
            .where(Restaurant.id == restaurant_id)
        )
        if restaurant is None:
            raise NotFoundError("Restaurant", restaurant_id)

        PermissionContext(user).require(
            Action.READ, restaurant, "view this restaurant", restaurant_id=restaurant.id
        )

        staff = sorted(restaurant.staff, key=lambda s: s.id)
        return RestaurantDetail(
            **RestaurantOutput.model_validate(restaurant).model_dump(),
            owner=UserRef.model_validate(restaurant.owner),
            staff=[StaffMemberOutput.model_validate(member) for member in staff],
        )

    def update(self, user: User, restaurant_id: int, data: RestaurantUpdate) -> Restaurant:
        restaurant = self._lookup.get_restaurant(restaurant_id)
        PermissionContext(user).require_restaurant_owner(restaurant, "update this restaurant")

        changes = data.model_dump(include=data.model_fields_set)
        if not changes:
            raise ValidationError("No fields to update", code="NO_UPDATES")

        for field, value in changes.items():
            setattr(restaurant, field, value)
        safe_commit(self._db)
        self._db.refresh(restaurant)

        logger.info("Restaurant updated", restaurant_id=restaurant.id, fields=sorted(changes))
        return restaurant

    def delete(self, user: User, restaurant_id: int) -> None:
        """
        Remove a restaurant in one transaction: staff and invitations through
        the ORM cascade, worker profiles explicitly, tips and reviews detached.
        """
        restaurant = self._lookup.get_restaurant(restaurant_id)
        PermissionContext(user).require_restaurant_owner(restaurant, "delete this restaurant")

        self._db.execute(
            update(Tip).where(Tip.restaurant_id == restaurant.id).values(restaurant_id=None)
        )
        self._db.execute(
            update(Review).where(Review.restaurant_id == restaurant.id).values(restaurant_id=None)
        )
        self._db.execute(delete(WorkerProfile).where(WorkerProfile.restaurant_id == restaurant.id))
        self._db.delete(restaurant)
        safe_commit(self._db)

        audit_privileged_action(
            "RESTAURANT_DELETED",
            actor_id=user.id,
            actor_role=user.role,
            target="restaurant",
            target_id=restaurant_id,
        )

    @staticmethod
    def count_owned(db: Session, user: User) -> int:
        if user.role != Roles.OWNER:
            return 0
        return db.scalar(
            select(func.count(Restaurant.id)).where(Restaurant.owner_user_id == user.id)
        ) or 0

"""
Worker Service.

Read side for tippers (public profile by user id or QR slug) and the
worker profile resource managed by restaurant owners.

Earnings and ratings are never stored: they are aggregated from Tip and
approved Review rows whenever a profile is read.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Literal
from urllib.parse import quote

from sqlalchemy import Select, asc, desc, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from tipsy_shared.config.constants import Limits, ReviewStatus, Roles, StaffStatus
from tipsy_shared.config.logging import audit_privileged_action, get_logger
from tipsy_shared.config.settings import settings
from tipsy_shared.infrastructure.db import safe_commit
from tipsy_shared.utils.exceptions import (
    DuplicateEntityError,
    NotFoundError,
    ValidationError,
)
from tipsy_shared.utils.tipping_schemas import (
    EarningsStats,
    PublicReview,
    RestaurantSummary,
    ReviewStats,
    SlugRestaurant,
    SlugWorker,
    StaffBadge,
    WorkerBySlug,
    WorkerProfileCreate,
    WorkerProfileOutput,
    WorkerProfileUpdate,
    WorkerPublicProfile,
    WorkerRestaurantEntry,
)
from tipsy_shared.utils.schemas import RestaurantRef
from tipsy_shared.utils.validators import escape_like_pattern, sanitize_search_term

from tipsy_api.models import Review, Staff, Tip, User, WorkerProfile
from tipsy_api.services.lookup import ReferenceLookup
from tipsy_api.services.permissions import Action, PermissionContext
from tipsy_api.services.domain.stats import (
    average_cents,
    average_rating,
    approved_ratings,
    worker_average_rating,
    worker_earnings,
)

logger = get_logger(__name__)

SortField = Literal["createdAt", "displayName", "earningsTotal", "ratingAvg"]
SortOrder = Literal["asc", "desc"]


def qrcode_url_for(user_id: int) -> str:
    """Link to an external QR image encoding the worker's tip URI."""
    data = quote(f"tips://worker/{user_id}", safe="")
    return f"{settings.qr_image_service_url}?size=300x300&data={data}"


class WorkerService:

    def __init__(self, db: Session):
        self._db = db
        self._lookup = ReferenceLookup(db)

    # =========================================================================
    # Public pages
    # =========================================================================

    def public_profile(self, user_id: int) -> WorkerPublicProfile:
        worker = self._db.get(User, user_id)
        if worker is None:
            raise NotFoundError("Worker", user_id)

        memberships = self._db.scalars(
            select(Staff)
            .options(joinedload(Staff.restaurant))
            .where(Staff.user_id == worker.id, Staff.status == StaffStatus.ACTIVE)
            .order_by(Staff.id)
        )
        restaurants = [
            WorkerRestaurantEntry(
                restaurant=RestaurantSummary.model_validate(member.restaurant),
                staff=StaffBadge.model_validate(member),
            )
            for member in memberships
        ]

        return WorkerPublicProfile(
            id=worker.id,
            name=worker.name,
            avatar_url=worker.avatar_url,
            average_rating=worker_average_rating(self._db, worker.id),
            restaurants=restaurants,
            recent_reviews=self._recent_approved(worker.id, Limits.RECENT_REVIEWS_PROFILE),
        )

    def by_slug(self, qr_slug: str) -> WorkerBySlug:
        ref = self._lookup.resolve_qr_slug(qr_slug, code="QR_SLUG_NOT_FOUND")
        staff, worker, restaurant = ref.staff, ref.worker, ref.restaurant
        return WorkerBySlug(
            worker=SlugWorker(
                name=worker.name,
                avatar_url=worker.avatar_url,
                average_rating=worker_average_rating(self._db, worker.id),
                role_in_restaurant=staff.role_in_restaurant,
                joined_at=staff.joined_at,
            ),
            restaurant=SlugRestaurant.model_validate(restaurant),
            reviews=self._recent_approved(worker.id, Limits.RECENT_REVIEWS_SLUG),
            qr_slug=staff.qr_slug,
        )

    def _recent_approved(self, worker_user_id: int, limit: int) -> list[PublicReview]:
        reviews = self._db.scalars(
            select(Review)
            .options(joinedload(Review.restaurant))
            .where(
                Review.worker_user_id == worker_user_id,
                Review.status == ReviewStatus.APPROVED,
            )
            .order_by(Review.created_at.desc(), Review.id.desc())
            .limit(limit)
        )
        return [
            PublicReview(
                id=review.id,
                rating=review.rating,
                comment=review.comment,
                created_at=review.created_at,
                restaurant_name=review.restaurant.name if review.restaurant else None,
            )
            for review in reviews
        ]

    # =========================================================================
    # Worker profile resource
    # =========================================================================

    def list_profiles(
        self,
        *,
        restaurant_id: int | None,
        search: str | None,
        sort: SortField,
        order: SortOrder,
        limit: int,
        offset: int,
    ) -> list[WorkerProfileOutput]:
        query: Select = select(WorkerProfile).options(joinedload(WorkerProfile.restaurant))

        if restaurant_id is not None:
            query = query.where(WorkerProfile.restaurant_id == restaurant_id)

        term = sanitize_search_term(search)
        if term:
            pattern = f"%{escape_like_pattern(term)}%"
            query = query.where(WorkerProfile.display_name.ilike(pattern, escape="\\"))

        direction = asc if order == "asc" else desc
        query = query.order_by(direction(self._sort_column(sort)), direction(WorkerProfile.id))

        profiles = self._db.scalars(query.offset(offset).limit(limit))
        return [self._to_output(profile) for profile in profiles]

    def _sort_column(self, sort: SortField):
        if sort == "displayName":
            return WorkerProfile.display_name
        if sort == "earningsTotal":
            return (
                select(func.coalesce(func.sum(Tip.amount_cents), 0))
                .where(Tip.worker_user_id == WorkerProfile.user_id)
                .correlate(WorkerProfile)
                .scalar_subquery()
            )
        if sort == "ratingAvg":
            return (
                select(func.coalesce(func.avg(Review.rating), 0))
                .where(
                    Review.worker_user_id == WorkerProfile.user_id,
                    Review.status == ReviewStatus.APPROVED,
                )
                .correlate(WorkerProfile)
                .scalar_subquery()
            )
        return WorkerProfile.created_at

    def get_profile(self, profile_id: int) -> WorkerProfileOutput:
        return self._to_output(self._get(profile_id))

    def create_profile(self, user: User, data: WorkerProfileCreate) -> WorkerProfileOutput:
        restaurant = self._lookup.get_restaurant(data.restaurant_id)
        PermissionContext(user).require_owner_or_admin(restaurant, "create worker profiles at this restaurant")

        target = self._db.get(User, data.user_id)
        if target is None:
            raise NotFoundError("User", data.user_id)
        if target.role != Roles.WORKER:
            raise ValidationError("User must have worker role", code="INVALID_USER_ROLE", user_id=target.id)
        if self._db.scalar(select(WorkerProfile.id).where(WorkerProfile.user_id == target.id)) is not None:
            raise DuplicateEntityError("Worker profile", code="WORKER_ALREADY_EXISTS", user_id=target.id)

        profile = WorkerProfile(
            user_id=target.id,
            restaurant_id=restaurant.id,
            display_name=data.display_name,
            bio=data.bio,
            upi_vpa=data.upi_vpa,
            qrcode_url=qrcode_url_for(target.id),
            updated_at=datetime.now(timezone.utc),
        )
        self._db.add(profile)
        try:
            safe_commit(self._db)
        except IntegrityError:
            raise DuplicateEntityError("Worker profile", code="WORKER_ALREADY_EXISTS", user_id=target.id)

        self._db.refresh(profile)
        logger.info("Worker profile created", profile_id=profile.id, user_id=target.id, restaurant_id=restaurant.id)
        return self._to_output(profile)

    def update_profile(self, user: User, profile_id: int, data: WorkerProfileUpdate) -> WorkerProfileOutput:
        profile = self._get(profile_id)
        PermissionContext(user).require(Action.UPDATE, profile, "update this worker profile", profile_id=profile.id)

        for field, value in data.model_dump(include=data.model_fields_set).items():
            setattr(profile, field, value)
        profile.updated_at = datetime.now(timezone.utc)
        safe_commit(self._db)
        self._db.refresh(profile)

        logger.info("Worker profile updated", profile_id=profile.id, fields=sorted(data.model_fields_set))
        return self._to_output(profile)

    def delete_profile(self, user: User, profile_id: int) -> None:
        profile = self._get(profile_id)
        PermissionContext(user).require(Action.DELETE, profile, "delete this worker profile", profile_id=profile.id)

        self._db.delete(profile)
        safe_commit(self._db)
        audit_privileged_action(
            "WORKER_PROFILE_DELETED",
            actor_id=user.id,
            actor_role=user.role,
            target="worker_profile",
            target_id=profile_id,
        )

    def _get(self, profile_id: int) -> WorkerProfile:
        profile = self._db.get(WorkerProfile, profile_id)
        if profile is None:
            raise NotFoundError("Worker", profile_id)
        return profile

    def _to_output(self, profile: WorkerProfile) -> WorkerProfileOutput:
        total, count = worker_earnings(self._db, profile.user_id)
        ratings = approved_ratings(self._db, profile.user_id)
        return WorkerProfileOutput(
            id=profile.id,
            user_id=profile.user_id,
            restaurant_id=profile.restaurant_id,
            display_name=profile.display_name,
            bio=profile.bio,
            upi_vpa=profile.upi_vpa,
            qrcode_url=profile.qrcode_url,
            created_at=profile.created_at,
            updated_at=profile.updated_at,
            restaurant=RestaurantRef.model_validate(profile.restaurant) if profile.restaurant else None,
            earnings=EarningsStats(total=total, tip_count=count, average=average_cents(total, count)),
            reviews=ReviewStats(total=len(ratings), avg_rating=average_rating(ratings)),
        )

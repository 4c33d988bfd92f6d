"""
Review Service.

Public review submission, role-scoped listings and moderation.

Moderation rules:
- Only the owner of the review's restaurant or an admin may moderate
- pending -> approved / rejected
- Repeating the action already applied is a no-op
- Switching a finalized review to the other status is a conflict
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from tipsy_shared.config.constants import (
    ModerationAction,
    NotificationType,
    ReviewStatus,
    Roles,
)
from tipsy_shared.config.logging import audit_privileged_action, get_logger
from tipsy_shared.infrastructure.db import safe_commit
from tipsy_shared.utils.exceptions import (
    ConflictError,
    InvalidTransitionError,
    ValidationError,
)
from tipsy_shared.utils.schemas import NamedRef
from tipsy_shared.utils.tipping_schemas import (
    ModeratedReview,
    ModerationRequest,
    ModeratorRef,
    ReviewCreate,
    ReviewListItem,
    ReviewOutput,
    ReviewReceipt,
)

from tipsy_api.models import Restaurant, Review, User
from tipsy_api.services.lookup import ReferenceLookup
from tipsy_api.services.permissions import PermissionContext
from tipsy_api.services.domain.notification_service import add_notification
from tipsy_api.services.domain.tip_service import review_notification_body

logger = get_logger(__name__)


class ReviewService:

    def __init__(self, db: Session):
        self._db = db
        self._lookup = ReferenceLookup(db)

    # =========================================================================
    # Submission
    # =========================================================================

    def submit(self, data: ReviewCreate) -> ReviewReceipt:
        """
        Record a pending review for the worker identified by exactly one of
        ``tip_id`` or ``qr_slug``.
        """
        if data.tip_id is None and data.qr_slug is None:
            raise ValidationError("Either tip_id or qr_slug is required", code="MISSING_REFERENCE")
        if data.tip_id is not None and data.qr_slug is not None:
            raise ValidationError("Provide only one of tip_id or qr_slug", code="AMBIGUOUS_REFERENCE")

        if data.tip_id is not None:
            ref = self._lookup.resolve_tip(data.tip_id)
            if self._tip_reviewed(data.tip_id):
                raise ConflictError("Tip already has a review", code="DUPLICATE_REVIEW", tip_id=data.tip_id)
            worker, restaurant = ref.worker, ref.restaurant
        else:
            staff_ref = self._lookup.resolve_qr_slug(data.qr_slug)
            worker, restaurant = staff_ref.worker, staff_ref.restaurant

        review = Review(
            worker_user_id=worker.id,
            restaurant_id=restaurant.id if restaurant else None,
            rating=data.rating,
            comment=data.comment,
            tip_id=data.tip_id,
            status=ReviewStatus.PENDING,
        )
        self._db.add(review)
        add_notification(
            self._db,
            worker.id,
            NotificationType.REVIEW_POSTED,
            "New Review Received",
            review_notification_body(data.rating),
        )

        try:
            safe_commit(self._db)
        except IntegrityError:
            # unique review.tip_id lost a race with a concurrent submission
            code = "DUPLICATE_REVIEW" if data.tip_id is not None else None
            raise ConflictError("Review could not be recorded", code=code)

        self._db.refresh(review)
        logger.info(
            "Review submitted",
            review_id=review.id,
            worker_user_id=worker.id,
            restaurant_id=review.restaurant_id,
            rating=review.rating,
        )

        return ReviewReceipt(
            review=ReviewOutput.model_validate(review),
            worker=NamedRef(name=worker.name),
            restaurant=NamedRef(name=restaurant.name) if restaurant else None,
        )

    def _tip_reviewed(self, tip_id: int) -> bool:
        return self._db.scalar(select(Review.id).where(Review.tip_id == tip_id)) is not None

    # =========================================================================
    # Listing
    # =========================================================================

    def list_for(
        self,
        user: User,
        *,
        restaurant_id: int | None,
        limit: int,
        offset: int,
    ) -> list[ReviewListItem]:
        """
        Role-scoped listing, newest first.

        worker: own reviews (restaurant filter optional)
        owner:  reviews of a restaurant they own (restaurant_id required)
        admin:  all reviews, optionally filtered by restaurant
        """
        query = select(Review).options(joinedload(Review.worker), joinedload(Review.restaurant))

        if user.role == Roles.OWNER:
            if restaurant_id is None:
                raise ValidationError("restaurantId is required", code="INVALID_REQUEST")
            restaurant = self._lookup.get_restaurant(restaurant_id)
            PermissionContext(user).require_restaurant_owner(restaurant, "list reviews of this restaurant")
            query = query.where(Review.restaurant_id == restaurant_id)
        elif user.role == Roles.ADMIN:
            if restaurant_id is not None:
                query = query.where(Review.restaurant_id == restaurant_id)
        else:
            query = query.where(Review.worker_user_id == user.id)
            if restaurant_id is not None:
                query = query.where(Review.restaurant_id == restaurant_id)

        query = query.order_by(Review.created_at.desc(), Review.id.desc()).offset(offset).limit(limit)
        return [ReviewListItem.model_validate(review) for review in self._db.scalars(query)]

    # =========================================================================
    # Moderation
    # =========================================================================

    def moderate(self, user: User, data: ModerationRequest) -> ModeratedReview:
        """
        Approve or reject a review. The caller's role has already been checked;
        this resolves the review and enforces ownership.
        """
        review = self._lookup.get_review(data.review_id)
        self._require_moderator_of(user, review)

        target = ModerationAction.TARGET_STATUS[data.action]
        if review.status in ReviewStatus.FINAL:
            if review.status != target:
                raise InvalidTransitionError(
                    "Review",
                    review.status,
                    target,
                    code="REVIEW_ALREADY_MODERATED",
                    review_id=review.id,
                )
            logger.info("Review already moderated, no change", review_id=review.id, status=review.status)
        else:
            review.status = target
            review.moderated_by_user_id = user.id
            review.moderated_at = datetime.now(timezone.utc)
            safe_commit(self._db)
            self._db.refresh(review)

            audit_privileged_action(
                "REVIEW_MODERATED",
                actor_id=user.id,
                actor_role=user.role,
                target="review",
                target_id=review.id,
                moderation_action=data.action,
                restaurant_id=review.restaurant_id,
            )

        moderator = review.moderated_by or user
        return ModeratedReview(
            **ReviewOutput.model_validate(review).model_dump(),
            moderation_action=data.action,
            moderated_by=ModeratorRef(id=moderator.id, name=moderator.name),
        )

    def _require_moderator_of(self, user: User, review: Review) -> None:
        ctx = PermissionContext(user)
        if ctx.is_admin:
            return
        restaurant: Restaurant | None = review.restaurant
        if restaurant is None:
            # Orphaned reviews (restaurant deleted) are left to admins
            ctx.deny("moderate this review", review_id=review.id)
        ctx.require_restaurant_owner(restaurant, "moderate this review")

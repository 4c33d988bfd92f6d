"""
Reference lookups shared by the domain services.

Public entry points (QR slugs, tip ids) and management endpoints (restaurant,
review, staff ids) all resolve their targets here so that unknown references
fail with the same not-found codes before anything is written.
"""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy import func, select
from sqlalchemy.orm import Session, joinedload

from tipsy_shared.config.constants import StaffStatus
from tipsy_shared.utils.exceptions import NotFoundError

from tipsy_api.models import (
    Notification,
    Restaurant,
    Review,
    Staff,
    StaffInvitation,
    Tip,
    User,
)


@dataclass(frozen=True)
class StaffReference:
    """An active staff membership resolved from a QR slug."""

    staff: Staff
    worker: User
    restaurant: Restaurant


@dataclass(frozen=True)
class TipReference:
    """A tip with the worker and restaurant it was left for."""

    tip: Tip
    worker: User
    restaurant: Restaurant | None

    @property
    def worker_user_id(self) -> int:
        return self.tip.worker_user_id

    @property
    def restaurant_id(self) -> int | None:
        return self.tip.restaurant_id


class ReferenceLookup:
    """Resolve external references to rows, raising NotFoundError when absent."""

    def __init__(self, db: Session):
        self._db = db

    def resolve_qr_slug(self, qr_slug: str, code: str = "INVALID_QR_SLUG") -> StaffReference:
        """Only active memberships can receive tips and reviews or be shown by slug."""
        staff = self._db.scalar(
            select(Staff)
            .options(joinedload(Staff.user), joinedload(Staff.restaurant))
            .where(Staff.qr_slug == qr_slug, Staff.status == StaffStatus.ACTIVE)
        )
        if staff is None:
            raise NotFoundError("QR slug", qr_slug, code=code)
        return StaffReference(staff=staff, worker=staff.user, restaurant=staff.restaurant)

    def resolve_tip(self, tip_id: int) -> TipReference:
        tip = self._db.scalar(
            select(Tip)
            .options(joinedload(Tip.worker), joinedload(Tip.restaurant))
            .where(Tip.id == tip_id)
        )
        if tip is None:
            raise NotFoundError("Tip", tip_id)
        return TipReference(tip=tip, worker=tip.worker, restaurant=tip.restaurant)

    def get_restaurant(self, restaurant_id: int) -> Restaurant:
        restaurant = self._db.get(Restaurant, restaurant_id)
        if restaurant is None:
            raise NotFoundError("Restaurant", restaurant_id)
        return restaurant

    def get_review(self, review_id: int) -> Review:
        review = self._db.get(Review, review_id)
        if review is None:
            raise NotFoundError("Review", review_id)
        return review

    def get_staff(self, staff_id: int) -> Staff:
        staff = self._db.get(Staff, staff_id)
        if staff is None:
            raise NotFoundError("Staff member", staff_id, code="STAFF_NOT_FOUND")
        return staff

    def get_user(self, user_id: int) -> User:
        user = self._db.get(User, user_id)
        if user is None:
            raise NotFoundError("User", user_id)
        return user

    def find_user_by_email(self, email: str) -> User | None:
        """Case-insensitive email match."""
        return self._db.scalar(
            select(User).where(func.lower(User.email) == email.strip().lower())
        )

    def get_invitation_by_token(self, token: str) -> StaffInvitation:
        invitation = self._db.scalar(
            select(StaffInvitation)
            .options(joinedload(StaffInvitation.restaurant), joinedload(StaffInvitation.invited_by))
            .where(StaffInvitation.token == token)
        )
        if invitation is None:
            raise NotFoundError("Invitation", code="INVITATION_NOT_FOUND")
        return invitation

    def get_own_notification(self, notification_id: int, user_id: int) -> Notification:
        """Another user's notification is indistinguishable from a missing one."""
        notification = self._db.get(Notification, notification_id)
        if notification is None or notification.user_id != user_id:
            raise NotFoundError("Notification", notification_id)
        return notification

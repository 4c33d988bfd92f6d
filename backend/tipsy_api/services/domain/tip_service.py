"""
Tip Service.

Submitting a tip is the central write of the platform. The tip, its
notification and (when rated) the pending review with its notification are
flushed into one session and committed once, so either all of them exist
or none do.
"""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from tipsy_shared.config.constants import NotificationType, ReviewStatus
from tipsy_shared.config.logging import get_logger
from tipsy_shared.infrastructure.db import safe_commit
from tipsy_shared.utils.exceptions import ConflictError
from tipsy_shared.utils.schemas import NamedRef
from tipsy_shared.utils.tipping_schemas import (
    ReviewSummary,
    TipCreate,
    TipListItem,
    TipOutput,
    TipReceipt,
)

from tipsy_api.models import Review, Tip, User
from tipsy_api.services.lookup import ReferenceLookup
from tipsy_api.services.domain.notification_service import add_notification

logger = get_logger(__name__)


def format_rupees(amount_cents: int) -> str:
    return f"₹{amount_cents / 100:.2f}"


def tip_notification_body(amount_cents: int, payer_name: str | None, message: str | None) -> str:
    """e.g. ``You received a tip of ₹250.00 from Raj: "Thanks"``"""
    body = f"You received a tip of {format_rupees(amount_cents)}"
    if payer_name:
        body += f" from {payer_name}"
    if message:
        body += f': "{message}"'
    return body


def review_notification_body(rating: int, reviewer_name: str | None = None) -> str:
    body = f"You received a {rating}-star review"
    if reviewer_name:
        body += f" from {reviewer_name}"
    return body


class TipService:
    """
    Domain service for tips.

    Business rules:
    - Only active staff memberships can receive tips
    - A rating turns into a pending review linked to the tip
    - Tips are immutable once created
    """

    def __init__(self, db: Session):
        self._db = db
        self._lookup = ReferenceLookup(db)

    def submit(self, data: TipCreate) -> TipReceipt:
        ref = self._lookup.resolve_qr_slug(data.qr_slug)
        worker, restaurant = ref.worker, ref.restaurant

        tip = Tip(
            worker_user_id=worker.id,
            restaurant_id=restaurant.id,
            amount_cents=data.amount_cents,
            currency=data.currency,
            payer_name=data.payer_name,
            message=data.message,
            rating=data.rating,
        )
        self._db.add(tip)
        self._db.flush()

        add_notification(
            self._db,
            worker.id,
            NotificationType.TIP_RECEIVED,
            "New Tip Received!",
            tip_notification_body(data.amount_cents, data.payer_name, data.message),
        )

        review = None
        if data.rating is not None:
            review = Review(
                worker_user_id=worker.id,
                restaurant_id=restaurant.id,
                rating=data.rating,
                comment=data.message,
                tip_id=tip.id,
                status=ReviewStatus.PENDING,
            )
            self._db.add(review)
            add_notification(
                self._db,
                worker.id,
                NotificationType.REVIEW_POSTED,
                "New Review Received",
                review_notification_body(data.rating, data.payer_name),
            )

        try:
            safe_commit(self._db)
        except IntegrityError:
            raise ConflictError("Tip could not be recorded", qr_slug=data.qr_slug)

        self._db.refresh(tip)
        if review is not None:
            self._db.refresh(review)

        logger.info(
            "Tip created",
            tip_id=tip.id,
            worker_user_id=worker.id,
            restaurant_id=restaurant.id,
            amount_cents=tip.amount_cents,
            review_id=review.id if review else None,
        )

        return TipReceipt(
            tip=TipOutput.model_validate(tip),
            worker=NamedRef(name=worker.name),
            restaurant=NamedRef(name=restaurant.name),
            review=ReviewSummary.model_validate(review) if review else None,
        )

    def list_for_worker(self, user: User, *, limit: int, offset: int) -> list[TipListItem]:
        """The requester's own tips, newest first."""
        tips = self._db.scalars(
            select(Tip)
            .options(joinedload(Tip.restaurant))
            .where(Tip.worker_user_id == user.id)
            .order_by(Tip.created_at.desc(), Tip.id.desc())
            .offset(offset)
            .limit(limit)
        )
        return [TipListItem.model_validate(tip) for tip in tips]

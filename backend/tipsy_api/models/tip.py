"""
Tip and Review models.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import BigInteger, CheckConstraint, DateTime, ForeignKey, Index, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from tipsy_shared.config.constants import ReviewStatus

from .base import Base, IdMixin, TimestampMixin

if TYPE_CHECKING:
    from .restaurant import Restaurant
    from .user import User


class Tip(IdMixin, TimestampMixin, Base):
    """
    A payment-intent record left for a worker. Immutable once created.
    Money is stored as integer cents.
    """

    __tablename__ = "tip"

    worker_user_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("app_user.id"), nullable=False, index=True
    )
    restaurant_id: Mapped[Optional[int]] = mapped_column(
        BigInteger, ForeignKey("restaurant.id", ondelete="SET NULL"), nullable=True, index=True
    )
    amount_cents: Mapped[int] = mapped_column(Integer, nullable=False)
    currency: Mapped[str] = mapped_column(Text, nullable=False, default="INR")
    payer_name: Mapped[Optional[str]] = mapped_column(Text)
    message: Mapped[Optional[str]] = mapped_column(Text)
    rating: Mapped[Optional[int]] = mapped_column(Integer)

    __table_args__ = (
        CheckConstraint("amount_cents > 0", name="ck_tip_amount_positive"),
        CheckConstraint("rating IS NULL OR (rating BETWEEN 1 AND 5)", name="ck_tip_rating_range"),
    )

    # Relationships
    worker: Mapped["User"] = relationship()
    restaurant: Mapped[Optional["Restaurant"]] = relationship()
    review: Mapped[Optional["Review"]] = relationship(back_populates="tip", uselist=False)

    def __repr__(self) -> str:
        return f"<Tip(id={self.id}, worker_user_id={self.worker_user_id}, amount_cents={self.amount_cents})>"


class Review(IdMixin, TimestampMixin, Base):
    """
    A rating (1-5) with optional comment for a worker.
    Starts ``pending``; only the restaurant's owner or an admin moderates it.
    """

    __tablename__ = "review"

    worker_user_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("app_user.id"), nullable=False
    )
    restaurant_id: Mapped[Optional[int]] = mapped_column(
        BigInteger, ForeignKey("restaurant.id", ondelete="SET NULL"), nullable=True, index=True
    )
    rating: Mapped[int] = mapped_column(Integer, nullable=False)
    comment: Mapped[Optional[str]] = mapped_column(Text)
    tip_id: Mapped[Optional[int]] = mapped_column(
        BigInteger, ForeignKey("tip.id"), nullable=True, unique=True
    )
    status: Mapped[str] = mapped_column(Text, nullable=False, default=ReviewStatus.PENDING)
    moderated_by_user_id: Mapped[Optional[int]] = mapped_column(
        BigInteger, ForeignKey("app_user.id"), nullable=True
    )
    moderated_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))

    __table_args__ = (
        CheckConstraint("rating BETWEEN 1 AND 5", name="ck_review_rating_range"),
        Index("ix_review_worker_status", "worker_user_id", "status"),
    )

    # Relationships
    worker: Mapped["User"] = relationship(foreign_keys=[worker_user_id])
    restaurant: Mapped[Optional["Restaurant"]] = relationship()
    tip: Mapped[Optional["Tip"]] = relationship(back_populates="review")
    moderated_by: Mapped[Optional["User"]] = relationship(foreign_keys=[moderated_by_user_id])

    def __repr__(self) -> str:
        return f"<Review(id={self.id}, rating={self.rating}, status='{self.status}')>"

"""
Restaurant, staff membership and staff invitation models.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import BigInteger, DateTime, ForeignKey, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from tipsy_shared.config.constants import (
    DEFAULT_ROLE_IN_RESTAURANT,
    InvitationStatus,
    StaffStatus,
)

from .base import Base, IdMixin, TimestampMixin

if TYPE_CHECKING:
    from .user import User


class Restaurant(IdMixin, TimestampMixin, Base):
    """
    A venue owned by exactly one user with role owner.
    Deleting a restaurant removes its staff memberships and invitations.
    """

    __tablename__ = "restaurant"

    owner_user_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("app_user.id"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(Text, nullable=False)
    address: Mapped[Optional[str]] = mapped_column(Text)
    upi_handle: Mapped[Optional[str]] = mapped_column(Text)

    # Relationships
    owner: Mapped["User"] = relationship(back_populates="restaurants")
    staff: Mapped[list["Staff"]] = relationship(
        back_populates="restaurant", cascade="all, delete-orphan"
    )
    invitations: Mapped[list["StaffInvitation"]] = relationship(
        back_populates="restaurant", cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return f"<Restaurant(id={self.id}, name='{self.name}', owner_user_id={self.owner_user_id})>"


class Staff(IdMixin, TimestampMixin, Base):
    """
    A user's membership at a restaurant.
    ``qr_slug`` is the public entry point for tipping and reviewing that worker.
    Only ``active`` memberships resolve from a QR slug.
    """

    __tablename__ = "staff"

    restaurant_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("restaurant.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("app_user.id"), nullable=False, index=True
    )
    role_in_restaurant: Mapped[str] = mapped_column(
        Text, nullable=False, default=DEFAULT_ROLE_IN_RESTAURANT
    )
    qr_slug: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    status: Mapped[str] = mapped_column(Text, nullable=False, default=StaffStatus.ACTIVE)
    joined_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))

    __table_args__ = (
        UniqueConstraint("restaurant_id", "user_id", name="uq_staff_restaurant_user"),
    )

    # Relationships
    restaurant: Mapped["Restaurant"] = relationship(back_populates="staff")
    user: Mapped["User"] = relationship(back_populates="staff_memberships")

    def __repr__(self) -> str:
        return (
            f"<Staff(id={self.id}, restaurant_id={self.restaurant_id}, "
            f"user_id={self.user_id}, status='{self.status}')>"
        )


class StaffInvitation(IdMixin, TimestampMixin, Base):
    """
    Pending invitation to join a restaurant, addressed by email.

    When the invitee already has an account an ``invited`` Staff row exists
    and ``staff_id`` points at it; otherwise no Staff row is created until the
    invitation is accepted.
    """

    __tablename__ = "staff_invitation"

    restaurant_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("restaurant.id", ondelete="CASCADE"), nullable=False, index=True
    )
    email: Mapped[str] = mapped_column(Text, nullable=False, index=True)
    role_in_restaurant: Mapped[str] = mapped_column(
        Text, nullable=False, default=DEFAULT_ROLE_IN_RESTAURANT
    )
    token: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    status: Mapped[str] = mapped_column(Text, nullable=False, default=InvitationStatus.PENDING)
    invited_by_user_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("app_user.id"), nullable=False
    )
    staff_id: Mapped[Optional[int]] = mapped_column(
        BigInteger, ForeignKey("staff.id", ondelete="SET NULL"), nullable=True
    )
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    accepted_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))

    # Relationships
    restaurant: Mapped["Restaurant"] = relationship(back_populates="invitations")
    invited_by: Mapped["User"] = relationship()
    staff: Mapped[Optional["Staff"]] = relationship()

    def __repr__(self) -> str:
        return (
            f"<StaffInvitation(id={self.id}, restaurant_id={self.restaurant_id}, "
            f"status='{self.status}')>"
        )

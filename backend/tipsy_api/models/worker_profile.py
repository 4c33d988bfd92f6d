"""
Public-facing worker profile.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import BigInteger, DateTime, ForeignKey, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, IdMixin, TimestampMixin

if TYPE_CHECKING:
    from .restaurant import Restaurant
    from .user import User


class WorkerProfile(IdMixin, TimestampMixin, Base):
    """
    Display name, bio and UPI address a worker shows to tippers.
    One per user. Earnings and rating figures are computed at read time.
    """

    __tablename__ = "worker_profile"

    user_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("app_user.id"), nullable=False, unique=True
    )
    restaurant_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("restaurant.id", ondelete="CASCADE"), nullable=False, index=True
    )
    display_name: Mapped[str] = mapped_column(Text, nullable=False)
    bio: Mapped[Optional[str]] = mapped_column(Text)
    upi_vpa: Mapped[Optional[str]] = mapped_column(Text)
    qrcode_url: Mapped[str] = mapped_column(Text, nullable=False)
    updated_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), onupdate=func.now(), nullable=True
    )

    user: Mapped["User"] = relationship()
    restaurant: Mapped["Restaurant"] = relationship()

    def __repr__(self) -> str:
        return f"<WorkerProfile(id={self.id}, user_id={self.user_id}, display_name='{self.display_name}')>"

"""
Application user model.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from sqlalchemy import Index, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from tipsy_shared.config.constants import Roles

from .base import Base, IdMixin, TimestampMixin

if TYPE_CHECKING:
    from .notification import Notification
    from .restaurant import Restaurant, Staff


class User(IdMixin, TimestampMixin, Base):
    """
    A person using TIPSY as worker, owner or admin.

    Rows are created on first authenticated request (see IdentityService)
    or by explicit registration. ``auth_user_id`` is the external identity
    carried by the bearer credential.
    """

    __tablename__ = "app_user"

    auth_user_id: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    role: Mapped[str] = mapped_column(Text, nullable=False, default=Roles.DEFAULT)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    email: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    phone: Mapped[Optional[str]] = mapped_column(Text)
    avatar_url: Mapped[Optional[str]] = mapped_column(Text)

    __table_args__ = (
        Index("ix_app_user_role", "role"),
    )

    # Relationships
    restaurants: Mapped[list["Restaurant"]] = relationship(back_populates="owner")
    staff_memberships: Mapped[list["Staff"]] = relationship(back_populates="user")
    notifications: Mapped[list["Notification"]] = relationship(back_populates="user")

    def __repr__(self) -> str:
        return f"<User(id={self.id}, role='{self.role}', email='{self.email}')>"

"""
Base class and shared mixins for all SQLAlchemy ORM models.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import BigInteger, DateTime, Integer, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

# 64-bit keys in PostgreSQL; SQLite only autoincrements INTEGER PRIMARY KEY
PrimaryKey = BigInteger().with_variant(Integer(), "sqlite")


class Base(DeclarativeBase):
    """Base class for all models."""

    pass


class IdMixin:
    """Surrogate 64-bit primary key."""

    id: Mapped[int] = mapped_column(PrimaryKey, primary_key=True, autoincrement=True)


class TimestampMixin:
    """Creation timestamp set by the database."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

"""
Derived figures for workers: approved-only rating averages and earnings.

Nothing here is stored; every figure is computed from Tip and Review rows
at read time.
"""

from __future__ import annotations

from collections.abc import Iterable
from decimal import ROUND_HALF_UP, Decimal

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from tipsy_shared.config.constants import ReviewStatus

from tipsy_api.models import Review, Tip


def round_half_up(value: Decimal | float, places: int = 1) -> Decimal:
    quantum = Decimal(1).scaleb(-places)
    return Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP)


def average_rating(ratings: Iterable[int]) -> float:
    """Mean rounded half-up to one decimal; 0 when there are no ratings."""
    ratings = list(ratings)
    if not ratings:
        return 0.0
    mean = Decimal(sum(ratings)) / Decimal(len(ratings))
    return float(round_half_up(mean, 1))


def approved_ratings(db: Session, worker_user_id: int) -> list[int]:
    return list(
        db.scalars(
            select(Review.rating).where(
                Review.worker_user_id == worker_user_id,
                Review.status == ReviewStatus.APPROVED,
            )
        )
    )


def worker_average_rating(db: Session, worker_user_id: int) -> float:
    return average_rating(approved_ratings(db, worker_user_id))


def worker_earnings(db: Session, worker_user_id: int) -> tuple[int, int]:
    """Return (total_cents, tip_count) for a worker."""
    total, count = db.execute(
        select(func.coalesce(func.sum(Tip.amount_cents), 0), func.count(Tip.id)).where(
            Tip.worker_user_id == worker_user_id
        )
    ).one()
    return int(total), int(count)


def average_cents(total_cents: int, count: int) -> int:
    """Average tip in whole cents, rounded half-up."""
    if count == 0:
        return 0
    return int((Decimal(total_cents) / Decimal(count)).quantize(Decimal(1), rounding=ROUND_HALF_UP))

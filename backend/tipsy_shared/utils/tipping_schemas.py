"""
Schemas for tips, reviews, moderation and worker pages.
"""

from datetime import datetime
from typing import Annotated, Optional

from pydantic import Field, field_validator

from tipsy_shared.config.constants import Limits
from tipsy_shared.config.settings import settings
from tipsy_shared.utils.schemas import (
    ModerationActionLiteral,
    NamedRef,
    OutputModel,
    RequestModel,
    RestaurantRef,
    ReviewStatusLiteral,
    UserRef,
)
from tipsy_shared.utils.validators import clean_optional_text, validate_upi_handle

Rating = Annotated[int, Field(strict=True, ge=Limits.MIN_RATING, le=Limits.MAX_RATING)]
PositiveId = Annotated[int, Field(strict=True, gt=0)]


# =============================================================================
# Tips
# =============================================================================


class TipCreate(RequestModel):
    """
    Public tip submission. Field order is validation order:
    slug, amount, rating, then the optional extras.
    """

    qr_slug: str = Field(min_length=1, max_length=255)
    amount_cents: int = Field(strict=True, gt=0, le=10_000_000)
    rating: Optional[Rating] = None
    currency: str = Field(default=settings.default_currency, pattern=r"^[A-Za-z]{3}$")
    payer_name: Optional[str] = Field(default=None, max_length=Limits.MAX_NAME_LENGTH)
    message: Optional[str] = Field(default=None, max_length=Limits.MAX_MESSAGE_LENGTH)

    @field_validator("rating", mode="before")
    @classmethod
    def _reject_null_rating(cls, value):
        if value is None:
            raise ValueError("rating must be a number when provided")
        return value

    @field_validator("currency")
    @classmethod
    def _upper_currency(cls, value: str) -> str:
        return value.upper()

    @field_validator("payer_name", "message")
    @classmethod
    def _blank_to_none(cls, value: str | None) -> str | None:
        return clean_optional_text(value)


TIP_ERROR_CODES = {
    "qr_slug": "MISSING_QR_SLUG",
    "amount_cents": "INVALID_AMOUNT",
    "rating": "INVALID_RATING",
}


class TipOutput(OutputModel):
    id: int
    amount_cents: int
    currency: str
    payer_name: str | None = None
    message: str | None = None
    rating: int | None = None
    created_at: datetime


class ReviewSummary(OutputModel):
    id: int
    rating: int
    status: ReviewStatusLiteral


class TipReceipt(OutputModel):
    """Response of a successful tip submission."""

    tip: TipOutput
    worker: NamedRef
    restaurant: NamedRef | None = None
    review: ReviewSummary | None = None


class TipListItem(TipOutput):
    restaurant: RestaurantRef | None = None


# =============================================================================
# Reviews
# =============================================================================


class ReviewCreate(RequestModel):
    """Public review; exactly one of tip_id / qr_slug identifies the worker."""

    rating: Rating
    comment: Optional[str] = Field(default=None, max_length=Limits.MAX_MESSAGE_LENGTH)
    tip_id: Optional[PositiveId] = None
    qr_slug: Optional[str] = Field(default=None, max_length=255)

    @field_validator("comment", "qr_slug")
    @classmethod
    def _blank_to_none(cls, value: str | None) -> str | None:
        return clean_optional_text(value)


REVIEW_ERROR_CODES = {
    "rating": "INVALID_RATING",
}


class ModerationRequest(RequestModel):
    review_id: PositiveId
    action: ModerationActionLiteral

    @field_validator("review_id", mode="before")
    @classmethod
    def _numeric_string_id(cls, value):
        if isinstance(value, str) and value.strip().isascii() and value.strip().isdigit():
            return int(value.strip())
        return value


MODERATION_ERROR_CODES = {
    "review_id": "MISSING_REVIEW_ID",
    "action": "INVALID_ACTION",
}


class ReviewOutput(OutputModel):
    id: int
    rating: int
    comment: str | None = None
    status: ReviewStatusLiteral
    tip_id: int | None = None
    worker_user_id: int
    restaurant_id: int | None = None
    moderated_by_user_id: int | None = None
    moderated_at: datetime | None = None
    created_at: datetime


class ReviewReceipt(OutputModel):
    """Response of a successful review submission."""

    review: ReviewOutput
    worker: NamedRef
    restaurant: NamedRef | None = None


class ReviewListItem(ReviewOutput):
    worker: UserRef
    restaurant: RestaurantRef | None = None


class ModeratorRef(OutputModel):
    id: int
    name: str


class ModeratedReview(ReviewOutput):
    moderation_action: ModerationActionLiteral
    moderated_by: ModeratorRef


# =============================================================================
# Public worker pages
# =============================================================================


class PublicReview(OutputModel):
    id: int
    rating: int
    comment: str | None = None
    created_at: datetime
    restaurant_name: str | None = None


class RestaurantSummary(OutputModel):
    id: int
    name: str
    address: str | None = None


class StaffBadge(OutputModel):
    qr_slug: str
    role_in_restaurant: str


class WorkerRestaurantEntry(OutputModel):
    restaurant: RestaurantSummary
    staff: StaffBadge


class WorkerPublicProfile(OutputModel):
    id: int
    name: str
    avatar_url: str | None = None
    average_rating: float
    restaurants: list[WorkerRestaurantEntry]
    recent_reviews: list[PublicReview]


class SlugWorker(OutputModel):
    name: str
    avatar_url: str | None = None
    average_rating: float
    role_in_restaurant: str
    joined_at: datetime | None = None


class SlugRestaurant(OutputModel):
    id: int
    name: str
    address: str | None = None
    upi_handle: str | None = None


class WorkerBySlug(OutputModel):
    worker: SlugWorker
    restaurant: SlugRestaurant
    reviews: list[PublicReview]
    qr_slug: str


# =============================================================================
# Worker profile resource
# =============================================================================


class WorkerProfileCreate(RequestModel):
    user_id: PositiveId
    restaurant_id: PositiveId
    display_name: str = Field(min_length=1, max_length=Limits.MAX_NAME_LENGTH)
    bio: Optional[str] = Field(default=None, max_length=Limits.MAX_BIO_LENGTH)
    upi_vpa: Optional[str] = None

    @field_validator("bio")
    @classmethod
    def _blank_to_none(cls, value: str | None) -> str | None:
        return clean_optional_text(value)

    @field_validator("upi_vpa")
    @classmethod
    def _check_upi(cls, value: str | None) -> str | None:
        return validate_upi_handle(value)


class WorkerProfileUpdate(RequestModel):
    """Partial update; only keys present in the body are applied."""

    display_name: Optional[str] = Field(default=None, min_length=1, max_length=Limits.MAX_NAME_LENGTH)
    bio: Optional[str] = Field(default=None, max_length=Limits.MAX_BIO_LENGTH)
    upi_vpa: Optional[str] = None

    @field_validator("display_name")
    @classmethod
    def _not_null(cls, value: str | None) -> str:
        if value is None:
            raise ValueError("display_name cannot be null")
        return value

    @field_validator("bio")
    @classmethod
    def _blank_to_none(cls, value: str | None) -> str | None:
        return clean_optional_text(value)

    @field_validator("upi_vpa")
    @classmethod
    def _check_upi(cls, value: str | None) -> str | None:
        return validate_upi_handle(value)


class EarningsStats(OutputModel):
    total: int
    tip_count: int
    average: int


class ReviewStats(OutputModel):
    total: int
    avg_rating: float


class WorkerProfileOutput(OutputModel):
    id: int
    user_id: int
    restaurant_id: int
    display_name: str
    bio: str | None = None
    upi_vpa: str | None = None
    qrcode_url: str
    created_at: datetime
    updated_at: datetime | None = None
    restaurant: RestaurantRef | None = None
    earnings: EarningsStats
    reviews: ReviewStats

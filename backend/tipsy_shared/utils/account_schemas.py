"""
Schemas for users, notifications, feature flags and payment links.
"""

from datetime import datetime
from decimal import Decimal
from typing import Annotated, Literal, Optional, Union

from pydantic import Field, field_validator

from tipsy_shared.config.constants import Limits
from tipsy_shared.config.settings import settings
from tipsy_shared.utils.schemas import OutputModel, RequestModel
from tipsy_shared.utils.validators import (
    clean_optional_text,
    normalize_email,
    validate_image_url,
    validate_redirect_url,
    validate_phone,
    validate_upi_handle,
)


# =============================================================================
# Users
# =============================================================================


class UserRegister(RequestModel):
    """Explicit registration; admins cannot be self-registered."""

    name: str = Field(min_length=1, max_length=Limits.MAX_NAME_LENGTH)
    email: str
    role: Literal["worker", "owner"] = "worker"
    phone: Optional[str] = None

    @field_validator("email")
    @classmethod
    def _normalize_email(cls, value: str) -> str:
        return normalize_email(value)

    @field_validator("phone")
    @classmethod
    def _check_phone(cls, value: str | None) -> str | None:
        return validate_phone(value)


class UserUpdate(RequestModel):
    """Partial self-profile update; only keys present in the body are applied."""

    name: Optional[str] = Field(default=None, min_length=1, max_length=Limits.MAX_NAME_LENGTH)
    phone: Optional[str] = None
    avatar_url: Optional[str] = None

    @field_validator("name")
    @classmethod
    def _name_not_null(cls, value: str | None) -> str:
        if value is None:
            raise ValueError("name cannot be null")
        return value

    @field_validator("phone")
    @classmethod
    def _check_phone(cls, value: str | None) -> str | None:
        return validate_phone(value)

    @field_validator("avatar_url")
    @classmethod
    def _check_avatar(cls, value: str | None) -> str | None:
        return validate_image_url(value)


class UserOutput(OutputModel):
    id: int
    auth_user_id: str
    name: str
    email: str
    phone: str | None = None
    avatar_url: str | None = None
    created_at: datetime


class WorkerSelfProfile(UserOutput):
    role: Literal["worker"]
    total_earnings_cents: int = Field(alias="total_earnings_cents")
    tips_count: int = Field(alias="tips_count")


class OwnerSelfProfile(UserOutput):
    role: Literal["owner"]
    restaurants_count: int = Field(alias="restaurants_count")


class AdminSelfProfile(UserOutput):
    role: Literal["admin"]


# Closed union over the three roles; "role" selects the variant
SelfProfile = Annotated[
    Union[WorkerSelfProfile, OwnerSelfProfile, AdminSelfProfile],
    Field(discriminator="role"),
]


class RegisteredUser(UserOutput):
    role: str


# =============================================================================
# Notifications
# =============================================================================


class NotificationOutput(OutputModel):
    id: int
    user_id: int
    type: str
    title: str
    body: str
    read: bool
    created_at: datetime


class NotificationReadResult(OutputModel):
    success: bool = True
    message: str
    notification: NotificationOutput


# =============================================================================
# Feature flags
# =============================================================================


class FeatureInput(RequestModel):
    key: str = Field(pattern=r"^[a-z0-9][a-z0-9_]{0,63}$")
    name: str = Field(min_length=1, max_length=Limits.MAX_NAME_LENGTH)
    description: Optional[str] = Field(default=None, max_length=Limits.MAX_MESSAGE_LENGTH)
    enabled: Optional[bool] = Field(default=None, strict=True)

    @field_validator("description")
    @classmethod
    def _blank_to_none(cls, value: str | None) -> str | None:
        return clean_optional_text(value)


FEATURE_ERROR_CODES = {
    "key": "INVALID_KEY",
    "name": "INVALID_NAME",
    "enabled": "INVALID_ENABLED",
}


class FeatureOutput(OutputModel):
    id: int
    key: str
    name: str
    description: str | None = None
    enabled: bool
    created_at: datetime


class FeatureUpsertResult(OutputModel):
    action: Literal["created", "updated"]
    feature: FeatureOutput


class FeatureBatchResult(OutputModel):
    message: str
    results: list[FeatureUpsertResult]


# =============================================================================
# Payment links
# =============================================================================


class StripeCheckoutRequest(RequestModel):
    amount_cents: int = Field(strict=True, gt=0, le=10_000_000)
    currency: str = Field(default=settings.default_currency, pattern=r"^[A-Za-z]{3}$")
    success_url: Optional[str] = None
    cancel_url: Optional[str] = None
    metadata: Optional[dict[str, str]] = None

    @field_validator("success_url", "cancel_url")
    @classmethod
    def _check_url(cls, value: str | None) -> str | None:
        return validate_redirect_url(value)


STRIPE_ERROR_CODES = {
    "amount_cents": "INVALID_AMOUNT",
}


class StripeCheckoutSession(OutputModel):
    checkout_url: str
    session_id: str
    cancel_url: str | None = None


class UpiIntentRequest(RequestModel):
    upi_handle: str
    amount_inr: Decimal = Field(gt=0, le=Decimal("100000"), decimal_places=2)
    note: Optional[str] = Field(default=None, max_length=80)
    payee_name: Optional[str] = Field(default=None, max_length=Limits.MAX_NAME_LENGTH)

    @field_validator("upi_handle")
    @classmethod
    def _check_upi(cls, value: str) -> str:
        handle = validate_upi_handle(value)
        if handle is None:
            raise ValueError("UPI handle is required")
        return handle

    @field_validator("note", "payee_name")
    @classmethod
    def _blank_to_none(cls, value: str | None) -> str | None:
        return clean_optional_text(value)


UPI_ERROR_CODES = {
    "upi_handle": "INVALID_UPI_HANDLE",
    "amount_inr": "INVALID_AMOUNT",
}


class UpiIntent(OutputModel):
    url: str

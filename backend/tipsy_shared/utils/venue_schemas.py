"""
Schemas for restaurants, staff memberships and staff invitations.
"""

from datetime import datetime
from typing import Annotated, Optional

from pydantic import Field, field_validator

from tipsy_shared.config.constants import DEFAULT_ROLE_IN_RESTAURANT, Limits
from tipsy_shared.utils.schemas import (
    InvitationStatusLiteral,
    OutputModel,
    RequestModel,
    StaffStatusLiteral,
    UserRef,
)
from tipsy_shared.utils.validators import (
    clean_optional_text,
    normalize_email,
    normalize_role_in_restaurant,
    validate_upi_handle,
)

PositiveId = Annotated[int, Field(strict=True, gt=0)]


# =============================================================================
# Restaurants
# =============================================================================


class RestaurantCreate(RequestModel):
    name: str = Field(min_length=1, max_length=Limits.MAX_NAME_LENGTH)
    address: Optional[str] = Field(default=None, max_length=Limits.MAX_ADDRESS_LENGTH)
    upi_handle: Optional[str] = None

    @field_validator("address")
    @classmethod
    def _blank_to_none(cls, value: str | None) -> str | None:
        return clean_optional_text(value)

    @field_validator("upi_handle")
    @classmethod
    def _check_upi(cls, value: str | None) -> str | None:
        return validate_upi_handle(value)


class RestaurantUpdate(RequestModel):
    """Partial update; only keys present in the body are applied."""

    name: Optional[str] = Field(default=None, min_length=1, max_length=Limits.MAX_NAME_LENGTH)
    address: Optional[str] = Field(default=None, max_length=Limits.MAX_ADDRESS_LENGTH)
    upi_handle: Optional[str] = None

    @field_validator("name")
    @classmethod
    def _name_not_null(cls, value: str | None) -> str:
        if value is None:
            raise ValueError("name cannot be null")
        return value

    @field_validator("address")
    @classmethod
    def _blank_to_none(cls, value: str | None) -> str | None:
        return clean_optional_text(value)

    @field_validator("upi_handle")
    @classmethod
    def _check_upi(cls, value: str | None) -> str | None:
        return validate_upi_handle(value)


class RestaurantOutput(OutputModel):
    id: int
    owner_user_id: int
    name: str
    address: str | None = None
    upi_handle: str | None = None
    created_at: datetime


class RestaurantListItem(RestaurantOutput):
    staff_count: int


# =============================================================================
# Staff
# =============================================================================


class StaffCreate(RequestModel):
    restaurant_id: PositiveId
    user_email: str
    role_in_restaurant: str = DEFAULT_ROLE_IN_RESTAURANT

    @field_validator("user_email")
    @classmethod
    def _normalize_email(cls, value: str) -> str:
        return normalize_email(value)

    @field_validator("role_in_restaurant")
    @classmethod
    def _normalize_role(cls, value: str) -> str:
        return normalize_role_in_restaurant(value)


STAFF_ERROR_CODES = {
    "user_email": "INVALID_USER_EMAIL",
    "role_in_restaurant": "INVALID_ROLE",
}


class StaffMemberOutput(OutputModel):
    id: int
    restaurant_id: int
    user_id: int
    role_in_restaurant: str
    qr_slug: str
    status: StaffStatusLiteral
    joined_at: datetime | None = None
    created_at: datetime
    user: UserRef | None = None


class StaffDeleted(OutputModel):
    success: bool = True
    message: str
    deleted_staff: StaffMemberOutput


class RestaurantDetail(RestaurantOutput):
    owner: UserRef
    staff: list[StaffMemberOutput]


# =============================================================================
# Invitations
# =============================================================================


class InvitationCreate(RequestModel):
    restaurant_id: PositiveId
    worker_email: str
    role: str = DEFAULT_ROLE_IN_RESTAURANT

    @field_validator("worker_email")
    @classmethod
    def _normalize_email(cls, value: str) -> str:
        return normalize_email(value)

    @field_validator("role")
    @classmethod
    def _normalize_role(cls, value: str) -> str:
        return normalize_role_in_restaurant(value)


INVITATION_ERROR_CODES = {
    "worker_email": "INVALID_EMAIL",
    "role": "INVALID_ROLE",
}


class InviterRef(OutputModel):
    name: str
    email: str


class InvitationOutput(OutputModel):
    id: int
    restaurant_id: int
    restaurant_name: str
    worker_email: str
    role: str
    status: InvitationStatusLiteral
    staff_id: int | None = None
    invitation_token: str
    invitation_link: str
    invited_at: datetime
    expires_at: datetime
    inviter_details: InviterRef
    note: str | None = None


class InvitationReceipt(OutputModel):
    message: str
    invitation: InvitationOutput


class InvitationAcceptance(OutputModel):
    message: str
    staff: StaffMemberOutput

"""
Shared Pydantic schemas and base models used across the application.

Request bodies accept both snake_case and camelCase keys
(``restaurant_id`` or ``restaurantId``); responses are serialized in camelCase.
"""

from typing import Literal

from pydantic import AliasChoices, AliasGenerator, BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


# =============================================================================
# Common Types
# =============================================================================

Role = Literal["worker", "owner", "admin"]
ReviewStatusLiteral = Literal["pending", "approved", "rejected"]
StaffStatusLiteral = Literal["invited", "active"]
InvitationStatusLiteral = Literal["pending", "accepted", "revoked"]
ModerationActionLiteral = Literal["approve", "reject"]


def _snake_or_camel(name: str) -> AliasChoices:
    camel = to_camel(name)
    if camel == name:
        return AliasChoices(name)
    return AliasChoices(name, camel)


class RequestModel(BaseModel):
    """Base for request bodies. Unknown keys are ignored."""

    model_config = ConfigDict(
        extra="ignore",
        str_strip_whitespace=True,
        alias_generator=AliasGenerator(validation_alias=_snake_or_camel),
    )


class OutputModel(BaseModel):
    """Base for response bodies, serialized with camelCase keys."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# =============================================================================
# Small shared references
# =============================================================================


class NamedRef(OutputModel):
    """Just a display name."""

    name: str


class RestaurantRef(OutputModel):
    id: int
    name: str


class UserRef(OutputModel):
    id: int
    name: str
    email: str | None = None
    avatar_url: str | None = None


# =============================================================================
# Error Schemas
# =============================================================================


class ErrorResponse(BaseModel):
    """Standard error envelope returned by every endpoint."""

    error: str
    code: str | None = None


class SuccessResponse(BaseModel):
    """Generic success acknowledgement."""

    success: bool = True
    message: str

"""
Staff membership and invitation endpoints.

All routes require authentication. Managing the staff of a restaurant is
reserved to its owner and admins; accepting an invitation is reserved to
the invited email address.
"""

from typing import Any, Literal, Optional

from fastapi import APIRouter, Body, Depends, Path, Query, status
from sqlalchemy.orm import Session

from tipsy_shared.infrastructure.db import get_db
from tipsy_shared.utils.validators import parse_body, reject_identity_fields, require_object
from tipsy_shared.utils.venue_schemas import (
    INVITATION_ERROR_CODES,
    STAFF_ERROR_CODES,
    InvitationAcceptance,
    InvitationCreate,
    InvitationOutput,
    InvitationReceipt,
    StaffCreate,
    StaffDeleted,
    StaffMemberOutput,
)

from tipsy_api.models import User
from tipsy_api.routers._common import Pagination, current_user, get_pagination
from tipsy_api.services.domain import InvitationService, StaffService


router = APIRouter(tags=["staff"])

STAFF_IDENTITY_FIELDS = ("userId", "user_id")
INVITE_IDENTITY_FIELDS = ("userId", "user_id", "inviterId", "invited_by_user_id")


# =============================================================================
# Invitations
# =============================================================================
# Declared before /staff/{staff_id} so "invite" is never taken for an id.


@router.post("/staff/invite", response_model=InvitationReceipt, status_code=status.HTTP_201_CREATED)
def invite_staff(
    body: Any = Body(default=None),
    db: Session = Depends(get_db),
    user: User = Depends(current_user),
) -> InvitationReceipt:
    """
    Invite a worker by email.

    Existing accounts get an ``invited`` membership and a notification;
    unknown emails only get the invitation, and the inviter is notified.
    """
    payload = require_object(body)
    reject_identity_fields(payload, INVITE_IDENTITY_FIELDS)
    data = parse_body(InvitationCreate, payload, INVITATION_ERROR_CODES)
    return InvitationService(db).invite(user, data)


@router.get("/staff/invite", response_model=list[InvitationOutput])
def list_invitations(
    restaurant_id: int = Query(alias="restaurantId", gt=0),
    invitation_status: Optional[Literal["pending", "accepted", "revoked"]] = Query(
        default=None, alias="status"
    ),
    pagination: Pagination = Depends(get_pagination),
    db: Session = Depends(get_db),
    user: User = Depends(current_user),
) -> list[InvitationOutput]:
    return InvitationService(db).list_for_restaurant(
        user,
        restaurant_id,
        status=invitation_status,
        limit=pagination.limit,
        offset=pagination.offset,
    )


@router.post("/staff/invite/{token}/accept", response_model=InvitationAcceptance)
def accept_invitation(
    token: str = Path(min_length=1, max_length=128),
    db: Session = Depends(get_db),
    user: User = Depends(current_user),
) -> InvitationAcceptance:
    """Join the restaurant the caller was invited to."""
    return InvitationService(db).accept(user, token)


# =============================================================================
# Memberships
# =============================================================================


@router.get("/staff", response_model=list[StaffMemberOutput])
def list_staff(
    restaurant_id: int = Query(alias="restaurantId", gt=0),
    db: Session = Depends(get_db),
    user: User = Depends(current_user),
) -> list[StaffMemberOutput]:
    """Staff of a restaurant with user details."""
    return StaffService(db).list_for_restaurant(user, restaurant_id)


@router.post("/staff", response_model=StaffMemberOutput, status_code=status.HTTP_201_CREATED)
def add_staff(
    body: Any = Body(default=None),
    db: Session = Depends(get_db),
    user: User = Depends(current_user),
) -> StaffMemberOutput:
    """Add an existing user to a restaurant as active staff."""
    payload = require_object(body)
    reject_identity_fields(payload, STAFF_IDENTITY_FIELDS)
    data = parse_body(StaffCreate, payload, STAFF_ERROR_CODES)
    return StaffService(db).add(user, data)


@router.delete("/staff/{staff_id}", response_model=StaffDeleted)
def remove_staff(
    staff_id: int = Path(gt=0),
    db: Session = Depends(get_db),
    user: User = Depends(current_user),
) -> StaffDeleted:
    return StaffService(db).remove(user, staff_id)

"""
Restaurant endpoints.

Owners list and create their restaurants; the detail view is open to the
owner, the restaurant's staff and admins; updates and deletes are reserved
to the owner.
"""

from typing import Any

from fastapi import APIRouter, Body, Depends, Path, status
from sqlalchemy.orm import Session

from tipsy_shared.config.constants import Roles
from tipsy_shared.infrastructure.db import get_db
from tipsy_shared.utils.schemas import SuccessResponse
from tipsy_shared.utils.validators import parse_body, reject_identity_fields, require_object
from tipsy_shared.utils.venue_schemas import (
    RestaurantCreate,
    RestaurantDetail,
    RestaurantListItem,
    RestaurantOutput,
    RestaurantUpdate,
)

from tipsy_api.models import User
from tipsy_api.routers._common import Pagination, current_user, get_pagination
from tipsy_api.services.domain import RestaurantService
from tipsy_api.services.permissions import PermissionContext


router = APIRouter(tags=["restaurants"])

OWNER_FIELDS = ("ownerUserId", "owner_user_id")


def _get_service(db: Session) -> RestaurantService:
    return RestaurantService(db)


@router.get("/restaurants", response_model=list[RestaurantListItem])
def list_restaurants(
    pagination: Pagination = Depends(get_pagination),
    db: Session = Depends(get_db),
    user: User = Depends(current_user),
) -> list[RestaurantListItem]:
    """Restaurants owned by the caller, with staff counts."""
    PermissionContext(user).require_role(Roles.OWNER, operation="list restaurants")
    return _get_service(db).list_owned(user, limit=pagination.limit, offset=pagination.offset)


@router.post("/restaurants", response_model=RestaurantOutput, status_code=status.HTTP_201_CREATED)
def create_restaurant(
    body: Any = Body(default=None),
    db: Session = Depends(get_db),
    user: User = Depends(current_user),
) -> RestaurantOutput:
    """Create a restaurant owned by the caller."""
    PermissionContext(user).require_role(Roles.OWNER, operation="create restaurant")
    payload = require_object(body)
    reject_identity_fields(payload, OWNER_FIELDS)
    data = parse_body(RestaurantCreate, payload)
    return RestaurantOutput.model_validate(_get_service(db).create(user, data))


@router.get("/restaurants/{restaurant_id}", response_model=RestaurantDetail)
def get_restaurant(
    restaurant_id: int = Path(gt=0),
    db: Session = Depends(get_db),
    user: User = Depends(current_user),
) -> RestaurantDetail:
    return _get_service(db).get_detail(user, restaurant_id)


@router.patch("/restaurants/{restaurant_id}", response_model=RestaurantOutput)
def update_restaurant(
    restaurant_id: int = Path(gt=0),
    body: Any = Body(default=None),
    db: Session = Depends(get_db),
    user: User = Depends(current_user),
) -> RestaurantOutput:
    """Partial update; only the keys present in the body change."""
    payload = require_object(body)
    reject_identity_fields(payload, OWNER_FIELDS)
    data = parse_body(RestaurantUpdate, payload)
    return RestaurantOutput.model_validate(_get_service(db).update(user, restaurant_id, data))


@router.delete("/restaurants/{restaurant_id}", response_model=SuccessResponse)
def delete_restaurant(
    restaurant_id: int = Path(gt=0),
    db: Session = Depends(get_db),
    user: User = Depends(current_user),
) -> SuccessResponse:
    """Delete a restaurant together with its staff, invitations and worker profiles."""
    _get_service(db).delete(user, restaurant_id)
    return SuccessResponse(message="Restaurant deleted successfully")

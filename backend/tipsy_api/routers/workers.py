"""
Worker endpoints.

Public pages:
- GET /api/workers/{id}                 worker profile with restaurants and reviews
- GET /api/workers/by-slug/{qr_slug}    what a tipper sees after scanning a QR code

Worker profile resource (``?id=`` selects a single profile):
- GET    /api/workers    list or fetch, public
- POST   /api/workers    restaurant owner or admin
- PUT    /api/workers    the profile's user, restaurant owner or admin
- DELETE /api/workers    same as PUT
"""

from typing import Any, Optional, Union

from fastapi import APIRouter, Body, Depends, Path, Query, status
from sqlalchemy.orm import Session

from tipsy_shared.infrastructure.db import get_db
from tipsy_shared.utils.schemas import SuccessResponse
from tipsy_shared.utils.tipping_schemas import (
    WorkerBySlug,
    WorkerProfileCreate,
    WorkerProfileOutput,
    WorkerProfileUpdate,
    WorkerPublicProfile,
)
from tipsy_shared.utils.validators import parse_body, reject_identity_fields, require_object

from tipsy_api.models import User
from tipsy_api.routers._common import Pagination, current_user, get_worker_pagination
from tipsy_api.services.domain import WorkerService
from tipsy_api.services.domain.worker_service import SortField, SortOrder


router = APIRouter(tags=["workers"])


def _get_service(db: Session) -> WorkerService:
    return WorkerService(db)


# =============================================================================
# Worker profile resource
# =============================================================================


@router.get("/workers", response_model=Union[WorkerProfileOutput, list[WorkerProfileOutput]])
def list_worker_profiles(
    profile_id: Optional[int] = Query(default=None, alias="id", gt=0),
    restaurant_id: Optional[int] = Query(default=None, gt=0),
    search: Optional[str] = Query(default=None, max_length=100),
    sort: SortField = Query(default="createdAt"),
    order: SortOrder = Query(default="desc"),
    pagination: Pagination = Depends(get_worker_pagination),
    db: Session = Depends(get_db),
):
    """One profile when ``id`` is given, otherwise a filtered, sorted page."""
    service = _get_service(db)
    if profile_id is not None:
        return service.get_profile(profile_id)
    return service.list_profiles(
        restaurant_id=restaurant_id,
        search=search,
        sort=sort,
        order=order,
        limit=pagination.limit,
        offset=pagination.offset,
    )


@router.post("/workers", response_model=WorkerProfileOutput, status_code=status.HTTP_201_CREATED)
def create_worker_profile(
    body: Any = Body(default=None),
    db: Session = Depends(get_db),
    user: User = Depends(current_user),
) -> WorkerProfileOutput:
    payload = require_object(body)
    reject_identity_fields(payload, ("userId",))
    data = parse_body(WorkerProfileCreate, payload)
    return _get_service(db).create_profile(user, data)


@router.put("/workers", response_model=WorkerProfileOutput)
def update_worker_profile(
    profile_id: int = Query(alias="id", gt=0),
    body: Any = Body(default=None),
    db: Session = Depends(get_db),
    user: User = Depends(current_user),
) -> WorkerProfileOutput:
    """Change display name, bio or UPI address. The owning user cannot change."""
    payload = require_object(body)
    reject_identity_fields(payload, ("userId", "user_id"))
    data = parse_body(WorkerProfileUpdate, payload)
    return _get_service(db).update_profile(user, profile_id, data)


@router.delete("/workers", response_model=SuccessResponse)
def delete_worker_profile(
    profile_id: int = Query(alias="id", gt=0),
    db: Session = Depends(get_db),
    user: User = Depends(current_user),
) -> SuccessResponse:
    _get_service(db).delete_profile(user, profile_id)
    return SuccessResponse(message="Worker profile deleted successfully")


# =============================================================================
# Public pages
# =============================================================================


@router.get("/workers/by-slug/{qr_slug}", response_model=WorkerBySlug)
def get_worker_by_slug(
    qr_slug: str = Path(min_length=1, max_length=200),
    db: Session = Depends(get_db),
) -> WorkerBySlug:
    return _get_service(db).by_slug(qr_slug)


@router.get("/workers/{worker_id}", response_model=WorkerPublicProfile)
def get_worker(
    worker_id: int = Path(gt=0),
    db: Session = Depends(get_db),
) -> WorkerPublicProfile:
    return _get_service(db).public_profile(worker_id)

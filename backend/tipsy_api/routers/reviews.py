"""
Review endpoints.

- POST /api/reviews            public, rate limited
- GET  /api/reviews            role scoped listing
- POST /api/reviews/moderate   restaurant owner or admin
"""

from typing import Any

from fastapi import APIRouter, Body, Depends, Query, Request, status
from sqlalchemy.orm import Session

from tipsy_shared.infrastructure.db import get_db
from tipsy_shared.security.rate_limit import PUBLIC_WRITE_LIMIT, limiter
from tipsy_shared.utils.tipping_schemas import (
    MODERATION_ERROR_CODES,
    REVIEW_ERROR_CODES,
    ModeratedReview,
    ModerationRequest,
    ReviewCreate,
    ReviewListItem,
    ReviewReceipt,
)
from tipsy_shared.utils.validators import parse_body, reject_identity_fields, require_object

from tipsy_api.models import User
from tipsy_api.routers._common import Pagination, current_user, get_pagination
from tipsy_api.services.domain import ReviewService
from tipsy_api.services.permissions import PermissionContext


router = APIRouter(tags=["reviews"])

MODERATION_IDENTITY_FIELDS = ("userId", "user_id", "moderatedByUserId", "moderated_by_user_id")


@router.post("/reviews", response_model=ReviewReceipt, status_code=status.HTTP_201_CREATED)
@limiter.limit(PUBLIC_WRITE_LIMIT)
def submit_review(
    request: Request,
    body: Any = Body(default=None),
    db: Session = Depends(get_db),
) -> ReviewReceipt:
    """Review a worker identified by exactly one of tip_id or qr_slug."""
    data = parse_body(ReviewCreate, body, REVIEW_ERROR_CODES)
    return ReviewService(db).submit(data)


@router.get("/reviews", response_model=list[ReviewListItem])
def list_reviews(
    restaurant_id: int | None = Query(default=None, alias="restaurantId", gt=0),
    pagination: Pagination = Depends(get_pagination),
    db: Session = Depends(get_db),
    user: User = Depends(current_user),
) -> list[ReviewListItem]:
    """
    Workers see their own reviews, owners the reviews of a restaurant
    they own (restaurantId required), admins everything.
    """
    return ReviewService(db).list_for(
        user,
        restaurant_id=restaurant_id,
        limit=pagination.limit,
        offset=pagination.offset,
    )


@router.post("/reviews/moderate", response_model=ModeratedReview)
def moderate_review(
    body: Any = Body(default=None),
    db: Session = Depends(get_db),
    user: User = Depends(current_user),
) -> ModeratedReview:
    """
    Approve or reject a review.

    Checks run in order: role, identity fields in the body, body fields,
    review existence, restaurant ownership.
    """
    PermissionContext(user).require_moderator("moderate review")
    payload = require_object(body)
    reject_identity_fields(payload, MODERATION_IDENTITY_FIELDS)
    data = parse_body(ModerationRequest, payload, MODERATION_ERROR_CODES)
    return ReviewService(db).moderate(user, data)

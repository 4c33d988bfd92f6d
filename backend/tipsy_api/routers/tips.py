"""
Tip endpoints.

POST /api/tips is public: anyone holding a QR code can tip the worker
behind it. GET /api/tips lists the caller's own tips.
"""

from typing import Any

from fastapi import APIRouter, Body, Depends, Request, status
from sqlalchemy.orm import Session

from tipsy_shared.infrastructure.db import get_db
from tipsy_shared.security.rate_limit import PUBLIC_WRITE_LIMIT, limiter
from tipsy_shared.utils.tipping_schemas import TIP_ERROR_CODES, TipCreate, TipListItem, TipReceipt
from tipsy_shared.utils.validators import parse_body

from tipsy_api.models import User
from tipsy_api.routers._common import Pagination, current_user, get_pagination
from tipsy_api.services.domain import TipService


router = APIRouter(tags=["tips"])


@router.post("/tips", response_model=TipReceipt, status_code=status.HTTP_201_CREATED)
@limiter.limit(PUBLIC_WRITE_LIMIT)
def submit_tip(
    request: Request,
    body: Any = Body(default=None),
    db: Session = Depends(get_db),
) -> TipReceipt:
    """
    Leave a tip for the worker behind a QR slug.

    A rating (1-5) also records a pending review. Validation runs in the
    order qr_slug, amount_cents, rating; nothing is written on failure.
    """
    data = parse_body(TipCreate, body, TIP_ERROR_CODES)
    return TipService(db).submit(data)


@router.get("/tips", response_model=list[TipListItem])
def list_tips(
    pagination: Pagination = Depends(get_pagination),
    db: Session = Depends(get_db),
    user: User = Depends(current_user),
) -> list[TipListItem]:
    """The caller's tips, newest first."""
    return TipService(db).list_for_worker(user, limit=pagination.limit, offset=pagination.offset)

"""
Notification endpoints. Callers only ever see their own notifications.
"""

from fastapi import APIRouter, Depends, Path, Query, Response
from sqlalchemy.orm import Session

from tipsy_shared.infrastructure.db import get_db
from tipsy_shared.utils.account_schemas import NotificationOutput, NotificationReadResult

from tipsy_api.models import User
from tipsy_api.routers._common import Pagination, current_user, get_notification_pagination
from tipsy_api.services.domain import NotificationService


router = APIRouter(tags=["notifications"])


@router.get("/notifications", response_model=list[NotificationOutput])
def list_notifications(
    response: Response,
    unread_only: bool = Query(default=False),
    pagination: Pagination = Depends(get_notification_pagination),
    db: Session = Depends(get_db),
    user: User = Depends(current_user),
) -> list[NotificationOutput]:
    """Newest first; the total unread count goes in ``X-Unread-Count``."""
    items, unread = NotificationService(db).list_for_user(
        user,
        limit=pagination.limit,
        offset=pagination.offset,
        unread_only=unread_only,
    )
    response.headers["X-Unread-Count"] = str(unread)
    return [NotificationOutput.model_validate(item) for item in items]


@router.post("/notifications/{notification_id}/read", response_model=NotificationReadResult)
def mark_notification_read(
    notification_id: int = Path(gt=0),
    db: Session = Depends(get_db),
    user: User = Depends(current_user),
) -> NotificationReadResult:
    notification = NotificationService(db).mark_read(user, notification_id)
    return NotificationReadResult(
        message="Notification marked as read",
        notification=NotificationOutput.model_validate(notification),
    )

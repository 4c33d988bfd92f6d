"""
Notification Service.

Notifications are derived writes: other services add them to the session of
the primary write and commit both together. Reading and marking read is
limited to the recipient.
"""

from __future__ import annotations

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from tipsy_shared.config.logging import get_logger
from tipsy_shared.infrastructure.db import safe_commit

from tipsy_api.models import Notification, User
from tipsy_api.services.lookup import ReferenceLookup

logger = get_logger(__name__)


def add_notification(db: Session, user_id: int, type_: str, title: str, body: str) -> Notification:
    """Stage a notification in the caller's transaction (no commit)."""
    notification = Notification(user_id=user_id, type=type_, title=title, body=body, read=False)
    db.add(notification)
    return notification


class NotificationService:

    def __init__(self, db: Session):
        self._db = db
        self._lookup = ReferenceLookup(db)

    def list_for_user(
        self,
        user: User,
        *,
        limit: int,
        offset: int,
        unread_only: bool = False,
    ) -> tuple[list[Notification], int]:
        """Return (page of notifications newest first, total unread count)."""
        query = select(Notification).where(Notification.user_id == user.id)
        if unread_only:
            query = query.where(Notification.read.is_(False))
        query = query.order_by(Notification.created_at.desc(), Notification.id.desc())

        items = list(self._db.scalars(query.offset(offset).limit(limit)))
        unread = self._db.scalar(
            select(func.count(Notification.id)).where(
                Notification.user_id == user.id,
                Notification.read.is_(False),
            )
        ) or 0
        return items, int(unread)

    def mark_read(self, user: User, notification_id: int) -> Notification:
        notification = self._lookup.get_own_notification(notification_id, user.id)
        if not notification.read:
            notification.read = True
            safe_commit(self._db)
            self._db.refresh(notification)
            logger.info("Notification marked read", notification_id=notification.id, user_id=user.id)
        return notification

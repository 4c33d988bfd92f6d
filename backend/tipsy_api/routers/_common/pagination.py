"""
Standardized pagination for list endpoints.

Usage:
    from tipsy_api.routers._common.pagination import Pagination, get_pagination

    @router.get("/restaurants")
    def list_restaurants(
        pagination: Pagination = Depends(get_pagination),
        db: Session = Depends(get_db),
    ):
        query = query.offset(pagination.offset).limit(pagination.limit)
"""

from dataclasses import dataclass

from fastapi import Query

from tipsy_shared.config.constants import Limits


@dataclass
class Pagination:
    """
    Pagination parameters with validation.

    Attributes:
        limit: Maximum items per page (1 to max_limit)
        offset: Number of items to skip
        max_limit: Maximum allowed limit
    """

    limit: int
    offset: int
    max_limit: int = Limits.MAX_PAGE_SIZE

    def __post_init__(self):
        """Validate and normalize values."""
        self.limit = min(max(1, self.limit), self.max_limit)
        self.offset = max(0, self.offset)


def get_pagination(
    limit: int = Query(
        default=Limits.DEFAULT_PAGE_SIZE,
        ge=1,
        le=Limits.MAX_PAGE_SIZE,
        description="Maximum number of items to return",
    ),
    offset: int = Query(
        default=0,
        ge=0,
        description="Number of items to skip",
    ),
) -> Pagination:
    """FastAPI dependency for pagination (default 10, max 100)."""
    return Pagination(limit=limit, offset=offset)


def get_notification_pagination(
    limit: int = Query(
        default=Limits.NOTIFICATIONS_PAGE_SIZE,
        ge=1,
        le=Limits.MAX_PAGE_SIZE,
        description="Maximum number of notifications to return",
    ),
    offset: int = Query(default=0, ge=0, description="Number of items to skip"),
) -> Pagination:
    """Notifications page in batches of 20 by default."""
    return Pagination(limit=limit, offset=offset)


def get_worker_pagination(
    limit: int = Query(default=Limits.WORKERS_PAGE_SIZE, ge=1, le=Limits.MAX_PAGE_SIZE),
    offset: int = Query(default=0, ge=0),
) -> Pagination:
    return Pagination(limit=limit, offset=offset)

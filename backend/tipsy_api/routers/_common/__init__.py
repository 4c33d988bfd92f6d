"""
Common utilities shared across routers.
"""

from .auth import current_user
from .pagination import (
    Pagination,
    get_pagination,
    get_notification_pagination,
    get_worker_pagination,
)

__all__ = [
    "current_user",
    "Pagination",
    "get_pagination",
    "get_notification_pagination",
    "get_worker_pagination",
]

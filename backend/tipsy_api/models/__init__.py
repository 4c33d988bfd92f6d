"""
SQLAlchemy ORM Models Package.

- base: Base class, IdMixin, TimestampMixin
- user: User
- restaurant: Restaurant, Staff, StaffInvitation
- tip: Tip, Review
- notification: Notification, Feature
- worker_profile: WorkerProfile
"""

from .base import Base, IdMixin, TimestampMixin
from .user import User
from .restaurant import Restaurant, Staff, StaffInvitation
from .tip import Tip, Review
from .notification import Notification, Feature
from .worker_profile import WorkerProfile

__all__ = [
    "Base",
    "IdMixin",
    "TimestampMixin",
    "User",
    "Restaurant",
    "Staff",
    "StaffInvitation",
    "Tip",
    "Review",
    "Notification",
    "Feature",
    "WorkerProfile",
]

"""
Configuration module: Settings, logging, constants.
"""

from tipsy_shared.config.settings import settings, DATABASE_URL
from tipsy_shared.config.logging import get_logger, setup_logging
from tipsy_shared.config.constants import (
    Roles,
    ReviewStatus,
    StaffStatus,
    NotificationType,
    Limits,
    MODERATOR_ROLES,
)

__all__ = [
    # settings
    "settings",
    "DATABASE_URL",
    # logging
    "get_logger",
    "setup_logging",
    # constants
    "Roles",
    "ReviewStatus",
    "StaffStatus",
    "NotificationType",
    "Limits",
    "MODERATOR_ROLES",
]

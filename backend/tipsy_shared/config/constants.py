"""
Centralized constants for the backend application.
Avoids magic strings for roles, statuses and notification types.

Usage:
    from tipsy_shared.config.constants import Roles, ReviewStatus

    if user.role == Roles.OWNER:
        ...

    if review.status == ReviewStatus.PENDING:
        ...
"""

from typing import Final


# =============================================================================
# User Roles
# =============================================================================


class Roles:
    """Application role constants."""

    WORKER: Final[str] = "worker"
    OWNER: Final[str] = "owner"
    ADMIN: Final[str] = "admin"

    ALL: Final[list[str]] = [WORKER, OWNER, ADMIN]

    DEFAULT: Final[str] = WORKER


MODERATOR_ROLES: Final[frozenset[str]] = frozenset({Roles.OWNER, Roles.ADMIN})


# =============================================================================
# Entity Status Constants
# =============================================================================


class ReviewStatus:
    """Review moderation status constants."""

    PENDING: Final[str] = "pending"
    APPROVED: Final[str] = "approved"
    REJECTED: Final[str] = "rejected"

    ALL: Final[list[str]] = [PENDING, APPROVED, REJECTED]
    FINAL: Final[list[str]] = [APPROVED, REJECTED]


class ModerationAction:
    """Moderation actions and the status each one produces."""

    APPROVE: Final[str] = "approve"
    REJECT: Final[str] = "reject"

    ALL: Final[list[str]] = [APPROVE, REJECT]
    TARGET_STATUS: Final[dict[str, str]] = {
        APPROVE: ReviewStatus.APPROVED,
        REJECT: ReviewStatus.REJECTED,
    }


class StaffStatus:
    """Staff membership status constants."""

    INVITED: Final[str] = "invited"
    ACTIVE: Final[str] = "active"

    ALL: Final[list[str]] = [INVITED, ACTIVE]


class InvitationStatus:
    """Staff invitation status constants."""

    PENDING: Final[str] = "pending"
    ACCEPTED: Final[str] = "accepted"
    REVOKED: Final[str] = "revoked"

    ALL: Final[list[str]] = [PENDING, ACCEPTED, REVOKED]


class NotificationType:
    """Notification type constants."""

    TIP_RECEIVED: Final[str] = "tip_received"
    REVIEW_POSTED: Final[str] = "review_posted"
    STAFF_INVITATION: Final[str] = "staff_invitation"
    PENDING_STAFF_INVITATION: Final[str] = "pending_staff_invitation"
    INVITATION_ACCEPTED: Final[str] = "invitation_accepted"


DEFAULT_ROLE_IN_RESTAURANT: Final[str] = "staff"


# =============================================================================
# Limits
# =============================================================================


class Limits:
    """Pagination and field size limits."""

    DEFAULT_PAGE_SIZE: Final[int] = 10
    MAX_PAGE_SIZE: Final[int] = 100
    NOTIFICATIONS_PAGE_SIZE: Final[int] = 20
    WORKERS_PAGE_SIZE: Final[int] = 20

    # Approved reviews shown on public worker pages
    RECENT_REVIEWS_PROFILE: Final[int] = 5
    RECENT_REVIEWS_SLUG: Final[int] = 3

    MIN_RATING: Final[int] = 1
    MAX_RATING: Final[int] = 5

    MAX_NAME_LENGTH: Final[int] = 100
    MAX_ADDRESS_LENGTH: Final[int] = 500
    MAX_MESSAGE_LENGTH: Final[int] = 1000
    MAX_BIO_LENGTH: Final[int] = 1000
    MAX_ROLE_LENGTH: Final[int] = 50
    MAX_URL_LENGTH: Final[int] = 2048
    MAX_CREDENTIAL_LENGTH: Final[int] = 255

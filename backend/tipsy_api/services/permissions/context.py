"""
Permission Context - Main entry point for permission checks.
"""

from enum import Enum, auto
from typing import Any

from tipsy_shared.config.constants import MODERATOR_ROLES, Roles
from tipsy_shared.config.logging import audit_access_denied
from tipsy_shared.utils.exceptions import ForbiddenError, InsufficientRoleError

from tipsy_api.models import Restaurant, User

from .strategies import get_strategy_for_role


class Action(Enum):
    """Available actions for permission checks."""
    READ = auto()
    UPDATE = auto()
    DELETE = auto()


class PermissionContext:
    """
    Context for performing permission checks.

    Selects the strategy from the resolved user's role.

    Usage:
        ctx = PermissionContext(user)

        ctx.require_role(Roles.OWNER)
        ctx.require_restaurant_owner(restaurant, "update this restaurant")

        ctx.require(Action.UPDATE, profile, "update this worker profile")
    """

    def __init__(self, user: User):
        self._user = user
        self._strategy = get_strategy_for_role(user.role)

    @property
    def is_admin(self) -> bool:
        return self._user.role == Roles.ADMIN

    def can(self, action: Action, entity: Any) -> bool:
        """Check if user can perform ``action`` on an entity instance."""
        if action == Action.READ:
            return self._strategy.can_read(self._user, entity)

        elif action == Action.UPDATE:
            return self._strategy.can_update(self._user, entity)

        elif action == Action.DELETE:
            return self._strategy.can_delete(self._user, entity)

        return False

    # =========================================================================
    # Role checks
    # =========================================================================

    def require_role(self, *roles: str, operation: str | None = None) -> None:
        """Raise InsufficientRoleError unless the user has one of ``roles``."""
        if self._user.role not in roles:
            audit_access_denied(
                operation or "role check",
                user_id=self._user.id,
                role=self._user.role,
                reason=f"requires one of {list(roles)}",
            )
            raise InsufficientRoleError(list(roles), user_id=self._user.id)

    def require_admin(self, operation: str | None = None) -> None:
        self.require_role(Roles.ADMIN, operation=operation)

    def require_moderator(self, operation: str | None = None) -> None:
        """Owners and admins moderate reviews."""
        self.require_role(*sorted(MODERATOR_ROLES), operation=operation)

    # =========================================================================
    # Ownership checks
    # =========================================================================

    def owns_restaurant(self, restaurant: Restaurant) -> bool:
        return restaurant.owner_user_id == self._user.id

    def require_restaurant_owner(self, restaurant: Restaurant, action: str) -> None:
        """Only the owner of the restaurant passes; admins do not."""
        if not self.owns_restaurant(restaurant):
            self.deny(action, restaurant_id=restaurant.id)

    def require_owner_or_admin(self, restaurant: Restaurant, action: str) -> None:
        """The restaurant's owner or any admin passes."""
        if not (self.is_admin or self.owns_restaurant(restaurant)):
            self.deny(action, restaurant_id=restaurant.id)

    def require(self, action: Action, entity: Any, description: str, **extra: Any) -> None:
        """Raise ForbiddenError unless the strategy allows ``action`` on ``entity``."""
        if not self.can(action, entity):
            self.deny(description, **extra)

    def deny(self, action: str, **extra: Any) -> None:
        """Audit and raise ForbiddenError for an ownership mismatch."""
        audit_access_denied(
            action,
            user_id=self._user.id,
            role=self._user.role,
            reason="ownership mismatch",
            **extra,
        )
        raise ForbiddenError(action, user_id=self._user.id, **extra)

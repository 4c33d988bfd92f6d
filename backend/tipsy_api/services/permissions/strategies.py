"""
Permission Strategy implementations.
Strategy Pattern for role-based access control.

Each strategy defines what a role may do with an entity instance. Ownership
is always derived from the restaurant the entity belongs to:

    Restaurant                      -> restaurant.owner_user_id
    WorkerProfile                   -> profile.restaurant.owner_user_id

Role-only and owner-only checks (feature flags, restaurant edits, staff,
invitations, moderation) go through PermissionContext's require_* helpers.
"""

from abc import ABC, abstractmethod
from typing import Any

from tipsy_shared.config.constants import Roles

from tipsy_api.models import Restaurant, User


# =============================================================================
# Helpers
# =============================================================================


def restaurant_of(entity: Any) -> Restaurant | None:
    """Return the restaurant an entity belongs to (itself for restaurants)."""
    if isinstance(entity, Restaurant):
        return entity
    return getattr(entity, "restaurant", None)


def owns(user: User, entity: Any) -> bool:
    """True when the user owns the restaurant the entity belongs to."""
    restaurant = restaurant_of(entity)
    return restaurant is not None and restaurant.owner_user_id == user.id


def is_staff_at(user: User, restaurant: Restaurant) -> bool:
    """True when the user has any membership row at the restaurant."""
    return any(member.user_id == user.id for member in restaurant.staff)


# =============================================================================
# Base Permission Strategy
# =============================================================================


class PermissionStrategy(ABC):
    """
    Abstract base for permission strategies.

    Each implementation defines access rules for a specific role.
    """

    # Entities whose rows may be edited or removed through a strategy check
    MANAGED_ENTITIES = frozenset({"WorkerProfile"})

    @property
    @abstractmethod
    def role_name(self) -> str:
        """Return the role this strategy handles."""
        ...

    @abstractmethod
    def can_read(self, user: User, entity: Any) -> bool:
        """Check if user can read entity."""
        ...

    @abstractmethod
    def can_update(self, user: User, entity: Any) -> bool:
        """Check if user can update entity."""
        ...

    def can_delete(self, user: User, entity: Any) -> bool:
        """Deleting follows the update rule for every role."""
        return self.can_update(user, entity)

    def manages(self, entity: Any) -> bool:
        return type(entity).__name__ in self.MANAGED_ENTITIES


class AdminStrategy(PermissionStrategy):
    """Admin reads everything and may edit or remove any worker profile."""

    @property
    def role_name(self) -> str:
        return Roles.ADMIN

    def can_read(self, user: User, entity: Any) -> bool:
        return True

    def can_update(self, user: User, entity: Any) -> bool:
        return self.manages(entity)


class OwnerStrategy(PermissionStrategy):
    """
    Owner sees the restaurants they own or work at, and manages worker
    profiles at restaurants they own.
    """

    @property
    def role_name(self) -> str:
        return Roles.OWNER

    def can_read(self, user: User, entity: Any) -> bool:
        if isinstance(entity, Restaurant):
            return entity.owner_user_id == user.id or is_staff_at(user, entity)
        return owns(user, entity)

    def can_update(self, user: User, entity: Any) -> bool:
        return self.manages(entity) and owns(user, entity)


class WorkerStrategy(PermissionStrategy):
    """
    Worker has self-service access only:
    - Reads restaurants they are staff at
    - Edits or removes their own worker profile
    """

    @property
    def role_name(self) -> str:
        return Roles.WORKER

    def can_read(self, user: User, entity: Any) -> bool:
        if isinstance(entity, Restaurant):
            return is_staff_at(user, entity)
        return getattr(entity, "user_id", None) == user.id

    def can_update(self, user: User, entity: Any) -> bool:
        return self.manages(entity) and getattr(entity, "user_id", None) == user.id


# Strategy registry
STRATEGY_REGISTRY: dict[str, type[PermissionStrategy]] = {
    Roles.ADMIN: AdminStrategy,
    Roles.OWNER: OwnerStrategy,
    Roles.WORKER: WorkerStrategy,
}


def get_strategy_for_role(role: str) -> PermissionStrategy:
    """Get permission strategy for a role; unknown roles get worker rights."""
    strategy_class = STRATEGY_REGISTRY.get(role, WorkerStrategy)
    return strategy_class()

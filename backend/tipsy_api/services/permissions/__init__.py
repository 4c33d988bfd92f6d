"""
Permission Strategy Pattern implementation.

Usage:
    from tipsy_api.services.permissions import PermissionContext, Action

    ctx = PermissionContext(user)
    ctx.require_role(Roles.OWNER)
    ctx.require(Action.DELETE, profile, "delete this worker profile")
"""

from .strategies import (
    PermissionStrategy,
    AdminStrategy,
    OwnerStrategy,
    WorkerStrategy,
    get_strategy_for_role,
)
from .context import PermissionContext, Action

__all__ = [
    # Strategies
    "PermissionStrategy",
    "AdminStrategy",
    "OwnerStrategy",
    "WorkerStrategy",
    "get_strategy_for_role",
    # Context
    "PermissionContext",
    "Action",
]

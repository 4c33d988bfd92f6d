"""
Self-profile Service.

``GET /users/me`` returns a role-specific view: workers see their earnings,
owners their restaurant count, admins just their account.
"""

from __future__ import annotations

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from tipsy_shared.config.constants import Roles
from tipsy_shared.config.logging import get_logger
from tipsy_shared.infrastructure.db import safe_commit
from tipsy_shared.utils.account_schemas import (
    AdminSelfProfile,
    OwnerSelfProfile,
    UserOutput,
    UserUpdate,
    WorkerSelfProfile,
)
from tipsy_shared.utils.exceptions import ConflictError, ValidationError

from tipsy_api.models import User
from tipsy_api.services.domain.restaurant_service import RestaurantService
from tipsy_api.services.domain.stats import worker_earnings

logger = get_logger(__name__)


class ProfileService:

    def __init__(self, db: Session):
        self._db = db

    def get(self, user: User) -> WorkerSelfProfile | OwnerSelfProfile | AdminSelfProfile:
        base = UserOutput.model_validate(user).model_dump()

        if user.role == Roles.WORKER:
            total, count = worker_earnings(self._db, user.id)
            return WorkerSelfProfile(
                **base, role=Roles.WORKER, total_earnings_cents=total, tips_count=count
            )
        if user.role == Roles.OWNER:
            return OwnerSelfProfile(
                **base,
                role=Roles.OWNER,
                restaurants_count=RestaurantService.count_owned(self._db, user),
            )
        return AdminSelfProfile(**base, role=Roles.ADMIN)

    def update(self, user: User, data: UserUpdate) -> WorkerSelfProfile | OwnerSelfProfile | AdminSelfProfile:
        changes = data.model_dump(include=data.model_fields_set)
        if not changes:
            raise ValidationError("No fields to update", code="NO_UPDATES")

        for field, value in changes.items():
            setattr(user, field, value)
        try:
            safe_commit(self._db)
        except IntegrityError:
            raise ConflictError("Profile could not be updated")

        self._db.refresh(user)
        logger.info("Profile updated", user_id=user.id, fields=sorted(changes))
        return self.get(user)

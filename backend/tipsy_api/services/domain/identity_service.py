"""
Identity Service.

Maps a bearer credential to an application user. The first authenticated
request of an unknown credential provisions a worker account; every later
request returns the same row.
"""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from tipsy_shared.config.constants import Roles
from tipsy_shared.config.logging import audit_identity_event, get_logger
from tipsy_shared.infrastructure.db import safe_commit
from tipsy_shared.security.auth import Credential
from tipsy_shared.utils.account_schemas import UserRegister
from tipsy_shared.utils.exceptions import ConflictError

from tipsy_api.models import User

logger = get_logger(__name__)


PLACEHOLDER_ATTEMPTS = 20


def placeholder_email(external_id: str, attempt: int = 0) -> str:
    if attempt:
        return f"{external_id}+{attempt}@example.com"
    return f"{external_id}@example.com"


def placeholder_name(external_id: str) -> str:
    return f"User {external_id}"


class IdentityService:
    """Get-or-provision and explicit registration of users."""

    def __init__(self, db: Session):
        self._db = db

    def find(self, external_id: str) -> User | None:
        return self._db.scalar(select(User).where(User.auth_user_id == external_id))

    def get_or_provision(self, credential: Credential) -> User:
        """
        Return the user for a credential, creating a worker on first use.

        A concurrent request provisioning the same credential may win the
        unique constraint race; in that case the winner's row is returned.
        """
        user = self.find(credential.external_id)
        if user is not None:
            return user

        email = credential.email.strip().lower() if credential.email else None
        if not email or self._email_taken(email):
            email = self._free_placeholder(credential.external_id)

        user = User(
            auth_user_id=credential.external_id,
            role=Roles.DEFAULT,
            name=credential.name or placeholder_name(credential.external_id),
            email=email,
        )
        self._db.add(user)
        try:
            safe_commit(self._db)
        except IntegrityError:
            existing = self.find(credential.external_id)
            if existing is None:
                raise ConflictError(
                    "Could not provision user",
                    code="PROVISIONING_CONFLICT",
                    external_id=credential.external_id,
                )
            return existing

        self._db.refresh(user)
        audit_identity_event("PROVISIONED", user_id=user.id, email=user.email)
        return user

    def register(self, credential: Credential, data: UserRegister) -> User:
        """Explicit registration with a chosen role (worker or owner)."""
        if self.find(credential.external_id) is not None:
            raise ConflictError("User already registered", code="USER_ALREADY_REGISTERED")
        if self._email_taken(data.email):
            raise ConflictError("Email is already in use", code="DUPLICATE_EMAIL")

        user = User(
            auth_user_id=credential.external_id,
            role=data.role,
            name=data.name,
            email=data.email,
            phone=data.phone,
        )
        self._db.add(user)
        try:
            safe_commit(self._db)
        except IntegrityError:
            raise ConflictError("User already registered", code="USER_ALREADY_REGISTERED")

        self._db.refresh(user)
        audit_identity_event("REGISTERED", user_id=user.id, email=user.email, role=user.role)
        return user

    def _email_taken(self, email: str) -> bool:
        return self._db.scalar(select(User.id).where(User.email == email)) is not None

    def _free_placeholder(self, external_id: str) -> str:
        """First `<id>[+n]@example.com` address no other user holds."""
        for attempt in range(PLACEHOLDER_ATTEMPTS):
            candidate = placeholder_email(external_id, attempt)
            if not self._email_taken(candidate):
                return candidate
        raise ConflictError("No free placeholder email", code="PROVISIONING_CONFLICT", external_id=external_id)

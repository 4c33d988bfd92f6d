"""
Self-service user endpoints.

The caller is always identified by the bearer credential. Bodies may never
name a user id or a role.
"""

from typing import Any

from fastapi import APIRouter, Body, Depends, status
from sqlalchemy.orm import Session

from tipsy_shared.infrastructure.db import get_db
from tipsy_shared.security.auth import Credential, require_credential
from tipsy_shared.utils.account_schemas import RegisteredUser, SelfProfile, UserRegister, UserUpdate
from tipsy_shared.utils.validators import parse_body, reject_identity_fields, require_object

from tipsy_api.models import User
from tipsy_api.routers._common import current_user
from tipsy_api.services.domain import IdentityService, ProfileService


router = APIRouter(tags=["users"])

PROFILE_IDENTITY_FIELDS = ("userId", "user_id", "authUserId", "auth_user_id", "id")


@router.get("/users/me", response_model=SelfProfile)
def get_me(
    db: Session = Depends(get_db),
    user: User = Depends(current_user),
):
    """The caller's account with role-specific figures."""
    return ProfileService(db).get(user)


@router.patch("/users/me", response_model=SelfProfile)
def update_me(
    body: Any = Body(default=None),
    db: Session = Depends(get_db),
    user: User = Depends(current_user),
):
    payload = require_object(body)
    reject_identity_fields(payload, PROFILE_IDENTITY_FIELDS)
    reject_identity_fields(payload, ("role",), code="ROLE_NOT_ALLOWED")
    data = parse_body(UserUpdate, payload)
    return ProfileService(db).update(user, data)


@router.post("/users/register", response_model=RegisteredUser, status_code=status.HTTP_201_CREATED)
def register(
    body: Any = Body(default=None),
    credential: Credential = Depends(require_credential),
    db: Session = Depends(get_db),
) -> RegisteredUser:
    """
    Explicit registration for a credential that has not been seen yet.

    Unlike every other authenticated route this does not auto-provision,
    so the caller picks name, email and role (worker or owner).
    """
    data = parse_body(UserRegister, body, {"role": "INVALID_ROLE"})
    return RegisteredUser.model_validate(IdentityService(db).register(credential, data))

"""
Bearer credential handling.

The ``Authorization: Bearer <token>`` header is the only thing that separates
authenticated from public requests. Depending on ``settings.identity_mode``
the token is either an opaque external identity or a signed JWT whose
``sub`` claim is the external identity.

Mapping the credential to an application user (and provisioning one on first
use) happens in ``tipsy_api.services.domain.identity_service``.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any

import jwt
from fastapi import Header

from tipsy_shared.config.constants import Limits
from tipsy_shared.config.logging import audit_identity_event, get_logger, mask_token
from tipsy_shared.config.settings import settings
from tipsy_shared.utils.exceptions import AuthenticationError

logger = get_logger(__name__)


@dataclass(frozen=True)
class Credential:
    """Identity asserted by the caller's bearer token."""

    external_id: str
    name: str | None = None
    email: str | None = None


def get_bearer_token(authorization: str | None) -> str | None:
    """
    Extract the token from an Authorization header value.

    Returns None ("no identity") when the header is absent, uses another
    scheme, or carries an empty, oversized or whitespace-containing token.
    """
    if not authorization or not authorization.startswith("Bearer "):
        return None

    token = authorization[len("Bearer "):]
    if not token or len(token) > Limits.MAX_CREDENTIAL_LENGTH:
        return None
    if any(ch.isspace() for ch in token):
        return None
    return token


# =============================================================================
# JWT Functions (identity_mode = "jwt")
# =============================================================================


def sign_jwt(
    subject: str,
    name: str | None = None,
    email: str | None = None,
    ttl_seconds: int | None = None,
) -> str:
    """
    Sign an identity token for the given external subject.

    Used by the CLI and tests; production tokens come from the identity provider.
    """
    if ttl_seconds is None:
        ttl_seconds = settings.jwt_access_token_expire_minutes * 60

    now = int(time.time())
    data: dict[str, Any] = {
        "sub": subject,
        "iss": settings.jwt_issuer,
        "aud": settings.jwt_audience,
        "iat": now,
        "exp": now + ttl_seconds,
    }
    if name:
        data["name"] = name
    if email:
        data["email"] = email
    return jwt.encode(data, settings.jwt_secret, algorithm="HS256")


def verify_jwt(token: str) -> dict[str, Any]:
    """
    Verify and decode an identity token.

    Raises:
        AuthenticationError: If the token is invalid, expired or has no subject.
    """
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=["HS256"],
            audience=settings.jwt_audience,
            issuer=settings.jwt_issuer,
        )
    except jwt.ExpiredSignatureError:
        audit_identity_event("TOKEN_REJECTED", success=False, reason="expired")
        raise AuthenticationError("Token has expired", code="INVALID_TOKEN")
    except jwt.InvalidTokenError as e:
        # Log the actual error, return a generic message
        logger.warning("JWT validation failed", error=str(e), token=mask_token(token))
        audit_identity_event("TOKEN_REJECTED", success=False, reason="invalid")
        raise AuthenticationError("Invalid token", code="INVALID_TOKEN")

    sub = payload.get("sub")
    if not isinstance(sub, str) or not sub or len(sub) > Limits.MAX_CREDENTIAL_LENGTH:
        raise AuthenticationError("Invalid token: missing subject claim", code="INVALID_TOKEN")

    return payload


def resolve_credential(token: str) -> Credential:
    """Turn a bearer token into a Credential according to the identity mode."""
    if settings.identity_mode == "jwt":
        payload = verify_jwt(token)
        return Credential(
            external_id=payload["sub"],
            name=payload.get("name"),
            email=payload.get("email"),
        )
    return Credential(external_id=token)


# =============================================================================
# FastAPI dependencies
# =============================================================================


def bearer_credential(
    authorization: str | None = Header(default=None, alias="Authorization"),
) -> Credential | None:
    """
    Dependency returning the caller's credential, or None for anonymous callers.

    A present but invalid JWT is an error rather than anonymity.
    """
    token = get_bearer_token(authorization)
    if token is None:
        return None
    return resolve_credential(token)


def require_credential(
    authorization: str | None = Header(default=None, alias="Authorization"),
) -> Credential:
    """Dependency that demands a usable bearer credential (401 otherwise)."""
    credential = bearer_credential(authorization)
    if credential is None:
        raise AuthenticationError()
    return credential

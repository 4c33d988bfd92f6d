"""
Security module: bearer credentials and rate limiting.
"""

from tipsy_shared.security.auth import (
    Credential,
    get_bearer_token,
    bearer_credential,
    require_credential,
    sign_jwt,
    verify_jwt,
)
from tipsy_shared.security.rate_limit import limiter, PUBLIC_WRITE_LIMIT

__all__ = [
    "Credential",
    "get_bearer_token",
    "bearer_credential",
    "require_credential",
    "sign_jwt",
    "verify_jwt",
    "limiter",
    "PUBLIC_WRITE_LIMIT",
]

"""
Utilities module: Exceptions, validators, schemas.
"""

from tipsy_shared.utils.exceptions import (
    AppException,
    AuthenticationError,
    NotFoundError,
    ForbiddenError,
    ValidationError,
    ConflictError,
)
from tipsy_shared.utils.validators import (
    parse_body,
    reject_identity_fields,
    escape_like_pattern,
)
from tipsy_shared.utils.schemas import ErrorResponse

__all__ = [
    # exceptions
    "AppException",
    "AuthenticationError",
    "NotFoundError",
    "ForbiddenError",
    "ValidationError",
    "ConflictError",
    # validators
    "parse_body",
    "reject_identity_fields",
    "escape_like_pattern",
    # schemas
    "ErrorResponse",
]

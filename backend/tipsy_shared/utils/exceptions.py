"""
Centralized HTTP exceptions for consistent error handling.

Every exception carries an HTTP status, a human readable message and a
machine readable code. The application boundary turns them into the
``{"error": ..., "code": ...}`` envelope.

Usage:
    from tipsy_shared.utils.exceptions import NotFoundError, ForbiddenError, ValidationError

    raise NotFoundError("Restaurant", restaurant_id)
    raise ForbiddenError("moderate this review")
    raise ValidationError("Rating must be between 1 and 5", code="INVALID_RATING")
"""

from typing import Any

from fastapi import HTTPException, status

from tipsy_shared.config.logging import get_logger

logger = get_logger(__name__)


class AppException(HTTPException):
    """
    Base exception with automatic logging.

    All custom exceptions should inherit from this class
    to ensure consistent logging and response format.
    """

    default_code = "ERROR"

    def __init__(
        self,
        status_code: int,
        detail: str,
        code: str | None = None,
        log_level: str = "warning",
        headers: dict[str, str] | None = None,
        **log_context: Any,
    ):
        self.code = code or self.default_code

        log_fn = getattr(logger, log_level, logger.warning)
        log_fn(detail, status_code=status_code, code=self.code, **log_context)

        super().__init__(status_code=status_code, detail=detail, headers=headers)

    def __str__(self) -> str:
        return self.detail


# =============================================================================
# 401 Unauthorized Errors
# =============================================================================


class AuthenticationError(AppException):
    """
    Missing or unusable bearer credential (401).

    Usage:
        raise AuthenticationError()
        raise AuthenticationError("Invalid token", code="INVALID_TOKEN")
    """

    default_code = "AUTHENTICATION_REQUIRED"

    def __init__(
        self,
        detail: str = "Authentication required",
        code: str | None = None,
        **log_context: Any,
    ):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            code=code,
            log_level="info",
            headers={"WWW-Authenticate": "Bearer"},
            **log_context,
        )


# =============================================================================
# 404 Not Found Errors
# =============================================================================


class NotFoundError(AppException):
    """
    Entity not found error (404).

    The code defaults to ``<ENTITY>_NOT_FOUND``.

    Usage:
        raise NotFoundError("Restaurant", 123)
        raise NotFoundError("QR slug", slug, code="INVALID_QR_SLUG")
    """

    def __init__(
        self,
        entity: str,
        entity_id: int | str | None = None,
        code: str | None = None,
        **log_context: Any,
    ):
        if entity_id is not None:
            detail = f"{entity} {entity_id} not found"
        else:
            detail = f"{entity} not found"

        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=detail,
            code=code or f"{entity.upper().replace(' ', '_')}_NOT_FOUND",
            log_level="warning",
            entity=entity,
            entity_id=entity_id,
            **log_context,
        )


# =============================================================================
# 403 Forbidden Errors
# =============================================================================


class ForbiddenError(AppException):
    """
    Ownership/permission error (403).

    Usage:
        raise ForbiddenError("update this restaurant")
        raise ForbiddenError("invite staff", code="PERMISSION_DENIED", user_id=user_id)
    """

    default_code = "ACCESS_DENIED"

    def __init__(self, action: str | None = None, code: str | None = None, **log_context: Any):
        if action:
            detail = f"Not authorized to {action}"
        else:
            detail = "Access denied"

        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=detail,
            code=code,
            log_level="warning",
            action=action,
            **log_context,
        )


class InsufficientRoleError(ForbiddenError):
    """User doesn't have the required role."""

    default_code = "INSUFFICIENT_PERMISSIONS"

    def __init__(self, required_roles: list[str], **log_context: Any):
        roles_str = ", ".join(required_roles)
        super().__init__(
            f"perform this action (requires role: {roles_str})",
            required_roles=required_roles,
            **log_context,
        )


# =============================================================================
# 400 Bad Request Errors
# =============================================================================


class ValidationError(AppException):
    """
    Input validation error (400).

    Usage:
        raise ValidationError("amount_cents must be a positive integer", code="INVALID_AMOUNT")
        raise ValidationError("No fields to update", code="NO_UPDATES")
    """

    default_code = "INVALID_REQUEST"

    def __init__(self, detail: str, code: str | None = None, **log_context: Any):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
            code=code,
            log_level="warning",
            **log_context,
        )


class IdentityFieldError(ValidationError):
    """A caller tried to set an identity or ownership field through the body."""

    default_code = "USER_ID_NOT_ALLOWED"

    def __init__(self, field: str, code: str | None = None, **log_context: Any):
        super().__init__(
            f"Field '{field}' cannot be provided in the request body",
            code=code,
            field=field,
            **log_context,
        )


# =============================================================================
# 409 Conflict Errors
# =============================================================================


class ConflictError(AppException):
    """
    Resource conflict error (409).

    Usage:
        raise ConflictError("Feature key already exists")
    """

    default_code = "CONFLICT"

    def __init__(self, detail: str, code: str | None = None, **log_context: Any):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            detail=detail,
            code=code,
            log_level="warning",
            **log_context,
        )


class DuplicateEntityError(ConflictError):
    """Entity already exists."""

    def __init__(
        self,
        entity: str,
        identifier: str | None = None,
        code: str | None = None,
        **log_context: Any,
    ):
        if identifier:
            detail = f"{entity} '{identifier}' already exists"
        else:
            detail = f"{entity} already exists"

        super().__init__(
            detail,
            code=code or f"DUPLICATE_{entity.upper().replace(' ', '_')}",
            entity=entity,
            identifier=identifier,
            **log_context,
        )


class InvalidTransitionError(ConflictError):
    """Invalid status transition."""

    default_code = "INVALID_TRANSITION"

    def __init__(
        self,
        entity: str,
        from_status: str,
        to_status: str,
        code: str | None = None,
        **log_context: Any,
    ):
        detail = f"{entity} cannot move from '{from_status}' to '{to_status}'"
        super().__init__(
            detail,
            code=code,
            entity=entity,
            from_status=from_status,
            to_status=to_status,
            **log_context,
        )


# =============================================================================
# 500 Internal Server Errors
# =============================================================================


class InternalError(AppException):
    """
    Internal server error (500).

    Usage:
        raise InternalError(operation="submit tip")
    """

    default_code = "INTERNAL_ERROR"

    def __init__(self, detail: str = "Internal server error", **log_context: Any):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=detail,
            log_level="error",
            **log_context,
        )

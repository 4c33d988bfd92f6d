"""
Shared validators for request bodies and user supplied values.

Mutation bodies are read as plain JSON objects so that identity fields can be
rejected before any schema validation runs, then parsed into Pydantic models.
Pydantic errors are translated into field specific codes
(``MISSING_<FIELD>`` / ``INVALID_<FIELD>`` unless overridden).
"""

import re
from collections.abc import Iterable, Mapping
from typing import Any, TypeVar
from urllib.parse import urlparse

from pydantic import AliasChoices, BaseModel
from pydantic import ValidationError as PydanticValidationError

from tipsy_shared.config.constants import Limits
from tipsy_shared.utils.exceptions import IdentityFieldError, ValidationError

ModelT = TypeVar("ModelT", bound=BaseModel)

# Blocked internal hosts for user supplied URLs (SSRF prevention)
BLOCKED_HOSTS = [
    "localhost",
    "127.0.0.1",
    "0.0.0.0",
    "10.",
    "192.168.",
    "169.254.",
    "[::1]",
    "metadata.google",
]

BLOCKED_SCHEMES = {"javascript", "data", "file", "ftp", "mailto", "tel"}

PHONE_PATTERN = re.compile(r"^\+?[0-9][0-9\s\-()]{6,19}$")
EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
UPI_HANDLE_PATTERN = re.compile(r"^[A-Za-z0-9._-]{2,256}@[A-Za-z][A-Za-z0-9.-]{1,63}$")
ROLE_IN_RESTAURANT_PATTERN = re.compile(r"^[a-z][a-z _-]*$")


# =============================================================================
# Body handling
# =============================================================================


def require_object(body: Any) -> Mapping[str, Any]:
    """Ensure the decoded JSON body is an object."""
    if not isinstance(body, Mapping):
        raise ValidationError("Request body must be a JSON object", code="INVALID_BODY_FORMAT")
    return body


def reject_identity_fields(
    body: Mapping[str, Any],
    fields: Iterable[str],
    code: str = "USER_ID_NOT_ALLOWED",
) -> None:
    """
    Reject caller supplied identity/ownership fields.

    Must run before any other validation of the body so that a request that
    tries to impersonate another user is refused regardless of its other fields.
    """
    for field in fields:
        if field in body:
            raise IdentityFieldError(field, code=code)


def _field_name(schema: type[BaseModel], loc_item: Any) -> str:
    """Map an error location (field name or alias) back to the model field name."""
    for name, field in schema.model_fields.items():
        if loc_item == name or loc_item == field.alias:
            return name
        alias = field.validation_alias
        if isinstance(alias, str) and alias == loc_item:
            return name
        if isinstance(alias, AliasChoices) and loc_item in alias.choices:
            return name
    return str(loc_item)


def parse_body(
    schema: type[ModelT],
    body: Any,
    codes: Mapping[str, str] | None = None,
) -> ModelT:
    """
    Validate a JSON object against a Pydantic schema.

    The first failing field (in declaration order) determines the error code.
    ``codes`` maps field names to a code used for every failure of that field.
    """
    data = require_object(body)
    try:
        return schema.model_validate(data)
    except PydanticValidationError as exc:
        error = exc.errors()[0]
        loc = error.get("loc") or ("body",)
        field = _field_name(schema, loc[0])
        missing = error.get("type") == "missing"

        code = (codes or {}).get(field)
        if code is None:
            prefix = "MISSING" if missing else "INVALID"
            code = f"{prefix}_{field.upper()}"

        if missing:
            message = f"Field '{field}' is required"
        else:
            message = f"Invalid value for '{field}': {error.get('msg', 'invalid')}"
        raise ValidationError(message, code=code, field=field) from None


# =============================================================================
# Value validators (raise ValueError, used inside Pydantic validators)
# =============================================================================


def validate_redirect_url(url: str | None) -> str | None:
    """
    Validate an http(s) URL supplied for browser redirects.

    Returns None for empty values.

    Raises:
        ValueError: If the URL is too long, malformed or not http(s).
    """
    if url is None:
        return None

    url = url.strip()
    if not url:
        return None

    if len(url) > Limits.MAX_URL_LENGTH:
        raise ValueError(f"URL too long (max {Limits.MAX_URL_LENGTH} characters)")

    parsed = urlparse(url)
    scheme = parsed.scheme.lower()
    if scheme in BLOCKED_SCHEMES or scheme not in ("http", "https"):
        raise ValueError("Only http and https URLs are allowed")

    if not parsed.netloc:
        raise ValueError("URL has no host")

    return url


def validate_image_url(url: str | None) -> str | None:
    """
    Validate an avatar image URL.

    Same rules as redirect URLs, and internal hosts are refused
    since other clients will fetch the image.
    """
    url = validate_redirect_url(url)
    if url is None:
        return None

    host = urlparse(url).netloc.lower()
    for blocked in BLOCKED_HOSTS:
        if host.startswith(blocked):
            raise ValueError("Internal URLs are not allowed")

    return url


def validate_phone(phone: str | None) -> str | None:
    """Accept international style phone numbers such as +91-9876543210."""
    if phone is None:
        return None
    phone = phone.strip()
    if not phone:
        return None
    if not PHONE_PATTERN.match(phone):
        raise ValueError("Phone number must contain 7 to 20 digits")
    return phone


def validate_upi_handle(handle: str | None) -> str | None:
    """UPI virtual payment addresses look like ``name@bank``."""
    if handle is None:
        return None
    handle = handle.strip()
    if not handle:
        return None
    if not UPI_HANDLE_PATTERN.match(handle):
        raise ValueError("UPI handle must look like name@bank")
    return handle


def normalize_email(email: str) -> str:
    """Trim and lowercase an email address, rejecting obviously malformed ones."""
    email = email.strip().lower()
    if not EMAIL_PATTERN.match(email):
        raise ValueError("Invalid email format")
    return email


def normalize_role_in_restaurant(role: str) -> str:
    """Free-form job titles ("server", "bartender") stored lowercase."""
    role = role.strip().lower()
    if not role or len(role) > Limits.MAX_ROLE_LENGTH:
        raise ValueError(f"Role must be 1-{Limits.MAX_ROLE_LENGTH} characters")
    if not ROLE_IN_RESTAURANT_PATTERN.match(role):
        raise ValueError("Role may only contain letters, spaces, '-' and '_'")
    return role


def clean_optional_text(value: str | None) -> str | None:
    """Trim text, turning blank strings into None."""
    if value is None:
        return None
    value = value.strip()
    return value or None


def escape_like_pattern(value: str) -> str:
    """
    Escape special characters in LIKE patterns.

    SQL LIKE uses % and _ as wildcards; escape them so user input
    is matched literally.
    """
    if not value:
        return value

    value = value.replace("\\", "\\\\")
    value = value.replace("%", "\\%")
    value = value.replace("_", "\\_")
    return value


def sanitize_search_term(term: str | None, max_length: int = 100) -> str:
    """Trim, truncate and strip control characters from a search term."""
    if not term:
        return ""

    term = term.strip()[:max_length]
    return re.sub(r"[\x00-\x1f\x7f-\x9f]", "", term)

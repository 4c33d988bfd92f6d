"""
Shared module for cross-cutting concerns used by the TIPSY REST API.

STRUCTURE:
- tipsy_shared.config: Configuration
  - settings.py: Environment config (pydantic-settings)
  - logging.py: Structured logging, audit helpers
  - constants.py: Roles, review/staff statuses, notification types, limits

- tipsy_shared.infrastructure: Database and request context
  - db.py: SQLAlchemy sessions, safe_commit()
  - correlation.py: X-Request-ID propagation into logs

- tipsy_shared.security: Caller identity and abuse protection
  - auth.py: Bearer credential extraction, JWT verification
  - rate_limit.py: slowapi limiter for public write endpoints

- tipsy_shared.utils: Utilities
  - exceptions.py: HTTP exceptions with machine codes and auto-logging
  - validators.py: Body parsing, identity-field rejection, URL checks
  - schemas.py: Base request/output models and shared refs
  - tipping_schemas.py: Tips, reviews, worker pages and profiles
  - venue_schemas.py: Restaurants, staff, invitations
  - account_schemas.py: Users, notifications, feature flags, payment links

IMPORT EXAMPLES:
    from tipsy_shared.infrastructure.db import get_db, safe_commit
    from tipsy_shared.config.settings import settings
    from tipsy_shared.config.constants import Roles, ReviewStatus
    from tipsy_shared.utils.exceptions import NotFoundError, ForbiddenError
    from tipsy_shared.utils.validators import parse_body, reject_identity_fields
"""

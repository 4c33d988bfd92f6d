"""
Rate limiting for unauthenticated write endpoints using slowapi.

Tips and reviews can be posted by anyone holding a QR code, so they are
limited per client IP.

Usage:
    from tipsy_shared.security.rate_limit import limiter, PUBLIC_WRITE_LIMIT

    @router.post("/tips")
    @limiter.limit(PUBLIC_WRITE_LIMIT)
    def submit_tip(request: Request, ...):
        ...
"""

from fastapi import Request
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from tipsy_shared.config.logging import security_audit_logger
from tipsy_shared.config.settings import settings

# Limiter instance keyed by client IP
limiter = Limiter(key_func=get_remote_address, enabled=settings.rate_limit_enabled)

PUBLIC_WRITE_LIMIT = settings.public_write_rate_limit


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """Return the standard error envelope for rate limited requests."""
    security_audit_logger.warning(
        "RATE_LIMIT_AUDIT: public write",
        path=request.url.path,
        ip_address=get_remote_address(request),
        limit=str(exc.detail),
    )
    return JSONResponse(
        status_code=429,
        content={
            "error": f"Rate limit exceeded: {exc.detail}",
            "code": "RATE_LIMITED",
        },
        headers={"Retry-After": "60"},
    )

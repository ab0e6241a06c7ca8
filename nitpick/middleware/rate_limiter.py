"""
Rate limiting middleware using slowapi.
Protects against abuse with configurable limits per endpoint.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from fastapi import Request, Response
from fastapi.responses import JSONResponse

from nitpick.config import get_settings

settings = get_settings()


def get_user_identifier(request: Request) -> str:
    """
    Get a unique identifier for rate limiting.
    Uses the bearer token if present, otherwise falls back to IP address.
    """
    auth_header = request.headers.get("authorization", "")
    if auth_header.startswith("Bearer "):
        return f"token:{hash(auth_header[7:])}"

    return f"ip:{get_remote_address(request)}"


# Uses in-memory storage by default, or Redis if configured
limiter = Limiter(
    key_func=get_user_identifier,
    storage_uri=settings.redis_url or "memory://",
    enabled=settings.rate_limit_enabled,
)


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> Response:
    """Custom handler for rate limit exceeded errors."""
    limit_value = str(exc.detail) if hasattr(exc, "detail") else "Rate limit exceeded"

    return JSONResponse(
        status_code=429,
        content={
            "error": "rate_limit_exceeded",
            "message": "Too many requests. Please slow down.",
            "detail": limit_value,
        },
        headers={"X-RateLimit-Limit": limit_value},
    )


def submissions_limit() -> str:
    """Get rate limit string for submission creation."""
    return f"{settings.rate_limit_submissions_per_hour}/hour"


def likes_limit() -> str:
    """Get rate limit string for like/unlike."""
    return f"{settings.rate_limit_likes_per_minute}/minute"

"""
Middleware for the submission review API.
"""

from nitpick.middleware.rate_limiter import limiter, rate_limit_exceeded_handler

__all__ = ["limiter", "rate_limit_exceeded_handler"]

"""
Authentication helpers.
"""

from nitpick.auth.jwt_handler import (
    create_access_token,
    verify_token,
    get_current_user,
)

__all__ = [
    "create_access_token",
    "verify_token",
    "get_current_user",
]

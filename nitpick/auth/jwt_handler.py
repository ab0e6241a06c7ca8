"""
JWT token creation and verification.
"""

import logging
from datetime import datetime, timedelta
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError, jwt
from sqlalchemy.orm import Session

from nitpick.config import get_settings
from nitpick.database import get_db
from nitpick.models.user import User

logger = logging.getLogger(__name__)

settings = get_settings()

DEMO_USERNAME = "demo"


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """
    Create a JWT access token.

    Args:
        data: Payload data to encode in the token
        expires_delta: Optional custom expiration time

    Returns:
        Encoded JWT token string
    """
    to_encode = data.copy()

    if expires_delta:
        expire = datetime.utcnow() + expires_delta
    else:
        expire = datetime.utcnow() + timedelta(minutes=settings.jwt_expire_minutes)

    to_encode.update({"exp": expire})
    return jwt.encode(
        to_encode,
        settings.jwt_secret_key,
        algorithm=settings.jwt_algorithm
    )


def verify_token(token: str) -> Optional[dict]:
    """
    Verify and decode a JWT token.

    Returns:
        Decoded token payload or None if invalid
    """
    try:
        return jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm]
        )
    except JWTError as e:
        logger.info(f"Token verification failed: {e}")
        return None


def _user_id_from_token(token: str) -> Optional[int]:
    payload = verify_token(token)
    if payload is None:
        return None
    try:
        return int(payload.get("sub"))
    except (ValueError, TypeError):
        return None


def get_or_create_demo_user(db: Session) -> User:
    """Get or create a demo user for demo mode."""
    demo_user = db.query(User).filter(User.username == DEMO_USERNAME).first()
    if not demo_user:
        demo_user = User(username=DEMO_USERNAME, email="demo@example.com")
        db.add(demo_user)
        db.commit()
        db.refresh(demo_user)
    return demo_user


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(
        HTTPBearer(auto_error=False)
    ),
    db: Session = Depends(get_db)
) -> User:
    """
    FastAPI dependency to get the current authenticated user.
    In demo mode, returns a demo user without requiring authentication.

    Raises:
        HTTPException: If token is invalid or user not found (only in non-demo mode)
    """
    if settings.demo_mode:
        return get_or_create_demo_user(db)

    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    if credentials is None:
        raise credentials_exception

    user_id = _user_id_from_token(credentials.credentials)
    if user_id is None:
        raise credentials_exception

    user = db.query(User).filter(User.id == user_id).first()
    if user is None:
        logger.info(f"Token references unknown user id={user_id}")
        raise credentials_exception
    return user


"""
Authentication Utility - JWT and Password handling.

Provides:
- Password hashing with passlib (pbkdf2_sha256)
- JWT token creation/verification
- FastAPI dependency for protected routes

Every protected route resolves the bearer credential BEFORE any rate-limit
check or business logic runs.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy import select
from sqlalchemy.orm import Session

from resumeflow.core.config import Settings, get_settings
from resumeflow.core.errors import AuthenticationError, AuthorizationError
from resumeflow.db.postgres import get_db
from resumeflow.db.schema import users

# Password hashing
pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

# Bearer token extractor - errors are raised by us so a missing header is a 401
bearer_scheme = HTTPBearer(auto_error=False)


def hash_password(password: str) -> str:
    """Hash password."""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify password against hash."""
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(data: dict, settings: Settings, expires_delta: Optional[timedelta] = None) -> str:
    """Create JWT access token."""
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=settings.jwt_expire_minutes))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_token(token: str, settings: Settings) -> Optional[dict]:
    """Decode and verify JWT token."""
    try:
        return jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings)
) -> dict:
    """
    FastAPI dependency - Get current authenticated user.

    Usage:
        @router.get("/protected")
        def route(user: dict = Depends(get_current_user)):
            return user
    """
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("Missing authorization header")

    payload = decode_token(credentials.credentials, settings)
    if not payload:
        raise AuthenticationError()

    user_id = payload.get("sub")
    if not user_id:
        raise AuthenticationError()

    try:
        user_id = int(user_id)
    except (TypeError, ValueError):
        raise AuthenticationError()

    # Verify user exists
    user = db.execute(
        select(users.c.user_id, users.c.email, users.c.role, users.c.is_active)
        .where(users.c.user_id == user_id)
    ).fetchone()

    if not user:
        raise AuthenticationError()

    if not user.is_active:
        raise AuthorizationError("Account deactivated")

    return {"user_id": user.user_id, "email": user.email, "role": user.role}


def is_admin(user: dict) -> bool:
    return user.get("role") == "admin"

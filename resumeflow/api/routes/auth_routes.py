"""
Authentication Routes

POST /auth/register - Register new user
POST /auth/login - Login and get JWT token
GET /auth/me - Get current user info
"""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import insert, select
from sqlalchemy.orm import Session

from resumeflow.core.auth import create_access_token, get_current_user, hash_password, verify_password
from resumeflow.core.config import Settings, get_settings
from resumeflow.db.postgres import get_db
from resumeflow.db.schema import users
from resumeflow.schemas.schemas import (
    LoginRequest, MessageResponse, RegisterRequest, TokenResponse, UserResponse, UserRole
)

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/register", response_model=MessageResponse, status_code=201)
def register(request: RegisterRequest, db: Session = Depends(get_db)):
    """
    Register a new user account.

    After registration, login to get access token.
    Admin accounts cannot be self-registered.
    """
    if request.role == UserRole.admin:
        raise HTTPException(status_code=403, detail="Admin accounts cannot be self-registered")

    existing = db.execute(select(users.c.user_id).where(users.c.email == request.email)).fetchone()
    if existing:
        raise HTTPException(status_code=400, detail="Email already registered")

    db.execute(
        insert(users).values(
            email=request.email,
            password_hash=hash_password(request.password),
            role=request.role.value,
            is_active=True
        )
    )
    db.commit()

    return MessageResponse(message=f"Registered successfully as {request.role.value}. Please login.")


@router.post("/login", response_model=TokenResponse)
def login(request: LoginRequest, db: Session = Depends(get_db), settings: Settings = Depends(get_settings)):
    """
    Login and receive JWT access token.

    Include token in requests: Authorization: Bearer <token>
    """
    user = db.execute(
        select(users.c.user_id, users.c.password_hash, users.c.role, users.c.is_active)
        .where(users.c.email == request.email)
    ).fetchone()

    if not user:
        raise HTTPException(status_code=401, detail="Invalid email or password")

    if not user.is_active:
        raise HTTPException(status_code=403, detail="Account deactivated")

    if not verify_password(request.password, user.password_hash):
        raise HTTPException(status_code=401, detail="Invalid email or password")

    token = create_access_token(data={"sub": str(user.user_id), "role": user.role}, settings=settings)

    return TokenResponse(access_token=token, user_id=user.user_id, role=user.role)


@router.get("/me", response_model=UserResponse)
def get_me(user: dict = Depends(get_current_user), db: Session = Depends(get_db)):
    """Get current authenticated user's info."""
    row = db.execute(
        select(users.c.user_id, users.c.email, users.c.role, users.c.is_active, users.c.created_at)
        .where(users.c.user_id == user["user_id"])
    ).fetchone()

    return UserResponse(
        user_id=row.user_id, email=row.email, role=row.role, is_active=row.is_active, created_at=row.created_at
    )

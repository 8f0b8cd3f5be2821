"""Authentication router for creator registration, login, and token management."""
import logging
from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from app.database import get_db
from app.config import settings
from app.models.user import User
from app.rate_limit import limiter
from app.schemas.auth import UserRegister, UserLogin, Token, UserResponse, RefreshTokenRequest, RegisterResponse
from app.auth.security import hash_password, verify_password, create_access_token, create_refresh_token, decode_token
from app.auth.dependencies import get_current_active_user
from app.services.email_service import EmailService

logger = logging.getLogger(__name__)

router = APIRouter()


def _tokens_for(user: User) -> dict:
    claims = {"sub": user.uuid, "email": user.email, "role": user.user_role}
    return {
        "access_token": create_access_token(data=claims),
        "refresh_token": create_refresh_token(data=claims),
        "token_type": "bearer",
    }


@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(settings.RATE_LIMIT_AUTH)
async def register(request: Request, user_data: UserRegister, db: AsyncSession = Depends(get_db)):
    """
    Register a new creator.

    - Checks email uniqueness
    - Hashes password with bcrypt
    - Creates an unapproved creator (an admin must approve before uploads)
    - Returns JWT tokens
    """
    email = user_data.email.lower()
    result = await db.execute(select(User).where(User.email == email))
    if result.scalar_one_or_none():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email already registered"
        )

    new_user = User(
        name=user_data.name,
        email=email,
        password_hash=hash_password(user_data.password),
        vendor=user_data.vendor or user_data.name,
        country=user_data.country,
        status="active",
        user_role="creator",
        approved=False,
        currency=settings.DEFAULT_CREATOR_CURRENCY,
    )
    db.add(new_user)
    await db.commit()
    await db.refresh(new_user)
    logger.info(f"Registered creator {new_user.uuid} ({new_user.email})")

    EmailService.send_welcome_email(new_user)

    return {"user": new_user, **_tokens_for(new_user)}


@router.post("/login", response_model=Token)
@limiter.limit(settings.RATE_LIMIT_AUTH)
async def login(request: Request, credentials: UserLogin, db: AsyncSession = Depends(get_db)):
    """
    Login with email and password.

    - Validates credentials
    - Returns JWT access + refresh tokens
    """
    result = await db.execute(select(User).where(User.email == credentials.email.lower()))
    user = result.scalar_one_or_none()

    if not user or not verify_password(credentials.password, user.password_hash):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password"
        )

    if user.status != "active":
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User account is not active"
        )

    return _tokens_for(user)


@router.post("/refresh", response_model=Token)
async def refresh(request: RefreshTokenRequest, db: AsyncSession = Depends(get_db)):
    """Exchange a refresh token for a new token pair."""
    payload = decode_token(request.refresh_token, expected_type="refresh")
    if payload is None or not payload.get("sub"):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired refresh token"
        )

    # Fetch user to verify they still exist
    result = await db.execute(select(User).where(User.uuid == payload["sub"]))
    user = result.scalar_one_or_none()

    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found"
        )

    return _tokens_for(user)


@router.get("/me", response_model=UserResponse)
async def get_current_user_profile(current_user: User = Depends(get_current_active_user)):
    """Current account."""
    return current_user

"""FastAPI dependencies for authentication and authorization."""
import logging
import secrets
from typing import Optional
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from app.config import settings
from app.database import get_db
from app.models.user import User
from app.auth.security import decode_token

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


async def _user_from_token(token: str, db: AsyncSession) -> Optional[User]:
    payload = decode_token(token, expected_type="access")
    if payload is None or payload.get("sub") is None:
        return None
    result = await db.execute(select(User).where(User.uuid == payload["sub"]))
    return result.scalar_one_or_none()


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: AsyncSession = Depends(get_db)
) -> User:
    """
    FastAPI dependency to extract and validate the current user from JWT Bearer token.
    Raises HTTPException if token is invalid or user not found.
    """
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    payload = decode_token(credentials.credentials, expected_type="access")
    if payload is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user_id: str = payload.get("sub")
    if user_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    result = await db.execute(select(User).where(User.uuid == user_id))
    user = result.scalar_one_or_none()

    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return user


async def get_optional_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: AsyncSession = Depends(get_db)
) -> Optional[User]:
    """Like get_current_user, but anonymous requests resolve to None."""
    if credentials is None:
        return None
    return await _user_from_token(credentials.credentials, db)


async def get_current_active_user(current_user: User = Depends(get_current_user)) -> User:
    """
    FastAPI dependency to ensure the current user is active.
    Raises HTTPException if user status is not "active".
    """
    if current_user.status != "active":
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User account is not active"
        )
    return current_user


async def approved_creator_required(current_user: User = Depends(get_current_active_user)) -> User:
    """
    FastAPI dependency for creator-only actions that need admin approval first.
    Admins pass through.
    """
    if current_user.is_admin:
        return current_user
    if current_user.user_role != "creator":
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Creator access required"
        )
    if not current_user.approved:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Creator account is pending approval"
        )
    return current_user


async def admin_required(current_user: User = Depends(get_current_active_user)) -> User:
    """
    FastAPI dependency to ensure the current user has admin role.
    Raises HTTPException if user_role is not "admin".
    """
    if not current_user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required"
        )
    return current_user


async def cron_or_admin_required(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: AsyncSession = Depends(get_db)
) -> Optional[User]:
    """
    Gate for the payout job endpoint.

    Accepts the configured CRON_API_KEY as a bearer token (returns None, the
    system actor) or an admin access token (returns the admin). Outside
    production an unauthenticated call is allowed when no key is configured.
    """
    if credentials is None:
        if settings.ENVIRONMENT != "production" and not settings.CRON_API_KEY:
            return None
        logger.warning("Unauthorized access attempt to payout job")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
            headers={"WWW-Authenticate": "Bearer"},
        )

    token = credentials.credentials
    if settings.CRON_API_KEY and secrets.compare_digest(token, settings.CRON_API_KEY):
        return None

    user = await _user_from_token(token, db)
    if user is None:
        logger.warning("Unauthorized access attempt to payout job")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
            headers={"WWW-Authenticate": "Bearer"},
        )
    if not user.is_admin or user.status != "active":
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required"
        )
    return user

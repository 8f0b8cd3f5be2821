"""Creator self-service endpoints for profile and payout details."""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from app.database import get_db
from app.models.poster import Poster
from app.models.user import User
from app.schemas.posters import PosterResponse
from app.schemas.users import ProfileResponse, ProfileUpdate
from app.auth.dependencies import get_current_active_user

router = APIRouter()


@router.get("/profile", response_model=ProfileResponse)
async def get_profile(current_user: User = Depends(get_current_active_user)):
    """Get current creator's profile, including payout details."""
    return current_user


@router.patch("/profile", response_model=ProfileResponse)
async def update_profile(
    profile_update: ProfileUpdate,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Update current creator's profile.

    - Only fields present in the request are changed
    - Currency drives dashboards and future payouts; existing payouts keep theirs
    """
    for field, value in profile_update.model_dump(exclude_unset=True).items():
        setattr(current_user, field, value)

    db.add(current_user)
    await db.commit()
    await db.refresh(current_user)

    return current_user


@router.get("/posters", response_model=list[PosterResponse])
async def list_my_posters(
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db)
):
    """Current creator's posters, newest first."""
    result = await db.execute(
        select(Poster)
        .where(Poster.creator_id == current_user.uuid)
        .order_by(Poster.upload_date.desc())
    )
    return result.scalars().all()

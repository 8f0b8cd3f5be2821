"""Poster submission endpoints for creators."""
import logging
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from app.database import get_db
from app.models.poster import Poster
from app.models.user import User
from app.schemas.posters import PosterCreate, PosterResponse
from app.auth.dependencies import approved_creator_required, get_current_active_user

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("", response_model=PosterResponse, status_code=status.HTTP_201_CREATED)
async def create_poster(
    poster_data: PosterCreate,
    current_user: User = Depends(approved_creator_required),
    db: AsyncSession = Depends(get_db)
):
    """Submit a poster for review. New posters start as ``pending``."""
    poster = Poster(
        title=poster_data.title,
        description=poster_data.description,
        drive_link=poster_data.drive_link,
        image_urls=poster_data.image_urls,
        selected_sizes=poster_data.selected_sizes,
        prices={size: poster_data.prices[size] for size in poster_data.selected_sizes},
        status="pending",
        creator_id=current_user.uuid,
    )
    db.add(poster)
    await db.commit()
    await db.refresh(poster)
    logger.info(f"Poster {poster.uuid} submitted by creator {current_user.uuid}")

    return poster


@router.get("", response_model=list[PosterResponse])
async def list_posters(
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db)
):
    """List the current creator's posters."""
    result = await db.execute(
        select(Poster)
        .where(Poster.creator_id == current_user.uuid)
        .order_by(Poster.upload_date.desc())
    )
    return result.scalars().all()


@router.delete("/{poster_id}", response_model=PosterResponse)
async def request_poster_deletion(
    poster_id: str,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Ask for a poster to be taken down.

    The poster is only marked ``willBeDeleted``; an admin removes it from the
    shop and deletes it.
    """
    result = await db.execute(
        select(Poster).where(Poster.uuid == poster_id, Poster.creator_id == current_user.uuid)
    )
    poster = result.scalar_one_or_none()

    if not poster:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Poster not found"
        )

    poster.status = "willBeDeleted"
    await db.commit()
    await db.refresh(poster)

    return poster

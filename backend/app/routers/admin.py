"""Admin back office: creator approval, poster moderation, payouts and support."""
import logging
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from sqlalchemy.orm import selectinload

from app.database import get_db
from app.models.payout import Payout
from app.models.poster import Poster
from app.models.support_message import SupportMessage
from app.models.user import User
from app.schemas.admin import AdminDashboardResponse, CreatorApprovalUpdate
from app.schemas.payouts import PayoutResponse, PayoutStatusUpdate
from app.schemas.posters import AdminPosterResponse, AdminPosterUpdate
from app.schemas.support import SupportMessageResponse, SupportStatusUpdate
from app.schemas.users import ProfileResponse
from app.auth.dependencies import admin_required
from app.services.email_service import EmailService
from app.services.payout_ledger import PayoutLedger

logger = logging.getLogger(__name__)

router = APIRouter()


async def _count(db: AsyncSession, model, *conditions) -> int:
    result = await db.execute(select(func.count()).select_from(model).where(*conditions))
    return result.scalar_one()


@router.get("/creators", response_model=list[ProfileResponse])
async def list_creators(
    approved: Optional[bool] = Query(None),
    current_user: User = Depends(admin_required),
    db: AsyncSession = Depends(get_db)
):
    """List creators, newest first, optionally filtered by approval."""
    query = select(User).where(User.user_role == "creator")
    if approved is not None:
        # Unset approval counts as pending
        query = query.where(User.approved.is_(True) if approved else User.approved.isnot(True))
    result = await db.execute(query.order_by(User.created_at.desc()))
    return result.scalars().all()


@router.patch("/creators", response_model=ProfileResponse)
async def update_creator_approval(
    update: CreatorApprovalUpdate,
    current_user: User = Depends(admin_required),
    db: AsyncSession = Depends(get_db)
):
    """Approve or revoke a creator. Newly approved creators get an email."""
    result = await db.execute(
        select(User).where(User.uuid == update.creator_id, User.user_role == "creator")
    )
    creator = result.scalar_one_or_none()

    if not creator:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Creator not found"
        )

    newly_approved = update.status and not creator.approved
    creator.approved = update.status
    await db.commit()
    await db.refresh(creator)
    logger.info(f"Creator {creator.uuid} approval set to {update.status} by {current_user.uuid}")

    if newly_approved:
        EmailService.send_creator_approved_email(creator)

    return creator


@router.get("/posters", response_model=list[AdminPosterResponse])
async def list_all_posters(
    poster_status: Optional[str] = Query(None, alias="status"),
    current_user: User = Depends(admin_required),
    db: AsyncSession = Depends(get_db)
):
    """All posters with creator names, newest first."""
    query = select(Poster).options(selectinload(Poster.creator))
    if poster_status:
        query = query.where(Poster.status == poster_status)
    result = await db.execute(query.order_by(Poster.upload_date.desc()))

    items = []
    for poster in result.scalars().all():
        item = AdminPosterResponse.model_validate(poster)
        if poster.creator:
            item.creator_name = poster.creator.name
        items.append(item)
    return items


@router.patch("/posters", response_model=AdminPosterResponse)
async def update_poster(
    update: AdminPosterUpdate,
    current_user: User = Depends(admin_required),
    db: AsyncSession = Depends(get_db)
):
    """
    Moderate a poster.

    - ``status`` approves, rejects or re-queues the poster
    - ``shopify_product_id``/``shopify_url`` link it to the shop product; only
      approved, linked posters count towards payouts
    """
    result = await db.execute(
        select(Poster).options(selectinload(Poster.creator)).where(Poster.uuid == update.poster_id)
    )
    poster = result.scalar_one_or_none()

    if not poster:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Poster not found"
        )

    creator_name = poster.creator.name if poster.creator else None
    changes = update.model_dump(exclude_unset=True, exclude={"poster_id"})
    for field, value in changes.items():
        if field == "status":
            if value:
                poster.status = value
        else:
            # An empty string unlinks the product
            setattr(poster, field, value or None)
    await db.commit()
    await db.refresh(poster)
    logger.info(f"Poster {poster.uuid} updated by {current_user.uuid}: {sorted(changes)}")

    item = AdminPosterResponse.model_validate(poster)
    if creator_name:
        item.creator_name = creator_name
    return item


@router.delete("/posters", status_code=status.HTTP_204_NO_CONTENT)
async def delete_poster(
    poster_id: str = Query(..., alias="id"),
    current_user: User = Depends(admin_required),
    db: AsyncSession = Depends(get_db)
):
    """Delete a poster permanently."""
    result = await db.execute(select(Poster).where(Poster.uuid == poster_id))
    poster = result.scalar_one_or_none()

    if not poster:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Poster not found"
        )

    await db.delete(poster)
    await db.commit()
    logger.info(f"Poster {poster_id} deleted by {current_user.uuid}")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/dashboard", response_model=AdminDashboardResponse)
async def admin_dashboard(
    current_user: User = Depends(admin_required),
    db: AsyncSession = Depends(get_db)
):
    """Back office counters."""
    is_creator = User.user_role == "creator"
    return AdminDashboardResponse(
        total_creators=await _count(db, User, is_creator),
        approved_creators=await _count(db, User, is_creator, User.approved.is_(True)),
        pending_creators=await _count(db, User, is_creator, User.approved.isnot(True)),
        total_posters=await _count(db, Poster),
        pending_posters=await _count(db, Poster, Poster.status == "pending"),
        approved_posters=await _count(db, Poster, Poster.status == "approved"),
        pending_payouts=await _count(db, Payout, Payout.status == "pending"),
        new_support_messages=await _count(db, SupportMessage, SupportMessage.status == "new"),
    )


@router.get("/payouts", response_model=list[PayoutResponse])
async def list_payouts(
    payout_status: Optional[str] = Query(None, alias="status"),
    current_user: User = Depends(admin_required),
    db: AsyncSession = Depends(get_db)
):
    """All payouts, newest first."""
    return await PayoutLedger(db).list_all(status=payout_status)


@router.patch("/payouts/{payout_id}", response_model=PayoutResponse)
async def update_payout_status(
    payout_id: str,
    update: PayoutStatusUpdate,
    current_user: User = Depends(admin_required),
    db: AsyncSession = Depends(get_db)
):
    """Mark a payout as paid (``completed``) or back to ``pending``."""
    payout = await PayoutLedger(db).update_status(payout_id, update.status)

    if payout is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Payout not found"
        )

    return payout


@router.get("/support", response_model=list[SupportMessageResponse])
async def list_support_messages(
    message_status: Optional[str] = Query(None, alias="status"),
    current_user: User = Depends(admin_required),
    db: AsyncSession = Depends(get_db)
):
    """Support inbox, newest first."""
    query = select(SupportMessage)
    if message_status:
        query = query.where(SupportMessage.status == message_status)
    result = await db.execute(query.order_by(SupportMessage.created_at.desc()))
    return result.scalars().all()


@router.patch("/support", response_model=SupportMessageResponse)
async def update_support_message(
    update: SupportStatusUpdate,
    current_user: User = Depends(admin_required),
    db: AsyncSession = Depends(get_db)
):
    """Change a support message's status."""
    result = await db.execute(select(SupportMessage).where(SupportMessage.uuid == update.message_id))
    message = result.scalar_one_or_none()

    if not message:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Support message not found"
        )

    message.status = update.status
    await db.commit()
    await db.refresh(message)

    return message

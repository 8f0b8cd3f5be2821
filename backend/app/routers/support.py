"""Support form endpoint."""
import logging
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.models.support_message import SupportMessage
from app.models.user import User
from app.schemas.support import SupportMessageCreate, SupportMessageResponse
from app.auth.dependencies import get_optional_user
from app.services.email_service import EmailService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("", response_model=SupportMessageResponse, status_code=status.HTTP_201_CREATED)
async def create_support_message(
    message_data: SupportMessageCreate,
    current_user: Optional[User] = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Send a message to the support team.

    Visitors must give a name and email; for logged-in creators they default
    to the account's.
    """
    name = message_data.name or (current_user.name if current_user else None)
    email = message_data.email or (current_user.email if current_user else None)
    if not name or not email:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Name and email are required"
        )

    message = SupportMessage(
        name=name,
        email=email,
        subject=message_data.subject,
        message=message_data.message,
        vendor=message_data.vendor or (current_user.vendor if current_user else None),
        status="new",
        user_id=current_user.uuid if current_user else None,
    )
    db.add(message)
    await db.commit()
    await db.refresh(message)
    logger.info(f"Support message {message.uuid} received from {email}")

    EmailService.send_support_confirmation_email(message)

    return message

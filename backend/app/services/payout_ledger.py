"""Persistence of payout records."""
import logging
from datetime import date
from decimal import Decimal
from typing import Optional

from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.payout import Payout, PAYOUT_STATUSES

logger = logging.getLogger(__name__)


class DuplicatePayoutError(Exception):
    """A payout for the same creator and period is already recorded."""


# Postgres names the constraint, SQLite lists its columns
PERIOD_UNIQUE_MARKERS = (
    "uq_payout_creator_period",
    "UNIQUE constraint failed: payouts.creator_id, payouts.period_start, payouts.period_end",
)


def is_period_conflict(error: IntegrityError) -> bool:
    message = str(error.orig)
    return any(marker in message for marker in PERIOD_UNIQUE_MARKERS)


class PayoutLedger:
    """Queries and writes on the ``payouts`` table.

    ``insert`` only flushes; the caller owns the transaction.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def exists(self, creator_id: str, period_start: date, period_end: date) -> bool:
        """True if any payout for the creator overlaps the period."""
        result = await self.db.execute(
            select(Payout.uuid)
            .where(
                Payout.creator_id == creator_id,
                Payout.period_start <= period_end,
                Payout.period_end >= period_start,
            )
            .limit(1)
        )
        return result.scalar_one_or_none() is not None

    async def insert(self, payout: Payout) -> Payout:
        self.db.add(payout)
        try:
            await self.db.flush()
        except IntegrityError as e:
            await self.db.rollback()
            if not is_period_conflict(e):
                logger.error(f"Could not store payout for creator {payout.creator_id}: {e.orig}")
                raise
            logger.warning(
                f"Duplicate payout for creator {payout.creator_id} "
                f"({payout.period_start} - {payout.period_end})"
            )
            raise DuplicatePayoutError(str(e.orig)) from e
        return payout

    async def list_by_creator(
        self,
        creator_id: str,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> list[Payout]:
        """Creator's payouts, newest first, optionally limited to a created-at range."""
        query = select(Payout).where(Payout.creator_id == creator_id)
        if start_date:
            query = query.where(Payout.created_at >= start_date)
        if end_date:
            query = query.where(Payout.created_at < end_date)
        result = await self.db.execute(query.order_by(Payout.created_at.desc()))
        return list(result.scalars().all())

    async def sum_amounts(self, creator_id: str) -> Decimal:
        result = await self.db.execute(
            select(func.coalesce(func.sum(Payout.amount), 0)).where(Payout.creator_id == creator_id)
        )
        return Decimal(str(result.scalar_one()))

    async def list_all(self, status: Optional[str] = None) -> list[Payout]:
        query = select(Payout)
        if status:
            query = query.where(Payout.status == status)
        result = await self.db.execute(query.order_by(Payout.created_at.desc()))
        return list(result.scalars().all())

    async def get(self, payout_id: str) -> Optional[Payout]:
        result = await self.db.execute(select(Payout).where(Payout.uuid == payout_id))
        return result.scalar_one_or_none()

    async def update_status(self, payout_id: str, status: str) -> Optional[Payout]:
        """Set a payout's status; returns None when the payout does not exist."""
        if status not in PAYOUT_STATUSES:
            raise ValueError(f"Invalid payout status: {status}")
        payout = await self.get(payout_id)
        if payout is None:
            return None
        payout.status = status
        await self.db.commit()
        await self.db.refresh(payout)
        logger.info(f"Payout {payout_id} marked {status}")
        return payout

"""Tests for payout persistence."""
from datetime import date, datetime
from decimal import Decimal

import pytest
from sqlalchemy.exc import IntegrityError

from app.models.payout import Payout
from app.services.payout_ledger import DuplicatePayoutError, PayoutLedger

from factories import create_user

MAY = (date(2024, 5, 1), date(2024, 5, 31))
JUNE = (date(2024, 6, 1), date(2024, 6, 30))


def make_payout(creator_id, period, amount="30.00", **fields):
    return Payout(
        creator_id=creator_id,
        name="Ada Creator",
        amount=Decimal(amount),
        currency="GBP",
        method="iban",
        status="pending",
        period_start=period[0],
        period_end=period[1],
        **fields,
    )


@pytest.mark.asyncio
async def test_exists_detects_overlapping_period(test_db, creator):
    creator_id = creator.uuid
    ledger = PayoutLedger(test_db)
    await ledger.insert(make_payout(creator_id, MAY))
    await test_db.commit()

    assert await ledger.exists(creator_id, *MAY)
    assert await ledger.exists(creator_id, date(2024, 5, 15), date(2024, 6, 14))
    assert not await ledger.exists(creator_id, *JUNE)


@pytest.mark.asyncio
async def test_exists_is_per_creator(test_db, creator):
    other = await create_user(test_db, "other@example.com", name="Other")
    ledger = PayoutLedger(test_db)
    await ledger.insert(make_payout(creator.uuid, MAY))
    await test_db.commit()

    assert not await ledger.exists(other.uuid, *MAY)


@pytest.mark.asyncio
async def test_duplicate_insert_rejected(test_db, creator):
    creator_id = creator.uuid
    ledger = PayoutLedger(test_db)
    await ledger.insert(make_payout(creator_id, MAY))
    await test_db.commit()

    with pytest.raises(DuplicatePayoutError):
        await ledger.insert(make_payout(creator_id, MAY, amount="31.00"))

    payouts = await ledger.list_by_creator(creator_id)
    assert len(payouts) == 1
    assert payouts[0].amount == Decimal("30.00")


@pytest.mark.asyncio
async def test_other_integrity_errors_are_not_duplicates(test_db, creator):
    """Test a NOT NULL violation propagates instead of reading as a duplicate."""
    creator_id = creator.uuid
    ledger = PayoutLedger(test_db)
    payout = make_payout(creator_id, MAY)
    payout.amount = None

    with pytest.raises(IntegrityError, match="NOT NULL"):
        await ledger.insert(payout)

    assert not await ledger.exists(creator_id, *MAY)


@pytest.mark.asyncio
async def test_list_by_creator_newest_first_and_filtered(test_db, creator):
    creator_id = creator.uuid
    ledger = PayoutLedger(test_db)
    await ledger.insert(make_payout(creator_id, MAY, created_at=datetime(2024, 6, 1, 2, 0)))
    await ledger.insert(make_payout(creator_id, JUNE, amount="12.50", created_at=datetime(2024, 7, 1, 2, 0)))
    await test_db.commit()

    payouts = await ledger.list_by_creator(creator_id)
    assert [p.period_start for p in payouts] == [JUNE[0], MAY[0]]

    june_only = await ledger.list_by_creator(creator_id, start_date=date(2024, 6, 1), end_date=date(2024, 6, 2))
    assert [p.period_start for p in june_only] == [MAY[0]]

    assert await ledger.sum_amounts(creator_id) == Decimal("42.50")


@pytest.mark.asyncio
async def test_sum_amounts_without_payouts(test_db, creator):
    assert await PayoutLedger(test_db).sum_amounts(creator.uuid) == Decimal("0")


@pytest.mark.asyncio
async def test_update_status(test_db, creator):
    ledger = PayoutLedger(test_db)
    payout = await ledger.insert(make_payout(creator.uuid, MAY))
    await test_db.commit()

    updated = await ledger.update_status(payout.uuid, "completed")

    assert updated.status == "completed"
    assert [p.uuid for p in await ledger.list_all(status="completed")] == [payout.uuid]
    assert await ledger.list_all(status="pending") == []


@pytest.mark.asyncio
async def test_update_status_rejects_unknown_status(test_db, creator):
    ledger = PayoutLedger(test_db)
    payout = await ledger.insert(make_payout(creator.uuid, MAY))
    await test_db.commit()

    with pytest.raises(ValueError):
        await ledger.update_status(payout.uuid, "cancelled")


@pytest.mark.asyncio
async def test_update_status_missing_payout(test_db):
    assert await PayoutLedger(test_db).update_status("missing", "completed") is None

"""Tests for the admin back office endpoints."""
import pytest
from datetime import date
from decimal import Decimal
from unittest.mock import patch
from sqlalchemy import select, update

from app.models.payout import Payout
from app.models.poster import Poster
from app.models.support_message import SupportMessage
from app.models.user import User

from factories import auth_headers, create_poster, create_user


async def add_payout(db, creator, status="pending"):
    payout = Payout(
        creator_id=creator.uuid,
        name=creator.name,
        amount=Decimal("30.00"),
        currency="GBP",
        method="iban",
        status=status,
        period_start=date(2024, 5, 1),
        period_end=date(2024, 5, 31),
    )
    db.add(payout)
    await db.commit()
    await db.refresh(payout)
    return payout


@pytest.mark.asyncio
async def test_admin_endpoints_require_admin(client, creator):
    """Test creators get 403 from the back office."""
    for path in ["/api/admin/creators", "/api/admin/posters", "/api/admin/payouts", "/api/admin/dashboard"]:
        response = await client.get(path, headers=auth_headers(creator))
        assert response.status_code == 403


@pytest.mark.asyncio
async def test_list_creators_filtered_by_approval(client, admin, creator, pending_creator):
    """Test listing creators, with and without the approval filter."""
    response = await client.get("/api/admin/creators", headers=auth_headers(admin))
    assert response.status_code == 200
    assert {c["email"] for c in response.json()} == {"creator@example.com", "pending@example.com"}

    response = await client.get("/api/admin/creators", params={"approved": "false"}, headers=auth_headers(admin))
    assert [c["email"] for c in response.json()] == ["pending@example.com"]


@pytest.mark.asyncio
async def test_approve_creator_sends_email_once(client, admin, pending_creator):
    """Test approval flips the flag and only a new approval sends the email."""
    payload = {"creator_id": pending_creator.uuid, "status": True}

    with patch("app.routers.admin.EmailService.send_creator_approved_email") as mock_email:
        response = await client.patch("/api/admin/creators", json=payload, headers=auth_headers(admin))
        assert response.status_code == 200
        assert response.json()["approved"] is True

        await client.patch("/api/admin/creators", json=payload, headers=auth_headers(admin))

    assert mock_email.call_count == 1


@pytest.mark.asyncio
async def test_approve_unknown_creator(client, admin):
    """Test approving a missing creator."""
    response = await client.patch(
        "/api/admin/creators",
        json={"creator_id": "missing", "status": True},
        headers=auth_headers(admin)
    )

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_list_posters_with_creator_names(client, test_db, admin, creator):
    """Test the moderation queue carries the creator name and filters by status."""
    await create_poster(test_db, creator, title="Live")
    await create_poster(test_db, creator, title="Queued", status="pending", shopify_product_id=None)

    response = await client.get("/api/admin/posters", headers=auth_headers(admin))
    assert response.status_code == 200
    assert {p["creator_name"] for p in response.json()} == {"Ada Creator"}
    assert len(response.json()) == 2

    response = await client.get("/api/admin/posters", params={"status": "pending"}, headers=auth_headers(admin))
    assert [p["title"] for p in response.json()] == ["Queued"]


@pytest.mark.asyncio
async def test_approve_and_link_poster(client, test_db, admin, creator):
    """Test approving a poster and linking it to a Shopify product."""
    poster = await create_poster(test_db, creator, status="pending", shopify_product_id=None)

    response = await client.patch(
        "/api/admin/posters",
        json={
            "poster_id": poster.uuid,
            "status": "approved",
            "shopify_product_id": "gid://shopify/Product/987",
            "shopify_url": "https://shop.example.com/products/sunset",
        },
        headers=auth_headers(admin)
    )

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "approved"
    assert data["shopify_product_id"] == "gid://shopify/Product/987"
    assert data["creator_name"] == "Ada Creator"


@pytest.mark.asyncio
async def test_empty_product_id_unlinks_poster(client, test_db, admin, creator):
    """Test an empty Shopify product id removes the link."""
    poster = await create_poster(test_db, creator)

    response = await client.patch(
        "/api/admin/posters",
        json={"poster_id": poster.uuid, "shopify_product_id": ""},
        headers=auth_headers(admin)
    )

    assert response.status_code == 200
    assert response.json()["shopify_product_id"] is None
    assert response.json()["status"] == "approved"


@pytest.mark.asyncio
async def test_update_poster_rejects_unknown_status(client, test_db, admin, creator):
    """Test poster status validation."""
    poster = await create_poster(test_db, creator)

    response = await client.patch(
        "/api/admin/posters",
        json={"poster_id": poster.uuid, "status": "archived"},
        headers=auth_headers(admin)
    )

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_delete_poster(client, test_db, admin, creator):
    """Test permanent poster deletion."""
    poster = await create_poster(test_db, creator)
    poster_id = poster.uuid

    response = await client.delete("/api/admin/posters", params={"id": poster_id}, headers=auth_headers(admin))
    assert response.status_code == 204

    result = await test_db.execute(select(Poster).where(Poster.uuid == poster_id))
    assert result.scalar_one_or_none() is None

    response = await client.delete("/api/admin/posters", params={"id": poster_id}, headers=auth_headers(admin))
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_admin_dashboard_counts(client, test_db, admin, creator, pending_creator):
    """Test back office counters."""
    await create_poster(test_db, creator)
    await create_poster(test_db, creator, title="Queued", status="pending")
    await add_payout(test_db, creator)
    test_db.add(SupportMessage(name="Visitor", email="v@example.com", subject="Hi", message="Hello"))
    await test_db.commit()

    response = await client.get("/api/admin/dashboard", headers=auth_headers(admin))

    assert response.status_code == 200
    assert response.json() == {
        "total_creators": 2,
        "approved_creators": 1,
        "pending_creators": 1,
        "total_posters": 2,
        "pending_posters": 1,
        "approved_posters": 1,
        "pending_payouts": 1,
        "new_support_messages": 1,
    }


@pytest.mark.asyncio
async def test_list_and_complete_payouts(client, test_db, admin, creator):
    """Test the payout list and marking a payout completed."""
    payout = await add_payout(test_db, creator)

    response = await client.get("/api/admin/payouts", params={"status": "pending"}, headers=auth_headers(admin))
    assert [p["uuid"] for p in response.json()] == [payout.uuid]

    response = await client.patch(
        f"/api/admin/payouts/{payout.uuid}", json={"status": "completed"}, headers=auth_headers(admin)
    )
    assert response.status_code == 200
    assert response.json()["status"] == "completed"
    assert response.json()["amount"] == 30.0


@pytest.mark.asyncio
async def test_update_payout_validation(client, test_db, admin, creator):
    """Test unknown payout ids and statuses."""
    payout = await add_payout(test_db, creator)

    response = await client.patch(
        f"/api/admin/payouts/{payout.uuid}", json={"status": "cancelled"}, headers=auth_headers(admin)
    )
    assert response.status_code == 422

    response = await client.patch(
        "/api/admin/payouts/missing", json={"status": "completed"}, headers=auth_headers(admin)
    )
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_support_inbox(client, test_db, admin):
    """Test listing and resolving support messages."""
    message = SupportMessage(name="Visitor", email="v@example.com", subject="Order", message="Where is it?")
    test_db.add(message)
    await test_db.commit()
    await test_db.refresh(message)

    response = await client.get("/api/admin/support", params={"status": "new"}, headers=auth_headers(admin))
    assert [m["subject"] for m in response.json()] == ["Order"]

    response = await client.patch(
        "/api/admin/support",
        json={"message_id": message.uuid, "status": "solved"},
        headers=auth_headers(admin)
    )
    assert response.status_code == 200
    assert response.json()["status"] == "solved"

    response = await client.get("/api/admin/support", params={"status": "new"}, headers=auth_headers(admin))
    assert response.json() == []


@pytest.mark.asyncio
async def test_creators_without_approval_flag_are_pending(client, test_db, admin, creator):
    """Test a creator whose approval was never set counts as pending."""
    legacy = await create_user(test_db, "legacy@example.com", name="Legacy Creator")
    legacy_id = legacy.uuid
    await test_db.execute(update(User).where(User.uuid == legacy_id).values(approved=None))
    await test_db.commit()

    response = await client.get("/api/admin/dashboard", headers=auth_headers(admin))
    assert response.json()["approved_creators"] == 1
    assert response.json()["pending_creators"] == 1

    response = await client.get("/api/admin/creators", params={"approved": "false"}, headers=auth_headers(admin))
    assert [c["uuid"] for c in response.json()] == [legacy_id]
    assert response.json()[0]["approved"] is False

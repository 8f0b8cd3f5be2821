"""Tests for creator profile endpoints."""
import pytest

from factories import auth_headers, create_poster


@pytest.mark.asyncio
async def test_get_user_profile(client, creator):
    """Test getting the current creator's profile."""
    response = await client.get("/api/user/profile", headers=auth_headers(creator))

    assert response.status_code == 200
    data = response.json()
    assert data["email"] == "creator@example.com"
    assert data["name"] == "Ada Creator"
    assert data["currency"] == "GBP"
    assert "password_hash" not in data


@pytest.mark.asyncio
async def test_get_profile_requires_token(client):
    """Test the profile is not served anonymously."""
    response = await client.get("/api/user/profile")

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_update_user_profile(client, creator):
    """Test partial profile update; unset fields keep their values."""
    response = await client.patch(
        "/api/user/profile",
        json={"bio": "Prints from Copenhagen", "currency": "dkk"},
        headers=auth_headers(creator)
    )

    assert response.status_code == 200
    data = response.json()
    assert data["bio"] == "Prints from Copenhagen"
    assert data["currency"] == "DKK"
    assert data["name"] == "Ada Creator"


@pytest.mark.asyncio
async def test_update_payout_details(client, creator):
    """Test setting bank transfer details normalizes the IBAN."""
    response = await client.patch(
        "/api/user/profile",
        json={"payment_method": "iban", "iban": "dk50 0040 0440 1162 43"},
        headers=auth_headers(creator)
    )

    assert response.status_code == 200
    assert response.json()["iban"] == "DK5000400440116243"
    assert response.json()["payment_method"] == "iban"


@pytest.mark.asyncio
@pytest.mark.parametrize("payload", [
    {"currency": "JPY"},
    {"payment_method": "cheque"},
    {"payment_method": "paypal"},
    {"payment_method": "iban"},
    {"paypal_email": "not-an-email"},
])
async def test_update_profile_validation(client, creator, payload):
    """Test invalid profile updates are rejected."""
    response = await client.patch("/api/user/profile", json=payload, headers=auth_headers(creator))

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_list_my_posters(client, test_db, creator, admin):
    """Test creators only see their own posters."""
    await create_poster(test_db, creator, title="Mine")
    await create_poster(test_db, admin, title="Not mine")

    response = await client.get("/api/user/posters", headers=auth_headers(creator))

    assert response.status_code == 200
    assert [p["title"] for p in response.json()] == ["Mine"]

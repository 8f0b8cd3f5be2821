"""Tests for poster submission endpoints."""
import pytest

from factories import auth_headers, create_poster


def poster_payload(**overrides):
    payload = {
        "title": "Harbour at Dawn",
        "description": "Risograph print",
        "drive_link": "https://drive.example.com/harbour",
        "image_urls": ["https://cdn.example.com/harbour.jpg"],
        "selected_sizes": ["50x70", "21x30"],
        "prices": {"50x70": 25, "21x30": 15, "70x100": 40},
    }
    payload.update(overrides)
    return payload


@pytest.mark.asyncio
async def test_create_poster(client, creator):
    """Test an approved creator can submit a poster for review."""
    response = await client.post("/api/posters", json=poster_payload(), headers=auth_headers(creator))

    assert response.status_code == 201
    data = response.json()
    assert data["status"] == "pending"
    assert data["creator_id"] == creator.uuid
    assert data["shopify_product_id"] is None
    # Prices for sizes that were not selected are dropped
    assert data["prices"] == {"50x70": 25.0, "21x30": 15.0}


@pytest.mark.asyncio
async def test_create_poster_requires_approval(client, pending_creator):
    """Test unapproved creators cannot submit posters."""
    response = await client.post("/api/posters", json=poster_payload(), headers=auth_headers(pending_creator))

    assert response.status_code == 403


@pytest.mark.asyncio
@pytest.mark.parametrize("overrides", [
    {"selected_sizes": []},
    {"selected_sizes": ["10x10"], "prices": {"10x10": 50}},
    {"selected_sizes": ["50x70"], "prices": {}},
    {"selected_sizes": ["50x70"], "prices": {"50x70": 19.99}},
    {"title": ""},
])
async def test_create_poster_validation(client, creator, overrides):
    """Test unknown sizes, missing prices and prices under the minimum."""
    response = await client.post(
        "/api/posters", json=poster_payload(**overrides), headers=auth_headers(creator)
    )

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_list_posters(client, test_db, creator):
    """Test listing the creator's posters."""
    await create_poster(test_db, creator, title="Sunset")

    response = await client.get("/api/posters", headers=auth_headers(creator))

    assert response.status_code == 200
    assert [p["title"] for p in response.json()] == ["Sunset"]


@pytest.mark.asyncio
async def test_request_deletion_marks_poster(client, test_db, creator):
    """Test deleting a poster only flags it for the admin."""
    poster = await create_poster(test_db, creator)

    response = await client.delete(f"/api/posters/{poster.uuid}", headers=auth_headers(creator))

    assert response.status_code == 200
    assert response.json()["status"] == "willBeDeleted"


@pytest.mark.asyncio
async def test_request_deletion_of_other_creators_poster(client, test_db, creator, pending_creator):
    """Test creators cannot touch posters they do not own."""
    poster = await create_poster(test_db, creator)

    response = await client.delete(f"/api/posters/{poster.uuid}", headers=auth_headers(pending_creator))

    assert response.status_code == 404

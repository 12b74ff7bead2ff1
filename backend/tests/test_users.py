"""
Tests for user registration, lookup, update and removal, plus the ops
endpoints.
"""

from datetime import timedelta

import pytest
from httpx import AsyncClient

from lending.core.timeutils import utcnow


@pytest.mark.asyncio
async def test_register_user(client: AsyncClient):
    response = await client.post(
        "/api/v1/users/",
        json={"name": "Nina", "email": "nina@example.com"},
    )

    assert response.status_code == 201
    data = response.json()
    assert data["name"] == "Nina"
    assert data["email"] == "nina@example.com"
    assert "id" in data


@pytest.mark.asyncio
async def test_register_duplicate_email(client: AsyncClient, owner):
    response = await client.post(
        "/api/v1/users/",
        json={"name": "Other", "email": owner.email},
    )
    assert response.status_code == 409


@pytest.mark.asyncio
async def test_register_invalid_email(client: AsyncClient):
    response = await client.post("/api/v1/users/", json={"name": "Nina", "email": "not-an-email"})
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_get_user(client: AsyncClient, owner):
    response = await client.get(f"/api/v1/users/{owner.id}")
    assert response.status_code == 200
    assert response.json()["name"] == owner.name


@pytest.mark.asyncio
async def test_get_unknown_user(client: AsyncClient):
    response = await client.get("/api/v1/users/9999")
    assert response.status_code == 404
    assert response.json()["detail"]["message"] == "User with id 9999 not found"


@pytest.mark.asyncio
async def test_register_duplicate_email_ignores_case(client: AsyncClient, owner):
    response = await client.post(
        "/api/v1/users/",
        json={"name": "Other", "email": owner.email.upper()},
    )
    assert response.status_code == 409


@pytest.mark.asyncio
async def test_list_users(client: AsyncClient, owner, booker):
    response = await client.get("/api/v1/users/")

    assert response.status_code == 200
    assert [user["id"] for user in response.json()] == [owner.id, booker.id]


@pytest.mark.asyncio
async def test_update_user_name(client: AsyncClient, owner):
    response = await client.patch(f"/api/v1/users/{owner.id}", json={"name": "Olga Renamed"})

    assert response.status_code == 200
    data = response.json()
    assert data["name"] == "Olga Renamed"
    assert data["email"] == owner.email


@pytest.mark.asyncio
async def test_update_user_keeps_blank_fields(client: AsyncClient, owner):
    response = await client.patch(f"/api/v1/users/{owner.id}", json={"name": "  "})

    assert response.status_code == 200
    assert response.json()["name"] == "Olga Owner"


@pytest.mark.asyncio
async def test_update_user_email(client: AsyncClient, owner):
    response = await client.patch(f"/api/v1/users/{owner.id}", json={"email": "olga@example.com"})

    assert response.status_code == 200
    assert response.json()["email"] == "olga@example.com"


@pytest.mark.asyncio
async def test_update_user_to_own_email(client: AsyncClient, owner):
    response = await client.patch(f"/api/v1/users/{owner.id}", json={"email": owner.email})
    assert response.status_code == 200


@pytest.mark.asyncio
async def test_update_user_to_taken_email(client: AsyncClient, owner, booker):
    response = await client.patch(f"/api/v1/users/{owner.id}", json={"email": booker.email.upper()})

    assert response.status_code == 409
    assert (await client.get(f"/api/v1/users/{owner.id}")).json()["email"] == owner.email


@pytest.mark.asyncio
async def test_update_unknown_user(client: AsyncClient):
    response = await client.patch("/api/v1/users/9999", json={"name": "Nobody"})
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_delete_user(client: AsyncClient, stranger):
    response = await client.delete(f"/api/v1/users/{stranger.id}")

    assert response.status_code == 204
    assert (await client.get(f"/api/v1/users/{stranger.id}")).status_code == 404


@pytest.mark.asyncio
async def test_delete_unknown_user(client: AsyncClient):
    response = await client.delete("/api/v1/users/9999")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_delete_user_who_owns_items(client: AsyncClient, owner, item):
    response = await client.delete(f"/api/v1/users/{owner.id}")

    assert response.status_code == 409
    assert response.json()["detail"]["details"]["blocking"] == "items"


@pytest.mark.asyncio
async def test_delete_user_with_bookings(client: AsyncClient, booker, item, make_booking):
    start = utcnow() + timedelta(days=1)
    await make_booking(item, booker, start, start + timedelta(days=1))

    response = await client.delete(f"/api/v1/users/{booker.id}")

    assert response.status_code == 409
    assert response.json()["detail"]["details"]["blocking"] == "bookings"



@pytest.mark.asyncio
async def test_health(client: AsyncClient):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json()["cache"] == {"status": "disabled"}


@pytest.mark.asyncio
async def test_metrics(client: AsyncClient):
    response = await client.get("/metrics")
    assert response.status_code == 200
    assert "booking_operations_total" in response.text

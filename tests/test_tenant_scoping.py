"""Tests for restaurant scoping and isolation"""

import pytest
from httpx import AsyncClient
from uuid import uuid4

from app.api.auth import create_access_token
from app.models.restaurant import Restaurant, Area, Table
from app.models.user import User
from app.reservations.errors import ValidationError


@pytest.fixture
async def other_restaurant(test_db):
    restaurant = Restaurant(
        id=uuid4(),
        name="Other Restaurant",
        timezone="Europe/Lisbon",
    )
    test_db.add(restaurant)
    await test_db.commit()

    return restaurant


@pytest.mark.asyncio
async def test_reservations_are_isolated_by_restaurant(
    authenticated_client: AsyncClient, other_restaurant, add_reservation
):
    """Reservations of another restaurant are invisible to the caller"""
    mine = await add_reservation(customer_name="Mine")
    theirs = await add_reservation(restaurant_id=other_restaurant.id, customer_name="Theirs")

    response = await authenticated_client.get("/api/reservations")

    assert response.status_code == 200
    names = [item["customer_name"] for item in response.json()["items"]]
    assert names == ["Mine"]

    response = await authenticated_client.get(f"/api/reservations/{mine.id}")
    assert response.status_code == 200

    # Foreign ids look exactly like unknown ones
    response = await authenticated_client.get(f"/api/reservations/{theirs.id}")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_cannot_modify_other_restaurant_reservation(
    authenticated_client: AsyncClient, other_restaurant, add_reservation
):
    theirs = await add_reservation(restaurant_id=other_restaurant.id)
    url = f"/api/reservations/{theirs.id}"

    assert (await authenticated_client.put(url, json={"notes": "hi"})).status_code == 404
    assert (
        await authenticated_client.patch(f"{url}/status", json={"status": "cancelled"})
    ).status_code == 404
    assert (await authenticated_client.delete(url)).status_code == 404


@pytest.mark.asyncio
async def test_created_reservation_belongs_to_caller(authenticated_client: AsyncClient, test_restaurant, test_tables):
    response = await authenticated_client.post(
        "/api/reservations",
        json={
            "customer_name": "Jane Smith",
            "number_of_people": 2,
            "reservation_date": "2026-03-12",
            "start_time": "20:00",
        },
    )

    assert response.status_code == 201
    assert response.json()["restaurant_id"] == str(test_restaurant.id)


@pytest.mark.asyncio
async def test_user_without_restaurant_is_forbidden(client: AsyncClient, test_db):
    user = User(
        id=uuid4(),
        restaurant_id=None,
        email="drifter@example.com",
        full_name="No Restaurant",
        is_active=True,
    )
    test_db.add(user)
    await test_db.commit()

    response = await client.get(
        "/api/reservations",
        headers={"Authorization": f"Bearer {create_access_token(user)}"},
    )

    assert response.status_code == 403
    assert response.json() == {"detail": "Restaurant access required", "kind": "forbidden"}


@pytest.mark.asyncio
async def test_inactive_user_is_rejected(client: AsyncClient, test_db, test_user):
    test_user.is_active = False
    await test_db.commit()

    response = await client.get(
        "/api/reservations",
        headers={"Authorization": f"Bearer {create_access_token(test_user)}"},
    )

    assert response.status_code == 400


@pytest.fixture
async def other_table(test_db, other_restaurant):
    area = Area(id=uuid4(), restaurant_id=other_restaurant.id, name="Their Terrace")
    test_db.add(area)
    await test_db.flush()

    table = Table(
        id=uuid4(),
        restaurant_id=other_restaurant.id,
        area_id=area.id,
        number=9,
        name="Their VIP table",
        capacity=8,
    )
    test_db.add(table)
    await test_db.commit()

    return table


@pytest.mark.asyncio
async def test_cannot_book_other_restaurant_table(store, test_restaurant, other_table, reservation_data):
    with pytest.raises(ValidationError):
        await store.create(test_restaurant.id, reservation_data(table_id=other_table.id))

    with pytest.raises(ValidationError):
        await store.create(
            test_restaurant.id, reservation_data(table_id=None, area_id=other_table.area_id)
        )


@pytest.mark.asyncio
async def test_cannot_move_reservation_to_other_restaurant_table(
    store, test_restaurant, other_table, reservation_data
):
    reservation = await store.create(test_restaurant.id, reservation_data())
    own_table_id = reservation.table_id

    with pytest.raises(ValidationError):
        await store.update(test_restaurant.id, reservation.id, {"table_id": other_table.id})

    unchanged = await store.get_by_id(test_restaurant.id, reservation.id)
    assert unchanged.table_id == own_table_id
    assert unchanged.table.name == "Table 1"


@pytest.mark.asyncio
async def test_api_rejects_other_restaurant_table(
    authenticated_client: AsyncClient, other_table, reservation_data
):
    data = reservation_data(table_id=other_table.id)
    payload = {
        **data,
        "reservation_date": data["reservation_date"].isoformat(),
        "start_time": data["start_time"].strftime("%H:%M"),
        "table_id": str(data["table_id"]),
        "area_id": str(data["area_id"]),
    }

    response = await authenticated_client.post("/api/reservations", json=payload)

    assert response.status_code == 400
    assert response.json()["kind"] == "validation_error"

"""Test configuration and fixtures"""

from datetime import date, datetime, time, timedelta, timezone

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from uuid import uuid4

from app.main import app
from app.database import Base, get_db
from app.models.restaurant import Restaurant, Area, Table
from app.models.reservation import Reservation
from app.models.user import User
from app.api.auth import create_access_token
from app.api.reservations import get_reservation_store
from app.reservations.store import ReservationStore


# Test database URL (use in-memory SQLite for tests)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

RESTAURANT_TZ = "America/Sao_Paulo"

# 12:30 on 2026-03-10 in Sao Paulo (UTC-3)
FIXED_NOW = datetime(2026, 3, 10, 15, 30, tzinfo=timezone.utc)
LOCAL_TODAY = date(2026, 3, 10)
LOCAL_TIME = time(12, 30)
TOMORROW = LOCAL_TODAY + timedelta(days=1)


def fixed_clock() -> datetime:
    return FIXED_NOW


async def create_schema(engine):
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


@pytest.fixture
async def test_db():
    """Create test database"""
    engine = create_async_engine(TEST_DATABASE_URL, echo=False)
    await create_schema(engine)

    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with session_factory() as session:
        yield session

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
async def test_restaurant(test_db):
    """Create a test restaurant"""
    restaurant = Restaurant(
        id=uuid4(),
        name="Test Restaurant",
        timezone=RESTAURANT_TZ,
    )
    test_db.add(restaurant)
    await test_db.commit()

    return restaurant


@pytest.fixture
async def test_area(test_db, test_restaurant):
    """Create a dining area"""
    area = Area(id=uuid4(), restaurant_id=test_restaurant.id, name="Main Hall")
    test_db.add(area)
    await test_db.commit()

    return area


@pytest.fixture
async def test_tables(test_db, test_restaurant, test_area):
    """Create two tables in the main hall"""
    tables = [
        Table(
            id=uuid4(),
            restaurant_id=test_restaurant.id,
            area_id=test_area.id,
            number=number,
            name=f"Table {number}",
            capacity=4,
        )
        for number in (1, 2)
    ]

    for table in tables:
        test_db.add(table)

    await test_db.commit()
    return tables


@pytest.fixture
def store(test_db):
    """Reservation store with a frozen clock"""
    return ReservationStore(test_db, clock=fixed_clock)


@pytest.fixture
def reservation_data(test_tables, test_area):
    """Factory for valid booking payloads on table 1 tomorrow at 19:00"""
    def _make(**overrides):
        data = {
            "customer_name": "Jane Smith",
            "phone": "+5511987654321",
            "number_of_people": 2,
            "reservation_date": TOMORROW,
            "start_time": time(19, 0),
            "table_id": test_tables[0].id,
            "area_id": test_area.id,
        }
        data.update(overrides)
        return data

    return _make


@pytest.fixture
def add_reservation(test_db, test_restaurant):
    """Insert reservations directly, bypassing the booking rules"""
    async def _add(**fields):
        values = {
            "restaurant_id": test_restaurant.id,
            "customer_name": "Walk In",
            "number_of_people": 2,
            "reservation_date": TOMORROW,
            "start_time": time(19, 0),
            "status": "pending",
        }
        values.update(fields)
        reservation = Reservation(**values)
        test_db.add(reservation)
        await test_db.commit()
        return reservation

    return _add


@pytest.fixture
async def test_user(test_db, test_restaurant):
    """Create a user acting for the test restaurant"""
    user = User(
        id=uuid4(),
        restaurant_id=test_restaurant.id,
        email="host@example.com",
        full_name="Test Host",
        is_active=True,
    )
    test_db.add(user)
    await test_db.commit()

    return user


@pytest.fixture
async def client(test_db):
    """Create test client with overridden database and clock"""
    async def override_get_db():
        yield test_db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_reservation_store] = lambda: ReservationStore(test_db, clock=fixed_clock)

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
async def authenticated_client(client, test_user):
    """Create authenticated test client"""
    token = create_access_token(test_user)
    client.headers["Authorization"] = f"Bearer {token}"

    return client

#!/usr/bin/env python3
"""
Seed script to create a demo restaurant with tables and reservations
"""

import asyncio
import uuid
from datetime import time, timedelta


async def seed_demo_data():
    """Seed demo data for development"""
    from sqlalchemy import select

    from app.api.auth import create_access_token
    from app.database import SessionLocal, engine, Base
    from app.models.restaurant import Restaurant, Area, Table
    from app.models.user import User
    from app.reservations.errors import ReservationError
    from app.reservations.store import ReservationStore

    # Create tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with SessionLocal() as db:
        # Check if demo restaurant already exists
        result = await db.execute(
            select(Restaurant).where(Restaurant.name == "Cantina da Praça")
        )
        existing = result.scalar_one_or_none()

        if existing:
            print("Demo data already exists. Skipping...")
            return

        print("Creating demo restaurant...")

        restaurant = Restaurant(
            id=uuid.uuid4(),
            name="Cantina da Praça",
            timezone="America/Sao_Paulo",
        )
        db.add(restaurant)
        await db.flush()

        print(f"Created restaurant: {restaurant.name} (ID: {restaurant.id})")

        # Areas and tables
        areas = {
            "Salão": [(1, 4), (2, 4), (3, 2), (4, 6)],
            "Varanda": [(10, 2), (11, 2), (12, 4)],
        }
        tables = []
        for area_name, layout in areas.items():
            area = Area(restaurant_id=restaurant.id, name=area_name)
            db.add(area)
            await db.flush()

            for number, capacity in layout:
                table = Table(
                    restaurant_id=restaurant.id,
                    area_id=area.id,
                    number=number,
                    name=f"Mesa {number}",
                    capacity=capacity,
                )
                db.add(table)
                tables.append(table)

        user = User(
            restaurant_id=restaurant.id,
            email="host@cantina.example",
            full_name="Demo Host",
        )
        db.add(user)
        await db.commit()

        # Reservations go through the store so the booking rules apply
        store = ReservationStore(db)
        today = (await store.local_now(restaurant.id)).date()
        bookings = [
            ("Ana Souza", 2, 1, time(19, 0), tables[2]),
            ("Carlos Lima", 4, 1, time(20, 0), tables[0]),
            ("Família Rocha", 6, 2, time(12, 30), tables[3]),
            ("Beatriz Alves", 2, 3, time(21, 0), tables[4]),
        ]
        created = 0
        for name, people, day_offset, start, table in bookings:
            try:
                await store.create(
                    restaurant.id,
                    {
                        "customer_name": name,
                        "phone": "+5511999990000",
                        "number_of_people": people,
                        "reservation_date": today + timedelta(days=day_offset),
                        "start_time": start,
                        "table_id": table.id,
                        "area_id": table.area_id,
                    },
                )
                created += 1
            except ReservationError as e:
                print(f"Skipped reservation for {name}: {e.message}")

        print(f"""
Demo data created successfully!

Restaurant: {restaurant.name}
  ID: {restaurant.id}
  Tables: {len(tables)}
  Reservations: {created}

Development token for {user.email}:
  {create_access_token(user)}
""")


if __name__ == "__main__":
    asyncio.run(seed_demo_data())

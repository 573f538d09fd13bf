"""
Database seeding script for masters and sample orders.

Creates a small directory of masters and a handful of orders spread over
the queue statuses, for local development.
Run this script after database is set up but before first use.
"""

import asyncio
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from backend.app.db.session import AsyncSessionLocal, engine, Base
from backend.app.domain.orders.financials import derive_financials
from backend.app.models.master import Master
from backend.app.models.order import Order
from backend.app.models.order_enums import OrderStatus
from sqlalchemy import select

MASTERS = [
    ("Ivan Petrov", ["Moscow", "Tver"], "+79990001122"),
    ("Oleg Sidorov", ["Kazan"], "+79990003344"),
    ("Anna Smirnova", ["Moscow"], "+79990005566"),
]

ORDERS = [
    # city, client, problem, status, settlement, expense
    ("Moscow", "Sergey", "Washing machine does not drain", OrderStatus.PENDING, None, None),
    ("Moscow", "Elena", "Fridge is noisy", OrderStatus.ACCEPTED, None, None),
    ("Tver", "Pavel", "Oven does not heat", OrderStatus.IN_PROGRESS, 2500.0, 400.0),
    ("Kazan", "Marat", "Dishwasher leaks", OrderStatus.MODERN, 6000.0, 1500.0),
]


async def seed_data():
    """
    Seed masters and sample orders.

    Skips everything if masters already exist.
    """
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with AsyncSessionLocal() as db:
        print("🌱 Starting seeding...")

        existing = (await db.execute(select(Master).limit(1))).scalar_one_or_none()
        if existing:
            print("ℹ️  Masters already exist, skipping seeding")
            return

        masters = [Master(name=name, cities=cities, phone=phone) for name, cities, phone in MASTERS]
        db.add_all(masters)
        await db.flush()
        print(f"✅ Created {len(masters)} masters")

        now = datetime.now(timezone.utc)
        for index, (city, client, problem, status, settlement, expense) in enumerate(ORDERS):
            net, payout = derive_financials(settlement, expense)
            master = next((m for m in masters if m.operates_in(city)), None)
            db.add(Order(
                city=city,
                phone=f"+7916000000{index}",
                client_name=client,
                address=f"{city}, Lenina {index + 1}",
                problem=problem,
                date_meeting=now + timedelta(days=index + 1),
                master_id=master.id if master and status != OrderStatus.PENDING else None,
                status=status,
                settlement=settlement,
                expense=expense,
                net=net,
                payout=payout,
                version=1,
            ))

        await db.commit()
        print(f"✅ Created {len(ORDERS)} sample orders")
        print("\n🎉 Seeding completed successfully!")


if __name__ == "__main__":
    asyncio.run(seed_data())

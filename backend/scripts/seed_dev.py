"""BizDesk - Seed a dev admin and sample products (run after migrations)."""
import asyncio
import os
import sys
from decimal import Decimal

# Add parent to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sqlalchemy import select

from app.db.session import async_session_maker, engine
from app.models import Product, User, UserRole
from app.services.user_service import UserService

SAMPLE_PRODUCTS = [
    {"name": "Steel Water Bottle", "slug": "steel-water-bottle", "sku": "SWB-750", "cost": "210", "mrp": "499", "price": "449"},
    {"name": "Cotton Tote Bag", "slug": "cotton-tote-bag", "sku": "CTB-01", "cost": "60", "mrp": "199", "price": "149"},
    {"name": "Desk Organizer", "slug": "desk-organizer", "sku": "DO-3", "cost": "140", "mrp": "399", "price": "349"},
]


async def seed():
    async with async_session_maker() as session:
        result = await session.execute(select(User.id).where(User.username == "admin").limit(1))
        if result.scalar_one_or_none() is not None:
            print("Dev admin already exists. Skipping seed.")
            return

        # password: dev12345
        await UserService.register(
            session,
            name="Dev Admin",
            email="admin@dev.local",
            username="admin",
            password="dev12345",
            role=UserRole.ADMIN,
        )
        for data in SAMPLE_PRODUCTS:
            session.add(
                Product(
                    **{k: Decimal(v) if k in ("cost", "mrp", "price") else v for k, v in data.items()},
                    publication_status="published",
                    stock_track=True,
                    stock_quantity=25,
                )
            )
        await session.commit()
        print(f"Seeded admin@dev.local (password: dev12345) and {len(SAMPLE_PRODUCTS)} products")

    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(seed())

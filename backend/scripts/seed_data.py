"""Seed data script for development and testing.

Creates:
- Freetown zones (Kissy, Wellington, Congo Town, Lumley, Aberdeen)
- 1 admin, 1 verified scout, 1 vendor owner and CITIZEN_COUNT citizens
- 1 active vendor with sachet, bucket and tanker products

Logins use phone + OTP; with DEBUG=true the OTP is written to the API log.

Environment Variables:
    CITIZEN_COUNT: Number of citizen accounts to create (default: 20)
    RESET_DATA: Set to "true" to clear orders, alerts and reports before seeding (default: false)

Usage:
    # First time setup
    python -m scripts.seed_data

    # Clear activity but keep accounts, zones and vendors
    RESET_DATA=true python -m scripts.seed_data
"""

import asyncio
import os

# Configuration from environment variables
CITIZEN_COUNT = int(os.getenv("CITIZEN_COUNT", "20"))
RESET_DATA = os.getenv("RESET_DATA", "false").lower() == "true"

from sqlalchemy import select, text
from sqlalchemy.ext.asyncio import AsyncSession

from maji.core.database import async_session_maker, engine
from maji.models import Product, User, Vendor, Zone
from maji.models.enums import UserRole

ZONES = [
    ("Kissy", "kissy"),
    ("Wellington", "wellington"),
    ("Congo Town", "congo-town"),
    ("Lumley", "lumley"),
    ("Aberdeen", "aberdeen"),
]

# (name, unit, price in Leones)
PRODUCTS = [
    ("Sachet water (bag of 30)", "bag", 15000),
    ("Bucket refill", "20L bucket", 3000),
    ("Tanker delivery", "1000L", 250000),
]


async def reset_activity_data(session: AsyncSession) -> None:
    """Clear orders, alerts and reports."""
    print("Resetting activity data...")
    for table in ("reports", "alert_feedback", "alerts", "ratings", "transactions", "order_items", "orders"):
        await session.execute(text(f"DELETE FROM {table}"))
    await session.commit()
    print("  Cleared reports, alerts, ratings, transactions, orders")


async def seed_zones(session: AsyncSession) -> list[Zone]:
    print("Seeding zones...")

    result = await session.execute(select(Zone))
    existing = list(result.scalars().all())
    if existing:
        print("  Zones already exist, skipping...")
        return existing

    zones = [Zone(name=name, slug=slug) for name, slug in ZONES]
    session.add_all(zones)
    await session.commit()

    print(f"  Created {len(zones)} zones")
    return zones


async def seed_users(session: AsyncSession, zones: list[Zone]) -> dict[str, User]:
    """Create the admin, scout, vendor owner and citizens.

    Phones:
    - Admin: +23276000001
    - Scout: +23276000002 (verified, Kissy)
    - Vendor owner: +23276000003
    - Citizens: +23277000001 upwards, spread across zones
    """
    print("Seeding users...")

    result = await session.execute(select(User).where(User.role == UserRole.ADMIN).limit(1))
    if result.scalar_one_or_none():
        print("  Users already exist, skipping...")
        result = await session.execute(select(User).where(User.role != UserRole.CITIZEN))
        return {user.role.value: user for user in result.scalars().all()}

    admin = User(phone="+23276000001", name="Admin", role=UserRole.ADMIN, is_verified=True)
    scout = User(
        phone="+23276000002",
        name="Kissy Scout",
        role=UserRole.SCOUT,
        is_verified=True,
        reputation=200,
        primary_zone_id=zones[0].zone_id,
    )
    owner = User(phone="+23276000003", name="Vendor Owner", role=UserRole.VENDOR, is_verified=True)
    citizens = [
        User(
            phone=f"+232770{i:05d}",
            name=f"Citizen {i}",
            role=UserRole.CITIZEN,
            primary_zone_id=zones[i % len(zones)].zone_id,
        )
        for i in range(1, CITIZEN_COUNT + 1)
    ]

    session.add_all([admin, scout, owner, *citizens])
    await session.commit()

    print(f"  Created admin {admin.phone}, scout {scout.phone}, vendor owner {owner.phone}")
    print(f"  Created {len(citizens)} citizens")
    return {
        UserRole.ADMIN.value: admin,
        UserRole.SCOUT.value: scout,
        UserRole.VENDOR.value: owner,
    }


async def seed_vendor(session: AsyncSession, owner: User, zones: list[Zone]) -> Vendor:
    """Create 1 active vendor delivering to every zone, with the standard product range."""
    print("Seeding vendor...")

    result = await session.execute(select(Vendor).limit(1))
    vendor = result.scalar_one_or_none()
    if vendor is not None:
        print("  Vendor already exists, skipping...")
        return vendor

    vendor = Vendor(
        user_id=owner.user_id,
        business_name="Aqua Salone Water",
        description="Sachets, buckets and tanker deliveries across Freetown",
        phone=owner.phone,
        address="12 Kissy Road, Freetown",
        longitude=-13.2317,
        latitude=8.4657,
        is_active=True,
        is_verified=True,
        delivery_fee=2000,
        min_order=5000,
        delivery_zones=list(zones),
    )
    session.add(vendor)
    await session.flush()

    session.add_all(
        Product(vendor_id=vendor.vendor_id, name=name, unit=unit, price=price)
        for name, unit, price in PRODUCTS
    )
    await session.commit()

    print(f"  Created vendor: {vendor.business_name} with {len(PRODUCTS)} products")
    return vendor


async def main():
    """Main seed function."""
    print("=" * 60)
    print("Maji - Seed Data Script")
    print("=" * 60)
    print(f"  RESET_DATA: {RESET_DATA}")
    print(f"  CITIZEN_COUNT: {CITIZEN_COUNT}")
    print("=" * 60)

    async with async_session_maker() as session:
        if RESET_DATA:
            await reset_activity_data(session)

        zones = await seed_zones(session)
        users = await seed_users(session, zones)
        vendor = await seed_vendor(session, users[UserRole.VENDOR.value], zones)

    print("=" * 60)
    print("Seed data complete!")
    print(f"  Zones: {len(zones)}")
    print(f"  Vendor: {vendor.business_name} ({vendor.vendor_id})")
    print("=" * 60)
    print("")
    print("Log in with POST /api/v1/auth/otp/request then /api/v1/auth/otp/verify")
    print("=" * 60)

    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())

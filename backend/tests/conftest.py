"""Pytest configuration and fixtures for testing."""

from typing import AsyncGenerator
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from maji.core.database import Base
from maji.models import Alert, Order, OrderItem, Product, Transaction, User, Vendor, Zone
from maji.models.enums import (
    AlertStatus,
    AlertType,
    EscrowStatus,
    OrderStatus,
    PaymentProvider,
    TransactionStatus,
    UserRole,
)


# In-memory database shared by every connection of one test
@pytest_asyncio.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create a fresh SQLite database and yield a session bound to it."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with session_maker() as session:
        yield session

    await engine.dispose()


# Mock Redis client fixture
@pytest.fixture
def mock_redis() -> AsyncMock:
    """Create a mock Redis client."""
    redis = AsyncMock()

    # Mock common Redis operations
    redis.get = AsyncMock(return_value=None)
    redis.set = AsyncMock(return_value=True)
    redis.incr = AsyncMock(return_value=1)
    redis.delete = AsyncMock(return_value=2)
    redis.lpush = AsyncMock(return_value=1)
    redis.register_script = MagicMock(return_value=AsyncMock(return_value=1))

    return redis


@pytest.fixture
def mock_redis_service() -> AsyncMock:
    """Create a mock RedisService whose locks are always free."""
    service = AsyncMock()
    service.acquire_lock = AsyncMock(return_value=(True, "owner"))
    service.release_lock = AsyncMock(return_value=True)
    return service


@pytest.fixture
def mock_notifier() -> MagicMock:
    """Create a mock NotificationService recording scheduled notifications."""
    notifier = MagicMock()
    notifier.dispatch = MagicMock()
    notifier.broadcast_zone = MagicMock()
    return notifier


# ==================== Model factories ====================


@pytest.fixture
def make_user(db_session: AsyncSession):
    counter = {"n": 0}

    async def _make(role: UserRole = UserRole.CITIZEN, **kwargs) -> User:
        counter["n"] += 1
        user = User(
            phone=kwargs.pop("phone", f"+232760{counter['n']:05d}"),
            role=role,
            **kwargs,
        )
        db_session.add(user)
        await db_session.commit()
        return user

    return _make


@pytest_asyncio.fixture
async def zone(db_session: AsyncSession) -> Zone:
    zone = Zone(name="Kissy", slug="kissy")
    db_session.add(zone)
    await db_session.commit()
    return zone


@pytest_asyncio.fixture
async def customer(make_user) -> User:
    return await make_user(UserRole.CITIZEN)


@pytest_asyncio.fixture
async def admin(make_user) -> User:
    return await make_user(UserRole.ADMIN)


@pytest_asyncio.fixture
async def vendor_owner(make_user) -> User:
    return await make_user(UserRole.VENDOR)


@pytest_asyncio.fixture
async def vendor(db_session: AsyncSession, vendor_owner: User) -> Vendor:
    """Active, verified vendor: delivery fee 2000, minimum order 10000."""
    vendor = Vendor(
        user_id=vendor_owner.user_id,
        business_name="Aqua Salone Water",
        phone=vendor_owner.phone,
        is_active=True,
        is_verified=True,
        delivery_fee=2000,
        min_order=10000,
    )
    db_session.add(vendor)
    await db_session.commit()
    return vendor


@pytest_asyncio.fixture
async def product(db_session: AsyncSession, vendor: Vendor) -> Product:
    """Available product priced at 5000 Leones."""
    product = Product(
        vendor_id=vendor.vendor_id,
        name="Sachet water (bag of 30)",
        unit="bag",
        price=5000,
    )
    db_session.add(product)
    await db_session.commit()
    return product


@pytest.fixture
def make_order(db_session: AsyncSession, customer: User, vendor: Vendor, product: Product):
    """Insert an order directly in a given status, optionally with a transaction."""
    counter = {"n": 0}

    async def _make(
        status: OrderStatus = OrderStatus.PENDING,
        transaction_status: TransactionStatus | None = None,
        escrow_status: EscrowStatus = EscrowStatus.NONE,
    ) -> Order:
        counter["n"] += 1
        order = Order(
            order_number=f"MJ-2026-{counter['n']:06d}",
            customer_id=customer.user_id,
            vendor_id=vendor.vendor_id,
            delivery_address="12 Kissy Road",
            subtotal=20000,
            delivery_fee=2000,
            platform_fee=1000,
            total_amount=23000,
            status=status,
            items=[
                OrderItem(
                    product_id=product.product_id,
                    quantity=4,
                    unit_price=5000,
                    total_price=20000,
                )
            ],
        )
        db_session.add(order)
        await db_session.flush()
        if transaction_status is not None:
            db_session.add(
                Transaction(
                    order_id=order.order_id,
                    amount=order.total_amount,
                    provider=PaymentProvider.ORANGE_MONEY,
                    payer_phone=customer.phone,
                    status=transaction_status,
                    escrow_status=escrow_status,
                )
            )
        await db_session.commit()
        return order

    return _make


@pytest.fixture
def make_alert(db_session: AsyncSession):
    async def _make(zone: Zone, scout: User, **kwargs) -> Alert:
        alert = Alert(
            zone_id=zone.zone_id,
            scout_id=scout.user_id,
            type=kwargs.pop("type", AlertType.WATER_COMING),
            confidence=kwargs.pop("confidence", 0.5),
            status=kwargs.pop("status", AlertStatus.ACTIVE),
            **kwargs,
        )
        db_session.add(alert)
        await db_session.commit()
        return alert

    return _make

"""
Test Configuration and Fixtures

This module provides:
- Test environment variables (log directory, test database name)
- An in-memory unit of work shared by use case tests
- The mock payment gateway and settings used by payment and wallet tests
- Entity builders for users, fixed-price listings and auctions

Architecture:
- Unit tests (marked `unit`): drive use cases through InMemoryUnitOfWork
- API tests (marked `api`): run the FastAPI app with the unit of work overridden
"""

# =============================================================================
# CRITICAL: Environment setup MUST happen before any other imports
# Settings and the loguru sink read these at import time
# =============================================================================
import os
from pathlib import Path


def _early_setup_test_environment() -> None:
    os.environ.setdefault('POSTGRES_DB', 'voltbay_test_db')

    test_log_dir = Path(__file__).parent / 'test_log'
    test_log_dir.mkdir(exist_ok=True)
    os.environ['TEST_LOG_DIR'] = str(test_log_dir)


_early_setup_test_environment()

from collections.abc import Callable  # noqa: E402
from datetime import datetime, timedelta, timezone  # noqa: E402
from decimal import Decimal  # noqa: E402
from typing import Optional  # noqa: E402

import pytest  # noqa: E402
from pydantic import SecretStr  # noqa: E402

from src.platform.config.core_setting import Settings  # noqa: E402
from src.service.marketplace.domain.entity.product_entity import Product  # noqa: E402
from src.service.marketplace.domain.entity.user_entity import UserEntity, UserRole  # noqa: E402
from src.service.marketplace.driven_adapter.gateway.mock_payment_gateway import (  # noqa: E402
    MockPaymentGateway,
)
from test.constants import TEST_PUBLIC_KEY, WEBHOOK_SECRET  # noqa: E402
from test.service.marketplace.in_memory_uow import InMemoryStore, InMemoryUnitOfWork  # noqa: E402


# =============================================================================
# Core fixtures
# =============================================================================
@pytest.fixture
def now() -> datetime:
    return datetime(2026, 6, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def uow(store: InMemoryStore) -> InMemoryUnitOfWork:
    return InMemoryUnitOfWork(store)


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        PAYMENT_MINIMUM_AMOUNT=Decimal('1.00'),
        PLATFORM_FEE_PERCENTAGE=Decimal('0.025'),
        PAYMENT_WEBHOOK_SECRET=SecretStr(WEBHOOK_SECRET),
        QUOTE_REQUEST_TTL_DAYS=30,
    )


@pytest.fixture
def payment_gateway() -> MockPaymentGateway:
    return MockPaymentGateway(
        public_key=TEST_PUBLIC_KEY, webhook_secret=SecretStr(WEBHOOK_SECRET)
    )


# =============================================================================
# Entity builders
# =============================================================================
@pytest.fixture
def create_user(uow: InMemoryUnitOfWork) -> Callable:
    async def _create(
        *, role: UserRole = UserRole.BUYER, email: Optional[str] = None, name: str = 'Test User'
    ) -> UserEntity:
        sequence = len(uow.store.users)  # type: ignore[attr-defined]
        return await uow.user_repo.create(
            user=UserEntity(
                email=email or f'{role.value}_{sequence}@voltbay.dev',
                name=name,
                hashed_password='hashed',
                role=role,
            )
        )

    return _create


@pytest.fixture
def create_listing(uow: InMemoryUnitOfWork, now: datetime) -> Callable:
    async def _create(*, owner_id: int, price: Decimal = Decimal('450.00')) -> Product:
        return await uow.product_repo.create(
            product=Product.create(
                owner_id=owner_id,
                category_id=1,
                title='Monocrystalline Panel 400W',
                description='Tier 1 panel, 25 year warranty',
                price=price,
                now=now - timedelta(days=1),
            )
        )

    return _create


@pytest.fixture
def create_auction(uow: InMemoryUnitOfWork, now: datetime) -> Callable:
    async def _create(
        *,
        owner_id: int,
        minimum_bid: Decimal = Decimal('100.00'),
        buy_now_price: Optional[Decimal] = None,
        ends_in: timedelta = timedelta(days=3),
    ) -> Product:
        created_at = now - timedelta(days=7)
        product = Product.create(
            owner_id=owner_id,
            category_id=1,
            title='Hybrid Inverter 8kW',
            description='Lightly used, includes monitoring kit',
            price=minimum_bid,
            is_auction=True,
            minimum_bid=minimum_bid,
            buy_now_price=buy_now_price,
            auction_end_date=created_at + timedelta(days=1),
            now=created_at,
        )
        # Move the end date relative to the test clock after creation-time validation
        product.auction_end_date = now + ends_in
        return await uow.product_repo.create(product=product)

    return _create

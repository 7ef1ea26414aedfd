#!/usr/bin/env python3
"""
Database Seed Script
Populate demo data into the database

Features:
1. Create Users - admin, sellers, buyers and enterprise accounts (shared password)
2. Create Categories - top-level categories plus a few subcategories
3. Create Products - fixed-price listings and one running auction
4. Create Wallets - opening deposit for every buyer

Everything goes through the repositories inside one unit of work, so a failure
leaves the database untouched.
"""

import asyncio
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Optional

from sqlalchemy import text

from src.platform.config.di import container
from src.platform.database.db_setting import dispose_engine, get_session_maker
from src.platform.database.unit_of_work import AbstractUnitOfWork
from src.service.marketplace.domain.entity.category_entity import Category
from src.service.marketplace.domain.entity.product_entity import (
    Product,
    ProductCondition,
    ProductSpecification,
)
from src.service.marketplace.domain.entity.user_entity import UserEntity, UserRole
from src.service.marketplace.domain.entity.wallet_entity import TransactionType, WalletTransaction


DEFAULT_PASSWORD = 'P@ssw0rd'
OPENING_BALANCE = Decimal('1000.00')


@dataclass
class UserConfig:
    """User seed configuration"""

    email: str
    name: str
    role: UserRole


@dataclass
class CategoryConfig:
    name: str
    description: str
    parent: Optional[str] = None


@dataclass
class ProductConfig:
    owner_email: str
    category: str
    title: str
    price: Decimal
    condition: ProductCondition = ProductCondition.NEW
    is_auction: bool = False
    minimum_bid: Optional[Decimal] = None
    buy_now_price: Optional[Decimal] = None
    auction_days: int = 0
    specifications: list[ProductSpecification] = field(default_factory=list)
    location: Optional[str] = None


TEST_USERS = [
    UserConfig(email='admin@voltbay.dev', name='VoltBay Admin', role=UserRole.ADMIN),
    UserConfig(email='seller1@voltbay.dev', name='Sunrise Solar Supply', role=UserRole.SELLER),
    UserConfig(email='seller2@voltbay.dev', name='Desert Power Surplus', role=UserRole.SELLER),
    UserConfig(email='buyer1@voltbay.dev', name='Home Installer', role=UserRole.BUYER),
    UserConfig(email='buyer2@voltbay.dev', name='Off-grid Cabin', role=UserRole.BUYER),
    UserConfig(
        email='vendor@voltbay.dev', name='Utility Modules Inc', role=UserRole.ENTERPRISE_VENDOR
    ),
    UserConfig(
        email='epc@voltbay.dev', name='Gigawatt EPC Partners', role=UserRole.ENTERPRISE_BUYER
    ),
]

TEST_CATEGORIES = [
    CategoryConfig('Solar Panels', 'Photovoltaic panels for converting sunlight to electricity'),
    CategoryConfig('Batteries', 'Energy storage solutions for solar systems'),
    CategoryConfig('Inverters', 'Convert DC power from solar panels to AC power'),
    CategoryConfig('Charge Controllers', 'Regulate power flow from solar panels to batteries'),
    CategoryConfig('Mounting Systems', 'Hardware for mounting solar panels'),
    CategoryConfig(
        'Monocrystalline Panels', 'High-efficiency single crystal panels', parent='Solar Panels'
    ),
    CategoryConfig(
        'Polycrystalline Panels', 'Cost-effective multi-crystal panels', parent='Solar Panels'
    ),
    CategoryConfig('Lithium Batteries', 'Lithium-ion battery systems', parent='Batteries'),
]

TEST_PRODUCTS = [
    ProductConfig(
        owner_email='seller1@voltbay.dev',
        category='Monocrystalline Panels',
        title='400W monocrystalline panel',
        price=Decimal('189.00'),
        specifications=[
            ProductSpecification(name='Wattage', value='400', unit='W'),
            ProductSpecification(name='Efficiency', value='21.3', unit='%'),
        ],
        location='Phoenix, AZ',
    ),
    ProductConfig(
        owner_email='seller1@voltbay.dev',
        category='Inverters',
        title='6kW hybrid inverter',
        price=Decimal('1249.00'),
        condition=ProductCondition.REFURBISHED,
        specifications=[ProductSpecification(name='Output', value='6', unit='kW')],
        location='Phoenix, AZ',
    ),
    ProductConfig(
        owner_email='seller2@voltbay.dev',
        category='Lithium Batteries',
        title='10kWh LiFePO4 battery bank',
        price=Decimal('3200.00'),
        condition=ProductCondition.USED,
        is_auction=True,
        minimum_bid=Decimal('1500.00'),
        buy_now_price=Decimal('3200.00'),
        auction_days=7,
        specifications=[ProductSpecification(name='Capacity', value='10', unit='kWh')],
        location='Tucson, AZ',
    ),
    ProductConfig(
        owner_email='seller2@voltbay.dev',
        category='Mounting Systems',
        title='Ground mount rail kit (8 panels)',
        price=Decimal('420.00'),
        location='Las Vegas, NV',
    ),
]


async def create_users(uow: AbstractUnitOfWork) -> dict[str, UserEntity]:
    print(f'👥 Creating {len(TEST_USERS)} users...')
    password_hasher = container.password_hasher()

    users: dict[str, UserEntity] = {}
    for config in TEST_USERS:
        user = UserEntity(
            email=config.email, name=config.name, role=config.role, is_verified=True
        )
        user.set_password(DEFAULT_PASSWORD, password_hasher)
        created = await uow.user_repo.create(user=user)
        users[created.email] = created
        print(f'   ✅ Created {config.role.value}: ID={created.id}, Email={created.email}')

    print(f'   📧 Credentials: {DEFAULT_PASSWORD}')
    return users


async def create_categories(uow: AbstractUnitOfWork) -> dict[str, Category]:
    print(f'📁 Creating {len(TEST_CATEGORIES)} categories...')

    categories: dict[str, Category] = {}
    for config in TEST_CATEGORIES:
        parent_id = categories[config.parent].id if config.parent else None
        created = await uow.category_repo.create(
            category=Category.create(
                name=config.name, description=config.description, parent_id=parent_id
            )
        )
        categories[created.name] = created
        print(f'   ✅ Created category: ID={created.id}, Name={created.name}')
    return categories


async def create_products(
    uow: AbstractUnitOfWork,
    users: dict[str, UserEntity],
    categories: dict[str, Category],
) -> None:
    print(f'🔆 Creating {len(TEST_PRODUCTS)} products...')
    now = datetime.now(timezone.utc)

    for config in TEST_PRODUCTS:
        product = Product.create(
            owner_id=users[config.owner_email].id,  # type: ignore[arg-type]
            category_id=categories[config.category].id,  # type: ignore[arg-type]
            title=config.title,
            description=f'{config.title}, listed by the seed script',
            price=config.price,
            condition=config.condition,
            is_auction=config.is_auction,
            minimum_bid=config.minimum_bid,
            buy_now_price=config.buy_now_price,
            auction_end_date=now + timedelta(days=config.auction_days)
            if config.is_auction
            else None,
            specifications=config.specifications,
            location=config.location,
            now=now,
        )
        created = await uow.product_repo.create(product=product)
        kind = 'auction' if created.is_auction else 'fixed price'
        print(f'   ✅ Created {kind}: ID={created.id}, Title={created.title}')


async def create_wallets(uow: AbstractUnitOfWork, users: dict[str, UserEntity]) -> None:
    buyers = [
        u for u in users.values() if u.role in (UserRole.BUYER, UserRole.ENTERPRISE_BUYER)
    ]
    print(f'👛 Funding {len(buyers)} wallets with ${OPENING_BALANCE}...')

    for user in buyers:
        wallet = await uow.wallet_repo.get_or_create(user_id=user.id)  # type: ignore[arg-type]
        wallet = await uow.wallet_repo.credit(
            wallet_id=wallet.id,  # type: ignore[arg-type]
            amount=OPENING_BALANCE,
        )
        await uow.wallet_repo.add_transaction(
            transaction=WalletTransaction.record(
                wallet_id=wallet.id,  # type: ignore[arg-type]
                type=TransactionType.DEPOSIT,
                amount=OPENING_BALANCE,
                description='Opening balance',
                reference='seed',
            )
        )
        print(f'   ✅ Wallet for {user.email}: balance={wallet.balance}')


async def verify_data() -> None:
    """Verify seeded data"""
    print('🔍 Verifying seeded data...')

    async with get_session_maker()() as session:
        for table in ['user', 'category', 'product', 'wallet', 'wallet_transaction']:
            result = await session.execute(text(f'SELECT COUNT(*) FROM "{table}"'))
            print(f'   {table} count: {result.scalar()}')

    print('   ✅ Data verification completed!')


async def _seed_data() -> None:
    """Seed everything in a single unit of work"""
    async with container.unit_of_work() as uow:
        users = await create_users(uow)
        print()
        categories = await create_categories(uow)
        print()
        await create_products(uow, users, categories)
        print()
        await create_wallets(uow, users)
        print()

        await uow.commit()
        print('✅ All data committed successfully!')


async def main() -> None:
    print('🌱 Starting data seeding...')
    print('=' * 50)

    try:
        await _seed_data()
        await verify_data()

        print()
        print('=' * 50)
        print('🌱 Data seeding completed!')
        print('📋 Test accounts:')
        for user in TEST_USERS:
            print(f'   {user.role.value}: {user.email} / {DEFAULT_PASSWORD}')
    finally:
        await dispose_engine()


if __name__ == '__main__':
    asyncio.run(main())

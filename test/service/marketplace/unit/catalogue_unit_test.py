from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Callable

import pytest

from src.platform.exception.exceptions import (
    ConflictError,
    DomainError,
    ForbiddenError,
    NotFoundError,
)
from src.service.marketplace.app.command.admin_moderation_use_case import AdminModerationUseCase
from src.service.marketplace.app.command.create_product_use_case import CreateProductUseCase
from src.service.marketplace.app.dto.page import PageRequest
from src.service.marketplace.app.dto.product_filter import ProductFilter
from src.service.marketplace.app.query.product_query_use_case import ProductQueryUseCase
from src.service.marketplace.domain.entity.category_entity import Category
from src.service.marketplace.domain.entity.product_entity import (
    Product,
    ProductSpecification,
    ProductStatus,
)
from src.service.marketplace.domain.entity.user_entity import UserRole
from test.service.marketplace.in_memory_uow import InMemoryUnitOfWork


@pytest.mark.unit
class TestProductCreation:
    def test_fixed_price_listing_drops_auction_fields(self):
        product = Product.create(
            owner_id=1,
            category_id=1,
            title='  Charge Controller  ',
            description='MPPT 60A',
            price=Decimal('189.999'),
            minimum_bid=Decimal('10'),
            auction_end_date=datetime.now(timezone.utc) + timedelta(days=1),
        )

        assert product.title == 'Charge Controller'
        assert product.price == Decimal('190.00')
        assert product.minimum_bid is None
        assert product.auction_end_date is None
        assert product.status == ProductStatus.ACTIVE

    @pytest.mark.parametrize(
        'overrides, message',
        [
            ({'minimum_bid': None}, 'Auction listings require a positive minimum bid'),
            ({'auction_end_date': None}, 'Auction listings require an auction end date'),
            ({'ends_in': timedelta(hours=-1)}, 'Auction end date must be in the future'),
            (
                {'buy_now_price': Decimal('50')},
                'Buy now price must be greater than the minimum bid',
            ),
        ],
    )
    def test_auction_validation(self, overrides: dict, message: str):
        overrides = dict(overrides)
        now = datetime.now(timezone.utc)
        fields = dict(
            owner_id=1,
            category_id=1,
            title='Battery Bank',
            description='48V lithium',
            price=Decimal('100'),
            is_auction=True,
            minimum_bid=Decimal('100'),
            auction_end_date=now + overrides.pop('ends_in', timedelta(days=2)),
            now=now,
        )
        fields.update(overrides)

        with pytest.raises(DomainError) as exc_info:
            Product.create(**fields)

        assert exc_info.value.message == message

    def test_specifications_round_trip_through_dicts(self):
        spec = ProductSpecification(name='Efficiency', value='21.3', unit='%')

        assert ProductSpecification.from_dict(spec.to_dict()) == spec


@pytest.mark.unit
class TestCreateProductUseCase:
    @pytest.mark.asyncio
    async def test_seller_lists_into_existing_category(
        self, uow: InMemoryUnitOfWork, create_user: Callable
    ) -> None:
        seller = await create_user(role=UserRole.SELLER)
        category = await uow.category_repo.create(category=Category.create(name='Solar Panels'))

        product = await CreateProductUseCase(uow=uow).execute(
            owner=seller,
            category_id=category.id,
            title='Bifacial Panel 550W',
            description='Half-cut cells',
            price=Decimal('310'),
        )

        assert product.id is not None
        assert product.owner_id == seller.id
        assert uow.commits == 1

    @pytest.mark.asyncio
    async def test_buyer_cannot_list(self, uow: InMemoryUnitOfWork, create_user: Callable) -> None:
        buyer = await create_user(role=UserRole.BUYER)

        with pytest.raises(ForbiddenError):
            await CreateProductUseCase(uow=uow).execute(
                owner=buyer,
                category_id=1,
                title='Panel',
                description='',
                price=Decimal('10'),
            )

    @pytest.mark.asyncio
    async def test_unknown_category(self, uow: InMemoryUnitOfWork, create_user: Callable) -> None:
        seller = await create_user(role=UserRole.SELLER)

        with pytest.raises(NotFoundError):
            await CreateProductUseCase(uow=uow).execute(
                owner=seller,
                category_id=404,
                title='Panel',
                description='',
                price=Decimal('10'),
            )


@pytest.mark.unit
class TestProductQueries:
    @pytest.mark.asyncio
    async def test_catalogue_filters(
        self,
        uow: InMemoryUnitOfWork,
        create_user: Callable,
        create_listing: Callable,
        create_auction: Callable,
    ) -> None:
        seller = await create_user(role=UserRole.SELLER)
        cheap = await create_listing(owner_id=seller.id, price=Decimal('90'))
        pricey = await create_listing(owner_id=seller.id, price=Decimal('900'))
        auction = await create_auction(owner_id=seller.id)
        query = ProductQueryUseCase(product_repo=uow.product_repo)

        auctions = await query.list_products(
            filter=ProductFilter(is_auction=True), page=PageRequest.of()
        )
        affordable = await query.list_products(
            filter=ProductFilter(max_price=Decimal('100')), page=PageRequest.of()
        )

        assert [p.id for p in auctions.items] == [auction.id]
        assert cheap.id in {p.id for p in affordable.items}
        assert pricey.id not in {p.id for p in affordable.items}

    def test_page_request_is_clamped(self):
        page = PageRequest.of(page=0, limit=1000)

        assert page.page == 1
        assert page.limit == 100
        assert page.offset == 0


@pytest.mark.unit
class TestAdminModeration:
    @pytest.fixture
    def use_case(self, uow: InMemoryUnitOfWork) -> AdminModerationUseCase:
        return AdminModerationUseCase(uow=uow)

    @pytest.mark.asyncio
    async def test_suspend_then_approve(
        self,
        use_case: AdminModerationUseCase,
        create_user: Callable,
        create_listing: Callable,
    ) -> None:
        seller = await create_user(role=UserRole.SELLER)
        listing = await create_listing(owner_id=seller.id)

        suspended = await use_case.suspend_product(product_id=listing.id)
        approved = await use_case.approve_product(product_id=listing.id)

        assert suspended.status == ProductStatus.SUSPENDED
        assert approved.status == ProductStatus.ACTIVE

    @pytest.mark.asyncio
    async def test_sold_product_cannot_be_suspended(
        self,
        use_case: AdminModerationUseCase,
        uow: InMemoryUnitOfWork,
        create_user: Callable,
        create_listing: Callable,
    ) -> None:
        seller = await create_user(role=UserRole.SELLER)
        listing = await create_listing(owner_id=seller.id)
        await uow.product_repo.update(product=listing.mark_as_sold())

        with pytest.raises(DomainError):
            await use_case.suspend_product(product_id=listing.id)

    @pytest.mark.asyncio
    async def test_verify_user(self, use_case: AdminModerationUseCase, create_user: Callable):
        seller = await create_user(role=UserRole.SELLER)

        verified = await use_case.verify_user(user_id=seller.id)

        assert verified.is_verified is True

    @pytest.mark.asyncio
    async def test_duplicate_category_conflicts(self, use_case: AdminModerationUseCase):
        await use_case.create_category(name='Batteries')

        with pytest.raises(ConflictError):
            await use_case.create_category(name=' Batteries ')

    @pytest.mark.asyncio
    async def test_only_empty_category_can_be_deleted(
        self,
        use_case: AdminModerationUseCase,
        uow: InMemoryUnitOfWork,
        create_user: Callable,
    ) -> None:
        seller = await create_user(role=UserRole.SELLER)
        panels = await use_case.create_category(name='Solar Panels')
        cables = await use_case.create_category(name='Cables')
        await CreateProductUseCase(uow=uow).execute(
            owner=seller,
            category_id=panels.id,
            title='Thin Film Panel',
            description='Flexible',
            price=Decimal('120'),
        )

        with pytest.raises(DomainError) as exc_info:
            await use_case.delete_category(category_id=panels.id)
        await use_case.delete_category(category_id=cables.id)

        assert exc_info.value.message == 'Cannot delete a category that still has products'
        assert await uow.category_repo.get_by_id(category_id=cables.id) is None
        assert [c.name for c in await uow.category_repo.list_all()] == ['Solar Panels']

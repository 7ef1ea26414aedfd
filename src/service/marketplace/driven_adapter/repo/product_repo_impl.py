from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import and_, case, func, or_, select, update

from src.platform.exception.exceptions import NotFoundError
from src.platform.logging.loguru_io import Logger
from src.service.marketplace.app.dto.page import Page, PageRequest
from src.service.marketplace.app.dto.product_filter import ProductFilter
from src.service.marketplace.app.interface.i_product_repo import IProductRepo
from src.service.marketplace.domain.entity.product_entity import (
    Product,
    ProductCondition,
    ProductSpecification,
    ProductStatus,
)
from src.service.marketplace.driven_adapter.model.product_model import ProductModel
from src.service.marketplace.driven_adapter.repo.base_repo import SessionRepo


def _running_auction(now: datetime):
    return and_(
        ProductModel.status == ProductStatus.ACTIVE.value,
        ProductModel.is_auction.is_(True),
        ProductModel.auction_end_date > now,
    )


class ProductRepoImpl(SessionRepo, IProductRepo):
    @Logger.io
    async def create(self, *, product: Product) -> Product:
        async with self._get_session() as session:
            product_model = ProductModel(
                owner_id=product.owner_id,
                category_id=product.category_id,
                title=product.title,
                description=product.description,
                price=product.price,
                condition=product.condition.value,
                status=product.status.value,
                is_auction=product.is_auction,
                minimum_bid=product.minimum_bid,
                current_bid=product.current_bid,
                buy_now_price=product.buy_now_price,
                auction_end_date=product.auction_end_date,
                specifications=[spec.to_dict() for spec in product.specifications],
                location=product.location,
            )
            session.add(product_model)
            await session.flush()
            await session.refresh(product_model)
            return self._to_entity(product_model)

    @Logger.io
    async def get_by_id(self, *, product_id: int) -> Optional[Product]:
        async with self._get_session() as session:
            # populate_existing: a re-read after a lost bid race must see the winner's row
            result = await session.execute(
                select(ProductModel)
                .where(ProductModel.id == product_id)
                .execution_options(populate_existing=True)
            )
            product_model = result.scalar_one_or_none()
            return self._to_entity(product_model) if product_model else None

    @Logger.io
    async def update(self, *, product: Product) -> Product:
        """Persist listing fields and status; current_bid only moves via raise_current_bid"""
        async with self._get_session() as session:
            product_model = await session.get(ProductModel, product.id)
            if product_model is None:
                raise NotFoundError(f'Product {product.id} not found')
            product_model.title = product.title
            product_model.description = product.description
            product_model.price = product.price
            product_model.condition = product.condition.value
            product_model.status = product.status.value
            product_model.buy_now_price = product.buy_now_price
            product_model.specifications = [spec.to_dict() for spec in product.specifications]
            product_model.location = product.location
            await session.flush()
            await session.refresh(product_model)
            return self._to_entity(product_model)

    @Logger.io
    async def raise_current_bid(
        self, *, product_id: int, amount: Decimal, now: datetime
    ) -> Optional[Product]:
        stmt = (
            update(ProductModel)
            .where(
                ProductModel.id == product_id,
                _running_auction(now),
                or_(
                    and_(ProductModel.current_bid.is_(None), ProductModel.minimum_bid <= amount),
                    ProductModel.current_bid < amount,
                ),
            )
            .values(current_bid=amount, updated_at=now)
            .returning(ProductModel)
            .execution_options(synchronize_session=False, populate_existing=True)
        )
        async with self._get_session() as session:
            product_model = (await session.execute(stmt)).scalar_one_or_none()
            return self._to_entity(product_model) if product_model else None

    @Logger.io
    async def close_auction(self, *, product_id: int, now: datetime) -> Optional[Product]:
        stmt = (
            update(ProductModel)
            .where(
                ProductModel.id == product_id,
                ProductModel.status == ProductStatus.ACTIVE.value,
                ProductModel.is_auction.is_(True),
                ProductModel.auction_end_date <= now,
            )
            .values(
                status=case(
                    (ProductModel.current_bid.is_(None), ProductStatus.EXPIRED.value),
                    else_=ProductStatus.ENDED.value,
                ),
                updated_at=now,
            )
            .returning(ProductModel)
            .execution_options(synchronize_session=False, populate_existing=True)
        )
        async with self._get_session() as session:
            product_model = (await session.execute(stmt)).scalar_one_or_none()
            return self._to_entity(product_model) if product_model else None

    @Logger.io
    async def mark_as_sold_if_available(self, *, product_id: int) -> Optional[Product]:
        stmt = (
            update(ProductModel)
            .where(
                ProductModel.id == product_id,
                ProductModel.status.not_in(
                    [ProductStatus.SOLD.value, ProductStatus.SUSPENDED.value]
                ),
            )
            .values(status=ProductStatus.SOLD.value, updated_at=func.now())
            .returning(ProductModel)
            .execution_options(synchronize_session=False, populate_existing=True)
        )
        async with self._get_session() as session:
            product_model = (await session.execute(stmt)).scalar_one_or_none()
            return self._to_entity(product_model) if product_model else None

    @Logger.io
    async def list_ids_to_settle(self, *, now: datetime, limit: int) -> List[int]:
        stmt = (
            select(ProductModel.id)
            .where(
                ProductModel.status == ProductStatus.ACTIVE.value,
                ProductModel.is_auction.is_(True),
                ProductModel.auction_end_date <= now,
            )
            .order_by(ProductModel.auction_end_date)
            .limit(limit)
        )
        async with self._get_session() as session:
            return list((await session.execute(stmt)).scalars().all())

    @Logger.io
    async def list_products(self, *, filter: ProductFilter, page: PageRequest) -> Page[Product]:
        stmt = select(ProductModel)
        if filter.status is not None:
            stmt = stmt.where(ProductModel.status == filter.status.value)
        if filter.owner_id is not None:
            stmt = stmt.where(ProductModel.owner_id == filter.owner_id)
        if filter.category_id is not None:
            stmt = stmt.where(ProductModel.category_id == filter.category_id)
        if filter.is_auction is not None:
            stmt = stmt.where(ProductModel.is_auction.is_(filter.is_auction))
        if filter.min_price is not None:
            stmt = stmt.where(ProductModel.price >= filter.min_price)
        if filter.max_price is not None:
            stmt = stmt.where(ProductModel.price <= filter.max_price)
        if filter.search:
            pattern = f'%{filter.search.strip()}%'
            stmt = stmt.where(
                or_(ProductModel.title.ilike(pattern), ProductModel.description.ilike(pattern))
            )
        stmt = stmt.order_by(ProductModel.created_at.desc(), ProductModel.id.desc())

        async with self._get_session() as session:
            return await self._paginate(session, stmt, page, self._to_entity)

    @Logger.io
    async def list_active_auctions(self, *, now: datetime, page: PageRequest) -> Page[Product]:
        stmt = (
            select(ProductModel)
            .where(_running_auction(now))
            .order_by(ProductModel.auction_end_date.asc(), ProductModel.id)
        )
        async with self._get_session() as session:
            return await self._paginate(session, stmt, page, self._to_entity)

    @Logger.io
    async def count_by_category(self, *, category_id: int) -> int:
        async with self._get_session() as session:
            result = await session.execute(
                select(func.count(ProductModel.id)).where(ProductModel.category_id == category_id)
            )
            return result.scalar_one()

    @staticmethod
    def _to_entity(product_model: ProductModel) -> Product:
        return Product(
            id=product_model.id,
            owner_id=product_model.owner_id,
            category_id=product_model.category_id,
            title=product_model.title,
            description=product_model.description,
            price=product_model.price,
            condition=ProductCondition(product_model.condition),
            status=ProductStatus(product_model.status),
            is_auction=product_model.is_auction,
            minimum_bid=product_model.minimum_bid,
            current_bid=product_model.current_bid,
            buy_now_price=product_model.buy_now_price,
            auction_end_date=product_model.auction_end_date,
            specifications=[
                ProductSpecification.from_dict(spec) for spec in product_model.specifications or []
            ],
            location=product_model.location,
            created_at=product_model.created_at,
            updated_at=product_model.updated_at,
        )

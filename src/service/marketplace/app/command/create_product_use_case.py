from datetime import datetime
from decimal import Decimal
from typing import List, Optional, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.database.unit_of_work import AbstractUnitOfWork
from src.platform.exception.exceptions import ForbiddenError, NotFoundError
from src.platform.logging.loguru_io import Logger
from src.service.marketplace.domain.entity.product_entity import (
    Product,
    ProductCondition,
    ProductSpecification,
)
from src.service.marketplace.domain.entity.user_entity import UserEntity


class CreateProductUseCase:
    def __init__(self, *, uow: AbstractUnitOfWork) -> None:
        self.uow = uow

    @classmethod
    @inject
    def depends(cls, uow: AbstractUnitOfWork = Depends(Provide[Container.unit_of_work])) -> Self:
        return cls(uow=uow)

    @Logger.io
    async def execute(
        self,
        *,
        owner: UserEntity,
        category_id: int,
        title: str,
        description: str,
        price: Decimal,
        condition: ProductCondition = ProductCondition.NEW,
        is_auction: bool = False,
        minimum_bid: Optional[Decimal] = None,
        buy_now_price: Optional[Decimal] = None,
        auction_end_date: Optional[datetime] = None,
        specifications: Optional[List[ProductSpecification]] = None,
        location: Optional[str] = None,
        publish: bool = True,
    ) -> Product:
        if not owner.can_sell or owner.id is None:
            raise ForbiddenError('Only sellers can perform this action')

        product = Product.create(
            owner_id=owner.id,
            category_id=category_id,
            title=title,
            description=description,
            price=price,
            condition=condition,
            is_auction=is_auction,
            minimum_bid=minimum_bid,
            buy_now_price=buy_now_price,
            auction_end_date=auction_end_date,
            specifications=specifications,
            location=location,
            publish=publish,
        )

        async with self.uow:
            if not await self.uow.category_repo.get_by_id(category_id=category_id):
                raise NotFoundError('Category not found')
            product = await self.uow.product_repo.create(product=product)
            await self.uow.commit()

        Logger.base.info(
            f'📦 [CATALOGUE] Product {product.id} listed by {owner.id} '
            f'({"auction" if product.is_auction else "fixed price"})'
        )
        return product

from datetime import datetime, timezone
from typing import Optional, Self

import attrs
from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.exception.exceptions import NotFoundError
from src.platform.logging.loguru_io import Logger
from src.service.marketplace.app.dto.page import Page, PageRequest
from src.service.marketplace.app.dto.product_filter import ProductFilter
from src.service.marketplace.app.interface.i_bid_repo import IBidRepo
from src.service.marketplace.app.interface.i_product_repo import IProductRepo
from src.service.marketplace.domain.entity.bid_entity import Bid
from src.service.marketplace.domain.entity.product_entity import Product


class ProductQueryUseCase:
    def __init__(self, *, product_repo: IProductRepo) -> None:
        self.product_repo = product_repo

    @classmethod
    @inject
    def depends(
        cls, product_repo: IProductRepo = Depends(Provide[Container.product_repo])
    ) -> Self:
        return cls(product_repo=product_repo)

    @Logger.io
    async def list_products(self, *, filter: ProductFilter, page: PageRequest) -> Page[Product]:
        return await self.product_repo.list_products(filter=filter, page=page)

    @Logger.io
    async def list_active_auctions(
        self, *, page: PageRequest, now: Optional[datetime] = None
    ) -> Page[Product]:
        return await self.product_repo.list_active_auctions(
            now=now or datetime.now(timezone.utc), page=page
        )

    @Logger.io
    async def list_my_products(
        self, *, owner_id: int, filter: ProductFilter, page: PageRequest
    ) -> Page[Product]:
        return await self.product_repo.list_products(
            filter=attrs.evolve(filter, owner_id=owner_id), page=page
        )

    @Logger.io
    async def get_product(self, *, product_id: int) -> Product:
        product = await self.product_repo.get_by_id(product_id=product_id)
        if not product:
            raise NotFoundError('Product not found')
        return product


class BidQueryUseCase:
    def __init__(self, *, bid_repo: IBidRepo, product_repo: IProductRepo) -> None:
        self.bid_repo = bid_repo
        self.product_repo = product_repo

    @classmethod
    @inject
    def depends(
        cls,
        bid_repo: IBidRepo = Depends(Provide[Container.bid_repo]),
        product_repo: IProductRepo = Depends(Provide[Container.product_repo]),
    ) -> Self:
        return cls(bid_repo=bid_repo, product_repo=product_repo)

    @Logger.io
    async def list_product_bids(self, *, product_id: int, page: PageRequest) -> Page[Bid]:
        if not await self.product_repo.get_by_id(product_id=product_id):
            raise NotFoundError('Product not found')
        return await self.bid_repo.list_by_product(product_id=product_id, page=page)

    @Logger.io
    async def list_my_bids(self, *, user_id: int, page: PageRequest) -> Page[Bid]:
        return await self.bid_repo.list_by_user(user_id=user_id, page=page)

from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.core_setting import Settings
from src.platform.config.di import Container
from src.platform.database.unit_of_work import AbstractUnitOfWork
from src.platform.exception.exceptions import DomainError, NotFoundError
from src.platform.logging.loguru_io import Logger
from src.service.marketplace.app.command.settle_auction_use_case import settle_ended_auction
from src.service.marketplace.domain.entity.auction_entity import AuctionState


class GetAuctionStateUseCase:
    """Read an auction's state, closing it first when its end date has passed."""

    def __init__(self, *, uow: AbstractUnitOfWork, platform_fee_percentage: Decimal) -> None:
        self.uow = uow
        self.platform_fee_percentage = platform_fee_percentage

    @classmethod
    @inject
    def depends(
        cls,
        uow: AbstractUnitOfWork = Depends(Provide[Container.unit_of_work]),
        settings: Settings = Depends(Provide[Container.config_service]),
    ) -> Self:
        return cls(uow=uow, platform_fee_percentage=settings.PLATFORM_FEE_PERCENTAGE)

    @Logger.io
    async def execute(self, *, product_id: int, now: Optional[datetime] = None) -> AuctionState:
        now = now or datetime.now(timezone.utc)
        async with self.uow:
            product = await self.uow.product_repo.get_by_id(product_id=product_id)
            if not product:
                raise NotFoundError('Product not found')
            if not product.is_auction:
                raise DomainError('This product is not an auction')

            if product.needs_settlement(now):
                await settle_ended_auction(
                    self.uow,
                    product=product,
                    now=now,
                    platform_fee_percentage=self.platform_fee_percentage,
                )
                await self.uow.commit()
                product = await self.uow.product_repo.get_by_id(product_id=product_id)
                if product is None:
                    raise NotFoundError('Product not found')

            highest = await self.uow.bid_repo.get_highest_bid(product_id=product_id)
            bid_count = await self.uow.bid_repo.count_by_product(product_id=product_id)

        return AuctionState.of(
            product,
            highest_bidder_id=highest.user_id if highest else None,
            bid_count=bid_count,
            now=now,
        )

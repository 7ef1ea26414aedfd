from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from opentelemetry import trace

from src.platform.config.core_setting import Settings
from src.platform.config.di import Container
from src.platform.database.unit_of_work import AbstractUnitOfWork
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.marketplace_metrics import metrics
from src.service.marketplace.app.command.settle_auction_use_case import settle_ended_auction
from src.service.marketplace.domain.entity.auction_entity import (
    AuctionState,
    BidRejectedError,
    BidRejectionKind,
)
from src.service.marketplace.domain.entity.bid_entity import Bid
from src.service.marketplace.domain.money import to_money


class PlaceBidUseCase:
    """
    Place a bid on a running auction.

    Flow (one unit of work):
    1. Load the product; an auction past its end date is settled first and the bid refused
    2. Domain checks: auction open, not the owner, amount beats the current bid
    3. Compare-and-set current_bid in SQL; a lost race is re-classified from fresh state
    4. Append the bid row and commit
    """

    def __init__(self, *, uow: AbstractUnitOfWork, platform_fee_percentage: Decimal) -> None:
        self.uow = uow
        self.platform_fee_percentage = platform_fee_percentage
        self.tracer = trace.get_tracer(__name__)

    @classmethod
    @inject
    def depends(
        cls,
        uow: AbstractUnitOfWork = Depends(Provide[Container.unit_of_work]),
        settings: Settings = Depends(Provide[Container.config_service]),
    ) -> Self:
        return cls(uow=uow, platform_fee_percentage=settings.PLATFORM_FEE_PERCENTAGE)

    @Logger.io
    async def execute(
        self,
        *,
        product_id: int,
        bidder_id: int,
        amount: Decimal,
        now: Optional[datetime] = None,
    ) -> AuctionState:
        try:
            state = await self._place(
                product_id=product_id,
                bidder_id=bidder_id,
                amount=to_money(amount),
                now=now or datetime.now(timezone.utc),
            )
        except BidRejectedError as e:
            metrics.record_bid(result=e.kind.value)
            raise
        metrics.record_bid(result='accepted')
        return state

    async def _place(
        self, *, product_id: int, bidder_id: int, amount: Decimal, now: datetime
    ) -> AuctionState:
        with self.tracer.start_as_current_span(
            'use_case.place_bid',
            attributes={'product.id': product_id, 'bidder.id': bidder_id},
        ):
            async with self.uow:
                product = await self.uow.product_repo.get_by_id(product_id=product_id)
                if not product:
                    raise BidRejectedError(BidRejectionKind.NOT_FOUND)

                if product.is_auction and product.needs_settlement(now):
                    await settle_ended_auction(
                        self.uow,
                        product=product,
                        now=now,
                        platform_fee_percentage=self.platform_fee_percentage,
                    )
                    await self.uow.commit()
                    raise BidRejectedError(BidRejectionKind.AUCTION_CLOSED, 'Auction has ended')

                product.validate_bid(bidder_id=bidder_id, amount=amount, now=now)

                updated = await self.uow.product_repo.raise_current_bid(
                    product_id=product_id, amount=amount, now=now
                )
                if updated is None:
                    # Another bid or the close landed first; explain with the fresh row
                    fresh = await self.uow.product_repo.get_by_id(product_id=product_id)
                    if fresh is None:
                        raise BidRejectedError(BidRejectionKind.NOT_FOUND)
                    fresh.validate_bid(bidder_id=bidder_id, amount=amount, now=now)
                    raise BidRejectedError(BidRejectionKind.BID_TOO_LOW)

                await self.uow.bid_repo.create(
                    bid=Bid.create(product_id=product_id, user_id=bidder_id, amount=amount)
                )
                bid_count = await self.uow.bid_repo.count_by_product(product_id=product_id)
                await self.uow.commit()

            Logger.base.info(f'💰 [BID] {bidder_id} bid {amount} on product {product_id}')
            return AuctionState.of(
                updated, highest_bidder_id=bidder_id, bid_count=bid_count, now=now
            )

from datetime import datetime, timezone
from decimal import Decimal
from typing import List, Optional, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.core_setting import Settings
from src.platform.config.di import Container
from src.platform.database.unit_of_work import AbstractUnitOfWork
from src.platform.exception.exceptions import DomainError, NotFoundError
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.marketplace_metrics import metrics
from src.service.marketplace.domain.entity.auction_entity import (
    AuctionOutcome,
    AuctionSettlement,
)
from src.service.marketplace.domain.entity.product_entity import Product, ProductStatus


CLOSED_STATUSES = (ProductStatus.ENDED, ProductStatus.EXPIRED)


@Logger.io
async def settle_ended_auction(
    uow: AbstractUnitOfWork,
    *,
    product: Product,
    now: datetime,
    platform_fee_percentage: Decimal,
) -> AuctionSettlement:
    """
    Close an ended auction (if still active) and describe its outcome.

    Runs inside the caller's unit of work and does not commit. Safe to call
    repeatedly: once closed, the winner is simply re-derived from the highest bid.
    A sold auction reports whoever paid for it, which is not necessarily the
    highest bidder when the product went at its buy-now price.
    """
    if product.id is None:
        raise NotFoundError('Product not found')

    if product.status == ProductStatus.SOLD:
        return await _settlement_of_sale(
            uow, product_id=product.id, now=now, platform_fee_percentage=platform_fee_percentage
        )

    if product.status == ProductStatus.ACTIVE:
        closed = await uow.product_repo.close_auction(product_id=product.id, now=now)
        # Bids are refused past the end date, so the highest bid is final from here on
        highest = await uow.bid_repo.get_highest_bid(product_id=product.id)
        if closed is not None:
            if highest is not None and highest.id is not None:
                await uow.bid_repo.mark_winning(bid_id=highest.id)
            metrics.record_auction_settled(outcome=closed.status.value)
            Logger.base.info(
                f'🔨 [AUCTION] Product {product.id} closed as {closed.status} '
                f'(winner={highest.user_id if highest else None})'
            )
    elif product.status in CLOSED_STATUSES:
        highest = await uow.bid_repo.get_highest_bid(product_id=product.id)
    else:
        raise DomainError(f'Auction cannot be settled while {product.status}')

    return AuctionSettlement.compute(
        product_id=product.id,
        winner_id=highest.user_id if highest else None,
        winning_bid_id=highest.id if highest else None,
        winning_amount=highest.amount if highest else None,
        platform_fee_percentage=platform_fee_percentage,
        settled_at=now,
    )


async def _settlement_of_sale(
    uow: AbstractUnitOfWork, *, product_id: int, now: datetime, platform_fee_percentage: Decimal
) -> AuctionSettlement:
    sale = await uow.order_repo.get_sale_for_product(product_id=product_id)
    highest = await uow.bid_repo.get_highest_bid(product_id=product_id)
    if sale is None:
        # Sold without an order on record: only a bid that won the closed auction counts
        won = highest if highest is not None and highest.is_winning else None
        return AuctionSettlement.compute(
            product_id=product_id,
            winner_id=won.user_id if won else None,
            winning_bid_id=won.id if won else None,
            winning_amount=won.amount if won else None,
            platform_fee_percentage=platform_fee_percentage,
            settled_at=now,
        )

    won_by_bid = (
        highest is not None
        and highest.user_id == sale.buyer_id
        and highest.amount == sale.total_amount
    )
    return AuctionSettlement.compute(
        product_id=product_id,
        winner_id=sale.buyer_id,
        winning_bid_id=highest.id if won_by_bid and highest else None,
        winning_amount=sale.total_amount,
        platform_fee_percentage=platform_fee_percentage,
        settled_at=now,
        outcome=AuctionOutcome.ENDED if won_by_bid else AuctionOutcome.BOUGHT_NOW,
    )


class SettleAuctionUseCase:
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
    async def execute(
        self, *, product_id: int, now: Optional[datetime] = None
    ) -> AuctionSettlement:
        now = now or datetime.now(timezone.utc)
        async with self.uow:
            product = await self.uow.product_repo.get_by_id(product_id=product_id)
            if not product:
                raise NotFoundError('Product not found')
            if not product.is_auction:
                raise DomainError('This product is not an auction')
            if not product.auction_has_ended(now):
                raise DomainError('Auction has not ended yet')

            settlement = await settle_ended_auction(
                self.uow,
                product=product,
                now=now,
                platform_fee_percentage=self.platform_fee_percentage,
            )
            await self.uow.commit()
            return settlement

    @Logger.io
    async def settle_expired(
        self, *, now: Optional[datetime] = None, limit: int = 100
    ) -> List[AuctionSettlement]:
        """Sweep every ended auction still marked active; idempotent, meant for a scheduler"""
        now = now or datetime.now(timezone.utc)
        settlements: List[AuctionSettlement] = []
        async with self.uow:
            product_ids = await self.uow.product_repo.list_ids_to_settle(now=now, limit=limit)
            for product_id in product_ids:
                product = await self.uow.product_repo.get_by_id(product_id=product_id)
                if product is None:
                    continue
                settlements.append(
                    await settle_ended_auction(
                        self.uow,
                        product=product,
                        now=now,
                        platform_fee_percentage=self.platform_fee_percentage,
                    )
                )
            await self.uow.commit()

        Logger.base.info(f'🧹 [AUCTION] Settled {len(settlements)} expired auctions')
        return settlements

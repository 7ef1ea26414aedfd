from datetime import datetime
from decimal import Decimal
from enum import StrEnum
from typing import TYPE_CHECKING, Optional

import attrs

from src.platform.exception.exceptions import DomainError
from src.service.marketplace.domain.money import CENT, split_platform_fee, to_money


if TYPE_CHECKING:
    from src.service.marketplace.domain.entity.product_entity import Product


class BidRejectionKind(StrEnum):
    NOT_FOUND = 'not_found'
    AUCTION_CLOSED = 'auction_closed'
    SELF_BID = 'self_bid'
    BID_TOO_LOW = 'bid_too_low'


_DEFAULT_MESSAGES = {
    BidRejectionKind.NOT_FOUND: 'Product not found',
    BidRejectionKind.AUCTION_CLOSED: 'Auction has ended',
    BidRejectionKind.SELF_BID: 'You cannot bid on your own product',
    BidRejectionKind.BID_TOO_LOW: 'Bid amount is too low',
}


class BidRejectedError(DomainError):
    def __init__(self, kind: BidRejectionKind, message: str | None = None) -> None:
        self.kind = kind
        status_code = 404 if kind == BidRejectionKind.NOT_FOUND else 400
        super().__init__(message or _DEFAULT_MESSAGES[kind], status_code)


class AuctionOutcome(StrEnum):
    ENDED = 'ended'  # closed with a winner
    EXPIRED = 'expired'  # closed without bids
    BOUGHT_NOW = 'bought_now'  # sold at the buy-now price before any bid won


@attrs.define(frozen=True)
class AuctionState:
    product_id: int
    minimum_bid: Decimal
    current_bid: Optional[Decimal]
    highest_bidder_id: Optional[int]
    bid_count: int
    auction_end_date: datetime
    is_closed: bool
    buy_now_price: Optional[Decimal] = None

    @property
    def minimum_next_bid(self) -> Decimal:
        if self.current_bid is None:
            return self.minimum_bid
        return self.current_bid + CENT

    @classmethod
    def of(
        cls,
        product: 'Product',
        *,
        highest_bidder_id: Optional[int],
        bid_count: int,
        now: datetime,
    ) -> 'AuctionState':
        if product.id is None or product.minimum_bid is None or product.auction_end_date is None:
            raise DomainError('This product is not an auction')
        return cls(
            product_id=product.id,
            minimum_bid=product.minimum_bid,
            current_bid=product.current_bid,
            highest_bidder_id=highest_bidder_id,
            bid_count=bid_count,
            auction_end_date=product.auction_end_date,
            is_closed=not product.is_auction_open(now),
            buy_now_price=product.buy_now_price,
        )


@attrs.define(frozen=True)
class AuctionSettlement:
    product_id: int
    outcome: AuctionOutcome
    winner_id: Optional[int]
    winning_bid_id: Optional[int]
    winning_amount: Optional[Decimal]
    platform_fee_percentage: Decimal
    platform_fee: Optional[Decimal]
    seller_payout: Optional[Decimal]
    settled_at: datetime

    @classmethod
    def compute(
        cls,
        *,
        product_id: int,
        winner_id: Optional[int],
        winning_bid_id: Optional[int],
        winning_amount: Optional[Decimal],
        platform_fee_percentage: Decimal,
        settled_at: datetime,
        outcome: AuctionOutcome = AuctionOutcome.ENDED,
    ) -> 'AuctionSettlement':
        if winner_id is None or winning_amount is None:
            return cls(
                product_id=product_id,
                outcome=AuctionOutcome.EXPIRED,
                winner_id=None,
                winning_bid_id=None,
                winning_amount=None,
                platform_fee_percentage=platform_fee_percentage,
                platform_fee=None,
                seller_payout=None,
                settled_at=settled_at,
            )

        fee, payout = split_platform_fee(winning_amount, platform_fee_percentage)
        return cls(
            product_id=product_id,
            outcome=outcome,
            winner_id=winner_id,
            winning_bid_id=winning_bid_id,
            winning_amount=to_money(winning_amount),
            platform_fee_percentage=platform_fee_percentage,
            platform_fee=fee,
            seller_payout=payout,
            settled_at=settled_at,
        )

from datetime import datetime, timezone
from decimal import Decimal
from enum import StrEnum
from typing import Any, List, Optional

import attrs

from src.platform.exception.exceptions import DomainError
from src.platform.logging.loguru_io import Logger
from src.service.marketplace.domain.entity.auction_entity import (
    AuctionOutcome,
    BidRejectedError,
    BidRejectionKind,
)
from src.service.marketplace.domain.money import to_money


class ProductStatus(StrEnum):
    DRAFT = 'draft'
    ACTIVE = 'active'
    ENDED = 'ended'
    SOLD = 'sold'
    EXPIRED = 'expired'
    SUSPENDED = 'suspended'


class ProductCondition(StrEnum):
    NEW = 'new'
    USED = 'used'
    REFURBISHED = 'refurbished'


@attrs.define(frozen=True)
class ProductSpecification:
    name: str
    value: str
    unit: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return attrs.asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> 'ProductSpecification':
        return cls(name=str(data['name']), value=str(data['value']), unit=data.get('unit'))


@attrs.define
class Product:
    owner_id: int
    category_id: int
    title: str
    description: str
    price: Decimal
    condition: ProductCondition = ProductCondition.NEW
    status: ProductStatus = ProductStatus.ACTIVE
    is_auction: bool = False
    minimum_bid: Optional[Decimal] = None
    current_bid: Optional[Decimal] = None
    buy_now_price: Optional[Decimal] = None
    auction_end_date: Optional[datetime] = None
    specifications: List[ProductSpecification] = attrs.field(factory=list)
    location: Optional[str] = None
    id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    @Logger.io
    def create(
        cls,
        *,
        owner_id: int,
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
        now: Optional[datetime] = None,
    ) -> 'Product':
        now = now or datetime.now(timezone.utc)

        if not title.strip():
            raise DomainError('Title is required')
        if price <= 0:
            raise DomainError('Price must be greater than 0')

        if is_auction:
            if minimum_bid is None or minimum_bid <= 0:
                raise DomainError('Auction listings require a positive minimum bid')
            if auction_end_date is None:
                raise DomainError('Auction listings require an auction end date')
            if auction_end_date <= now:
                raise DomainError('Auction end date must be in the future')
            if buy_now_price is not None and buy_now_price <= minimum_bid:
                raise DomainError('Buy now price must be greater than the minimum bid')
        else:
            # Auction-only fields are meaningless on a fixed-price listing
            minimum_bid = buy_now_price = auction_end_date = None

        return cls(
            owner_id=owner_id,
            category_id=category_id,
            title=title.strip(),
            description=description,
            price=to_money(price),
            condition=condition,
            status=ProductStatus.ACTIVE if publish else ProductStatus.DRAFT,
            is_auction=is_auction,
            minimum_bid=to_money(minimum_bid) if minimum_bid is not None else None,
            current_bid=None,
            buy_now_price=to_money(buy_now_price) if buy_now_price is not None else None,
            auction_end_date=auction_end_date,
            specifications=list(specifications or []),
            location=location,
            created_at=now,
            updated_at=now,
        )

    # ========== Auction ==========

    def auction_has_ended(self, now: datetime) -> bool:
        return bool(self.is_auction and self.auction_end_date and now >= self.auction_end_date)

    def is_auction_open(self, now: datetime) -> bool:
        return (
            self.is_auction
            and self.status == ProductStatus.ACTIVE
            and not self.auction_has_ended(now)
        )

    def needs_settlement(self, now: datetime) -> bool:
        return self.status == ProductStatus.ACTIVE and self.auction_has_ended(now)

    def validate_bid(self, *, bidder_id: int, amount: Decimal, now: datetime) -> None:
        if not self.is_auction:
            raise BidRejectedError(
                BidRejectionKind.AUCTION_CLOSED, 'This product is not an auction'
            )
        if not self.is_auction_open(now):
            raise BidRejectedError(BidRejectionKind.AUCTION_CLOSED, 'Auction has ended')
        if self.owner_id == bidder_id:
            raise BidRejectedError(BidRejectionKind.SELF_BID)
        self.validate_bid_amount(amount)

    def validate_bid_amount(self, amount: Decimal) -> None:
        if self.current_bid is None:
            if self.minimum_bid is None:
                raise DomainError('Auction product must carry a minimum bid')
            if amount < self.minimum_bid:
                raise BidRejectedError(
                    BidRejectionKind.BID_TOO_LOW,
                    f'Bid must be at least ${self.minimum_bid:.2f}',
                )
        elif amount <= self.current_bid:
            raise BidRejectedError(
                BidRejectionKind.BID_TOO_LOW,
                f'Bid must be higher than current bid of ${self.current_bid:.2f}',
            )

    def close_auction(self, *, outcome: AuctionOutcome, now: datetime) -> 'Product':
        status = ProductStatus.ENDED if outcome == AuctionOutcome.ENDED else ProductStatus.EXPIRED
        return attrs.evolve(self, status=status, updated_at=now)

    # ========== Lifecycle ==========

    def mark_as_sold(self) -> 'Product':
        return attrs.evolve(self, status=ProductStatus.SOLD, updated_at=datetime.now(timezone.utc))

    def approve(self) -> 'Product':
        if self.status not in (ProductStatus.DRAFT, ProductStatus.SUSPENDED):
            raise DomainError(f'Cannot approve a product in status {self.status}')
        return attrs.evolve(
            self, status=ProductStatus.ACTIVE, updated_at=datetime.now(timezone.utc)
        )

    def suspend(self) -> 'Product':
        if self.status in (ProductStatus.SOLD, ProductStatus.SUSPENDED):
            raise DomainError(f'Cannot suspend a product in status {self.status}')
        return attrs.evolve(
            self, status=ProductStatus.SUSPENDED, updated_at=datetime.now(timezone.utc)
        )

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from src.service.marketplace.domain.entity.product_entity import ProductCondition, ProductStatus
from src.service.marketplace.driving_adapter.http_controller.schema.common_schema import (
    EntityModel,
)


class SpecificationSchema(EntityModel):
    name: str = Field(..., min_length=1, max_length=100)
    value: str = Field(..., max_length=255)
    unit: Optional[str] = Field(None, max_length=20)


class ProductCreateRequest(BaseModel):
    model_config = ConfigDict(
        json_schema_extra={
            'examples': [
                {
                    'category_id': 1,
                    'title': '400W Monocrystalline Panel',
                    'description': 'Tier-1 panel, 21.3% efficiency',
                    'price': '189.00',
                    'condition': 'new',
                    'specifications': [{'name': 'Power', 'value': '400', 'unit': 'W'}],
                },
                {
                    'category_id': 2,
                    'title': '10kWh LiFePO4 Battery',
                    'description': 'Lightly used, 6000 cycles rated',
                    'price': '3200.00',
                    'condition': 'used',
                    'is_auction': True,
                    'minimum_bid': '1500.00',
                    'buy_now_price': '2900.00',
                    'auction_end_date': '2030-01-01T00:00:00Z',
                },
            ]
        }
    )

    category_id: int
    title: str = Field(..., min_length=1, max_length=255)
    description: str = ''
    price: Decimal = Field(..., gt=0, decimal_places=2)
    condition: ProductCondition = ProductCondition.NEW
    is_auction: bool = False
    minimum_bid: Optional[Decimal] = Field(None, gt=0, decimal_places=2)
    buy_now_price: Optional[Decimal] = Field(None, gt=0, decimal_places=2)
    auction_end_date: Optional[datetime] = None
    specifications: List[SpecificationSchema] = []
    location: Optional[str] = Field(None, max_length=255)
    publish: bool = True


class ProductResponse(EntityModel):
    id: int
    owner_id: int
    category_id: int
    title: str
    description: str
    price: Decimal
    condition: ProductCondition
    status: ProductStatus
    is_auction: bool
    minimum_bid: Optional[Decimal] = None
    current_bid: Optional[Decimal] = None
    buy_now_price: Optional[Decimal] = None
    auction_end_date: Optional[datetime] = None
    specifications: List[SpecificationSchema] = []
    location: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class BidCreateRequest(BaseModel):
    model_config = ConfigDict(json_schema_extra={'example': {'amount': '150.00'}})

    amount: Decimal = Field(..., gt=0, decimal_places=2)


class BidResponse(EntityModel):
    id: int
    product_id: int
    user_id: int
    amount: Decimal
    is_winning: bool
    created_at: Optional[datetime] = None
    bidder_name: Optional[str] = None
    product_title: Optional[str] = None


class AuctionStateResponse(EntityModel):
    product_id: int
    minimum_bid: Optional[Decimal] = None
    current_bid: Optional[Decimal] = None
    minimum_next_bid: Optional[Decimal] = None
    highest_bidder_id: Optional[int] = None
    bid_count: int
    auction_end_date: Optional[datetime] = None
    is_closed: bool
    buy_now_price: Optional[Decimal] = None


class AuctionSettlementResponse(EntityModel):
    product_id: int
    outcome: str
    winner_id: Optional[int] = None
    winning_bid_id: Optional[int] = None
    winning_amount: Optional[Decimal] = None
    platform_fee: Optional[Decimal] = None
    seller_payout: Optional[Decimal] = None
    settled_at: datetime


class SettleSweepResponse(BaseModel):
    settled: List[AuctionSettlementResponse]
    count: int


class CategoryCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None
    parent_id: Optional[int] = None


class CategoryResponse(EntityModel):
    id: int
    name: str
    description: Optional[str] = None
    parent_id: Optional[int] = None
    product_count: int = 0

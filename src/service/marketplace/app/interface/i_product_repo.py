from abc import ABC, abstractmethod
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from src.service.marketplace.app.dto.page import Page, PageRequest
from src.service.marketplace.app.dto.product_filter import ProductFilter
from src.service.marketplace.domain.entity.product_entity import Product


class IProductRepo(ABC):
    @abstractmethod
    async def create(self, *, product: Product) -> Product:
        pass

    @abstractmethod
    async def get_by_id(self, *, product_id: int) -> Optional[Product]:
        pass

    @abstractmethod
    async def update(self, *, product: Product) -> Product:
        pass

    @abstractmethod
    async def raise_current_bid(
        self, *, product_id: int, amount: Decimal, now: datetime
    ) -> Optional[Product]:
        """
        Compare-and-set the highest bid in one statement.

        Succeeds only while the product is an active auction that has not ended and
        `amount` beats the current bid (or meets the minimum bid when there is none).
        Returns None when the guard did not match, i.e. the race was lost.
        """
        pass

    @abstractmethod
    async def close_auction(self, *, product_id: int, now: datetime) -> Optional[Product]:
        """
        Move an ended auction out of `active`, guarded by status and end date:
        `ended` when a bid exists, `expired` otherwise.

        Returns None when another caller already closed it.
        """
        pass

    @abstractmethod
    async def mark_as_sold_if_available(self, *, product_id: int) -> Optional[Product]:
        """Set `sold` unless already sold or suspended; None when the guard fails"""
        pass

    @abstractmethod
    async def list_ids_to_settle(self, *, now: datetime, limit: int) -> List[int]:
        """Active auctions whose end date has passed"""
        pass

    @abstractmethod
    async def list_products(self, *, filter: ProductFilter, page: PageRequest) -> Page[Product]:
        pass

    @abstractmethod
    async def list_active_auctions(self, *, now: datetime, page: PageRequest) -> Page[Product]:
        """Running auctions, ending soonest first"""
        pass

    @abstractmethod
    async def count_by_category(self, *, category_id: int) -> int:
        pass

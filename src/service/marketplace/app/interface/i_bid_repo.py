from abc import ABC, abstractmethod
from typing import Optional

from src.service.marketplace.app.dto.page import Page, PageRequest
from src.service.marketplace.domain.entity.bid_entity import Bid


class IBidRepo(ABC):
    """Bids are append-only; only is_winning is ever updated"""

    @abstractmethod
    async def create(self, *, bid: Bid) -> Bid:
        pass

    @abstractmethod
    async def get_highest_bid(self, *, product_id: int) -> Optional[Bid]:
        pass

    @abstractmethod
    async def count_by_product(self, *, product_id: int) -> int:
        pass

    @abstractmethod
    async def mark_winning(self, *, bid_id: int) -> None:
        pass

    @abstractmethod
    async def list_by_product(self, *, product_id: int, page: PageRequest) -> Page[Bid]:
        """Highest amount first"""
        pass

    @abstractmethod
    async def list_by_user(self, *, user_id: int, page: PageRequest) -> Page[Bid]:
        """Newest first, with product_title filled"""
        pass

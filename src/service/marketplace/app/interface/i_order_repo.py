from abc import ABC, abstractmethod
from typing import Optional

from uuid_utils import UUID

from src.service.marketplace.app.dto.page import Page, PageRequest
from src.service.marketplace.domain.entity.order_entity import Order, OrderStatus


class IOrderRepo(ABC):
    @abstractmethod
    async def create(self, *, order: Order) -> Order:
        pass

    @abstractmethod
    async def get_by_id(self, *, order_id: UUID) -> Optional[Order]:
        pass

    @abstractmethod
    async def get_by_payment_intent_id(self, *, payment_intent_id: str) -> Optional[Order]:
        pass

    @abstractmethod
    async def get_sale_for_product(self, *, product_id: int) -> Optional[Order]:
        """The paid (or shipped / delivered) order that bought the product, if any"""
        pass

    @abstractmethod
    async def update(self, *, order: Order) -> Order:
        pass

    @abstractmethod
    async def list_for_user(
        self, *, user_id: int, status: Optional[OrderStatus], page: PageRequest
    ) -> Page[Order]:
        """Orders where the user is buyer or seller, newest first"""
        pass

    @abstractmethod
    async def list_all(self, *, status: Optional[OrderStatus], page: PageRequest) -> Page[Order]:
        pass

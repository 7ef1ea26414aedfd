from abc import ABC, abstractmethod
from typing import Optional

from src.service.marketplace.app.dto.page import Page, PageRequest
from src.service.marketplace.domain.entity.payment_entity import Payment


class IPaymentRepo(ABC):
    @abstractmethod
    async def create(self, *, payment: Payment) -> Payment:
        pass

    @abstractmethod
    async def get_by_intent_id(self, *, payment_intent_id: str) -> Optional[Payment]:
        pass

    @abstractmethod
    async def update(self, *, payment: Payment) -> Payment:
        pass

    @abstractmethod
    async def list_by_user(self, *, user_id: int, page: PageRequest) -> Page[Payment]:
        """Newest first"""
        pass

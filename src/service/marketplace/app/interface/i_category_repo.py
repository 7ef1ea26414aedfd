from abc import ABC, abstractmethod
from typing import List, Optional

from src.service.marketplace.domain.entity.category_entity import Category


class ICategoryRepo(ABC):
    @abstractmethod
    async def create(self, *, category: Category) -> Category:
        pass

    @abstractmethod
    async def get_by_id(self, *, category_id: int) -> Optional[Category]:
        pass

    @abstractmethod
    async def get_by_name(self, *, name: str) -> Optional[Category]:
        pass

    @abstractmethod
    async def list_all(self) -> List[Category]:
        """Categories ordered by name, with product_count filled"""
        pass

    @abstractmethod
    async def delete(self, *, category_id: int) -> None:
        pass

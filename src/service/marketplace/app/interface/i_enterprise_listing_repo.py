from abc import ABC, abstractmethod
from typing import Optional

from src.service.marketplace.app.dto.page import Page, PageRequest
from src.service.marketplace.domain.entity.enterprise_entity import EnterpriseListing


class IEnterpriseListingRepo(ABC):
    @abstractmethod
    async def create(self, *, listing: EnterpriseListing) -> EnterpriseListing:
        pass

    @abstractmethod
    async def get_by_id(self, *, listing_id: int) -> Optional[EnterpriseListing]:
        pass

    @abstractmethod
    async def update(self, *, listing: EnterpriseListing) -> EnterpriseListing:
        pass

    @abstractmethod
    async def list_active(
        self,
        *,
        page: PageRequest,
        category_id: Optional[int] = None,
        location: Optional[str] = None,
    ) -> Page[EnterpriseListing]:
        pass

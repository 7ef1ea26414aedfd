from abc import ABC, abstractmethod
from typing import List, Optional

from src.service.marketplace.app.dto.page import Page, PageRequest
from src.service.marketplace.domain.entity.enterprise_entity import (
    QuoteRequest,
    QuoteRequestStatus,
    QuoteResponse,
)


class IQuoteRepo(ABC):
    # ========== Requests ==========

    @abstractmethod
    async def create_request(self, *, request: QuoteRequest) -> QuoteRequest:
        pass

    @abstractmethod
    async def get_request(self, *, request_id: int) -> Optional[QuoteRequest]:
        pass

    @abstractmethod
    async def update_request(self, *, request: QuoteRequest) -> QuoteRequest:
        pass

    @abstractmethod
    async def list_requests_by_buyer(
        self, *, buyer_id: int, status: Optional[QuoteRequestStatus], page: PageRequest
    ) -> Page[QuoteRequest]:
        pass

    @abstractmethod
    async def list_requests_for_vendor(
        self, *, vendor_id: int, status: Optional[QuoteRequestStatus], page: PageRequest
    ) -> Page[QuoteRequest]:
        """Requests addressed to the vendor, made against its listings, or open to all"""
        pass

    # ========== Responses ==========

    @abstractmethod
    async def create_response(self, *, response: QuoteResponse) -> QuoteResponse:
        pass

    @abstractmethod
    async def get_response(self, *, response_id: int) -> Optional[QuoteResponse]:
        pass

    @abstractmethod
    async def update_response(self, *, response: QuoteResponse) -> QuoteResponse:
        pass

    @abstractmethod
    async def list_responses_for_request(self, *, request_id: int) -> List[QuoteResponse]:
        pass

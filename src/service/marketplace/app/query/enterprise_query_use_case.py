from typing import List, Optional, Self

import attrs
from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.logging.loguru_io import Logger
from src.service.marketplace.app.dto.page import Page, PageRequest
from src.service.marketplace.app.interface.i_enterprise_listing_repo import (
    IEnterpriseListingRepo,
)
from src.service.marketplace.app.interface.i_quote_repo import IQuoteRepo
from src.service.marketplace.domain.entity.enterprise_entity import (
    EnterpriseListing,
    QuoteRequest,
    QuoteRequestStatus,
    QuoteResponse,
)


@attrs.define(frozen=True)
class QuoteRequestView:
    request: QuoteRequest
    responses: List[QuoteResponse]


class EnterpriseQueryUseCase:
    def __init__(
        self, *, enterprise_listing_repo: IEnterpriseListingRepo, quote_repo: IQuoteRepo
    ) -> None:
        self.enterprise_listing_repo = enterprise_listing_repo
        self.quote_repo = quote_repo

    @classmethod
    @inject
    def depends(
        cls,
        enterprise_listing_repo: IEnterpriseListingRepo = Depends(
            Provide[Container.enterprise_listing_repo]
        ),
        quote_repo: IQuoteRepo = Depends(Provide[Container.quote_repo]),
    ) -> Self:
        return cls(enterprise_listing_repo=enterprise_listing_repo, quote_repo=quote_repo)

    @Logger.io
    async def list_listings(
        self,
        *,
        page: PageRequest,
        category_id: Optional[int] = None,
        location: Optional[str] = None,
    ) -> Page[EnterpriseListing]:
        return await self.enterprise_listing_repo.list_active(
            page=page, category_id=category_id, location=location
        )

    @Logger.io
    async def list_my_requests(
        self, *, buyer_id: int, status: Optional[QuoteRequestStatus], page: PageRequest
    ) -> Page[QuoteRequestView]:
        requests = await self.quote_repo.list_requests_by_buyer(
            buyer_id=buyer_id, status=status, page=page
        )
        return await self._with_responses(requests)

    @Logger.io
    async def vendor_dashboard(
        self, *, vendor_id: int, status: Optional[QuoteRequestStatus], page: PageRequest
    ) -> Page[QuoteRequestView]:
        requests = await self.quote_repo.list_requests_for_vendor(
            vendor_id=vendor_id, status=status, page=page
        )
        views = await self._with_responses(requests)
        # A vendor only sees its own answers, never its competitors'
        return attrs.evolve(
            views,
            items=[
                QuoteRequestView(
                    request=view.request,
                    responses=[r for r in view.responses if r.vendor_id == vendor_id],
                )
                for view in views.items
            ],
        )

    async def _with_responses(self, requests: Page[QuoteRequest]) -> Page[QuoteRequestView]:
        items = [
            QuoteRequestView(
                request=request,
                responses=await self.quote_repo.list_responses_for_request(
                    request_id=request.id  # type: ignore[arg-type]
                ),
            )
            for request in requests.items
        ]
        return Page(items=items, total=requests.total, page=requests.page, limit=requests.limit)

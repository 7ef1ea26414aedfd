from datetime import datetime, timezone
from decimal import Decimal
from typing import List, Optional, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.database.unit_of_work import AbstractUnitOfWork
from src.platform.exception.exceptions import DomainError, ForbiddenError, NotFoundError
from src.platform.logging.loguru_io import Logger
from src.service.marketplace.domain.entity.enterprise_entity import (
    QuoteLineItem,
    QuoteRequest,
    QuoteRequestStatus,
    QuoteResponse,
)


class RespondToQuoteUseCase:
    def __init__(self, *, uow: AbstractUnitOfWork) -> None:
        self.uow = uow

    @classmethod
    @inject
    def depends(cls, uow: AbstractUnitOfWork = Depends(Provide[Container.unit_of_work])) -> Self:
        return cls(uow=uow)

    async def _ensure_entitled(self, *, request: QuoteRequest, vendor_id: int) -> None:
        if request.is_open_request or request.vendor_id == vendor_id:
            return
        if request.listing_id is not None:
            listing = await self.uow.enterprise_listing_repo.get_by_id(
                listing_id=request.listing_id
            )
            if listing and listing.vendor_id == vendor_id:
                return
        raise ForbiddenError('Quote request is not addressed to you')

    @Logger.io
    async def execute(
        self,
        *,
        quote_request_id: int,
        vendor_id: int,
        proposed_total_price: Decimal,
        valid_until: datetime,
        line_items: Optional[List[QuoteLineItem]] = None,
        delivery_estimate: Optional[str] = None,
        message: Optional[str] = None,
        payment_terms: Optional[str] = None,
        warranty_terms: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> QuoteResponse:
        now = now or datetime.now(timezone.utc)

        async with self.uow:
            request = await self.uow.quote_repo.get_request(request_id=quote_request_id)
            if not request:
                raise NotFoundError('Quote request not found')
            if request.buyer_id == vendor_id:
                raise DomainError('Cannot respond to your own quote request')
            await self._ensure_entitled(request=request, vendor_id=vendor_id)

            if request.status == QuoteRequestStatus.PENDING and request.is_expired(now):
                # Persist the expiry before refusing, so listings stop showing it as open
                await self.uow.quote_repo.update_request(request=request.expire(now))
                await self.uow.commit()
                raise DomainError('Quote request has expired')
            request.ensure_open_for_response(now)

            response = await self.uow.quote_repo.create_response(
                response=QuoteResponse.create(
                    quote_request_id=quote_request_id,
                    vendor_id=vendor_id,
                    proposed_total_price=proposed_total_price,
                    valid_until=valid_until,
                    line_items=line_items,
                    delivery_estimate=delivery_estimate,
                    message=message,
                    payment_terms=payment_terms,
                    warranty_terms=warranty_terms,
                    now=now,
                )
            )
            await self.uow.quote_repo.update_request(request=request.mark_responded(now))
            await self.uow.commit()

        Logger.base.info(f'📬 [QUOTE] Vendor {vendor_id} answered request {quote_request_id}')
        return response

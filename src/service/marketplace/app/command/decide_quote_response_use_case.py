from datetime import datetime, timezone
from typing import Optional, Self

import attrs
from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.database.unit_of_work import AbstractUnitOfWork
from src.platform.exception.exceptions import ForbiddenError, NotFoundError
from src.platform.logging.loguru_io import Logger
from src.service.marketplace.domain.entity.enterprise_entity import (
    QuoteRequest,
    QuoteResponse,
    QuoteResponseStatus,
)


@attrs.define(frozen=True)
class QuoteDecision:
    request: QuoteRequest
    response: QuoteResponse


class DecideQuoteResponseUseCase:
    """The requesting buyer accepts or rejects one vendor response."""

    def __init__(self, *, uow: AbstractUnitOfWork) -> None:
        self.uow = uow

    @classmethod
    @inject
    def depends(cls, uow: AbstractUnitOfWork = Depends(Provide[Container.unit_of_work])) -> Self:
        return cls(uow=uow)

    async def _load(self, *, response_id: int, buyer_id: int) -> tuple[QuoteRequest, QuoteResponse]:
        response = await self.uow.quote_repo.get_response(response_id=response_id)
        if not response:
            raise NotFoundError('Quote response not found')
        request = await self.uow.quote_repo.get_request(request_id=response.quote_request_id)
        if not request:
            raise NotFoundError('Quote request not found')
        if request.buyer_id != buyer_id:
            raise ForbiddenError('Only the requesting buyer can decide on this quote')
        return request, response

    @Logger.io
    async def accept(
        self, *, response_id: int, buyer_id: int, now: Optional[datetime] = None
    ) -> QuoteDecision:
        now = now or datetime.now(timezone.utc)
        async with self.uow:
            request, response = await self._load(response_id=response_id, buyer_id=buyer_id)

            response = await self.uow.quote_repo.update_response(response=response.accept(now))
            request = await self.uow.quote_repo.update_request(
                request=request.decide(accepted=True, now=now)
            )
            for other in await self.uow.quote_repo.list_responses_for_request(
                request_id=request.id  # type: ignore[arg-type]
            ):
                if other.id != response.id and other.status == QuoteResponseStatus.PENDING:
                    await self.uow.quote_repo.update_response(response=other.reject(now))

            await self.uow.commit()

        Logger.base.info(f'🤝 [QUOTE] Request {request.id} accepted response {response.id}')
        return QuoteDecision(request=request, response=response)

    @Logger.io
    async def reject(
        self, *, response_id: int, buyer_id: int, now: Optional[datetime] = None
    ) -> QuoteDecision:
        now = now or datetime.now(timezone.utc)
        async with self.uow:
            request, response = await self._load(response_id=response_id, buyer_id=buyer_id)

            response = await self.uow.quote_repo.update_response(response=response.reject(now))
            request = await self.uow.quote_repo.update_request(
                request=request.decide(accepted=False, now=now)
            )
            await self.uow.commit()
        return QuoteDecision(request=request, response=response)

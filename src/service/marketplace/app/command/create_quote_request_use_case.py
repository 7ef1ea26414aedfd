from datetime import datetime, timezone
from typing import Optional, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.core_setting import Settings
from src.platform.config.di import Container
from src.platform.database.unit_of_work import AbstractUnitOfWork
from src.platform.exception.exceptions import DomainError, NotFoundError
from src.platform.logging.loguru_io import Logger
from src.service.marketplace.domain.entity.enterprise_entity import (
    ListingStatus,
    ProjectSpecs,
    QuoteRequest,
)
from src.service.marketplace.domain.entity.user_entity import UserRole


class CreateQuoteRequestUseCase:
    """
    A buyer asks for a quote in one of three ways:

    - against an active listing (addressed to the listing's vendor)
    - directly to a vendor
    - open to every vendor (neither listing nor vendor given)
    """

    def __init__(self, *, uow: AbstractUnitOfWork, ttl_days: int) -> None:
        self.uow = uow
        self.ttl_days = ttl_days

    @classmethod
    @inject
    def depends(
        cls,
        uow: AbstractUnitOfWork = Depends(Provide[Container.unit_of_work]),
        settings: Settings = Depends(Provide[Container.config_service]),
    ) -> Self:
        return cls(uow=uow, ttl_days=settings.QUOTE_REQUEST_TTL_DAYS)

    @Logger.io
    async def execute(
        self,
        *,
        buyer_id: int,
        requested_quantity: int,
        project_specs: ProjectSpecs,
        listing_id: Optional[int] = None,
        vendor_id: Optional[int] = None,
        notes: Optional[str] = None,
        delivery_deadline: Optional[datetime] = None,
        now: Optional[datetime] = None,
    ) -> QuoteRequest:
        now = now or datetime.now(timezone.utc)

        async with self.uow:
            if listing_id is not None:
                listing = await self.uow.enterprise_listing_repo.get_by_id(listing_id=listing_id)
                if not listing:
                    raise NotFoundError('Listing not found')
                if listing.status != ListingStatus.ACTIVE:
                    raise DomainError('Listing is not active')
                if vendor_id is not None and vendor_id != listing.vendor_id:
                    raise DomainError('Vendor does not own this listing')
                vendor_id = listing.vendor_id
            elif vendor_id is not None:
                vendor = await self.uow.user_repo.get_by_id(user_id=vendor_id)
                if not vendor or vendor.role != UserRole.ENTERPRISE_VENDOR:
                    raise NotFoundError('Vendor not found')

            request = await self.uow.quote_repo.create_request(
                request=QuoteRequest.create(
                    buyer_id=buyer_id,
                    requested_quantity=requested_quantity,
                    project_specs=project_specs,
                    ttl_days=self.ttl_days,
                    listing_id=listing_id,
                    vendor_id=vendor_id,
                    notes=notes,
                    delivery_deadline=delivery_deadline,
                    now=now,
                )
            )
            await self.uow.commit()

        Logger.base.info(f'📨 [QUOTE] Request {request.id} from buyer {buyer_id}')
        return request

from decimal import Decimal
from typing import List, Optional, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.database.unit_of_work import AbstractUnitOfWork
from src.platform.exception.exceptions import NotFoundError
from src.platform.logging.loguru_io import Logger
from src.service.marketplace.domain.entity.enterprise_entity import (
    EnterpriseListing,
    ListingSpec,
)


class CreateEnterpriseListingUseCase:
    def __init__(self, *, uow: AbstractUnitOfWork) -> None:
        self.uow = uow

    @classmethod
    @inject
    def depends(cls, uow: AbstractUnitOfWork = Depends(Provide[Container.unit_of_work])) -> Self:
        return cls(uow=uow)

    @Logger.io
    async def create(
        self,
        *,
        vendor_id: int,
        category_id: int,
        name: str,
        description: str,
        base_price: Decimal,
        price_unit: str = 'unit',
        specs: Optional[List[ListingSpec]] = None,
        location: Optional[str] = None,
        delivery_time: Optional[str] = None,
    ) -> EnterpriseListing:
        async with self.uow:
            if not await self.uow.category_repo.get_by_id(category_id=category_id):
                raise NotFoundError('Category not found')

            listing = await self.uow.enterprise_listing_repo.create(
                listing=EnterpriseListing.create(
                    vendor_id=vendor_id,
                    category_id=category_id,
                    name=name,
                    description=description,
                    base_price=base_price,
                    price_unit=price_unit,
                    specs=specs,
                    location=location,
                    delivery_time=delivery_time,
                )
            )
            await self.uow.commit()
        return listing

    @Logger.io
    async def publish(self, *, listing_id: int, vendor_id: int) -> EnterpriseListing:
        async with self.uow:
            listing = await self.uow.enterprise_listing_repo.get_by_id(listing_id=listing_id)
            if not listing:
                raise NotFoundError('Listing not found')

            published = listing.publish(vendor_id=vendor_id)
            if published is not listing:
                published = await self.uow.enterprise_listing_repo.update(listing=published)
                await self.uow.commit()
        return published

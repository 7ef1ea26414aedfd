from typing import Optional

from sqlalchemy import select

from src.platform.exception.exceptions import NotFoundError
from src.platform.logging.loguru_io import Logger
from src.service.marketplace.app.dto.page import Page, PageRequest
from src.service.marketplace.app.interface.i_enterprise_listing_repo import (
    IEnterpriseListingRepo,
)
from src.service.marketplace.domain.entity.enterprise_entity import (
    EnterpriseListing,
    ListingSpec,
    ListingStatus,
)
from src.service.marketplace.driven_adapter.model.enterprise_model import EnterpriseListingModel
from src.service.marketplace.driven_adapter.repo.base_repo import SessionRepo


class EnterpriseListingRepoImpl(SessionRepo, IEnterpriseListingRepo):
    @Logger.io
    async def create(self, *, listing: EnterpriseListing) -> EnterpriseListing:
        async with self._get_session() as session:
            listing_model = EnterpriseListingModel(
                vendor_id=listing.vendor_id,
                category_id=listing.category_id,
                name=listing.name,
                description=listing.description,
                base_price=listing.base_price,
                price_unit=listing.price_unit,
                specs=[spec.to_dict() for spec in listing.specs],
                location=listing.location,
                delivery_time=listing.delivery_time,
                status=listing.status.value,
            )
            session.add(listing_model)
            await session.flush()
            await session.refresh(listing_model)
            return self._to_entity(listing_model)

    @Logger.io
    async def get_by_id(self, *, listing_id: int) -> Optional[EnterpriseListing]:
        async with self._get_session() as session:
            listing_model = await session.get(EnterpriseListingModel, listing_id)
            return self._to_entity(listing_model) if listing_model else None

    @Logger.io
    async def update(self, *, listing: EnterpriseListing) -> EnterpriseListing:
        async with self._get_session() as session:
            listing_model = await session.get(EnterpriseListingModel, listing.id)
            if listing_model is None:
                raise NotFoundError(f'Listing {listing.id} not found')
            listing_model.name = listing.name
            listing_model.description = listing.description
            listing_model.base_price = listing.base_price
            listing_model.price_unit = listing.price_unit
            listing_model.specs = [spec.to_dict() for spec in listing.specs]
            listing_model.location = listing.location
            listing_model.delivery_time = listing.delivery_time
            listing_model.status = listing.status.value
            await session.flush()
            await session.refresh(listing_model)
            return self._to_entity(listing_model)

    @Logger.io
    async def list_active(
        self,
        *,
        page: PageRequest,
        category_id: Optional[int] = None,
        location: Optional[str] = None,
    ) -> Page[EnterpriseListing]:
        stmt = select(EnterpriseListingModel).where(
            EnterpriseListingModel.status == ListingStatus.ACTIVE.value
        )
        if category_id is not None:
            stmt = stmt.where(EnterpriseListingModel.category_id == category_id)
        if location:
            stmt = stmt.where(EnterpriseListingModel.location.ilike(f'%{location.strip()}%'))
        stmt = stmt.order_by(EnterpriseListingModel.created_at.desc())
        async with self._get_session() as session:
            return await self._paginate(session, stmt, page, self._to_entity)

    @staticmethod
    def _to_entity(listing_model: EnterpriseListingModel) -> EnterpriseListing:
        return EnterpriseListing(
            id=listing_model.id,
            vendor_id=listing_model.vendor_id,
            category_id=listing_model.category_id,
            name=listing_model.name,
            description=listing_model.description,
            base_price=listing_model.base_price,
            price_unit=listing_model.price_unit,
            specs=[ListingSpec.from_dict(spec) for spec in listing_model.specs or []],
            location=listing_model.location,
            delivery_time=listing_model.delivery_time,
            status=ListingStatus(listing_model.status),
            created_at=listing_model.created_at,
            updated_at=listing_model.updated_at,
        )

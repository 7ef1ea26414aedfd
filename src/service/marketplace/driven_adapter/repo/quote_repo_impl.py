from typing import List, Optional

from sqlalchemy import and_, or_, select

from src.platform.exception.exceptions import NotFoundError
from src.platform.logging.loguru_io import Logger
from src.service.marketplace.app.dto.page import Page, PageRequest
from src.service.marketplace.app.interface.i_quote_repo import IQuoteRepo
from src.service.marketplace.domain.entity.enterprise_entity import (
    ProjectSpecs,
    QuoteLineItem,
    QuoteRequest,
    QuoteRequestStatus,
    QuoteResponse,
    QuoteResponseStatus,
)
from src.service.marketplace.driven_adapter.model.enterprise_model import (
    EnterpriseListingModel,
    QuoteRequestModel,
    QuoteResponseModel,
)
from src.service.marketplace.driven_adapter.repo.base_repo import SessionRepo


class QuoteRepoImpl(SessionRepo, IQuoteRepo):
    # ========== Requests ==========

    @Logger.io
    async def create_request(self, *, request: QuoteRequest) -> QuoteRequest:
        async with self._get_session() as session:
            request_model = QuoteRequestModel(
                buyer_id=request.buyer_id,
                listing_id=request.listing_id,
                vendor_id=request.vendor_id,
                requested_quantity=request.requested_quantity,
                project_specs=request.project_specs.to_dict(),
                notes=request.notes,
                delivery_deadline=request.delivery_deadline,
                status=request.status.value,
                expires_at=request.expires_at,
            )
            session.add(request_model)
            await session.flush()
            await session.refresh(request_model)
            return self._to_request(request_model)

    @Logger.io
    async def get_request(self, *, request_id: int) -> Optional[QuoteRequest]:
        async with self._get_session() as session:
            request_model = await session.get(QuoteRequestModel, request_id)
            return self._to_request(request_model) if request_model else None

    @Logger.io
    async def update_request(self, *, request: QuoteRequest) -> QuoteRequest:
        async with self._get_session() as session:
            request_model = await session.get(QuoteRequestModel, request.id)
            if request_model is None:
                raise NotFoundError(f'Quote request {request.id} not found')
            request_model.status = request.status.value
            request_model.notes = request.notes
            await session.flush()
            await session.refresh(request_model)
            return self._to_request(request_model)

    @Logger.io
    async def list_requests_by_buyer(
        self, *, buyer_id: int, status: Optional[QuoteRequestStatus], page: PageRequest
    ) -> Page[QuoteRequest]:
        stmt = select(QuoteRequestModel).where(QuoteRequestModel.buyer_id == buyer_id)
        if status is not None:
            stmt = stmt.where(QuoteRequestModel.status == status.value)
        stmt = stmt.order_by(QuoteRequestModel.created_at.desc())
        async with self._get_session() as session:
            return await self._paginate(session, stmt, page, self._to_request)

    @Logger.io
    async def list_requests_for_vendor(
        self, *, vendor_id: int, status: Optional[QuoteRequestStatus], page: PageRequest
    ) -> Page[QuoteRequest]:
        own_listings = select(EnterpriseListingModel.id).where(
            EnterpriseListingModel.vendor_id == vendor_id
        )
        stmt = select(QuoteRequestModel).where(
            or_(
                QuoteRequestModel.vendor_id == vendor_id,
                QuoteRequestModel.listing_id.in_(own_listings),
                and_(
                    QuoteRequestModel.vendor_id.is_(None),
                    QuoteRequestModel.listing_id.is_(None),
                ),
            ),
            QuoteRequestModel.buyer_id != vendor_id,
        )
        if status is not None:
            stmt = stmt.where(QuoteRequestModel.status == status.value)
        stmt = stmt.order_by(QuoteRequestModel.created_at.desc())
        async with self._get_session() as session:
            return await self._paginate(session, stmt, page, self._to_request)

    # ========== Responses ==========

    @Logger.io
    async def create_response(self, *, response: QuoteResponse) -> QuoteResponse:
        async with self._get_session() as session:
            response_model = QuoteResponseModel(
                quote_request_id=response.quote_request_id,
                vendor_id=response.vendor_id,
                proposed_total_price=response.proposed_total_price,
                line_items=[item.to_dict() for item in response.line_items],
                delivery_estimate=response.delivery_estimate,
                message=response.message,
                payment_terms=response.payment_terms,
                warranty_terms=response.warranty_terms,
                status=response.status.value,
                valid_until=response.valid_until,
            )
            session.add(response_model)
            await session.flush()
            await session.refresh(response_model)
            return self._to_response(response_model)

    @Logger.io
    async def get_response(self, *, response_id: int) -> Optional[QuoteResponse]:
        async with self._get_session() as session:
            response_model = await session.get(QuoteResponseModel, response_id)
            return self._to_response(response_model) if response_model else None

    @Logger.io
    async def update_response(self, *, response: QuoteResponse) -> QuoteResponse:
        async with self._get_session() as session:
            response_model = await session.get(QuoteResponseModel, response.id)
            if response_model is None:
                raise NotFoundError(f'Quote response {response.id} not found')
            response_model.status = response.status.value
            await session.flush()
            await session.refresh(response_model)
            return self._to_response(response_model)

    @Logger.io
    async def list_responses_for_request(self, *, request_id: int) -> List[QuoteResponse]:
        stmt = (
            select(QuoteResponseModel)
            .where(QuoteResponseModel.quote_request_id == request_id)
            .order_by(QuoteResponseModel.created_at.asc(), QuoteResponseModel.id.asc())
        )
        async with self._get_session() as session:
            result = await session.execute(stmt)
            return [self._to_response(model) for model in result.scalars().all()]

    # ========== Mapping ==========

    @staticmethod
    def _to_request(request_model: QuoteRequestModel) -> QuoteRequest:
        return QuoteRequest(
            id=request_model.id,
            buyer_id=request_model.buyer_id,
            listing_id=request_model.listing_id,
            vendor_id=request_model.vendor_id,
            requested_quantity=request_model.requested_quantity,
            project_specs=ProjectSpecs.from_dict(request_model.project_specs),
            notes=request_model.notes,
            delivery_deadline=request_model.delivery_deadline,
            status=QuoteRequestStatus(request_model.status),
            expires_at=request_model.expires_at,
            created_at=request_model.created_at,
            updated_at=request_model.updated_at,
        )

    @staticmethod
    def _to_response(response_model: QuoteResponseModel) -> QuoteResponse:
        return QuoteResponse(
            id=response_model.id,
            quote_request_id=response_model.quote_request_id,
            vendor_id=response_model.vendor_id,
            proposed_total_price=response_model.proposed_total_price,
            line_items=[QuoteLineItem.from_dict(item) for item in response_model.line_items or []],
            delivery_estimate=response_model.delivery_estimate,
            message=response_model.message,
            payment_terms=response_model.payment_terms,
            warranty_terms=response_model.warranty_terms,
            status=QuoteResponseStatus(response_model.status),
            valid_until=response_model.valid_until,
            created_at=response_model.created_at,
            updated_at=response_model.updated_at,
        )

"""
Enterprise quote workflow

Vendors publish bulk listings, buyers request quotes and vendors answer them.
The whole router sits behind the industrial quotes feature flag.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from src.platform.logging.loguru_io import Logger
from src.service.marketplace.app.command.create_enterprise_listing_use_case import (
    CreateEnterpriseListingUseCase,
)
from src.service.marketplace.app.command.create_quote_request_use_case import (
    CreateQuoteRequestUseCase,
)
from src.service.marketplace.app.command.decide_quote_response_use_case import (
    DecideQuoteResponseUseCase,
)
from src.service.marketplace.app.command.respond_to_quote_use_case import (
    RespondToQuoteUseCase,
)
from src.service.marketplace.app.dto.page import PageRequest
from src.service.marketplace.app.query.enterprise_query_use_case import EnterpriseQueryUseCase
from src.service.marketplace.domain.entity.enterprise_entity import (
    ListingSpec,
    ProjectSpecs,
    QuoteLineItem,
    QuoteRequestStatus,
)
from src.service.marketplace.domain.entity.user_entity import UserEntity
from src.service.marketplace.driving_adapter.http_controller.auth.role_auth import (
    require_enterprise_vendor,
    require_industrial_quotes,
    require_quote_buyer,
)
from src.service.marketplace.driving_adapter.http_controller.schema.common_schema import (
    ApiResponse,
    PageResponse,
)
from src.service.marketplace.driving_adapter.http_controller.schema.enterprise_schema import (
    ListingCreateRequest,
    ListingResponse,
    QuoteDecisionResponse,
    QuoteRequestCreateRequest,
    QuoteRequestSchema,
    QuoteRequestWithResponses,
    QuoteResponseCreateRequest,
    QuoteResponseSchema,
)


router = APIRouter(dependencies=[Depends(require_industrial_quotes)])


# ============================ Listings ============================


@router.post('/listing', status_code=status.HTTP_201_CREATED)
@Logger.io
async def create_listing(
    request: ListingCreateRequest,
    vendor: UserEntity = Depends(require_enterprise_vendor),
    use_case: CreateEnterpriseListingUseCase = Depends(CreateEnterpriseListingUseCase.depends),
) -> ApiResponse[ListingResponse]:
    listing = await use_case.create(
        vendor_id=vendor.id,  # type: ignore[arg-type]
        category_id=request.category_id,
        name=request.name,
        description=request.description,
        base_price=request.base_price,
        price_unit=request.price_unit,
        specs=[ListingSpec(**spec.model_dump()) for spec in request.specs],
        location=request.location,
        delivery_time=request.delivery_time,
    )
    return ApiResponse(data=ListingResponse.model_validate(listing))


@router.patch('/listing/{listing_id}/publish')
@Logger.io
async def publish_listing(
    listing_id: int,
    vendor: UserEntity = Depends(require_enterprise_vendor),
    use_case: CreateEnterpriseListingUseCase = Depends(CreateEnterpriseListingUseCase.depends),
) -> ApiResponse[ListingResponse]:
    listing = await use_case.publish(listing_id=listing_id, vendor_id=vendor.id)  # type: ignore[arg-type]
    return ApiResponse(data=ListingResponse.model_validate(listing))


@router.get('/listings')
@Logger.io
async def list_listings(
    category_id: Optional[int] = None,
    location: Optional[str] = Query(None, max_length=255),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    use_case: EnterpriseQueryUseCase = Depends(EnterpriseQueryUseCase.depends),
) -> ApiResponse[PageResponse[ListingResponse]]:
    listings = await use_case.list_listings(
        page=PageRequest.of(page=page, limit=limit),
        category_id=category_id,
        location=location,
    )
    return ApiResponse(data=PageResponse.of(listings, ListingResponse))


# ============================ Quotes ============================


@router.post('/quote-request', status_code=status.HTTP_201_CREATED)
@Logger.io
async def create_quote_request(
    request: QuoteRequestCreateRequest,
    buyer: UserEntity = Depends(require_quote_buyer),
    use_case: CreateQuoteRequestUseCase = Depends(CreateQuoteRequestUseCase.depends),
) -> ApiResponse[QuoteRequestSchema]:
    quote_request = await use_case.execute(
        buyer_id=buyer.id,  # type: ignore[arg-type]
        requested_quantity=request.requested_quantity,
        project_specs=ProjectSpecs(**request.project_specs.model_dump()),
        listing_id=request.listing_id,
        vendor_id=request.vendor_id,
        notes=request.notes,
        delivery_deadline=request.delivery_deadline,
    )
    return ApiResponse(data=QuoteRequestSchema.model_validate(quote_request))


@router.post('/quote-response', status_code=status.HTTP_201_CREATED)
@Logger.io
async def respond_to_quote(
    request: QuoteResponseCreateRequest,
    vendor: UserEntity = Depends(require_enterprise_vendor),
    use_case: RespondToQuoteUseCase = Depends(RespondToQuoteUseCase.depends),
) -> ApiResponse[QuoteResponseSchema]:
    response = await use_case.execute(
        quote_request_id=request.quote_request_id,
        vendor_id=vendor.id,  # type: ignore[arg-type]
        proposed_total_price=request.proposed_total_price,
        valid_until=request.valid_until,
        line_items=[QuoteLineItem(**item.model_dump()) for item in request.line_items],
        delivery_estimate=request.delivery_estimate,
        message=request.message,
        payment_terms=request.payment_terms,
        warranty_terms=request.warranty_terms,
    )
    return ApiResponse(data=QuoteResponseSchema.model_validate(response))


@router.post('/quote-response/{response_id}/accept')
@Logger.io
async def accept_quote_response(
    response_id: int,
    buyer: UserEntity = Depends(require_quote_buyer),
    use_case: DecideQuoteResponseUseCase = Depends(DecideQuoteResponseUseCase.depends),
) -> ApiResponse[QuoteDecisionResponse]:
    decision = await use_case.accept(response_id=response_id, buyer_id=buyer.id)  # type: ignore[arg-type]
    return ApiResponse(data=QuoteDecisionResponse.model_validate(decision))


@router.post('/quote-response/{response_id}/reject')
@Logger.io
async def reject_quote_response(
    response_id: int,
    buyer: UserEntity = Depends(require_quote_buyer),
    use_case: DecideQuoteResponseUseCase = Depends(DecideQuoteResponseUseCase.depends),
) -> ApiResponse[QuoteDecisionResponse]:
    decision = await use_case.reject(response_id=response_id, buyer_id=buyer.id)  # type: ignore[arg-type]
    return ApiResponse(data=QuoteDecisionResponse.model_validate(decision))


@router.get('/my-requests')
@Logger.io
async def list_my_requests(
    status: Optional[QuoteRequestStatus] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    buyer: UserEntity = Depends(require_quote_buyer),
    use_case: EnterpriseQueryUseCase = Depends(EnterpriseQueryUseCase.depends),
) -> ApiResponse[PageResponse[QuoteRequestWithResponses]]:
    requests = await use_case.list_my_requests(
        buyer_id=buyer.id,  # type: ignore[arg-type]
        status=status,
        page=PageRequest.of(page=page, limit=limit),
    )
    return ApiResponse(data=PageResponse.of(requests, QuoteRequestWithResponses))


@router.get('/vendor-dashboard')
@Logger.io
async def vendor_dashboard(
    status: Optional[QuoteRequestStatus] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    vendor: UserEntity = Depends(require_enterprise_vendor),
    use_case: EnterpriseQueryUseCase = Depends(EnterpriseQueryUseCase.depends),
) -> ApiResponse[PageResponse[QuoteRequestWithResponses]]:
    requests = await use_case.vendor_dashboard(
        vendor_id=vendor.id,  # type: ignore[arg-type]
        status=status,
        page=PageRequest.of(page=page, limit=limit),
    )
    return ApiResponse(data=PageResponse.of(requests, QuoteRequestWithResponses))

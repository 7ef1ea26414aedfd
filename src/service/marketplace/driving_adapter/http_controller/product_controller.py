from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from opentelemetry import trace

from src.platform.logging.loguru_io import Logger
from src.service.marketplace.app.command.create_product_use_case import CreateProductUseCase
from src.service.marketplace.app.command.place_bid_use_case import PlaceBidUseCase
from src.service.marketplace.app.command.settle_auction_use_case import SettleAuctionUseCase
from src.service.marketplace.app.dto.page import PageRequest
from src.service.marketplace.app.dto.product_filter import ProductFilter
from src.service.marketplace.app.query.get_auction_state_use_case import GetAuctionStateUseCase
from src.service.marketplace.app.query.product_query_use_case import (
    BidQueryUseCase,
    ProductQueryUseCase,
)
from src.service.marketplace.domain.entity.product_entity import (
    ProductSpecification,
    ProductStatus,
)
from src.service.marketplace.domain.entity.user_entity import UserEntity
from src.service.marketplace.driving_adapter.http_controller.auth.role_auth import (
    get_current_user,
    require_buyer,
    require_seller,
)
from src.service.marketplace.driving_adapter.http_controller.schema.common_schema import (
    ApiResponse,
    PageResponse,
)
from src.service.marketplace.driving_adapter.http_controller.schema.product_schema import (
    AuctionSettlementResponse,
    AuctionStateResponse,
    BidCreateRequest,
    BidResponse,
    ProductCreateRequest,
    ProductResponse,
)


router = APIRouter()
tracer = trace.get_tracer(__name__)


@router.post('', status_code=status.HTTP_201_CREATED)
@Logger.io
async def create_product(
    request: ProductCreateRequest,
    current_user: UserEntity = Depends(require_seller),
    use_case: CreateProductUseCase = Depends(CreateProductUseCase.depends),
) -> ApiResponse[ProductResponse]:
    product = await use_case.execute(
        owner=current_user,
        category_id=request.category_id,
        title=request.title,
        description=request.description,
        price=request.price,
        condition=request.condition,
        is_auction=request.is_auction,
        minimum_bid=request.minimum_bid,
        buy_now_price=request.buy_now_price,
        auction_end_date=request.auction_end_date,
        specifications=[
            ProductSpecification(name=spec.name, value=spec.value, unit=spec.unit)
            for spec in request.specifications
        ],
        location=request.location,
        publish=request.publish,
    )
    return ApiResponse(data=ProductResponse.model_validate(product))


@router.get('')
@Logger.io
async def list_products(
    search: Optional[str] = Query(None, max_length=100),
    category_id: Optional[int] = None,
    is_auction: Optional[bool] = None,
    min_price: Optional[Decimal] = Query(None, ge=0),
    max_price: Optional[Decimal] = Query(None, ge=0),
    status: ProductStatus = ProductStatus.ACTIVE,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    use_case: ProductQueryUseCase = Depends(ProductQueryUseCase.depends),
) -> ApiResponse[PageResponse[ProductResponse]]:
    products = await use_case.list_products(
        filter=ProductFilter(
            search=search,
            category_id=category_id,
            is_auction=is_auction,
            min_price=min_price,
            max_price=max_price,
            status=status,
        ),
        page=PageRequest.of(page=page, limit=limit),
    )
    return ApiResponse(data=PageResponse.of(products, ProductResponse))


@router.get('/auctions')
@Logger.io
async def list_active_auctions(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    use_case: ProductQueryUseCase = Depends(ProductQueryUseCase.depends),
) -> ApiResponse[PageResponse[ProductResponse]]:
    auctions = await use_case.list_active_auctions(page=PageRequest.of(page=page, limit=limit))
    return ApiResponse(data=PageResponse.of(auctions, ProductResponse))


@router.get('/my-products')
@Logger.io
async def list_my_products(
    status: Optional[ProductStatus] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    current_user: UserEntity = Depends(require_seller),
    use_case: ProductQueryUseCase = Depends(ProductQueryUseCase.depends),
) -> ApiResponse[PageResponse[ProductResponse]]:
    products = await use_case.list_my_products(
        owner_id=current_user.id,  # type: ignore[arg-type]
        filter=ProductFilter(status=status),
        page=PageRequest.of(page=page, limit=limit),
    )
    return ApiResponse(data=PageResponse.of(products, ProductResponse))


@router.get('/{product_id}')
@Logger.io
async def get_product(
    product_id: int,
    use_case: ProductQueryUseCase = Depends(ProductQueryUseCase.depends),
) -> ApiResponse[ProductResponse]:
    product = await use_case.get_product(product_id=product_id)
    return ApiResponse(data=ProductResponse.model_validate(product))


# ============================ Auction Endpoints ============================


@router.post('/{product_id}/bids', status_code=status.HTTP_201_CREATED)
@Logger.io
async def place_bid(
    product_id: int,
    request: BidCreateRequest,
    current_user: UserEntity = Depends(require_buyer),
    use_case: PlaceBidUseCase = Depends(PlaceBidUseCase.depends),
) -> ApiResponse[AuctionStateResponse]:
    with tracer.start_as_current_span(
        'controller.place_bid',
        attributes={'product.id': product_id, 'user.id': current_user.id or 0},
    ):
        state = await use_case.execute(
            product_id=product_id,
            bidder_id=current_user.id,  # type: ignore[arg-type]
            amount=request.amount,
        )
        return ApiResponse(data=AuctionStateResponse.model_validate(state))


@router.get('/{product_id}/bids')
@Logger.io
async def list_product_bids(
    product_id: int,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    use_case: BidQueryUseCase = Depends(BidQueryUseCase.depends),
) -> ApiResponse[PageResponse[BidResponse]]:
    bids = await use_case.list_product_bids(
        product_id=product_id, page=PageRequest.of(page=page, limit=limit)
    )
    return ApiResponse(data=PageResponse.of(bids, BidResponse))


@router.get('/{product_id}/auction')
@Logger.io
async def get_auction_state(
    product_id: int,
    use_case: GetAuctionStateUseCase = Depends(GetAuctionStateUseCase.depends),
) -> ApiResponse[AuctionStateResponse]:
    state = await use_case.execute(product_id=product_id)
    return ApiResponse(data=AuctionStateResponse.model_validate(state))


@router.post('/{product_id}/settle')
@Logger.io
async def settle_auction(
    product_id: int,
    current_user: UserEntity = Depends(get_current_user),
    use_case: SettleAuctionUseCase = Depends(SettleAuctionUseCase.depends),
) -> ApiResponse[AuctionSettlementResponse]:
    with tracer.start_as_current_span(
        'controller.settle_auction',
        attributes={'product.id': product_id, 'user.id': current_user.id or 0},
    ):
        settlement = await use_case.execute(product_id=product_id)
        return ApiResponse(data=AuctionSettlementResponse.model_validate(settlement))

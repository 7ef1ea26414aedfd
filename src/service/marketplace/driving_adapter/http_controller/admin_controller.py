from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from opentelemetry import trace

from src.platform.logging.loguru_io import Logger
from src.service.marketplace.app.command.admin_moderation_use_case import AdminModerationUseCase
from src.service.marketplace.app.command.settle_auction_use_case import SettleAuctionUseCase
from src.service.marketplace.app.dto.page import PageRequest
from src.service.marketplace.app.dto.product_filter import ProductFilter
from src.service.marketplace.app.query.admin_query_use_case import AdminQueryUseCase
from src.service.marketplace.app.query.order_query_use_case import OrderQueryUseCase
from src.service.marketplace.app.query.product_query_use_case import ProductQueryUseCase
from src.service.marketplace.domain.entity.order_entity import OrderStatus
from src.service.marketplace.domain.entity.product_entity import ProductStatus
from src.service.marketplace.domain.entity.user_entity import UserRole
from src.service.marketplace.driving_adapter.http_controller.auth.role_auth import require_admin
from src.service.marketplace.driving_adapter.http_controller.schema.admin_schema import (
    AdminStatsResponse,
)
from src.service.marketplace.driving_adapter.http_controller.schema.common_schema import (
    ApiResponse,
    MessageResponse,
    PageResponse,
)
from src.service.marketplace.driving_adapter.http_controller.schema.payment_schema import (
    OrderResponse,
)
from src.service.marketplace.driving_adapter.http_controller.schema.product_schema import (
    AuctionSettlementResponse,
    CategoryCreateRequest,
    CategoryResponse,
    ProductResponse,
    SettleSweepResponse,
)
from src.service.marketplace.driving_adapter.http_controller.schema.user_schema import (
    UserResponse,
)


router = APIRouter(dependencies=[Depends(require_admin)])
tracer = trace.get_tracer(__name__)


@router.get('/stats', response_model_by_alias=True)
@Logger.io
async def get_stats(
    use_case: AdminQueryUseCase = Depends(AdminQueryUseCase.depends),
) -> ApiResponse[AdminStatsResponse]:
    stats = await use_case.get_stats()
    return ApiResponse(data=AdminStatsResponse.model_validate(stats))


# ============================ Users ============================


@router.get('/users')
@Logger.io
async def list_users(
    role: Optional[UserRole] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    use_case: AdminQueryUseCase = Depends(AdminQueryUseCase.depends),
) -> ApiResponse[PageResponse[UserResponse]]:
    users = await use_case.list_users(page=PageRequest.of(page=page, limit=limit), role=role)
    return ApiResponse(data=PageResponse.of(users, UserResponse))


@router.post('/users/{user_id}/verify')
@Logger.io
async def verify_user(
    user_id: int,
    use_case: AdminModerationUseCase = Depends(AdminModerationUseCase.depends),
) -> ApiResponse[UserResponse]:
    user = await use_case.verify_user(user_id=user_id)
    return ApiResponse(data=UserResponse.model_validate(user))


# ============================ Products ============================


@router.get('/products')
@Logger.io
async def list_products(
    status: Optional[ProductStatus] = None,
    search: Optional[str] = Query(None, max_length=100),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    use_case: ProductQueryUseCase = Depends(ProductQueryUseCase.depends),
) -> ApiResponse[PageResponse[ProductResponse]]:
    products = await use_case.list_products(
        filter=ProductFilter(search=search, status=status),
        page=PageRequest.of(page=page, limit=limit),
    )
    return ApiResponse(data=PageResponse.of(products, ProductResponse))


@router.post('/products/{product_id}/approve')
@Logger.io
async def approve_product(
    product_id: int,
    use_case: AdminModerationUseCase = Depends(AdminModerationUseCase.depends),
) -> ApiResponse[ProductResponse]:
    product = await use_case.approve_product(product_id=product_id)
    return ApiResponse(data=ProductResponse.model_validate(product))


@router.post('/products/{product_id}/suspend')
@Logger.io
async def suspend_product(
    product_id: int,
    use_case: AdminModerationUseCase = Depends(AdminModerationUseCase.depends),
) -> ApiResponse[ProductResponse]:
    product = await use_case.suspend_product(product_id=product_id)
    return ApiResponse(data=ProductResponse.model_validate(product))


# ============================ Categories ============================


@router.get('/categories')
@Logger.io
async def list_categories(
    use_case: AdminQueryUseCase = Depends(AdminQueryUseCase.depends),
) -> ApiResponse[List[CategoryResponse]]:
    categories = await use_case.list_categories()
    return ApiResponse(data=[CategoryResponse.model_validate(c) for c in categories])


@router.post('/categories', status_code=status.HTTP_201_CREATED)
@Logger.io
async def create_category(
    request: CategoryCreateRequest,
    use_case: AdminModerationUseCase = Depends(AdminModerationUseCase.depends),
) -> ApiResponse[CategoryResponse]:
    category = await use_case.create_category(
        name=request.name, description=request.description, parent_id=request.parent_id
    )
    return ApiResponse(data=CategoryResponse.model_validate(category))


@router.delete('/categories/{category_id}')
@Logger.io
async def delete_category(
    category_id: int,
    use_case: AdminModerationUseCase = Depends(AdminModerationUseCase.depends),
) -> ApiResponse[MessageResponse]:
    await use_case.delete_category(category_id=category_id)
    return ApiResponse(data=MessageResponse(message='Category deleted'))


# ============================ Orders & auctions ============================


@router.get('/orders')
@Logger.io
async def list_orders(
    status: Optional[OrderStatus] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    use_case: OrderQueryUseCase = Depends(OrderQueryUseCase.depends),
) -> ApiResponse[PageResponse[OrderResponse]]:
    orders = await use_case.list_all_orders(
        status=status, page=PageRequest.of(page=page, limit=limit)
    )
    return ApiResponse(data=PageResponse.of(orders, OrderResponse))


@router.post('/auctions/settle-expired')
@Logger.io
async def settle_expired_auctions(
    limit: int = Query(100, ge=1, le=1000),
    use_case: SettleAuctionUseCase = Depends(SettleAuctionUseCase.depends),
) -> ApiResponse[SettleSweepResponse]:
    with tracer.start_as_current_span('controller.settle_expired_auctions'):
        settlements = await use_case.settle_expired(limit=limit)
        return ApiResponse(
            data=SettleSweepResponse(
                settled=[AuctionSettlementResponse.model_validate(s) for s in settlements],
                count=len(settlements),
            )
        )

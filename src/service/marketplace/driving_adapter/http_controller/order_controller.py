from typing import Optional

from fastapi import APIRouter, Depends, Query

from src.platform.logging.loguru_io import Logger
from src.platform.types.uuid7_utils_types import UtilsUUID7
from src.service.marketplace.app.command.update_order_status_use_case import (
    UpdateOrderStatusUseCase,
)
from src.service.marketplace.app.dto.page import PageRequest
from src.service.marketplace.app.query.order_query_use_case import OrderQueryUseCase
from src.service.marketplace.domain.entity.order_entity import OrderStatus
from src.service.marketplace.domain.entity.user_entity import UserEntity
from src.service.marketplace.driving_adapter.http_controller.auth.role_auth import (
    get_current_user,
)
from src.service.marketplace.driving_adapter.http_controller.schema.common_schema import (
    ApiResponse,
    PageResponse,
)
from src.service.marketplace.driving_adapter.http_controller.schema.payment_schema import (
    OrderResponse,
    ShipOrderRequest,
)


router = APIRouter()


@router.get('')
@Logger.io
async def list_my_orders(
    status: Optional[OrderStatus] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    current_user: UserEntity = Depends(get_current_user),
    use_case: OrderQueryUseCase = Depends(OrderQueryUseCase.depends),
) -> ApiResponse[PageResponse[OrderResponse]]:
    orders = await use_case.list_my_orders(
        user_id=current_user.id,  # type: ignore[arg-type]
        status=status,
        page=PageRequest.of(page=page, limit=limit),
    )
    return ApiResponse(data=PageResponse.of(orders, OrderResponse))


@router.get('/{order_id}')
@Logger.io
async def get_order(
    order_id: UtilsUUID7,
    current_user: UserEntity = Depends(get_current_user),
    use_case: OrderQueryUseCase = Depends(OrderQueryUseCase.depends),
) -> ApiResponse[OrderResponse]:
    order = await use_case.get_order(order_id=order_id, user=current_user)
    return ApiResponse(data=OrderResponse.model_validate(order))


@router.patch('/{order_id}/ship')
@Logger.io
async def ship_order(
    order_id: UtilsUUID7,
    request: ShipOrderRequest,
    current_user: UserEntity = Depends(get_current_user),
    use_case: UpdateOrderStatusUseCase = Depends(UpdateOrderStatusUseCase.depends),
) -> ApiResponse[OrderResponse]:
    order = await use_case.ship(
        order_id=order_id,
        seller_id=current_user.id,  # type: ignore[arg-type]
        tracking_number=request.tracking_number,
    )
    return ApiResponse(data=OrderResponse.model_validate(order))


@router.patch('/{order_id}/confirm-delivery')
@Logger.io
async def confirm_delivery(
    order_id: UtilsUUID7,
    current_user: UserEntity = Depends(get_current_user),
    use_case: UpdateOrderStatusUseCase = Depends(UpdateOrderStatusUseCase.depends),
) -> ApiResponse[OrderResponse]:
    order = await use_case.confirm_delivery(
        order_id=order_id,
        buyer_id=current_user.id,  # type: ignore[arg-type]
    )
    return ApiResponse(data=OrderResponse.model_validate(order))


@router.patch('/{order_id}/cancel')
@Logger.io
async def cancel_order(
    order_id: UtilsUUID7,
    current_user: UserEntity = Depends(get_current_user),
    use_case: UpdateOrderStatusUseCase = Depends(UpdateOrderStatusUseCase.depends),
) -> ApiResponse[OrderResponse]:
    order = await use_case.cancel(
        order_id=order_id,
        user_id=current_user.id,  # type: ignore[arg-type]
    )
    return ApiResponse(data=OrderResponse.model_validate(order))

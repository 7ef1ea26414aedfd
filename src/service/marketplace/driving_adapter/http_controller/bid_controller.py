from fastapi import APIRouter, Depends, Query

from src.platform.logging.loguru_io import Logger
from src.service.marketplace.app.dto.page import PageRequest
from src.service.marketplace.app.query.product_query_use_case import BidQueryUseCase
from src.service.marketplace.domain.entity.user_entity import UserEntity
from src.service.marketplace.driving_adapter.http_controller.auth.role_auth import (
    get_current_user,
)
from src.service.marketplace.driving_adapter.http_controller.schema.common_schema import (
    ApiResponse,
    PageResponse,
)
from src.service.marketplace.driving_adapter.http_controller.schema.product_schema import (
    BidResponse,
)


router = APIRouter()


@router.get('/my-bids')
@Logger.io
async def list_my_bids(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    current_user: UserEntity = Depends(get_current_user),
    use_case: BidQueryUseCase = Depends(BidQueryUseCase.depends),
) -> ApiResponse[PageResponse[BidResponse]]:
    bids = await use_case.list_my_bids(
        user_id=current_user.id,  # type: ignore[arg-type]
        page=PageRequest.of(page=page, limit=limit),
    )
    return ApiResponse(data=PageResponse.of(bids, BidResponse))

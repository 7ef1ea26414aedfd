from typing import Optional

from fastapi import APIRouter, Depends, Query

from src.platform.logging.loguru_io import Logger
from src.service.marketplace.app.command.add_wallet_funds_use_case import (
    AddWalletFundsUseCase,
    WalletOperationResult,
)
from src.service.marketplace.app.command.deduct_wallet_funds_use_case import (
    DeductWalletFundsUseCase,
)
from src.service.marketplace.app.command.transfer_wallet_funds_use_case import (
    TransferWalletFundsUseCase,
)
from src.service.marketplace.app.dto.page import PageRequest
from src.service.marketplace.app.query.wallet_query_use_case import WalletQueryUseCase
from src.service.marketplace.domain.entity.user_entity import UserEntity
from src.service.marketplace.domain.entity.wallet_entity import TransactionType
from src.service.marketplace.driving_adapter.http_controller.auth.role_auth import (
    get_current_user,
)
from src.service.marketplace.driving_adapter.http_controller.schema.common_schema import (
    ApiResponse,
    PageResponse,
)
from src.service.marketplace.driving_adapter.http_controller.schema.wallet_schema import (
    AddFundsRequest,
    PurchaseRequest,
    TransferRequest,
    TransferResponse,
    WalletOperationResponse,
    WalletResponse,
    WalletStatsResponse,
    WalletTransactionResponse,
)


router = APIRouter()


def _operation_response(result: WalletOperationResult) -> WalletOperationResponse:
    return WalletOperationResponse(
        balance=result.wallet.balance,
        available_balance=result.wallet.available_balance,
        transaction=WalletTransactionResponse.model_validate(result.transaction),
    )


@router.get('/balance')
@Logger.io
async def get_balance(
    current_user: UserEntity = Depends(get_current_user),
    use_case: WalletQueryUseCase = Depends(WalletQueryUseCase.depends),
) -> ApiResponse[WalletResponse]:
    overview = await use_case.get_wallet(user_id=current_user.id)  # type: ignore[arg-type]
    wallet = overview.wallet
    return ApiResponse(
        data=WalletResponse(
            user_id=wallet.user_id,
            balance=wallet.balance,
            locked_balance=wallet.locked_balance,
            available_balance=wallet.available_balance,
            recent_transactions=[
                WalletTransactionResponse.model_validate(txn)
                for txn in overview.recent_transactions
            ],
        )
    )


@router.post('/add-funds')
@Logger.io
async def add_funds(
    request: AddFundsRequest,
    current_user: UserEntity = Depends(get_current_user),
    use_case: AddWalletFundsUseCase = Depends(AddWalletFundsUseCase.depends),
) -> ApiResponse[WalletOperationResponse]:
    result = await use_case.execute(
        user_id=current_user.id,  # type: ignore[arg-type]
        amount=request.amount,
        payment_method_id=request.payment_method_id,
    )
    return ApiResponse(data=_operation_response(result))


@router.post('/purchase')
@Logger.io
async def purchase(
    request: PurchaseRequest,
    current_user: UserEntity = Depends(get_current_user),
    use_case: DeductWalletFundsUseCase = Depends(DeductWalletFundsUseCase.depends),
) -> ApiResponse[WalletOperationResponse]:
    result = await use_case.execute(
        user_id=current_user.id,  # type: ignore[arg-type]
        amount=request.amount,
        description=request.description,
        reference=request.reference,
    )
    return ApiResponse(data=_operation_response(result))


@router.post('/transfer')
@Logger.io
async def transfer(
    request: TransferRequest,
    current_user: UserEntity = Depends(get_current_user),
    use_case: TransferWalletFundsUseCase = Depends(TransferWalletFundsUseCase.depends),
) -> ApiResponse[TransferResponse]:
    result = await use_case.execute(
        sender_id=current_user.id,  # type: ignore[arg-type]
        recipient_id=request.recipient_id,
        amount=request.amount,
        description=request.description,
    )
    return ApiResponse(
        data=TransferResponse(
            balance=result.sender_wallet.balance,
            available_balance=result.sender_wallet.available_balance,
            outgoing=WalletTransactionResponse.model_validate(result.outgoing),
            incoming=WalletTransactionResponse.model_validate(result.incoming),
        )
    )


@router.get('/transactions')
@Logger.io
async def list_transactions(
    type: Optional[TransactionType] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    current_user: UserEntity = Depends(get_current_user),
    use_case: WalletQueryUseCase = Depends(WalletQueryUseCase.depends),
) -> ApiResponse[PageResponse[WalletTransactionResponse]]:
    transactions = await use_case.list_transactions(
        user_id=current_user.id,  # type: ignore[arg-type]
        page=PageRequest.of(page=page, limit=limit),
        type=type,
    )
    return ApiResponse(data=PageResponse.of(transactions, WalletTransactionResponse))


@router.get('/stats')
@Logger.io
async def get_stats(
    current_user: UserEntity = Depends(get_current_user),
    use_case: WalletQueryUseCase = Depends(WalletQueryUseCase.depends),
) -> ApiResponse[WalletStatsResponse]:
    stats = await use_case.get_stats(user_id=current_user.id)  # type: ignore[arg-type]
    return ApiResponse(data=WalletStatsResponse.model_validate(stats))

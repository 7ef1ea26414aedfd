from fastapi import APIRouter, Depends, Header, Query, Request, status
from opentelemetry import trace

from src.platform.logging.loguru_io import Logger
from src.service.marketplace.app.command.confirm_payment_use_case import (
    ConfirmPaymentUseCase,
    PaymentConfirmation,
)
from src.service.marketplace.app.command.create_payment_intent_use_case import (
    CreatePaymentIntentUseCase,
)
from src.service.marketplace.app.command.process_payment_webhook_use_case import (
    ProcessPaymentWebhookUseCase,
)
from src.service.marketplace.app.dto.page import PageRequest
from src.service.marketplace.app.query.payment_query_use_case import PaymentQueryUseCase
from src.service.marketplace.domain.entity.order_entity import ShippingAddress
from src.service.marketplace.domain.entity.user_entity import UserEntity
from src.service.marketplace.driving_adapter.http_controller.auth.role_auth import (
    get_current_user,
    require_buyer,
)
from src.service.marketplace.driving_adapter.http_controller.schema.common_schema import (
    ApiResponse,
    PageResponse,
)
from src.service.marketplace.driving_adapter.http_controller.schema.payment_schema import (
    ConfirmPaymentRequest,
    CreatePaymentIntentRequest,
    MockConfirmRequest,
    OrderResponse,
    PaymentConfigResponse,
    PaymentConfirmationResponse,
    PaymentIntentResponse,
    PaymentResponse,
    PaymentStatusResponse,
    WebhookAckResponse,
)


router = APIRouter()
tracer = trace.get_tracer(__name__)

WEBHOOK_SIGNATURE_HEADER = 'Payment-Signature'


def _confirmation_response(confirmation: PaymentConfirmation) -> PaymentConfirmationResponse:
    return PaymentConfirmationResponse(
        payment=PaymentResponse.model_validate(confirmation.payment),
        order=OrderResponse.model_validate(confirmation.order),
    )


@router.post('/create-payment-intent', status_code=status.HTTP_201_CREATED)
@Logger.io
async def create_payment_intent(
    request: CreatePaymentIntentRequest,
    current_user: UserEntity = Depends(require_buyer),
    use_case: CreatePaymentIntentUseCase = Depends(CreatePaymentIntentUseCase.depends),
) -> ApiResponse[PaymentIntentResponse]:
    address = request.shipping_address
    result = await use_case.execute(
        buyer_id=current_user.id,  # type: ignore[arg-type]
        product_id=request.product_id,
        amount=request.amount,
        shipping_address=ShippingAddress(**address.model_dump()) if address else None,
    )
    return ApiResponse(data=PaymentIntentResponse.model_validate(result))


@router.post('/confirm-payment')
@Logger.io
async def confirm_payment(
    request: ConfirmPaymentRequest,
    current_user: UserEntity = Depends(get_current_user),
    use_case: ConfirmPaymentUseCase = Depends(ConfirmPaymentUseCase.depends),
) -> ApiResponse[PaymentConfirmationResponse]:
    with tracer.start_as_current_span(
        'controller.confirm_payment',
        attributes={'payment.intent_id': request.payment_intent_id},
    ):
        confirmation = await use_case.execute(
            payment_intent_id=request.payment_intent_id,
            user_id=current_user.id,  # type: ignore[arg-type]
        )
        return ApiResponse(data=_confirmation_response(confirmation))


@router.post('/mock-confirm')
@Logger.io
async def mock_confirm(
    request: MockConfirmRequest,
    current_user: UserEntity = Depends(get_current_user),
    use_case: ConfirmPaymentUseCase = Depends(ConfirmPaymentUseCase.depends),
) -> ApiResponse[PaymentConfirmationResponse]:
    confirmation = await use_case.execute_with_test_card(
        payment_intent_id=request.payment_intent_id,
        user_id=current_user.id,  # type: ignore[arg-type]
        payment_method_id=request.payment_method_id,
    )
    return ApiResponse(data=_confirmation_response(confirmation))


@router.post('/webhook')
async def payment_webhook(
    request: Request,
    signature: str = Header('', alias=WEBHOOK_SIGNATURE_HEADER),
    use_case: ProcessPaymentWebhookUseCase = Depends(ProcessPaymentWebhookUseCase.depends),
) -> ApiResponse[WebhookAckResponse]:
    # Signature covers the raw bytes, so the body is not parsed here
    payload = await request.body()
    result = await use_case.execute(payload=payload, signature=signature)
    return ApiResponse(
        data=WebhookAckResponse(event_type=result.event_type, handled=result.handled)
    )


@router.get('/history')
@Logger.io
async def payment_history(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    current_user: UserEntity = Depends(get_current_user),
    use_case: PaymentQueryUseCase = Depends(PaymentQueryUseCase.depends),
) -> ApiResponse[PageResponse[PaymentResponse]]:
    payments = await use_case.list_history(
        user_id=current_user.id,  # type: ignore[arg-type]
        page=PageRequest.of(page=page, limit=limit),
    )
    return ApiResponse(data=PageResponse.of(payments, PaymentResponse))


@router.get('/status/{payment_intent_id}')
@Logger.io
async def payment_status(
    payment_intent_id: str,
    current_user: UserEntity = Depends(get_current_user),
    use_case: PaymentQueryUseCase = Depends(PaymentQueryUseCase.depends),
) -> ApiResponse[PaymentStatusResponse]:
    view = await use_case.get_status(
        payment_intent_id=payment_intent_id,
        user_id=current_user.id,  # type: ignore[arg-type]
    )
    return ApiResponse(
        data=PaymentStatusResponse(
            payment=PaymentResponse.model_validate(view.payment),
            intent_status=view.intent_status,
        )
    )


@router.get('/config', response_model_by_alias=True)
async def payment_config(
    use_case: PaymentQueryUseCase = Depends(PaymentQueryUseCase.depends),
) -> ApiResponse[PaymentConfigResponse]:
    config = use_case.get_config()
    return ApiResponse(
        data=PaymentConfigResponse(
            public_key=config.public_key,
            minimum_amount=config.minimum_amount,
            currency=config.currency,
            platform_fee_percentage=config.platform_fee_percentage,
        )
    )

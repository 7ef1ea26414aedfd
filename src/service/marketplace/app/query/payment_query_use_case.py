from decimal import Decimal
from typing import Self

import attrs
from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.core_setting import Settings
from src.platform.config.di import Container
from src.platform.exception.exceptions import ForbiddenError, NotFoundError
from src.platform.logging.loguru_io import Logger
from src.service.marketplace.app.dto.page import Page, PageRequest
from src.service.marketplace.app.interface.i_payment_gateway import IPaymentGateway
from src.service.marketplace.app.interface.i_payment_repo import IPaymentRepo
from src.service.marketplace.domain.entity.payment_entity import IntentStatus, Payment


@attrs.define(frozen=True)
class PaymentConfig:
    public_key: str
    minimum_amount: Decimal
    currency: str
    platform_fee_percentage: Decimal


@attrs.define(frozen=True)
class PaymentStatusView:
    payment: Payment
    intent_status: IntentStatus


class PaymentQueryUseCase:
    def __init__(
        self,
        *,
        payment_repo: IPaymentRepo,
        payment_gateway: IPaymentGateway,
        settings: Settings,
    ) -> None:
        self.payment_repo = payment_repo
        self.payment_gateway = payment_gateway
        self.settings = settings

    @classmethod
    @inject
    def depends(
        cls,
        payment_repo: IPaymentRepo = Depends(Provide[Container.payment_repo]),
        payment_gateway: IPaymentGateway = Depends(Provide[Container.payment_gateway]),
        settings: Settings = Depends(Provide[Container.config_service]),
    ) -> Self:
        return cls(payment_repo=payment_repo, payment_gateway=payment_gateway, settings=settings)

    def get_config(self) -> PaymentConfig:
        return PaymentConfig(
            public_key=self.payment_gateway.public_key,
            minimum_amount=self.settings.PAYMENT_MINIMUM_AMOUNT,
            currency=self.settings.PAYMENT_CURRENCY,
            platform_fee_percentage=self.settings.PLATFORM_FEE_PERCENTAGE,
        )

    @Logger.io
    async def list_history(self, *, user_id: int, page: PageRequest) -> Page[Payment]:
        return await self.payment_repo.list_by_user(user_id=user_id, page=page)

    @Logger.io
    async def get_status(self, *, payment_intent_id: str, user_id: int) -> PaymentStatusView:
        payment = await self.payment_repo.get_by_intent_id(payment_intent_id=payment_intent_id)
        if not payment:
            raise NotFoundError('Payment not found')
        if payment.user_id != user_id:
            raise ForbiddenError('Only the payer can view this payment')

        intent = await self.payment_gateway.retrieve_payment_intent(
            payment_intent_id=payment_intent_id
        )
        return PaymentStatusView(payment=payment, intent_status=intent.status)

from typing import Optional, Self

import attrs
from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.database.unit_of_work import AbstractUnitOfWork
from src.platform.exception.exceptions import (
    ConflictError,
    DomainError,
    ForbiddenError,
    NotFoundError,
)
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.marketplace_metrics import metrics
from src.service.marketplace.app.interface.i_payment_gateway import IPaymentGateway
from src.service.marketplace.domain.entity.order_entity import Order
from src.service.marketplace.domain.entity.payment_entity import Payment, PaymentStatus


SOLD_ELSEWHERE = 'Product has already been sold; your payment was refunded'


@attrs.define(frozen=True)
class PaymentConfirmation:
    payment: Payment
    order: Order


async def load_payment_and_order(
    uow: AbstractUnitOfWork, *, payment_intent_id: str
) -> tuple[Payment, Order]:
    payment = await uow.payment_repo.get_by_intent_id(payment_intent_id=payment_intent_id)
    if not payment:
        raise NotFoundError('Payment not found')
    order = await uow.order_repo.get_by_id(order_id=payment.order_id)
    if not order:
        raise NotFoundError('Order not found')
    return payment, order


@Logger.io
async def apply_successful_payment(
    uow: AbstractUnitOfWork, *, payment: Payment, order: Order
) -> Optional[PaymentConfirmation]:
    """
    payment -> succeeded, order -> paid, product -> sold; caller commits.

    Returns None when another order already bought the product.
    """
    if not await uow.product_repo.mark_as_sold_if_available(product_id=order.product_id):
        return None

    payment = await uow.payment_repo.update(payment=payment.mark_as_succeeded())
    order = await uow.order_repo.update(order=order.mark_as_paid())
    metrics.record_payment_confirmation(result='succeeded', amount=payment.amount)
    return PaymentConfirmation(payment=payment, order=order)


@Logger.io
async def refund_lost_sale(
    uow: AbstractUnitOfWork,
    payment_gateway: IPaymentGateway,
    *,
    payment: Payment,
    order: Order,
) -> PaymentConfirmation:
    """
    The buyer was charged but the product went to another order.

    Refunds the intent, then payment -> refunded and order -> cancelled; caller commits.
    """
    await payment_gateway.refund_payment_intent(payment_intent_id=payment.payment_intent_id)
    payment = await uow.payment_repo.update(payment=payment.mark_as_refunded())
    order = await uow.order_repo.update(order=order.cancel())
    metrics.record_payment_confirmation(result='refunded')
    Logger.base.warning(
        f'↩️ [PAYMENT] Product {order.product_id} already sold, '
        f'refunded {payment.payment_intent_id} and cancelled order {order.id}'
    )
    return PaymentConfirmation(payment=payment, order=order)


class ConfirmPaymentUseCase:
    def __init__(self, *, uow: AbstractUnitOfWork, payment_gateway: IPaymentGateway) -> None:
        self.uow = uow
        self.payment_gateway = payment_gateway

    @classmethod
    @inject
    def depends(
        cls,
        uow: AbstractUnitOfWork = Depends(Provide[Container.unit_of_work]),
        payment_gateway: IPaymentGateway = Depends(Provide[Container.payment_gateway]),
    ) -> Self:
        return cls(uow=uow, payment_gateway=payment_gateway)

    @Logger.io
    async def execute(self, *, payment_intent_id: str, user_id: int) -> PaymentConfirmation:
        async with self.uow:
            payment, order = await load_payment_and_order(
                self.uow, payment_intent_id=payment_intent_id
            )
            if payment.user_id != user_id:
                raise ForbiddenError('Only the payer can confirm this payment')

            # Already confirmed (by an earlier call or the webhook)
            if payment.is_succeeded:
                return PaymentConfirmation(payment=payment, order=order)
            if payment.status == PaymentStatus.REFUNDED:
                raise ConflictError(SOLD_ELSEWHERE)

            intent = await self.payment_gateway.retrieve_payment_intent(
                payment_intent_id=payment_intent_id
            )
            if not intent.succeeded:
                metrics.record_payment_confirmation(result=intent.status.value)
                raise DomainError('Payment not successful')

            confirmation = await apply_successful_payment(self.uow, payment=payment, order=order)
            if confirmation is None:
                await refund_lost_sale(
                    self.uow, self.payment_gateway, payment=payment, order=order
                )
                await self.uow.commit()
                raise ConflictError(SOLD_ELSEWHERE)
            await self.uow.commit()

        Logger.base.info(f'✅ [PAYMENT] Order {order.id} paid via {payment_intent_id}')
        return confirmation

    @Logger.io
    async def execute_with_test_card(
        self,
        *,
        payment_intent_id: str,
        user_id: int,
        payment_method_id: Optional[str] = None,
    ) -> PaymentConfirmation:
        """Confirm the intent on the gateway with a test card, then confirm the payment"""
        async with self.uow:
            payment, _ = await load_payment_and_order(
                self.uow, payment_intent_id=payment_intent_id
            )
            if payment.user_id != user_id:
                raise ForbiddenError('Only the payer can confirm this payment')

        await self.payment_gateway.confirm_payment_intent(
            payment_intent_id=payment_intent_id, payment_method_id=payment_method_id
        )
        return await self.execute(payment_intent_id=payment_intent_id, user_id=user_id)

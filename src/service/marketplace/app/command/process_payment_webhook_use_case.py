from typing import Any, Self

import attrs
from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.database.unit_of_work import AbstractUnitOfWork
from src.platform.exception.exceptions import NotFoundError
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.marketplace_metrics import metrics
from src.service.marketplace.app.command.confirm_payment_use_case import (
    apply_successful_payment,
    load_payment_and_order,
    refund_lost_sale,
)
from src.service.marketplace.app.interface.i_payment_gateway import IPaymentGateway
from src.service.marketplace.domain.entity.order_entity import OrderStatus
from src.service.marketplace.domain.entity.payment_entity import PaymentStatus


class WebhookEventType:
    SUCCEEDED = 'payment_intent.succeeded'
    FAILED = 'payment_intent.payment_failed'
    CANCELED = 'payment_intent.canceled'


@attrs.define(frozen=True)
class WebhookResult:
    event_type: str
    payment_intent_id: str | None
    handled: bool


class ProcessPaymentWebhookUseCase:
    """Apply gateway-pushed intent outcomes; duplicates and unknown intents are acknowledged"""

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

    @Logger.io(truncate_content=True)
    async def execute(self, *, payload: bytes, signature: str) -> WebhookResult:
        event = self.payment_gateway.construct_webhook_event(payload=payload, signature=signature)
        event_type = str(event.get('type', ''))
        intent_id = self._intent_id(event)

        if intent_id is None:
            return WebhookResult(event_type=event_type, payment_intent_id=None, handled=False)

        try:
            if event_type == WebhookEventType.SUCCEEDED:
                handled = await self._on_succeeded(payment_intent_id=intent_id)
            elif event_type in (WebhookEventType.FAILED, WebhookEventType.CANCELED):
                handled = await self._on_failed(payment_intent_id=intent_id, event_type=event_type)
            else:
                Logger.base.info(f'📭 [WEBHOOK] Ignoring event {event_type}')
                handled = False
        except NotFoundError:
            # Intents created outside this service
            Logger.base.warning(f'⚠️ [WEBHOOK] No payment for intent {intent_id}')
            handled = False

        return WebhookResult(event_type=event_type, payment_intent_id=intent_id, handled=handled)

    @staticmethod
    def _intent_id(event: dict[str, Any]) -> str | None:
        data_object = (event.get('data') or {}).get('object') or {}
        intent_id = data_object.get('id')
        return str(intent_id) if intent_id else None

    async def _on_succeeded(self, *, payment_intent_id: str) -> bool:
        async with self.uow:
            payment, order = await load_payment_and_order(
                self.uow, payment_intent_id=payment_intent_id
            )
            if payment.status in (PaymentStatus.SUCCEEDED, PaymentStatus.REFUNDED):
                return False
            confirmation = await apply_successful_payment(self.uow, payment=payment, order=order)
            if confirmation is None:
                await refund_lost_sale(
                    self.uow, self.payment_gateway, payment=payment, order=order
                )
            await self.uow.commit()
        return True

    async def _on_failed(self, *, payment_intent_id: str, event_type: str) -> bool:
        async with self.uow:
            payment, order = await load_payment_and_order(
                self.uow, payment_intent_id=payment_intent_id
            )
            if payment.status in (PaymentStatus.SUCCEEDED, PaymentStatus.REFUNDED):
                Logger.base.warning(
                    f'⚠️ [WEBHOOK] {event_type} after {payment.status} '
                    f'for {payment_intent_id}, ignored'
                )
                return False

            await self.uow.payment_repo.update(payment=payment.mark_as_failed())
            # Pending orders never take the product off sale
            if order.status == OrderStatus.PENDING:
                await self.uow.order_repo.update(order=order.cancel())
            await self.uow.commit()

        metrics.record_payment_confirmation(
            result='canceled' if event_type == WebhookEventType.CANCELED else 'failed'
        )
        return True

from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional, Self

import attrs
from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from opentelemetry import trace
from uuid_utils import UUID

from src.platform.config.core_setting import Settings
from src.platform.config.di import Container
from src.platform.database.unit_of_work import AbstractUnitOfWork
from src.platform.exception.exceptions import DomainError, ForbiddenError, NotFoundError
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.marketplace_metrics import metrics
from src.service.marketplace.app.command.settle_auction_use_case import settle_ended_auction
from src.service.marketplace.app.interface.i_payment_gateway import IPaymentGateway
from src.service.marketplace.domain.entity.order_entity import Order, ShippingAddress
from src.service.marketplace.domain.entity.payment_entity import Payment
from src.service.marketplace.domain.entity.product_entity import Product, ProductStatus
from src.service.marketplace.domain.money import to_cents, to_money


class PurchasePurpose:
    FIXED_PRICE = 'fixed_price'
    BUY_NOW = 'buy_now'
    AUCTION_WIN = 'auction_win'


@attrs.define(frozen=True)
class PaymentIntentResult:
    payment_intent_id: str
    client_secret: str
    order_id: UUID
    amount: Decimal
    currency: str


class CreatePaymentIntentUseCase:
    """
    Open a payment for a product: pending order, gateway intent, pending payment row.

    The amount to charge is always derived server-side; the client's amount must
    match it exactly.
    """

    def __init__(
        self,
        *,
        uow: AbstractUnitOfWork,
        payment_gateway: IPaymentGateway,
        settings: Settings,
    ) -> None:
        self.uow = uow
        self.payment_gateway = payment_gateway
        self.settings = settings
        self.tracer = trace.get_tracer(__name__)

    @classmethod
    @inject
    def depends(
        cls,
        uow: AbstractUnitOfWork = Depends(Provide[Container.unit_of_work]),
        payment_gateway: IPaymentGateway = Depends(Provide[Container.payment_gateway]),
        settings: Settings = Depends(Provide[Container.config_service]),
    ) -> Self:
        return cls(uow=uow, payment_gateway=payment_gateway, settings=settings)

    @Logger.io
    async def execute(
        self,
        *,
        buyer_id: int,
        product_id: int,
        amount: Decimal,
        shipping_address: Optional[ShippingAddress] = None,
        now: Optional[datetime] = None,
    ) -> PaymentIntentResult:
        amount = to_money(amount)
        minimum = self.settings.PAYMENT_MINIMUM_AMOUNT
        if amount < minimum:
            raise DomainError(f'Minimum charge amount is ${minimum:.2f}')

        now = now or datetime.now(timezone.utc)
        currency = self.settings.PAYMENT_CURRENCY

        with self.tracer.start_as_current_span(
            'use_case.create_payment_intent',
            attributes={'product.id': product_id, 'buyer.id': buyer_id},
        ):
            async with self.uow:
                product = await self.uow.product_repo.get_by_id(product_id=product_id)
                if not product:
                    raise NotFoundError('Product not found')
                if product.owner_id == buyer_id:
                    raise DomainError('Cannot purchase your own product')

                expected, purpose = await self._resolve_expected_amount(
                    product=product, buyer_id=buyer_id, now=now
                )
                if amount != expected:
                    raise DomainError(f'Payment amount must be ${expected:.2f}')

                order = await self.uow.order_repo.create(
                    order=Order.create(
                        buyer_id=buyer_id,
                        seller_id=product.owner_id,
                        product_id=product_id,
                        total_amount=amount,
                        platform_fee_percentage=self.settings.PLATFORM_FEE_PERCENTAGE,
                        shipping_address=shipping_address,
                    )
                )

                intent = await self.payment_gateway.create_payment_intent(
                    amount_cents=to_cents(amount),
                    currency=currency,
                    metadata={
                        'order_id': str(order.id),
                        'product_id': str(product_id),
                        'buyer_id': str(buyer_id),
                        'seller_id': str(product.owner_id),
                        'purpose': purpose,
                    },
                )

                order = await self.uow.order_repo.update(
                    order=order.attach_payment_intent(intent.id)
                )
                await self.uow.payment_repo.create(
                    payment=Payment.create(
                        user_id=buyer_id,
                        order_id=order.id,
                        payment_intent_id=intent.id,
                        amount=amount,
                        platform_fee=order.platform_fee,
                        currency=currency,
                        description=f'{purpose}: {product.title}',
                    )
                )
                await self.uow.commit()

        metrics.record_payment_intent(purpose=purpose)
        Logger.base.info(f'💳 [PAYMENT] Intent {intent.id} created for order {order.id}')
        return PaymentIntentResult(
            payment_intent_id=intent.id,
            client_secret=intent.client_secret,
            order_id=order.id,
            amount=amount,
            currency=currency,
        )

    async def _resolve_expected_amount(
        self, *, product: Product, buyer_id: int, now: datetime
    ) -> tuple[Decimal, str]:
        if not product.is_auction:
            if product.status == ProductStatus.ACTIVE:
                return product.price, PurchasePurpose.FIXED_PRICE
            raise DomainError('Product is not available for purchase')

        if product.is_auction_open(now):
            if product.buy_now_price is not None:
                return product.buy_now_price, PurchasePurpose.BUY_NOW
            raise DomainError('Auction is still active')

        if not (product.needs_settlement(now) or product.status == ProductStatus.ENDED):
            raise DomainError('Product is not available for purchase')

        settlement = await settle_ended_auction(
            self.uow,
            product=product,
            now=now,
            platform_fee_percentage=self.settings.PLATFORM_FEE_PERCENTAGE,
        )
        if settlement.winner_id is None or settlement.winning_amount is None:
            raise DomainError('Product is not available for purchase')
        if settlement.winner_id != buyer_id:
            raise ForbiddenError('You are not the winning bidder')
        return settlement.winning_amount, PurchasePurpose.AUCTION_WIN

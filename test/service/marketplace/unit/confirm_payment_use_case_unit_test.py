"""
Unit tests for payment confirmation

Both confirmation paths (client confirm and gateway webhook) end in the same state:
payment succeeded, order paid, product sold. Repeats are no-ops, and a second
buyer racing for the same product gets a conflict and their charge back.
"""

from datetime import datetime
from decimal import Decimal
from typing import Callable

import orjson
import pytest

from src.platform.config.core_setting import Settings
from src.platform.exception.exceptions import (
    ConflictError,
    DomainError,
    ForbiddenError,
    NotFoundError,
    PaymentGatewayError,
)
from src.service.marketplace.app.command.confirm_payment_use_case import (
    SOLD_ELSEWHERE,
    ConfirmPaymentUseCase,
)
from src.service.marketplace.app.command.create_payment_intent_use_case import (
    CreatePaymentIntentUseCase,
    PaymentIntentResult,
)
from src.service.marketplace.app.command.process_payment_webhook_use_case import (
    ProcessPaymentWebhookUseCase,
)
from src.service.marketplace.domain.entity.order_entity import OrderStatus
from src.service.marketplace.domain.entity.payment_entity import PaymentStatus
from src.service.marketplace.domain.entity.product_entity import ProductStatus
from src.service.marketplace.domain.entity.user_entity import UserRole
from src.service.marketplace.driven_adapter.gateway.mock_payment_gateway import (
    DECLINED_TEST_CARD,
    MockPaymentGateway,
    sign_webhook_payload,
)
from test.constants import WEBHOOK_SECRET
from test.service.marketplace.in_memory_uow import InMemoryUnitOfWork


@pytest.fixture
def create_intent(
    uow: InMemoryUnitOfWork, payment_gateway: MockPaymentGateway, test_settings: Settings
) -> CreatePaymentIntentUseCase:
    return CreatePaymentIntentUseCase(
        uow=uow, payment_gateway=payment_gateway, settings=test_settings
    )


@pytest.fixture
def confirm(uow: InMemoryUnitOfWork, payment_gateway: MockPaymentGateway) -> ConfirmPaymentUseCase:
    return ConfirmPaymentUseCase(uow=uow, payment_gateway=payment_gateway)


@pytest.fixture
def webhook(
    uow: InMemoryUnitOfWork, payment_gateway: MockPaymentGateway
) -> ProcessPaymentWebhookUseCase:
    return ProcessPaymentWebhookUseCase(uow=uow, payment_gateway=payment_gateway)


@pytest.fixture
def open_purchase(
    create_intent: CreatePaymentIntentUseCase,
    create_user: Callable,
    create_listing: Callable,
    now: datetime,
) -> Callable:
    async def _open() -> tuple[int, int, PaymentIntentResult]:
        seller = await create_user(role=UserRole.SELLER)
        buyer = await create_user(role=UserRole.BUYER)
        listing = await create_listing(owner_id=seller.id, price=Decimal('320'))
        result = await create_intent.execute(
            buyer_id=buyer.id, product_id=listing.id, amount=Decimal('320'), now=now
        )
        return buyer.id, listing.id, result

    return _open


def _signed(event_type: str, intent_id: str) -> tuple[bytes, str]:
    payload = orjson.dumps({'type': event_type, 'data': {'object': {'id': intent_id}}})
    return payload, sign_webhook_payload(payload, WEBHOOK_SECRET)


async def _assert_sold(uow: InMemoryUnitOfWork, *, intent_id: str, product_id: int) -> None:
    payment = await uow.payment_repo.get_by_intent_id(payment_intent_id=intent_id)
    assert payment is not None
    assert payment.status == PaymentStatus.SUCCEEDED
    assert payment.paid_at is not None

    order = await uow.order_repo.get_by_id(order_id=payment.order_id)
    assert order is not None
    assert order.status == OrderStatus.PAID
    assert order.paid_at is not None

    product = await uow.product_repo.get_by_id(product_id=product_id)
    assert product is not None
    assert product.status == ProductStatus.SOLD


@pytest.mark.unit
class TestConfirmPayment:
    @pytest.mark.asyncio
    async def test_test_card_confirmation_marks_everything_paid(
        self, confirm: ConfirmPaymentUseCase, uow: InMemoryUnitOfWork, open_purchase: Callable
    ) -> None:
        buyer_id, product_id, intent = await open_purchase()

        confirmation = await confirm.execute_with_test_card(
            payment_intent_id=intent.payment_intent_id, user_id=buyer_id
        )

        assert confirmation.payment.status == PaymentStatus.SUCCEEDED
        assert confirmation.order.status == OrderStatus.PAID
        await _assert_sold(uow, intent_id=intent.payment_intent_id, product_id=product_id)

    @pytest.mark.asyncio
    async def test_unconfirmed_intent_is_not_successful(
        self, confirm: ConfirmPaymentUseCase, uow: InMemoryUnitOfWork, open_purchase: Callable
    ) -> None:
        buyer_id, product_id, intent = await open_purchase()

        with pytest.raises(DomainError) as exc_info:
            await confirm.execute(payment_intent_id=intent.payment_intent_id, user_id=buyer_id)

        assert exc_info.value.message == 'Payment not successful'
        product = await uow.product_repo.get_by_id(product_id=product_id)
        assert product is not None
        assert product.status == ProductStatus.ACTIVE

    @pytest.mark.asyncio
    async def test_declined_card_keeps_payment_pending(
        self, confirm: ConfirmPaymentUseCase, uow: InMemoryUnitOfWork, open_purchase: Callable
    ) -> None:
        buyer_id, _, intent = await open_purchase()

        with pytest.raises(DomainError):
            await confirm.execute_with_test_card(
                payment_intent_id=intent.payment_intent_id,
                user_id=buyer_id,
                payment_method_id=DECLINED_TEST_CARD,
            )

        payment = await uow.payment_repo.get_by_intent_id(
            payment_intent_id=intent.payment_intent_id
        )
        assert payment is not None
        assert payment.status == PaymentStatus.PENDING

    @pytest.mark.asyncio
    async def test_confirming_twice_is_idempotent(
        self, confirm: ConfirmPaymentUseCase, uow: InMemoryUnitOfWork, open_purchase: Callable
    ) -> None:
        buyer_id, _, intent = await open_purchase()
        first = await confirm.execute_with_test_card(
            payment_intent_id=intent.payment_intent_id, user_id=buyer_id
        )
        commits = uow.commits

        second = await confirm.execute(
            payment_intent_id=intent.payment_intent_id, user_id=buyer_id
        )

        assert second.payment.paid_at == first.payment.paid_at
        assert uow.commits == commits

    @pytest.mark.asyncio
    async def test_only_payer_can_confirm(
        self, confirm: ConfirmPaymentUseCase, open_purchase: Callable
    ) -> None:
        _, _, intent = await open_purchase()

        with pytest.raises(ForbiddenError):
            await confirm.execute(payment_intent_id=intent.payment_intent_id, user_id=9999)

    @pytest.mark.asyncio
    async def test_unknown_intent(self, confirm: ConfirmPaymentUseCase) -> None:
        with pytest.raises(NotFoundError):
            await confirm.execute(payment_intent_id='pi_missing', user_id=1)

    @pytest.mark.asyncio
    async def test_second_buyer_loses_to_first_confirmation(
        self,
        confirm: ConfirmPaymentUseCase,
        create_intent: CreatePaymentIntentUseCase,
        uow: InMemoryUnitOfWork,
        payment_gateway: MockPaymentGateway,
        create_user: Callable,
        create_listing: Callable,
        now: datetime,
    ) -> None:
        # Given: two buyers hold intents for the same listing
        seller = await create_user(role=UserRole.SELLER)
        first_buyer = await create_user(role=UserRole.BUYER)
        second_buyer = await create_user(role=UserRole.BUYER)
        listing = await create_listing(owner_id=seller.id, price=Decimal('75'))
        first = await create_intent.execute(
            buyer_id=first_buyer.id, product_id=listing.id, amount=Decimal('75'), now=now
        )
        second = await create_intent.execute(
            buyer_id=second_buyer.id, product_id=listing.id, amount=Decimal('75'), now=now
        )

        # When: both confirm
        await confirm.execute_with_test_card(
            payment_intent_id=first.payment_intent_id, user_id=first_buyer.id
        )

        # Then: the later confirmation conflicts and the charge is refunded
        with pytest.raises(ConflictError) as exc_info:
            await confirm.execute_with_test_card(
                payment_intent_id=second.payment_intent_id, user_id=second_buyer.id
            )
        assert exc_info.value.status_code == 409
        assert exc_info.value.message == SOLD_ELSEWHERE

        payment = await uow.payment_repo.get_by_intent_id(
            payment_intent_id=second.payment_intent_id
        )
        assert payment is not None
        assert payment.status == PaymentStatus.REFUNDED
        order = await uow.order_repo.get_by_id(order_id=second.order_id)
        assert order is not None
        assert order.status == OrderStatus.CANCELLED
        intent = await payment_gateway.retrieve_payment_intent(
            payment_intent_id=second.payment_intent_id
        )
        assert intent.refunded
        await _assert_sold(uow, intent_id=first.payment_intent_id, product_id=listing.id)

        # Asking again reports the same outcome without charging or refunding twice
        with pytest.raises(ConflictError):
            await confirm.execute(
                payment_intent_id=second.payment_intent_id, user_id=second_buyer.id
            )

    @pytest.mark.asyncio
    async def test_webhook_refunds_a_charge_that_lost_the_race(
        self,
        confirm: ConfirmPaymentUseCase,
        webhook: ProcessPaymentWebhookUseCase,
        create_intent: CreatePaymentIntentUseCase,
        uow: InMemoryUnitOfWork,
        payment_gateway: MockPaymentGateway,
        create_user: Callable,
        create_listing: Callable,
        now: datetime,
    ) -> None:
        # Given: the listing is sold, and a second buyer's card was charged anyway
        seller = await create_user(role=UserRole.SELLER)
        first_buyer = await create_user(role=UserRole.BUYER)
        second_buyer = await create_user(role=UserRole.BUYER)
        listing = await create_listing(owner_id=seller.id, price=Decimal('75'))
        first = await create_intent.execute(
            buyer_id=first_buyer.id, product_id=listing.id, amount=Decimal('75'), now=now
        )
        second = await create_intent.execute(
            buyer_id=second_buyer.id, product_id=listing.id, amount=Decimal('75'), now=now
        )
        await confirm.execute_with_test_card(
            payment_intent_id=first.payment_intent_id, user_id=first_buyer.id
        )
        await payment_gateway.confirm_payment_intent(payment_intent_id=second.payment_intent_id)

        # When: the gateway reports the second charge
        payload, signature = _signed('payment_intent.succeeded', second.payment_intent_id)
        result = await webhook.execute(payload=payload, signature=signature)

        # Then
        assert result.handled is True
        payment = await uow.payment_repo.get_by_intent_id(
            payment_intent_id=second.payment_intent_id
        )
        assert payment is not None
        assert payment.status == PaymentStatus.REFUNDED
        order = await uow.order_repo.get_by_id(order_id=second.order_id)
        assert order is not None
        assert order.status == OrderStatus.CANCELLED
        intent = await payment_gateway.retrieve_payment_intent(
            payment_intent_id=second.payment_intent_id
        )
        assert intent.refunded
        await _assert_sold(uow, intent_id=first.payment_intent_id, product_id=listing.id)


@pytest.mark.unit
class TestPaymentWebhook:
    @pytest.mark.asyncio
    async def test_succeeded_event_applies_payment(
        self,
        webhook: ProcessPaymentWebhookUseCase,
        uow: InMemoryUnitOfWork,
        open_purchase: Callable,
    ) -> None:
        _, product_id, intent = await open_purchase()
        payload, signature = _signed('payment_intent.succeeded', intent.payment_intent_id)

        result = await webhook.execute(payload=payload, signature=signature)

        assert result.handled is True
        await _assert_sold(uow, intent_id=intent.payment_intent_id, product_id=product_id)

    @pytest.mark.asyncio
    async def test_duplicate_event_is_acknowledged_but_not_reapplied(
        self, webhook: ProcessPaymentWebhookUseCase, open_purchase: Callable
    ) -> None:
        _, _, intent = await open_purchase()
        payload, signature = _signed('payment_intent.succeeded', intent.payment_intent_id)
        await webhook.execute(payload=payload, signature=signature)

        result = await webhook.execute(payload=payload, signature=signature)

        assert result.handled is False

    @pytest.mark.asyncio
    async def test_failed_event_cancels_order_and_leaves_product_on_sale(
        self,
        webhook: ProcessPaymentWebhookUseCase,
        uow: InMemoryUnitOfWork,
        open_purchase: Callable,
    ) -> None:
        _, product_id, intent = await open_purchase()
        payload, signature = _signed('payment_intent.payment_failed', intent.payment_intent_id)

        result = await webhook.execute(payload=payload, signature=signature)

        assert result.handled is True
        payment = await uow.payment_repo.get_by_intent_id(
            payment_intent_id=intent.payment_intent_id
        )
        assert payment is not None
        assert payment.status == PaymentStatus.FAILED
        order = await uow.order_repo.get_by_id(order_id=intent.order_id)
        assert order is not None
        assert order.status == OrderStatus.CANCELLED
        product = await uow.product_repo.get_by_id(product_id=product_id)
        assert product is not None
        assert product.status == ProductStatus.ACTIVE

    @pytest.mark.asyncio
    async def test_failed_event_on_sold_product_leaves_it_sold(
        self,
        confirm: ConfirmPaymentUseCase,
        webhook: ProcessPaymentWebhookUseCase,
        create_intent: CreatePaymentIntentUseCase,
        uow: InMemoryUnitOfWork,
        create_user: Callable,
        create_listing: Callable,
        now: datetime,
    ) -> None:
        # Given: one buyer paid, another buyer's intent is still open
        seller = await create_user(role=UserRole.SELLER)
        winner = await create_user(role=UserRole.BUYER)
        loser = await create_user(role=UserRole.BUYER)
        listing = await create_listing(owner_id=seller.id, price=Decimal('90'))
        paid = await create_intent.execute(
            buyer_id=winner.id, product_id=listing.id, amount=Decimal('90'), now=now
        )
        open_intent = await create_intent.execute(
            buyer_id=loser.id, product_id=listing.id, amount=Decimal('90'), now=now
        )
        await confirm.execute_with_test_card(
            payment_intent_id=paid.payment_intent_id, user_id=winner.id
        )

        # When: the open intent fails
        payload, signature = _signed('payment_intent.payment_failed', open_intent.payment_intent_id)
        result = await webhook.execute(payload=payload, signature=signature)

        # Then: only the failed order is cancelled
        assert result.handled is True
        order = await uow.order_repo.get_by_id(order_id=open_intent.order_id)
        assert order is not None
        assert order.status == OrderStatus.CANCELLED
        await _assert_sold(uow, intent_id=paid.payment_intent_id, product_id=listing.id)

    @pytest.mark.asyncio
    async def test_unknown_intent_is_acknowledged(
        self, webhook: ProcessPaymentWebhookUseCase
    ) -> None:
        payload, signature = _signed('payment_intent.succeeded', 'pi_from_elsewhere')

        result = await webhook.execute(payload=payload, signature=signature)

        assert result.handled is False
        assert result.payment_intent_id == 'pi_from_elsewhere'

    @pytest.mark.asyncio
    async def test_tampered_payload_is_rejected(
        self, webhook: ProcessPaymentWebhookUseCase
    ) -> None:
        payload, signature = _signed('payment_intent.succeeded', 'pi_1')

        with pytest.raises(PaymentGatewayError) as exc_info:
            await webhook.execute(payload=payload + b' ', signature=signature)

        assert exc_info.value.status_code == 400

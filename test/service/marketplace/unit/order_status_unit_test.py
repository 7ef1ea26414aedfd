from datetime import datetime
from decimal import Decimal
from typing import Callable

import pytest
import uuid_utils

from src.platform.config.core_setting import Settings
from src.platform.exception.exceptions import DomainError, ForbiddenError, NotFoundError
from src.service.marketplace.app.command.admin_moderation_use_case import AdminModerationUseCase
from src.service.marketplace.app.command.confirm_payment_use_case import ConfirmPaymentUseCase
from src.service.marketplace.app.command.create_payment_intent_use_case import (
    CreatePaymentIntentUseCase,
)
from src.service.marketplace.app.command.update_order_status_use_case import (
    UpdateOrderStatusUseCase,
)
from src.service.marketplace.app.query.order_query_use_case import OrderQueryUseCase
from src.service.marketplace.domain.entity.order_entity import Order, OrderStatus
from src.service.marketplace.domain.entity.product_entity import ProductStatus
from src.service.marketplace.domain.entity.user_entity import UserEntity, UserRole
from src.service.marketplace.driven_adapter.gateway.mock_payment_gateway import (
    MockPaymentGateway,
)
from test.service.marketplace.in_memory_uow import InMemoryUnitOfWork


def _order(**overrides) -> Order:
    fields = dict(
        buyer_id=1,
        seller_id=2,
        product_id=3,
        total_amount=Decimal('200'),
        platform_fee_percentage=Decimal('0.025'),
    )
    fields.update(overrides)
    return Order.create(**fields)


@pytest.mark.unit
class TestOrderTransitions:
    def test_happy_path(self):
        order = _order()

        order = order.mark_as_paid()
        order = order.ship(tracking_number=' 1Z999 ')
        order = order.confirm_delivery()

        assert order.status == OrderStatus.DELIVERED
        assert order.tracking_number == '1Z999'
        assert order.paid_at and order.shipped_at and order.delivered_at

    def test_fee_split_sums_to_total(self):
        order = _order(total_amount=Decimal('199.99'))

        assert order.platform_fee == Decimal('5.00')
        assert order.seller_amount == Decimal('194.99')
        assert order.platform_fee + order.seller_amount == order.total_amount

    def test_pending_order_cannot_ship(self):
        with pytest.raises(DomainError) as exc_info:
            _order().ship(tracking_number='1Z999')

        assert exc_info.value.message == 'Cannot change order status from pending to shipped'

    def test_tracking_number_required(self):
        with pytest.raises(DomainError):
            _order().mark_as_paid().ship(tracking_number='  ')

    def test_paid_order_cannot_be_cancelled(self):
        with pytest.raises(DomainError):
            _order().mark_as_paid().cancel()

    def test_paid_order_can_be_refunded(self):
        assert _order().mark_as_paid().refund().status == OrderStatus.REFUNDED

    def test_marking_paid_twice_is_a_no_op(self):
        paid = _order().mark_as_paid()

        assert paid.mark_as_paid() is paid

    def test_buyer_cannot_be_seller(self):
        with pytest.raises(DomainError):
            _order(buyer_id=5, seller_id=5)


@pytest.mark.unit
class TestUpdateOrderStatusUseCase:
    @pytest.fixture
    def use_case(self, uow: InMemoryUnitOfWork) -> UpdateOrderStatusUseCase:
        return UpdateOrderStatusUseCase(uow=uow)

    @pytest.mark.asyncio
    async def test_seller_ships_and_buyer_confirms(
        self, use_case: UpdateOrderStatusUseCase, uow: InMemoryUnitOfWork
    ) -> None:
        order = await uow.order_repo.create(order=_order().mark_as_paid())

        shipped = await use_case.ship(order_id=order.id, seller_id=2, tracking_number='TRK-1')
        delivered = await use_case.confirm_delivery(order_id=order.id, buyer_id=1)

        assert shipped.status == OrderStatus.SHIPPED
        assert delivered.status == OrderStatus.DELIVERED

    @pytest.mark.asyncio
    async def test_buyer_cannot_ship(
        self, use_case: UpdateOrderStatusUseCase, uow: InMemoryUnitOfWork
    ) -> None:
        order = await uow.order_repo.create(order=_order().mark_as_paid())

        with pytest.raises(ForbiddenError):
            await use_case.ship(order_id=order.id, seller_id=1, tracking_number='TRK-1')

    @pytest.fixture
    def create_intent(
        self,
        uow: InMemoryUnitOfWork,
        payment_gateway: MockPaymentGateway,
        test_settings: Settings,
    ) -> CreatePaymentIntentUseCase:
        return CreatePaymentIntentUseCase(
            uow=uow, payment_gateway=payment_gateway, settings=test_settings
        )

    @pytest.mark.asyncio
    async def test_cancel_leaves_product_on_sale(
        self,
        use_case: UpdateOrderStatusUseCase,
        create_intent: CreatePaymentIntentUseCase,
        uow: InMemoryUnitOfWork,
        create_user: Callable,
        create_listing: Callable,
        now: datetime,
    ) -> None:
        seller = await create_user(role=UserRole.SELLER)
        buyer = await create_user(role=UserRole.BUYER)
        listing = await create_listing(owner_id=seller.id, price=Decimal('200'))
        intent = await create_intent.execute(
            buyer_id=buyer.id, product_id=listing.id, amount=Decimal('200'), now=now
        )

        cancelled = await use_case.cancel(order_id=intent.order_id, user_id=buyer.id)

        assert cancelled.status == OrderStatus.CANCELLED
        product = await uow.product_repo.get_by_id(product_id=listing.id)
        assert product is not None
        assert product.status == ProductStatus.ACTIVE

    @pytest.mark.asyncio
    async def test_cancelling_a_losing_order_keeps_product_sold(
        self,
        use_case: UpdateOrderStatusUseCase,
        create_intent: CreatePaymentIntentUseCase,
        uow: InMemoryUnitOfWork,
        payment_gateway: MockPaymentGateway,
        create_user: Callable,
        create_listing: Callable,
        now: datetime,
    ) -> None:
        # Given: A and B both open intents, B pays first
        seller = await create_user(role=UserRole.SELLER)
        buyer_a = await create_user(role=UserRole.BUYER)
        buyer_b = await create_user(role=UserRole.BUYER)
        listing = await create_listing(owner_id=seller.id, price=Decimal('200'))
        intent_a = await create_intent.execute(
            buyer_id=buyer_a.id, product_id=listing.id, amount=Decimal('200'), now=now
        )
        intent_b = await create_intent.execute(
            buyer_id=buyer_b.id, product_id=listing.id, amount=Decimal('200'), now=now
        )
        confirm = ConfirmPaymentUseCase(uow=uow, payment_gateway=payment_gateway)
        await confirm.execute_with_test_card(
            payment_intent_id=intent_b.payment_intent_id, user_id=buyer_b.id
        )

        # When: A gives up on the pending order
        await use_case.cancel(order_id=intent_a.order_id, user_id=buyer_a.id)

        # Then: B's purchase stands and the product cannot be bought again
        product = await uow.product_repo.get_by_id(product_id=listing.id)
        assert product is not None
        assert product.status == ProductStatus.SOLD
        order_b = await uow.order_repo.get_by_id(order_id=intent_b.order_id)
        assert order_b is not None
        assert order_b.status == OrderStatus.PAID

        with pytest.raises(DomainError):
            await create_intent.execute(
                buyer_id=buyer_a.id, product_id=listing.id, amount=Decimal('200'), now=now
            )

    @pytest.mark.asyncio
    async def test_seller_cancel_does_not_lift_a_suspension(
        self,
        use_case: UpdateOrderStatusUseCase,
        create_intent: CreatePaymentIntentUseCase,
        uow: InMemoryUnitOfWork,
        create_user: Callable,
        create_listing: Callable,
        now: datetime,
    ) -> None:
        # Given: a pending order on a listing an admin then suspends
        seller = await create_user(role=UserRole.SELLER)
        buyer = await create_user(role=UserRole.BUYER)
        listing = await create_listing(owner_id=seller.id, price=Decimal('200'))
        intent = await create_intent.execute(
            buyer_id=buyer.id, product_id=listing.id, amount=Decimal('200'), now=now
        )
        await AdminModerationUseCase(uow=uow).suspend_product(product_id=listing.id)

        # When
        await use_case.cancel(order_id=intent.order_id, user_id=seller.id)

        # Then
        product = await uow.product_repo.get_by_id(product_id=listing.id)
        assert product is not None
        assert product.status == ProductStatus.SUSPENDED

    @pytest.mark.asyncio
    async def test_outsider_cannot_cancel(
        self, use_case: UpdateOrderStatusUseCase, uow: InMemoryUnitOfWork
    ) -> None:
        order = await uow.order_repo.create(order=_order())

        with pytest.raises(ForbiddenError):
            await use_case.cancel(order_id=order.id, user_id=99)

    @pytest.mark.asyncio
    async def test_unknown_order(self, use_case: UpdateOrderStatusUseCase) -> None:
        with pytest.raises(NotFoundError):
            await use_case.confirm_delivery(order_id=uuid_utils.uuid7(), buyer_id=1)


@pytest.mark.unit
class TestOrderQuery:
    @pytest.mark.asyncio
    async def test_only_parties_and_admins_see_an_order(self, uow: InMemoryUnitOfWork) -> None:
        query = OrderQueryUseCase(order_repo=uow.order_repo)
        order = await uow.order_repo.create(order=_order())

        seller_view = await query.get_order(
            order_id=order.id, user=UserEntity(id=2, role=UserRole.SELLER)
        )
        admin_view = await query.get_order(
            order_id=order.id, user=UserEntity(id=50, role=UserRole.ADMIN)
        )
        assert seller_view.id == admin_view.id == order.id

        with pytest.raises(ForbiddenError):
            await query.get_order(order_id=order.id, user=UserEntity(id=7))

from datetime import datetime, timezone
from decimal import Decimal
from enum import StrEnum
from typing import Any, Optional

import attrs
import uuid_utils
from uuid_utils import UUID

from src.platform.exception.exceptions import DomainError
from src.platform.logging.loguru_io import Logger
from src.service.marketplace.domain.money import split_platform_fee


class OrderStatus(StrEnum):
    PENDING = 'pending'
    PAID = 'paid'
    SHIPPED = 'shipped'
    DELIVERED = 'delivered'
    CANCELLED = 'cancelled'
    REFUNDED = 'refunded'

# Orders that hold the product: it was paid for and not refunded
SALE_STATUSES = frozenset({OrderStatus.PAID, OrderStatus.SHIPPED, OrderStatus.DELIVERED})


ALLOWED_TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.PENDING: frozenset({OrderStatus.PAID, OrderStatus.CANCELLED}),
    OrderStatus.PAID: frozenset({OrderStatus.SHIPPED, OrderStatus.REFUNDED}),
    OrderStatus.SHIPPED: frozenset({OrderStatus.DELIVERED}),
    OrderStatus.DELIVERED: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
    OrderStatus.REFUNDED: frozenset(),
}


@attrs.define(frozen=True)
class ShippingAddress:
    street: str
    city: str
    state: str
    zip_code: str
    country: str = 'US'

    def to_dict(self) -> dict[str, Any]:
        return attrs.asdict(self)


@attrs.define
class Order:
    id: UUID
    buyer_id: int
    seller_id: int
    product_id: int
    total_amount: Decimal
    platform_fee: Decimal
    seller_amount: Decimal
    shipping_address: Optional[ShippingAddress] = None
    status: OrderStatus = OrderStatus.PENDING
    payment_intent_id: Optional[str] = None
    tracking_number: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    paid_at: Optional[datetime] = None
    shipped_at: Optional[datetime] = None
    delivered_at: Optional[datetime] = None

    @classmethod
    @Logger.io
    def create(
        cls,
        *,
        buyer_id: int,
        seller_id: int,
        product_id: int,
        total_amount: Decimal,
        platform_fee_percentage: Decimal,
        shipping_address: Optional[ShippingAddress] = None,
    ) -> 'Order':
        if buyer_id == seller_id:
            raise DomainError('Cannot purchase your own product')
        if total_amount <= 0:
            raise DomainError('Order amount must be greater than 0')

        fee, seller_amount = split_platform_fee(total_amount, platform_fee_percentage)
        now = datetime.now(timezone.utc)
        return cls(
            id=uuid_utils.uuid7(),
            buyer_id=buyer_id,
            seller_id=seller_id,
            product_id=product_id,
            total_amount=fee + seller_amount,
            platform_fee=fee,
            seller_amount=seller_amount,
            shipping_address=shipping_address,
            status=OrderStatus.PENDING,
            created_at=now,
            updated_at=now,
        )

    def can_transition_to(self, target: OrderStatus) -> bool:
        return target in ALLOWED_TRANSITIONS[self.status]

    def _transition(self, target: OrderStatus, **changes: Any) -> 'Order':
        if not self.can_transition_to(target):
            raise DomainError(f'Cannot change order status from {self.status} to {target}')
        return attrs.evolve(self, status=target, updated_at=datetime.now(timezone.utc), **changes)

    def attach_payment_intent(self, payment_intent_id: str) -> 'Order':
        return attrs.evolve(self, payment_intent_id=payment_intent_id)

    @Logger.io
    def mark_as_paid(self) -> 'Order':
        if self.status == OrderStatus.PAID:
            return self
        return self._transition(OrderStatus.PAID, paid_at=datetime.now(timezone.utc))

    @Logger.io
    def ship(self, *, tracking_number: str) -> 'Order':
        if not tracking_number.strip():
            raise DomainError('Tracking number is required')
        return self._transition(
            OrderStatus.SHIPPED,
            tracking_number=tracking_number.strip(),
            shipped_at=datetime.now(timezone.utc),
        )

    @Logger.io
    def confirm_delivery(self) -> 'Order':
        return self._transition(OrderStatus.DELIVERED, delivered_at=datetime.now(timezone.utc))

    @Logger.io
    def cancel(self) -> 'Order':
        return self._transition(OrderStatus.CANCELLED)

    @Logger.io
    def refund(self) -> 'Order':
        return self._transition(OrderStatus.REFUNDED)

    def is_party(self, user_id: int) -> bool:
        return user_id in (self.buyer_id, self.seller_id)

from datetime import datetime, timezone
from decimal import Decimal
from enum import StrEnum
from typing import Optional

import attrs
from uuid_utils import UUID

from src.platform.exception.exceptions import DomainError
from src.platform.logging.loguru_io import Logger


class PaymentStatus(StrEnum):
    PENDING = 'pending'
    PROCESSING = 'processing'
    SUCCEEDED = 'succeeded'
    FAILED = 'failed'
    REFUNDED = 'refunded'


class IntentStatus(StrEnum):
    """Lifecycle of a payment intent on the gateway side."""

    REQUIRES_PAYMENT_METHOD = 'requires_payment_method'
    PROCESSING = 'processing'
    SUCCEEDED = 'succeeded'
    FAILED = 'failed'
    CANCELED = 'canceled'


@attrs.define(frozen=True)
class PaymentIntent:
    id: str
    client_secret: str
    amount_cents: int
    currency: str
    status: IntentStatus
    metadata: dict[str, str] = attrs.field(factory=dict)
    last_error: Optional[str] = None
    amount_refunded_cents: int = 0

    @property
    def succeeded(self) -> bool:
        return self.status == IntentStatus.SUCCEEDED

    @property
    def refunded(self) -> bool:
        return self.amount_refunded_cents >= self.amount_cents > 0


@attrs.define
class Payment:
    user_id: int
    order_id: UUID
    payment_intent_id: str
    amount: Decimal
    platform_fee: Decimal
    net_amount: Decimal
    currency: str = 'usd'
    status: PaymentStatus = PaymentStatus.PENDING
    description: Optional[str] = None
    id: Optional[int] = None
    created_at: Optional[datetime] = None
    paid_at: Optional[datetime] = None

    @classmethod
    def create(
        cls,
        *,
        user_id: int,
        order_id: UUID,
        payment_intent_id: str,
        amount: Decimal,
        platform_fee: Decimal,
        currency: str,
        description: Optional[str] = None,
    ) -> 'Payment':
        return cls(
            user_id=user_id,
            order_id=order_id,
            payment_intent_id=payment_intent_id,
            amount=amount,
            platform_fee=platform_fee,
            net_amount=amount - platform_fee,
            currency=currency,
            status=PaymentStatus.PENDING,
            description=description,
            created_at=datetime.now(timezone.utc),
        )

    @property
    def is_succeeded(self) -> bool:
        return self.status == PaymentStatus.SUCCEEDED

    @Logger.io
    def mark_as_succeeded(self) -> 'Payment':
        if self.is_succeeded:
            return self
        if self.status not in (PaymentStatus.PENDING, PaymentStatus.PROCESSING):
            raise DomainError(f'Cannot mark a {self.status} payment as succeeded')
        return attrs.evolve(
            self, status=PaymentStatus.SUCCEEDED, paid_at=datetime.now(timezone.utc)
        )

    @Logger.io
    def mark_as_failed(self) -> 'Payment':
        if self.status == PaymentStatus.FAILED:
            return self
        if self.is_succeeded:
            raise DomainError('Cannot fail a succeeded payment')
        return attrs.evolve(self, status=PaymentStatus.FAILED)

    @Logger.io
    def mark_as_refunded(self) -> 'Payment':
        """The gateway captured the money but the sale could not go through"""
        if self.status == PaymentStatus.REFUNDED:
            return self
        if self.status == PaymentStatus.FAILED:
            raise DomainError('Cannot refund a failed payment')
        return attrs.evolve(self, status=PaymentStatus.REFUNDED)

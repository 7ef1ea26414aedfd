from datetime import datetime, timezone
from decimal import Decimal
from enum import StrEnum
from typing import Optional

import attrs

from src.platform.exception.exceptions import DomainError
from src.service.marketplace.domain.money import to_money


class TransactionType(StrEnum):
    DEPOSIT = 'deposit'
    PURCHASE = 'purchase'
    TRANSFER_IN = 'transfer_in'
    TRANSFER_OUT = 'transfer_out'
    REFUND = 'refund'


class TransactionStatus(StrEnum):
    PENDING = 'pending'
    COMPLETED = 'completed'
    FAILED = 'failed'


# Sign of the ledger amount for each transaction type
DEBIT_TYPES = frozenset({TransactionType.PURCHASE, TransactionType.TRANSFER_OUT})


def validate_positive_amount(amount: Decimal) -> Decimal:
    if amount <= 0:
        raise DomainError('Amount must be greater than 0')
    return to_money(amount)


@attrs.define
class WalletTransaction:
    wallet_id: int
    type: TransactionType
    amount: Decimal  # signed: debits are negative
    status: TransactionStatus = TransactionStatus.COMPLETED
    description: Optional[str] = None
    reference: Optional[str] = None
    id: Optional[int] = None
    created_at: Optional[datetime] = None

    @classmethod
    def record(
        cls,
        *,
        wallet_id: int,
        type: TransactionType,
        amount: Decimal,
        description: Optional[str] = None,
        reference: Optional[str] = None,
    ) -> 'WalletTransaction':
        magnitude = validate_positive_amount(amount)
        return cls(
            wallet_id=wallet_id,
            type=type,
            amount=-magnitude if type in DEBIT_TYPES else magnitude,
            status=TransactionStatus.COMPLETED,
            description=description,
            reference=reference,
            created_at=datetime.now(timezone.utc),
        )


@attrs.define
class Wallet:
    user_id: int
    balance: Decimal = Decimal('0.00')
    locked_balance: Decimal = Decimal('0.00')
    id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def available_balance(self) -> Decimal:
        return self.balance - self.locked_balance

    def ensure_can_debit(self, amount: Decimal) -> None:
        if self.available_balance < amount:
            raise DomainError('Insufficient available balance')


@attrs.define(frozen=True)
class WalletStats:
    total_deposits: Decimal
    total_purchases: Decimal
    total_transfers_in: Decimal
    total_transfers_out: Decimal
    transaction_count: int

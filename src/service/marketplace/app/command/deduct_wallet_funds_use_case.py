from decimal import Decimal
from typing import Optional, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.database.unit_of_work import AbstractUnitOfWork
from src.platform.exception.exceptions import DomainError
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.marketplace_metrics import metrics
from src.service.marketplace.app.command.add_wallet_funds_use_case import WalletOperationResult
from src.service.marketplace.domain.entity.wallet_entity import (
    TransactionType,
    WalletTransaction,
    validate_positive_amount,
)


INSUFFICIENT_BALANCE = 'Insufficient available balance'


class DeductWalletFundsUseCase:
    """Pay from the wallet: domain balance check, then a conditional debit in SQL."""

    def __init__(self, *, uow: AbstractUnitOfWork) -> None:
        self.uow = uow

    @classmethod
    @inject
    def depends(cls, uow: AbstractUnitOfWork = Depends(Provide[Container.unit_of_work])) -> Self:
        return cls(uow=uow)

    @Logger.io
    async def execute(
        self,
        *,
        user_id: int,
        amount: Decimal,
        description: Optional[str] = None,
        reference: Optional[str] = None,
    ) -> WalletOperationResult:
        amount = validate_positive_amount(amount)

        async with self.uow:
            wallet = await self.uow.wallet_repo.get_by_user_id(user_id=user_id)
            if wallet is None or wallet.id is None:
                raise DomainError(INSUFFICIENT_BALANCE)
            wallet.ensure_can_debit(amount)

            debited = await self.uow.wallet_repo.debit_if_sufficient(
                wallet_id=wallet.id, amount=amount
            )
            if debited is None:
                # A concurrent debit drained the balance after our read
                metrics.record_wallet_transaction(type=TransactionType.PURCHASE, result='rejected')
                raise DomainError(INSUFFICIENT_BALANCE)

            transaction = await self.uow.wallet_repo.add_transaction(
                transaction=WalletTransaction.record(
                    wallet_id=wallet.id,
                    type=TransactionType.PURCHASE,
                    amount=amount,
                    description=description or 'Wallet purchase',
                    reference=reference,
                )
            )
            await self.uow.commit()

        metrics.record_wallet_transaction(type=TransactionType.PURCHASE, result='completed')
        return WalletOperationResult(wallet=debited, transaction=transaction)

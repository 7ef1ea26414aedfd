from decimal import Decimal
from typing import Optional, Self

import attrs
from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.database.unit_of_work import AbstractUnitOfWork
from src.platform.exception.exceptions import DomainError, NotFoundError
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.marketplace_metrics import metrics
from src.service.marketplace.app.command.deduct_wallet_funds_use_case import (
    INSUFFICIENT_BALANCE,
)
from src.service.marketplace.domain.entity.wallet_entity import (
    TransactionType,
    Wallet,
    WalletTransaction,
    validate_positive_amount,
)


@attrs.define(frozen=True)
class TransferResult:
    sender_wallet: Wallet
    outgoing: WalletTransaction
    incoming: WalletTransaction


class TransferWalletFundsUseCase:
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
        sender_id: int,
        recipient_id: int,
        amount: Decimal,
        description: Optional[str] = None,
    ) -> TransferResult:
        if sender_id == recipient_id:
            raise DomainError('Cannot transfer to same user')
        amount = validate_positive_amount(amount)

        async with self.uow:
            if not await self.uow.user_repo.get_by_id(user_id=recipient_id):
                raise NotFoundError('Recipient not found')

            sender = await self.uow.wallet_repo.get_by_user_id(user_id=sender_id)
            if sender is None or sender.id is None:
                raise DomainError(INSUFFICIENT_BALANCE)
            sender.ensure_can_debit(amount)

            debited = await self.uow.wallet_repo.debit_if_sufficient(
                wallet_id=sender.id, amount=amount
            )
            if debited is None:
                metrics.record_wallet_transaction(
                    type=TransactionType.TRANSFER_OUT, result='rejected'
                )
                raise DomainError(INSUFFICIENT_BALANCE)

            recipient = await self.uow.wallet_repo.get_or_create(user_id=recipient_id)
            if recipient.id is None:
                raise NotFoundError('Recipient wallet not found')
            await self.uow.wallet_repo.credit(wallet_id=recipient.id, amount=amount)

            outgoing = await self.uow.wallet_repo.add_transaction(
                transaction=WalletTransaction.record(
                    wallet_id=sender.id,
                    type=TransactionType.TRANSFER_OUT,
                    amount=amount,
                    description=description or f'Transfer to user {recipient_id}',
                    reference=f'user:{recipient_id}',
                )
            )
            incoming = await self.uow.wallet_repo.add_transaction(
                transaction=WalletTransaction.record(
                    wallet_id=recipient.id,
                    type=TransactionType.TRANSFER_IN,
                    amount=amount,
                    description=description or f'Transfer from user {sender_id}',
                    reference=f'user:{sender_id}',
                )
            )
            await self.uow.commit()

        metrics.record_wallet_transaction(type=TransactionType.TRANSFER_OUT, result='completed')
        Logger.base.info(f'🔁 [WALLET] ${amount} moved from user {sender_id} to {recipient_id}')
        return TransferResult(sender_wallet=debited, outgoing=outgoing, incoming=incoming)
